from setuptools import setup

__version__ = "1.2.0"
__author__ = "April Second"
__license__ = "Apache v2"
__copyright__ = "Copyright (c) 2020 April Second"

setup( name = 'authserver',
       version = __version__,
       description = 'Local listener receiving OAuth authorization codes',
       author = __author__,
       license = __license__,
       packages = [ 'authserver' ],
       zip_safe = True,
       python_requires = '>=3.8',
       install_requires = [ 'pyyaml', 'termcolor', 'pygments', 'rich' ],
       extras_require = {
           'test': [ 'pytest' ],
       },
       long_description = 'Minimal local listener standing in for an OAuth redirect URI, it captures the authorization code sent back by the browser.',
       entry_points = {
           'console_scripts': [
               'authserver=authserver.__main__:main',
           ],
       },
)
