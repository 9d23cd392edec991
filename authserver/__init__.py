"""authserver, local listener receiving OAuth authorization codes"""

__version__ = "1.2.0"
__author__ = "April Second"
__license__ = "Apache v2"
__copyright__ = "Copyright (c) 2020 April Second"

import os
import yaml

from . import constants
from .utils import AuthServerException
from .utils import validatePort

def _getConfigFile():
    configFile = os.environ.get( constants.CONFIG_FILE_ENV_VAR, None )
    if configFile is None:
        configFile = constants.CONFIG_FILE_PATH
    return configFile

def loadConfig( configFile = None ):
    '''Load the listener settings.

    Settings are acquired in the following order:
    1- AUTHSERVER_PORT environment variable (port only).
    2- AUTHSERVER_CONFIG_FILE environment variable points to a YAML file with "port", "host" and "timeout".
    3- Assumes a config file (like #2) is present at "~/.authserver".
    4- Defaults: port 65500 on localhost, no timeout.

    Args:
        configFile (str): optional path to the YAML file, overrides #2 and #3.

    Returns:
        a dict with the "port", "host" and "timeout" keys.
    '''
    config = {
        'port': constants.DEFAULT_PORT,
        'host': constants.DEFAULT_HOST,
        'timeout': None,
    }

    if configFile is None:
        configFile = _getConfigFile()
    if os.path.isfile( configFile ):
        with open( configFile, 'rb' ) as f:
            try:
                data = yaml.safe_load( f.read() )
            except yaml.YAMLError as e:
                raise AuthServerException( 'invalid config file %s: %s' % ( configFile, e ) )
        if data is None:
            data = {}
        if not isinstance( data, dict ):
            raise AuthServerException( 'config file %s must contain a mapping' % ( configFile, ) )
        for k in config:
            if data.get( k, None ) is not None:
                config[ k ] = data[ k ]

    envPort = os.environ.get( constants.PORT_ENV_VAR, None )
    if envPort:
        config[ 'port' ] = envPort

    config[ 'port' ] = validatePort( config[ 'port' ] )
    if config[ 'timeout' ] is not None:
        try:
            config[ 'timeout' ] = float( config[ 'timeout' ] )
        except ( TypeError, ValueError ):
            raise AuthServerException( 'invalid timeout: %s' % ( config[ 'timeout' ], ) )
    return config

from .Listener import Listener
from .Listener import ListenerState
from .Listener import set_default_print_debug_fn
from .outcomes import StepOutcome
from .outcomes import RunOutcome
from .request_line import parseRequestLine
from .request_line import extractCode
