import os

# Path to the configuration file. Can be overriden for tests.
CONFIG_FILE_PATH = os.path.expanduser( '~/.authserver' )

# Environment variable pointing to an alternate YAML configuration file.
CONFIG_FILE_ENV_VAR = 'AUTHSERVER_CONFIG_FILE'

# Environment variable overriding the listening port.
PORT_ENV_VAR = 'AUTHSERVER_PORT'

# Port registered as the redirect URI with the authorization server.
DEFAULT_PORT = 65500
DEFAULT_HOST = 'localhost'

# Unprivileged port range a local listener may use.
MIN_PORT = 1024
MAX_PORT = 65535

# Only one browser connection may wait in the accept queue.
QUEUE_LENGTH = 1

# Longest request or header line accepted from the browser, in bytes.
MAX_LINE_LENGTH = 65536

# The redirect lands on the root of the listener.
CALLBACK_PATH = '/'
CODE_PARAM = 'code'
ERROR_PARAM = 'error'
