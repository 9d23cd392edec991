from .constants import MIN_PORT, MAX_PORT


class AuthServerException ( Exception ):
    '''Exception type used for caller errors in the authorization listener.'''

    def __init__(self, message, code=None):
        """
        Initialize the exception with a message and an optional status code.

        Args:
            message (str): The error message.
            code (int, optional): An optional status code. Defaults to None.
        """
        super().__init__(message)
        self.code = code


def validatePort( port ):
    '''Validate a listening port and return it as an int.

    Args:
        port (int or str): the port, as given by a caller, the environment or a config file.

    Returns:
        the port as an int.
    '''
    if isinstance( port, bool ) or not isinstance( port, ( int, str ) ):
        raise AuthServerException( 'invalid port: %s' % ( port, ) )
    try:
        port = int( port )
    except ValueError:
        raise AuthServerException( 'invalid port: %s' % ( port, ) )
    if port < MIN_PORT or port > MAX_PORT:
        raise AuthServerException( 'port %s is outside of the range %s-%s' % ( port, MIN_PORT, MAX_PORT ) )
    return port
