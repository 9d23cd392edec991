import socket
import time
from collections import deque
from datetime import datetime, timezone

from typing import Callable, Optional

from .constants import DEFAULT_HOST
from .constants import QUEUE_LENGTH
from .constants import MAX_LINE_LENGTH
from .utils import AuthServerException
from .utils import validatePort
from .request_line import parseRequestLine
from .response import renderMessage, renderHeaders, renderBody
from .outcomes import StepOutcome, RunOutcome
from .outcomes import BIND, ACCEPT, STREAMS, TERMINATED, READ, WRITE, CLOSE, TIMEOUT

# Shortest socket timeout used while a run deadline is pending, in seconds.
MIN_SOCKET_TIMEOUT = 0.01

# Pause before accepting again after a failed accept, in seconds.
ACCEPT_RETRY_DELAY = 0.1

# Number of most recent step failures kept on a state.
MAX_RECORDED_FAILURES = 100

# Default function to call with status messages.
DEFAULT_PRINT_DEBUG_FN: Optional[Callable[[str], None]] = None

def set_default_print_debug_fn( fn: Optional[Callable[[str], None]] = None ):
    """
    Set a default function to call with status messages.

    Args:
        fn (function): the function to call with status messages.
    """
    global DEFAULT_PRINT_DEBUG_FN
    DEFAULT_PRINT_DEBUG_FN = fn


class ListenerState( object ):
    '''State of one authorization attempt, owned by the caller.'''

    def __init__( self ):
        # Listening socket, set once bound.
        self.server = None
        self.port = None

        # The single connection currently open, if any.
        self.connection = None
        self.address = None
        self.reader = None
        self.writer = None

        self.isConnectionProcessed = False
        self.counter = 1
        self.authorizationCode = None
        self.authorizationError = None
        # Most recent failures, with a count per kind over the whole run.
        self.failures = deque( maxlen = MAX_RECORDED_FAILURES )
        self.failureCounts = {}

    @property
    def isBound( self ):
        return self.server is not None


class Listener( object ):
    '''Minimal server waiting for the browser redirect carrying an authorization code.'''

    def __init__( self, print_debug_fn: Optional[Callable[[str], None]] = None, host: str = DEFAULT_HOST, timeout: Optional[float] = None ):
        '''Create a listener.

        Args:
            print_debug_fn (function(message)): a callback function that will receive status messages.
            host (str): the interface to listen on.
            timeout (float): optional number of seconds after which a run gives up, by default it waits forever.
        '''
        self._debug: Optional[Callable[[str], None]] = print_debug_fn or DEFAULT_PRINT_DEBUG_FN
        self._host = host
        self._timeout = timeout
        self._deadline = None

    def _printDebug( self, msg ):
        if self._debug is not None:
            time_string = datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%SZ")
            self._debug( f"{time_string}: {msg}" )

    def _fail( self, state, kind, error ):
        outcome = StepOutcome.failure( kind, error )
        state.failures.append( outcome )
        state.failureCounts[ kind ] = state.failureCounts.get( kind, 0 ) + 1
        return outcome

    def _isExpired( self ):
        return self._deadline is not None and time.monotonic() >= self._deadline

    def _socketTimeout( self ):
        if self._deadline is None:
            return None
        return max( self._deadline - time.monotonic(), MIN_SOCKET_TIMEOUT )

    def run( self, port: int, state: Optional[ListenerState] = None ) -> RunOutcome:
        '''Wait for the authorization redirect on a port.

        Connections are accepted one at a time until a response was
        successfully sent to one of them.

        Args:
            port (int): the port to listen on, in the unprivileged range.
            state (ListenerState): optional state to operate on, a new one is created if not set.

        Returns:
            a RunOutcome, its code attribute holds the captured authorization code.
        '''
        port = validatePort( port )
        if state is None:
            state = ListenerState()

        bound = self.bind( port, state )
        if not bound:
            return RunOutcome( state, error = bound )

        return self.serve( state )

    def bind( self, port: int, state: ListenerState ) -> StepOutcome:
        '''Create the listening socket of the state.'''
        port = validatePort( port )
        server = None
        try:
            server = socket.socket( socket.AF_INET, socket.SOCK_STREAM )
            server.setsockopt( socket.SOL_SOCKET, socket.SO_REUSEADDR, 1 )
            server.bind( ( self._host, port ) )
            server.listen( QUEUE_LENGTH )
        except OSError as e:
            if server is not None:
                server.close()
            self._printDebug( 'Error starting the server : %s' % ( e, ) )
            return self._fail( state, BIND, e )

        state.server = server
        state.port = port
        self._printDebug( 'Listening on %s:%s' % ( self._host, port ) )
        return StepOutcome.success( BIND, port )

    def serve( self, state: ListenerState ) -> RunOutcome:
        '''Process connections on a bound state until one was answered.'''
        if not state.isBound:
            raise AuthServerException( 'listener is not bound' )

        if self._timeout is not None:
            self._deadline = time.monotonic() + self._timeout

        try:
            while not state.isConnectionProcessed:
                accepted = self.accept( state )
                if not accepted:
                    if accepted.isFatal:
                        return RunOutcome( state, error = accepted )
                    # Errors such as EMFILE persist, avoid spinning on them.
                    time.sleep( ACCEPT_RETRY_DELAY )
                    continue

                try:
                    self.openStreams( state )
                    request = self.readRequest( state )
                    if request:
                        self.sendResponse( state, request.value )
                finally:
                    self.close( state )
        finally:
            self.shutdown( state )
            self._deadline = None

        return RunOutcome( state )

    def accept( self, state: ListenerState ) -> StepOutcome:
        '''Block until a browser connects.'''
        if self._isExpired():
            self._printDebug( 'Timed out waiting for connection' )
            return self._fail( state, TIMEOUT, AuthServerException( 'timed out waiting for the authorization redirect' ) )

        self._printDebug( 'Waiting for connection' )
        try:
            state.server.settimeout( self._socketTimeout() )
            connection, address = state.server.accept()
        except socket.timeout as e:
            self._printDebug( 'Timed out waiting for connection' )
            return self._fail( state, TIMEOUT, e )
        except OSError as e:
            self._printDebug( 'Error waiting for connection : %s' % ( e, ) )
            return self._fail( state, ACCEPT, e )

        connection.settimeout( self._socketTimeout() )
        state.connection = connection
        state.address = address
        self._printDebug( 'Connection %s received from: %s' % ( state.counter, address[ 0 ] ) )
        return StepOutcome.success( ACCEPT, address )

    def openStreams( self, state: ListenerState ) -> StepOutcome:
        '''Get the streams to send and receive data.'''
        outcome = StepOutcome.success( STREAMS )

        try:
            state.writer = state.connection.makefile( 'wb' )
        except OSError as e:
            self._printDebug( 'Error setting up output stream : %s' % ( e, ) )
            outcome = self._fail( state, STREAMS, e )

        try:
            state.reader = state.connection.makefile( 'rb' )
        except OSError as e:
            self._printDebug( 'Error setting up the input stream : %s' % ( e, ) )
            outcome = self._fail( state, STREAMS, e )

        return outcome

    def readRequest( self, state: ListenerState ) -> StepOutcome:
        '''Read the request headers and extract the authorization code.

        Although a number of headers are submitted by the browser, only
        the request line, similar to "GET /?code=12389 HTTP/1.1", is
        looked at. If several lines carry a code, the last one wins.

        Returns:
            a StepOutcome whose value is the code received on this connection, or None.
        '''
        if state.reader is None:
            return self._fail( state, READ, AuthServerException( 'input stream is not available' ) )

        code = None
        nLines = 0
        try:
            while True:
                raw = state.reader.readline( MAX_LINE_LENGTH + 1 )
                if not raw:
                    break
                if len( raw ) > MAX_LINE_LENGTH:
                    raise AuthServerException( 'request line too long' )
                nLines += 1

                line = raw.decode( 'iso-8859-1' ).rstrip( '\r\n' )
                if 0 == len( line ):
                    break

                request = parseRequestLine( line )
                if request is None:
                    continue
                if request.error is not None:
                    state.authorizationError = request.error
                    self._printDebug( 'Authorization server returned an error : %s' % ( request.error, ) )
                if request.code is not None:
                    code = request.code
                    state.authorizationCode = code
        except ( OSError, AuthServerException ) as e:
            self._printDebug( 'Error reading the request : %s' % ( e, ) )
            return self._fail( state, READ, e )

        if 0 == nLines:
            self._printDebug( 'Client terminated connection before sending a request' )
            return self._fail( state, TERMINATED, EOFError( 'end of stream before request line' ) )

        if code is not None:
            self._printDebug( 'Authorization code received' )
        return StepOutcome.success( READ, code )

    def sendResponse( self, state: ListenerState, code: Optional[str] ) -> StepOutcome:
        '''Send the acknowledgment page to the browser.'''
        if state.writer is None:
            return self._fail( state, WRITE, AuthServerException( 'output stream is not available' ) )

        message = renderMessage( code )
        try:
            state.writer.write( renderHeaders() )
            state.writer.flush()

            state.writer.write( renderBody( message ) )
            state.writer.flush()
        except OSError as e:
            self._printDebug( 'Error writing the response to the browser : %s' % ( e, ) )
            return self._fail( state, WRITE, e )

        state.isConnectionProcessed = True
        self._printDebug( 'Response sent' )
        return StepOutcome.success( WRITE )

    def close( self, state: ListenerState ) -> StepOutcome:
        '''Close the streams and the connection, never raising.'''
        self._printDebug( 'Terminating connection' )

        outcome = StepOutcome.success( CLOSE )
        for name in ( 'writer', 'reader', 'connection' ):
            handle = getattr( state, name )
            if handle is None:
                continue
            try:
                handle.close()
            except OSError as e:
                self._printDebug( 'Error closing the %s : %s' % ( name, e ) )
                outcome = self._fail( state, CLOSE, e )
            finally:
                setattr( state, name, None )

        state.address = None
        state.counter += 1
        return outcome

    def shutdown( self, state: ListenerState ):
        '''Close the listening socket.'''
        if state.server is None:
            return
        try:
            state.server.close()
        except OSError as e:
            self._printDebug( 'Error stopping the server : %s' % ( e, ) )
            self._fail( state, CLOSE, e )
        finally:
            state.server = None
        self._printDebug( 'Server stopped' )
