"""
Typed results of the listener steps.

Every step of the accept/parse/respond loop returns a StepOutcome instead of
raising, so callers and tests can tell which failure happened. Only a BIND
failure (or an exhausted TIMEOUT) ends a run without a processed connection.
"""

from typing import Any, Optional

# Step failure kinds.
BIND = 'bind'
ACCEPT = 'accept'
STREAMS = 'streams'
TERMINATED = 'terminated'
READ = 'read'
WRITE = 'write'
CLOSE = 'close'
TIMEOUT = 'timeout'

FATAL_KINDS = ( BIND, TIMEOUT )


class StepOutcome( object ):
    '''Result of a single step of the listener.'''

    def __init__( self, kind: str, isSuccess: bool, error: Optional[BaseException] = None, value: Any = None ):
        self.kind = kind
        self.isSuccess = isSuccess
        self.error = error
        self.value = value

    @classmethod
    def success( cls, kind: str, value: Any = None ) -> 'StepOutcome':
        return cls( kind, True, value = value )

    @classmethod
    def failure( cls, kind: str, error: Optional[BaseException] = None ) -> 'StepOutcome':
        return cls( kind, False, error = error )

    @property
    def isFatal( self ) -> bool:
        return not self.isSuccess and self.kind in FATAL_KINDS

    def toDict( self ) -> dict:
        return {
            'kind': self.kind,
            'success': self.isSuccess,
            'error': None if self.error is None else str( self.error ),
        }

    def __bool__( self ):
        return self.isSuccess

    def __repr__( self ):
        if self.isSuccess:
            return 'StepOutcome(%s, ok)' % ( self.kind, )
        return 'StepOutcome(%s, failed: %s)' % ( self.kind, self.error )


class RunOutcome( object ):
    '''Result of a full listener run.

    Attributes:
        isSuccess (bool): True if a response was sent to a browser.
        code (str): the captured authorization code, None if no redirect carried one.
        error (StepOutcome): the failure that ended the run, None on success.
        attempts (int): number of connections handled.
        state (ListenerState): the state the run operated on.
    '''

    def __init__( self, state, error: Optional[StepOutcome] = None ):
        self.state = state
        self.error = error

    @property
    def isSuccess( self ) -> bool:
        return self.error is None and self.state.isConnectionProcessed

    @property
    def code( self ) -> Optional[str]:
        return self.state.authorizationCode

    @property
    def attempts( self ) -> int:
        return self.state.counter - 1

    def toDict( self ) -> dict:
        return {
            'success': self.isSuccess,
            'code': self.code,
            'authorization_error': self.state.authorizationError,
            'attempts': self.attempts,
            'error': None if self.error is None else self.error.toDict(),
            'failures': [ f.toDict() for f in self.state.failures ],
            'failure_counts': dict( self.state.failureCounts ),
        }

    def __bool__( self ):
        return self.isSuccess
