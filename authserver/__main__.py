import sys
import traceback


def cli(args):
    """
    Command line interface for the authorization listener.

    Args:
        args (list): list of CLI arguments to parse.

    Returns:
        the process exit status.
    """
    import argparse
    from termcolor import colored

    parser = argparse.ArgumentParser( prog = 'authserver' )
    parser.add_argument( 'action',
                         type = str,
                         help = 'action, currently supported "listen" (wait for an authorization redirect and print the code), "version" (print the version)' )

    # Hack around a bit so that we can pass the help
    # to the proper sub-command line.
    rootArgs = args[ 1: 2 ]

    # Everything after the command name and the action name that is passed
    # to the action argument parser.
    actionArgs = args[ 2: ]
    args = parser.parse_args( rootArgs )

    if args.action.lower() == 'version':
        from . import __version__
        print( "authserver Version %s" % ( __version__, ) )
    elif args.action.lower() == 'listen':
        from . import loadConfig
        from .Listener import Listener
        from .term_utils import makeConsoleSink, prettyFormatDict, useColors
        from .utils import validatePort

        parser = argparse.ArgumentParser( prog = 'authserver listen' )
        parser.add_argument( '--port',
                             type = int,
                             default = None,
                             help = 'port to listen on, overrides the environment and config file (default: 65500)' )
        parser.add_argument( '--json',
                             action = 'store_true',
                             default = False,
                             help = 'print the outcome of the run as JSON' )
        listen_args = parser.parse_args( actionArgs )

        config = loadConfig()
        port = config[ 'port' ]
        if listen_args.port is not None:
            port = validatePort( listen_args.port )

        listener = Listener( print_debug_fn = makeConsoleSink(),
                             host = config[ 'host' ],
                             timeout = config[ 'timeout' ] )
        outcome = listener.run( port )

        if listen_args.json:
            print( prettyFormatDict( outcome.toDict() ) )
        elif outcome.isSuccess:
            message = "Authorization code received: %s" % ( outcome.code if outcome.code is not None else '', )
            print( colored( message, 'green' ) if useColors() else message )
        else:
            message = "No authorization code received: %s" % ( outcome.error.error, )
            print( colored( message, 'red' ) if useColors() else message, file = sys.stderr )

        return 0 if outcome.isSuccess else 1
    else:
        raise Exception( 'invalid action: %s' % ( args.action.lower(), ) )

    return 0

def main():
    args = sys.argv

    # Hack since we don't have access to parsed args here and parsing itself may fail
    debug_mode = False
    if "--debug" in args:
        debug_mode = True
        args.remove("--debug")

    try:
        return cli(args)
    except Exception as e:
        print("Error:", e, file=sys.stderr)

        if debug_mode:
            print(traceback.format_exc(), file=sys.stderr)

        return 1

if __name__ == "__main__":
    sys.exit(main())
