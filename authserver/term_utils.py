import os
import sys
import json

from pygments import highlight, lexers, formatters
from rich.console import Console
from rich.markup import escape

# Styles applied to status lines, matched on the message text.
STATUS_STYLES = (
    ( 'Error', 'bold red' ),
    ( 'Timed out', 'bold red' ),
    ( 'terminated', 'yellow' ),
    ( 'Authorization code received', 'bold green' ),
    ( 'Response sent', 'green' ),
)


def useColors(stream=None):
    """
    Return true if we should use ANSI colors in the output.

    :param stream: The stream the output goes to, defaults to stdout.
    :return: True if ANSI colors should be used, False otherwise.
    """
    stream = stream if stream is not None else sys.stdout

    # Check if the stream is a tty (i.e., terminal)
    if not stream.isatty():
        return False

    # Optionally, disable colors if the NO_COLOR environment variable is set
    if "NO_COLOR" in os.environ:
        return False

    # Also, sometimes checking TERM helps to avoid "dumb" terminals
    term = os.environ.get("TERM", "")
    if term == "dumb":
        return False

    return True


def statusStyle(message: str):
    """Return the rich style to print a status message with, or None."""
    for marker, style in STATUS_STYLES:
        if marker in message:
            return style
    return None


def makeConsoleSink(stream=None, use_colors: bool = None):
    """
    Build a status message sink printing through a rich Console.

    :param stream: The stream to print to, defaults to stderr so stdout only carries results.
    :param use_colors: Whether to use ANSI colors, detected from the stream if None.
    :return: A function accepting one message string.
    """
    stream = stream if stream is not None else sys.stderr
    use_colors = (use_colors if use_colors is not None else useColors(stream))
    console = Console(file=stream, no_color=not use_colors, highlight=False, soft_wrap=True)

    def sink(message: str) -> None:
        console.print(escape(message), style=statusStyle(message))

    return sink


def prettyFormatDict(data: dict, use_colors: bool = None, indent: int = 2) -> str:
    """
    Pretty format a dictionary to a string, optionally with ANSI colors.

    :param data: The dictionary to format.
    :param use_colors: Whether to use ANSI colors.
    :param indent: The number of spaces to use for indentation.
    :return: The formatted string.
    """
    formatted_json = json.dumps(data, sort_keys=True, indent=indent)

    use_colors = (use_colors if use_colors is not None else useColors())
    if use_colors:
        result = highlight(formatted_json, lexers.JsonLexer(), formatters.TerminalFormatter())
    else:
        result = formatted_json

    return result
