import re
import urllib.parse
from typing import List, Optional, Tuple

from .constants import CALLBACK_PATH, CODE_PARAM, ERROR_PARAM


# METHOD SP TARGET SP HTTP/VERSION
REQUEST_LINE_RE = re.compile(r'^(?P<method>[A-Z]+) (?P<target>\S+) (?P<version>HTTP/\d+(?:\.\d+)?)$')


def parseQuery(query: str) -> List[Tuple[str, str]]:
    """
    Split a query string into name/value pairs, without decoding them.

    Each pair is split on its first "=" only, so "code=a=b" yields "a=b".
    """
    pairs = []
    for field in query.split("&"):
        if not field:
            continue
        name, _, value = field.partition("=")
        pairs.append((name, value))
    return pairs


class RequestLine:
    """The three parts of an HTTP request line, with its query string parsed."""

    def __init__(self, method: str, target: str, version: str):
        self.method = method
        self.target = target
        self.version = version

        parsed = urllib.parse.urlsplit(target)
        self.path = parsed.path
        self.query: List[Tuple[str, str]] = parseQuery(parsed.query)

    def get_param(self, name: str, decoded: bool = False) -> Optional[str]:
        """
        Return the first value of a query parameter, or None if absent.

        Values are returned as sent unless decoded is set, in which case
        "+" and "%XX" escapes are decoded.
        """
        for key, value in self.query:
            if key == name:
                return urllib.parse.unquote_plus(value) if decoded else value
        return None

    @property
    def is_callback(self) -> bool:
        """True if this is the browser redirect to the listener root."""
        return self.method == 'GET' and self.path == CALLBACK_PATH

    @property
    def code(self) -> Optional[str]:
        if not self.is_callback:
            return None
        return self.get_param(CODE_PARAM)

    @property
    def error(self) -> Optional[str]:
        if not self.is_callback:
            return None
        return self.get_param(ERROR_PARAM)

    def __repr__(self):
        return 'RequestLine(%r, %r, %r)' % (self.method, self.target, self.version)


def parseRequestLine(line: str) -> Optional[RequestLine]:
    """
    Parse an HTTP request line.

    Args:
        line: a single line, without its terminator.

    Returns:
        a RequestLine, or None if the line is not a request line (e.g. a header).
    """
    match = REQUEST_LINE_RE.match(line)
    if match is None:
        return None
    return RequestLine(match.group('method'), match.group('target'), match.group('version'))


def extractCode(line: str) -> Optional[str]:
    """
    Extract the authorization code from a redirect request line.

    For example "GET /?code=12389 HTTP/1.1" yields "12389".

    Returns:
        the code, or None if the line is not a GET to the callback path carrying a code.
    """
    request = parseRequestLine(line)
    if request is None:
        return None
    return request.code
