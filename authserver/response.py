import html
from typing import Optional


STATUS_LINE = 'HTTP/1.0 200 '
CONTENT_TYPE = 'text/html'
TITLE = 'Authorization Granted'

MESSAGE_TEMPLATE = "ASRemind successfully received authorization [Auth Code :%s].\nPlease close this browser window :)"


def renderMessage(code: Optional[str]) -> str:
    """Message shown to the user, with an empty code when none was received."""
    return MESSAGE_TEMPLATE % (html.escape(code or ''),)


def renderHeaders() -> bytes:
    """Status line, content type and the blank line ending the headers."""
    return ('%s\r\nContent-Type: %s\r\n\r\n' % (STATUS_LINE, CONTENT_TYPE)).encode('ascii')


def renderBody(message: str) -> bytes:
    """Page body, in the same ISO-8859-1 charset request lines are read with."""
    return ('<html><head><title>%s</title></head><body>SERVER >> %s</body></html>\n' % (TITLE, message)).encode('iso-8859-1', errors='xmlcharrefreplace')
