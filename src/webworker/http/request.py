"""
=============================================================================
HTTP REQUEST LINE PARSING
=============================================================================

The worker only ever acts on one thing: the request line.

    GET /page.html HTTP/1.1
    └─┘ └────────┘ └──────┘
    Method  Target   Version

=============================================================================
WHY TOKENIZE INSTEAD OF SLICING?
=============================================================================

Fixed-offset slicing ("target starts at index 4, ends at the last space")
silently produces garbage, or blows up, as soon as the spacing differs
from what the author expected:

    "GET /"            → no version, no second space
    "GET  /  HTTP/1.1" → extra spaces
    "GET / HTTP/1.1 x" → trailing junk

Splitting on whitespace and checking the field count turns all of these
into one clean, catchable RequestLineError.

Trailing junk is not folded into the target: "GET /page.html HTTP/1.1 x"
gets no 404, it gets no response at all. The worker logs it as
"Malformed request line", which is separate from the "Request error"
line it logs for socket faults and timeouts.

=============================================================================
"""

from dataclasses import dataclass


SUPPORTED_METHOD = "GET"


class RequestLineError(Exception):
    """
    Raised when a request line cannot be parsed.

    There is no 400 response in this server: the worker logs the error,
    abandons the request and closes the connection.
    """

    def __init__(self, message: str, line: str = ""):
        super().__init__(message)
        self.line = line


@dataclass(frozen=True)
class RequestLine:
    """A parsed `METHOD SP TARGET SP VERSION` line."""

    method: str
    target: str
    version: str


def is_get_line(line: str) -> bool:
    """True for lines that should trigger a response (they start with GET)."""
    return line.startswith(SUPPORTED_METHOD)


def parse_request_line(line: str) -> RequestLine:
    """
    Parse a GET request line.

    Args:
        line: One line of input, terminator already removed.

    Returns:
        The parsed RequestLine.

    Raises:
        RequestLineError: If the line doesn't have exactly three fields,
            or its method isn't GET.

    Example:
        >>> parse_request_line("GET /index.html HTTP/1.1").target
        '/index.html'
    """
    fields = line.split()
    if len(fields) != 3:
        raise RequestLineError(
            f"Expected 3 fields in request line, got {len(fields)}", line
        )

    method, target, version = fields
    if method != SUPPORTED_METHOD:
        raise RequestLineError(f"Unsupported method: {method}", line)

    return RequestLine(method=method, target=target, version=version)
