"""
=============================================================================
HTTP PROTOCOL PACKAGE
=============================================================================

The protocol surface of the web worker, kept apart from sockets and files:

    http/
    ├── request.py       # Request line parsing (GET only)
    ├── response.py      # Header block + date formatting
    └── status_codes.py  # 200 OK and the bare 404

=============================================================================
"""

from .request import RequestLine, RequestLineError, is_get_line, parse_request_line
from .response import (
    ResponseHeader,
    format_http_date,
    format_content_date,
    fixed_timezone,
    utc_now,
    DEFAULT_CONTENT_TYPE,
)
from .status_codes import HTTPStatus

__all__ = [
    # Request
    "RequestLine",
    "RequestLineError",
    "is_get_line",
    "parse_request_line",
    # Response
    "ResponseHeader",
    "format_http_date",
    "format_content_date",
    "fixed_timezone",
    "utc_now",
    "DEFAULT_CONTENT_TYPE",
    # Status
    "HTTPStatus",
]
