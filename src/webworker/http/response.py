"""
=============================================================================
HTTP RESPONSE HEADER
=============================================================================

Builds the header block the worker sends before any body bytes.

=============================================================================
WIRE FORMAT
=============================================================================

    HTTP/1.1 200 OK\n                      ← Status line
    Date: Mon, 19 Oct 2026 06:05:00 GMT\n  ← Always GMT
    Server: WebWorker/1.0\n                ← Fixed identification
    Connection: close\n                    ← One request per connection
    Content-Type: text/html\n
    \n                                     ← Empty line ends the header

Two things stand out compared to a "textbook" HTTP/1.1 response:

1. Lines end with a bare \n, not \r\n. Every mainstream client accepts
   this, and it is the format this server has always produced.

2. There is no Content-Length. The server closes the connection after
   the body, so the client reads until EOF. That is exactly why
   "Connection: close" is mandatory here.

=============================================================================
ORDERING
=============================================================================

The header is sent as ONE write, and it must complete before the first
body byte goes out. A client that sees body bytes before the blank line
would parse them as header lines.

=============================================================================
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone, timedelta
from typing import Callable

from .status_codes import HTTPStatus


HTTP_VERSION = "HTTP/1.1"
DEFAULT_CONTENT_TYPE = "text/html"

_DAYS = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]
_MONTHS = ["Jan", "Feb", "Mar", "Apr", "May", "Jun",
           "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]


def utc_now() -> datetime:
    """Current time in UTC. Injected as a clock so tests can pin it."""
    return datetime.now(timezone.utc)


@dataclass
class ResponseHeader:
    """
    The header block of a response.

    Attributes:
        status: HTTPStatus.OK or HTTPStatus.NOT_FOUND.
        server_name: Value of the Server header.
        content_type: Value of the Content-Type header.
        clock: Returns the current time for the Date header.
    """

    status: HTTPStatus = HTTPStatus.OK
    server_name: str = "WebWorker/1.0"
    content_type: str = DEFAULT_CONTENT_TYPE
    clock: Callable[[], datetime] = field(default=utc_now, repr=False)

    @property
    def status_line(self) -> str:
        """
        "HTTP/1.1 200 OK" or "HTTP/1.1 404".

        The 404 line deliberately has no reason phrase.
        """
        phrase = self.status.phrase
        if phrase:
            return f"{HTTP_VERSION} {int(self.status)} {phrase}"
        return f"{HTTP_VERSION} {int(self.status)}"

    def to_bytes(self) -> bytes:
        """
        Serialize the header block, terminated by the empty line.

        Header order is fixed: Date, Server, Connection, Content-Type.
        """
        lines = [
            self.status_line,
            f"Date: {format_http_date(self.clock())}",
            f"Server: {self.server_name}",
            "Connection: close",
            f"Content-Type: {self.content_type}",
        ]
        # HTTP header ends with 2 newlines
        return ("\n".join(lines) + "\n\n").encode("utf-8")


def format_http_date(dt: datetime) -> str:
    """
    Format a datetime as an HTTP-date in GMT.

    Format: Day, DD Mon YYYY HH:MM:SS GMT
    Example: Mon, 19 Oct 2026 06:05:00 GMT

    Aware datetimes in other zones are converted to UTC first; naive
    datetimes are taken to already be UTC.
    """
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc)

    return (
        f"{_DAYS[dt.weekday()]}, "
        f"{dt.day:02d} {_MONTHS[dt.month - 1]} {dt.year} "
        f"{dt.hour:02d}:{dt.minute:02d}:{dt.second:02d} GMT"
    )


def fixed_timezone(name: str, utc_offset_hours: float) -> timezone:
    """A fixed-offset zone, e.g. fixed_timezone("MST", -7)."""
    return timezone(timedelta(hours=utc_offset_hours), name)


def format_content_date(dt: datetime, tz: timezone) -> str:
    """
    Format the date substituted into served files.

    Medium date style, in the given zone rather than GMT:

        >>> format_content_date(datetime(2026, 10, 19, 3, tzinfo=timezone.utc),
        ...                     fixed_timezone("MST", -7))
        'Oct 18, 2026'
    """
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    local = dt.astimezone(tz)
    return f"{_MONTHS[local.month - 1]} {local.day}, {local.year}"
