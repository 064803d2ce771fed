"""
=============================================================================
CONTENT EMITTER
=============================================================================

Produces the response body for each resolver outcome.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   DEFAULT_PAGE   <h3>My web server works!</h3>                      │
    │                                                                      │
    │   FILE_FOUND     <p>{file text, placeholders substituted}</p>        │
    │                                                                      │
    │   NOT_FOUND      <h3>404 Not Found</h3>                             │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Every body uses the same minimal shell, one line each:

    <html><head></head><body>\n
    ...fragment...\n
    </body></html>\n

=============================================================================
PLACEHOLDERS
=============================================================================

Served files may contain two literal tokens:

    <cs371date>     → today's date in the content time zone, "Oct 19, 2026"
    <cs371server>   → the configured server name

This is plain string replacement of EVERY occurrence, not templating.
Nothing is escaped: HTML in the file passes straight through.

Files are read fresh on every request. Nothing is cached.

=============================================================================
"""

import logging
from datetime import datetime, timezone
from typing import Callable, Optional

from .resolver import Outcome, Resolution
from ..http.response import format_content_date, fixed_timezone, utc_now


logger = logging.getLogger(__name__)

DATE_PLACEHOLDER = "<cs371date>"
SERVER_PLACEHOLDER = "<cs371server>"

HTML_OPEN = "<html><head></head><body>\n"
HTML_CLOSE = "</body></html>\n"
DEFAULT_PAGE_FRAGMENT = "<h3>My web server works!</h3>\n"
NOT_FOUND_FRAGMENT = "<h3>404 Not Found</h3>\n"


def wrap_html(fragment: str) -> str:
    """Place a fragment inside the minimal HTML shell."""
    return HTML_OPEN + fragment + HTML_CLOSE


class ContentEmitter:
    """
    Renders response bodies.

    Usage:
        emitter = ContentEmitter(server_name="WebWorker/1.0")
        body = emitter.render(resolution)   # bytes, ready to send
    """

    def __init__(
        self,
        server_name: str,
        content_tz: Optional[timezone] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        """
        Args:
            server_name: Replaces <cs371server>.
            content_tz: Zone for <cs371date>. Defaults to fixed MST (UTC-7).
            clock: Returns the current time.
        """
        self.server_name = server_name
        self.content_tz = content_tz or fixed_timezone("MST", -7)
        self.clock = clock

    def render(self, resolution: Resolution) -> bytes:
        """
        Render the body for a resolution.

        Raises:
            OSError: If a FILE_FOUND path can no longer be read.
        """
        if resolution.outcome is Outcome.DEFAULT_PAGE:
            html = wrap_html(DEFAULT_PAGE_FRAGMENT)
        elif resolution.outcome is Outcome.FILE_FOUND:
            html = wrap_html(f"<p>{self.render_file(resolution.path)}</p>\n")
        else:
            html = wrap_html(NOT_FOUND_FRAGMENT)
        return html.encode("utf-8")

    def render_file(self, path) -> str:
        """Read a file as text and substitute its placeholders."""
        text = path.read_bytes().decode("utf-8", errors="replace")
        return self.substitute(text)

    def substitute(self, text: str) -> str:
        """Replace every date and server-name placeholder in text."""
        today = format_content_date(self.clock(), self.content_tz)
        text = text.replace(DATE_PLACEHOLDER, today)
        return text.replace(SERVER_PLACEHOLDER, self.server_name)
