"""
=============================================================================
HTTP STATUS CODES
=============================================================================

This server only ever answers with two statuses:

    200 OK          The default page or a served file
    404             The target doesn't name a readable file

Note the 404 status line carries NO reason phrase:

    HTTP/1.1 200 OK
    HTTP/1.1 404

The reason phrase is optional in HTTP/1.1 (clients must not rely on it),
and this server's wire format has always sent a bare 404. Keep it that way.

=============================================================================
"""

from enum import IntEnum


class HTTPStatus(IntEnum):
    """
    Status codes this server emits.

        >>> HTTPStatus.OK == 200
        True
        >>> HTTPStatus.NOT_FOUND.phrase
        ''
    """

    OK = 200
    NOT_FOUND = 404

    @property
    def phrase(self) -> str:
        """Reason phrase written after the code (may be empty)."""
        return _PHRASES[self]

    @property
    def is_success(self) -> bool:
        return 200 <= self < 300


_PHRASES = {
    HTTPStatus.OK: "OK",
    HTTPStatus.NOT_FOUND: "",
}
