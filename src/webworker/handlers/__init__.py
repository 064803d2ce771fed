"""
=============================================================================
REQUEST HANDLERS PACKAGE
=============================================================================

The two halves of answering a GET:

    resolver.py   target → DEFAULT_PAGE | FILE_FOUND | NOT_FOUND
    content.py    outcome → HTML body bytes

    resolution = PathResolver(base_dir).resolve("/page.html")
    body = ContentEmitter("WebWorker/1.0").render(resolution)

=============================================================================
"""

from .resolver import PathResolver, Resolution, Outcome
from .content import (
    ContentEmitter,
    wrap_html,
    DATE_PLACEHOLDER,
    SERVER_PLACEHOLDER,
)

__all__ = [
    "PathResolver",
    "Resolution",
    "Outcome",
    "ContentEmitter",
    "wrap_html",
    "DATE_PLACEHOLDER",
    "SERVER_PLACEHOLDER",
]
