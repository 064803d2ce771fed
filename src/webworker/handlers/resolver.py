"""
=============================================================================
PATH RESOLVER
=============================================================================

Maps a request target to one of three outcomes:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   target == "/"                       → DEFAULT_PAGE                 │
    │                                                                      │
    │   base_dir + target is a readable     → FILE_FOUND (path)            │
    │   regular file                                                       │
    │                                                                      │
    │   anything else                       → NOT_FOUND                    │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
LITERAL CONCATENATION
=============================================================================

The target is appended to the base directory AS A STRING:

    base_dir = "/srv/site"
    target   = "/docs/a.html"   →  "/srv/site/docs/a.html"
    target   = "a.html"         →  "/srv/site" + "a.html" = "/srv/sitea.html"

We do NOT use Path(base_dir) / target, because a target starting with "/"
would then REPLACE base_dir entirely. No URL-decoding, no query stripping.

=============================================================================
PATH TRAVERSAL
=============================================================================

By default ".." segments are left alone, so "/../secret.txt" can reach
outside base_dir. That is the historical behavior of this server and is
kept as the default. Set reject_parent_segments=True to answer any target
containing a ".." segment with 404 instead.

=============================================================================
"""

import os
import logging
from enum import Enum
from dataclasses import dataclass
from pathlib import Path
from typing import Optional


logger = logging.getLogger(__name__)

DEFAULT_PAGE_TARGET = "/"


class Outcome(Enum):
    """What a request target resolved to."""
    DEFAULT_PAGE = "default_page"
    FILE_FOUND = "file_found"
    NOT_FOUND = "not_found"


@dataclass(frozen=True)
class Resolution:
    """Result of resolving a target. `path` is set only for FILE_FOUND."""

    outcome: Outcome
    target: str
    path: Optional[Path] = None

    @property
    def found(self) -> bool:
        return self.outcome is not Outcome.NOT_FOUND


class PathResolver:
    """
    Resolves request targets against a fixed base directory.

    Usage:
        resolver = PathResolver("/srv/site")
        resolver.resolve("/")            # Outcome.DEFAULT_PAGE
        resolver.resolve("/index.html")  # FILE_FOUND if it exists
    """

    def __init__(self, base_dir: str, reject_parent_segments: bool = False):
        """
        Args:
            base_dir: Directory targets are appended to. Used as given,
                      without resolving symlinks or "..".
            reject_parent_segments: Treat targets with ".." segments as
                      not found.
        """
        self.base_dir = str(base_dir)
        self.reject_parent_segments = reject_parent_segments

    def resolve(self, target: str) -> Resolution:
        if target == DEFAULT_PAGE_TARGET:
            return Resolution(Outcome.DEFAULT_PAGE, target)

        if not target:
            return Resolution(Outcome.NOT_FOUND, target)

        if self.reject_parent_segments and self._has_parent_segment(target):
            logger.warning(f"Path traversal attempt: {target}")
            return Resolution(Outcome.NOT_FOUND, target)

        path = Path(self.base_dir + target)
        if self._is_readable_file(path):
            return Resolution(Outcome.FILE_FOUND, target, path)

        return Resolution(Outcome.NOT_FOUND, target)

    @staticmethod
    def _has_parent_segment(target: str) -> bool:
        return ".." in target.replace("\\", "/").split("/")

    @staticmethod
    def _is_readable_file(path: Path) -> bool:
        try:
            return path.is_file() and os.access(path, os.R_OK)
        except (OSError, ValueError):
            # ValueError: embedded NUL byte in the target
            return False
