"""Exception hierarchy for pft.

Build-aborting problems are exceptions. Recoverable problems (unknown
header keys, incomplete dates, unresolved references) are reported as
:class:`pft.models.Diagnostic` values instead.
"""

from __future__ import annotations

from pathlib import Path


class PftError(Exception):
    """Base class for all pft errors."""


class ConfigurationError(PftError):
    """Raised when the site configuration is missing or invalid."""


class HeaderError(PftError, ValueError):
    """Raised when a header violates the title/date validity rule."""


class HeaderParseError(HeaderError):
    """Raised when a header block cannot be parsed."""

    def __init__(self, source: Path | str | None, message: str) -> None:
        self.source = source
        self.message = message
        prefix = f"{source}: " if source is not None else ""
        super().__init__(f"{prefix}{message}")


class MapBuildError(PftError):
    """Raised when the site map cannot be built."""


class DuplicateIdError(MapBuildError):
    """Two distinct entries derive the same node id."""

    def __init__(self, node_id: str, first: str, second: str) -> None:
        self.node_id = node_id
        self.first = first
        self.second = second
        super().__init__(f"Duplicate node id {node_id!r}: {first} and {second}")


class InvalidVirtualHeaderError(MapBuildError):
    """A virtual entry was supplied without a usable header."""


class ReconcileError(PftError):
    """Raised when an entry cannot be made consistent."""


class FilesystemError(ReconcileError):
    """A filesystem operation failed during reconciliation.

    The entry is left as it was before the call.
    """

    def __init__(self, path: Path, message: str) -> None:
        self.path = path
        self.message = message
        super().__init__(f"{path}: {message}")
