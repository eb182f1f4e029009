"""Content files on disk."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import TYPE_CHECKING

from .config import REFERENCE_PATTERN
from .header import ParsedDocument, dump_document, parse_document
from .models import Header

if TYPE_CHECKING:
    from .tree import ContentTree

log = logging.getLogger(__name__)


class Entry:
    """A user-edited content file: a header block followed by a body.

    An entry may point at a path that does not exist yet; ``header()`` then
    returns None and ``set_header()`` creates the file.
    """

    def __init__(self, path: Path | str, tree: ContentTree | None = None) -> None:
        self._path = Path(path).absolute()
        self.tree = tree

    @property
    def path(self) -> Path:
        return self._path

    @property
    def name(self) -> str:
        return self._path.name

    @property
    def mtime(self) -> float:
        return self._path.stat().st_mtime

    def exists(self) -> bool:
        return self._path.exists()

    def is_empty(self) -> bool:
        return self._path.stat().st_size == 0

    def read(self) -> str:
        return self._path.read_text(encoding="utf-8")

    def read_bytes(self) -> bytes:
        return self._path.read_bytes()

    def write(self, text: str) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(text, encoding="utf-8")

    def write_bytes(self, data: bytes) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_bytes(data)

    def touch(self) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.touch()

    def unlink(self) -> None:
        self._path.unlink()

    def parse(self) -> ParsedDocument | None:
        """Split the file into header and body, or None if it has no content."""
        if not self.exists() or self.is_empty():
            return None
        return parse_document(self.read(), self._path)

    def header(self) -> Header | None:
        """Load the header.

        Returns:
            The header, or None when the file is missing or empty.

        Raises:
            HeaderParseError: If the file has content but a broken header.
        """
        parsed = self.parse()
        return parsed.header if parsed is not None else None

    def body(self) -> str:
        parsed = self.parse()
        return parsed.body if parsed is not None else ""

    def set_header(self, header: Header) -> None:
        """Rewrite the file with ``header``, keeping the current body."""
        if not isinstance(header, Header):
            raise TypeError("set_header expects a Header")
        self.write(dump_document(header, self.body()))

    def symbols(self) -> list[str]:
        """Reference symbols (``[[node-id]]``) found in the body, in order."""
        seen: set[str] = set()
        symbols: list[str] = []
        for match in REFERENCE_PATTERN.finditer(self.body()):
            symbol = match.group(1)
            if symbol not in seen:
                seen.add(symbol)
                symbols.append(symbol)
        return symbols

    def rename_as(self, new_path: Path | str) -> None:
        """Move the file to ``new_path`` and update bookkeeping.

        Raises:
            FileExistsError: If another file already sits at ``new_path``.
            OSError: If the move fails.
        """
        new_path = Path(new_path).absolute()
        if new_path == self._path:
            return
        if new_path.exists():
            raise FileExistsError(f"Cannot rename {self._path} -> {new_path}: target exists")

        new_path.parent.mkdir(parents=True, exist_ok=True)
        os.rename(self._path, new_path)
        log.info("Renamed %s -> %s", self._path, new_path)

        old_path = self._path
        self._path = new_path
        if self.tree is not None:
            self.tree.was_renamed(old_path, new_path)

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Entry) and other._path == self._path

    def __hash__(self) -> int:
        return hash(self._path)

    def __repr__(self) -> str:
        return f"Entry(path={str(self._path)!r})"
