"""Keep an entry's header consistent with where it lives on disk.

The path of a blog entry encodes its date and slug
(``blog/2024-01/05-hello-world``), pages and tags encode their slug. When
the two disagree, either the header is completed from the path or the
file is moved to the path its header implies.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Protocol

from .errors import FilesystemError, HeaderError, ReconcileError
from .map.node import NodeKind
from .models import Date, Header

if TYPE_CHECKING:
    from .content import Entry

log = logging.getLogger(__name__)


class ContentLocator(Protocol):
    """Maps between content paths and header metadata."""

    def path_to_date(self, path: Path) -> Date | None: ...

    def path_to_slug(self, path: Path) -> str | None: ...

    def kind_of(self, path: Path) -> NodeKind | None: ...

    def canonical_path(self, header: Header, kind: NodeKind | None = None) -> Path: ...


def _relocation_kind(kind: NodeKind | None) -> NodeKind | None:
    # Blog and month entries move between each other following their date.
    if kind in (NodeKind.PAGE, NodeKind.TAG):
        return kind
    return None


def reconcile(
    entry: Entry,
    locator: ContentLocator | None = None,
    header: Header | None = None,
) -> bool:
    """Make ``entry`` consistent with its location.

    In order:

    1. If the path implies a date and the header date is absent or
       incomplete, the header takes the path's date and is written back.
    2. If a complete header date or the slug of its title disagrees with
       the path, the entry is marked for relocation.
    3. A marked entry is moved to the canonical path of its header.

    Args:
        entry: The entry to check.
        locator: Path/metadata mapping, defaults to the entry's tree.
        header: The entry's header, loaded from the file when omitted. It is
            updated in place when its date is completed.

    Returns:
        True if the header or the path changed.

    Raises:
        FilesystemError: If writing or moving fails. The file is restored
            to its state before the call.
        ReconcileError: If there is no locator, the title has no usable
            slug, or the header has no canonical path.
    """
    locator = locator if locator is not None else entry.tree
    if locator is None:
        raise ReconcileError(f"{entry.path}: no content locator to reconcile against")

    if header is None:
        header = entry.header()
        if header is None:
            log.debug("Nothing to reconcile in empty entry %s", entry.path)
            return False

    path = entry.path
    path_date = locator.path_to_date(path)
    kind = locator.kind_of(path)

    new_date: Date | None = None
    relocate = False

    if path_date is not None:
        current = header.date
        if current is None or (not current.complete and current != path_date):
            new_date = path_date
        elif current != path_date:
            log.info("%s: header date %s disagrees with path date %s", path, current, path_date)
            relocate = True

    original_date = header.date
    if new_date is not None:
        # Validates before anything touches the disk.
        try:
            header.set_date(new_date)
        except HeaderError as e:
            raise ReconcileError(f"{path}: {e}") from e

    if kind is not NodeKind.MONTH:
        try:
            slug = header.slug
        except ValueError as e:
            header.date = original_date
            raise ReconcileError(f"{path}: {e}") from e
        if slug != locator.path_to_slug(path):
            log.info("%s: slug %r disagrees with path", path, slug)
            relocate = True

    if new_date is None and not relocate:
        return False

    try:
        snapshot = entry.read_bytes()
    except OSError as e:
        header.date = original_date
        raise FilesystemError(path, f"Cannot read: {e}") from e

    renamed = False
    try:
        if new_date is not None:
            entry.set_header(header)
            log.info("%s: date set to %s from path", path, new_date)
        if relocate:
            target = locator.canonical_path(header, _relocation_kind(kind))
            if target != entry.path:
                entry.rename_as(target)
                renamed = True
    except (OSError, ValueError, HeaderError) as e:
        header.date = original_date
        _restore(entry, path, snapshot)
        if isinstance(e, OSError):
            raise FilesystemError(path, str(e)) from e
        raise ReconcileError(f"{path}: {e}") from e

    return new_date is not None or renamed


def _restore(entry: Entry, path: Path, snapshot: bytes) -> None:
    try:
        if entry.path != path:
            entry.rename_as(path)
        entry.write_bytes(snapshot)
    except OSError:
        log.exception("Could not restore %s after a failed reconcile", path)
