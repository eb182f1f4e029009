"""Filesystem tree of a PFT site.

Layout below the site root::

    pft.yaml
    content/
        blog/2024-01/05-hello-world    blog entry (date and slug in the path)
        blog/2024-01.month             month entry
        pages/about                    page
        tags/python                    tag page
    templates/
    inject/

The tree is the content locator: it maps paths to dates, slugs and kinds,
computes the canonical path of a header, and keeps its path index in sync
when entries are renamed.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterator
from pathlib import Path

from .config import (
    BLOG_DIR,
    BLOG_FILE_PATTERN,
    CONTENT_DIR,
    INJECT_DIR,
    MONTH_DIR_PATTERN,
    MONTH_FILE_PATTERN,
    MONTH_SUFFIX,
    PAGES_DIR,
    TAGS_DIR,
    TEMPLATES_DIR,
    SiteConfig,
    get_site_root,
    is_root,
)
from .consistency import reconcile
from .content import Entry
from .errors import HeaderParseError
from .map import MapEntry, NodeKind, SiteMap, build_map
from .models import Date, Diagnostic, Header

log = logging.getLogger(__name__)


class ContentTree:
    """Content directory of a site rooted at ``root``."""

    def __init__(self, root: Path | str) -> None:
        self.root = Path(root).absolute()
        self._entries: dict[Path, Entry] = {}
        self._lock = threading.Lock()

    @classmethod
    def locate(cls, start: Path | None = None) -> ContentTree:
        """Open the site containing ``start`` (or the current directory)."""
        return cls(get_site_root(start))

    @classmethod
    def create(cls, root: Path | str, config: SiteConfig | None = None) -> ContentTree:
        """Create the directory skeleton and a default ``pft.yaml``."""
        tree = cls(root)
        for directory in (
            tree.blog_dir,
            tree.pages_dir,
            tree.tags_dir,
            tree.root / TEMPLATES_DIR,
            tree.root / INJECT_DIR,
        ):
            directory.mkdir(parents=True, exist_ok=True)
        if not is_root(tree.root):
            (config or SiteConfig()).save_to(tree.root)
        log.info("Created site skeleton in %s", tree.root)
        return tree

    # -- layout ---------------------------------------------------------------

    @property
    def content_dir(self) -> Path:
        return self.root / CONTENT_DIR

    @property
    def blog_dir(self) -> Path:
        return self.content_dir / BLOG_DIR

    @property
    def pages_dir(self) -> Path:
        return self.content_dir / PAGES_DIR

    @property
    def tags_dir(self) -> Path:
        return self.content_dir / TAGS_DIR

    @property
    def config(self) -> SiteConfig:
        return SiteConfig.load(self.root)

    def _relative(self, path: Path | str) -> tuple[str, ...] | None:
        try:
            return Path(path).absolute().relative_to(self.content_dir).parts
        except ValueError:
            return None

    def kind_of(self, path: Path | str) -> NodeKind | None:
        """Classify a content path, or None if it is outside the known areas."""
        parts = self._relative(path)
        if not parts or len(parts) < 2:
            return None
        area = parts[0]
        if area == BLOG_DIR:
            if len(parts) == 2 and MONTH_FILE_PATTERN.match(parts[1]):
                return NodeKind.MONTH
            if len(parts) == 3 and MONTH_DIR_PATTERN.match(parts[1]):
                return NodeKind.BLOG
            return None
        if len(parts) != 2:
            return None
        if area == PAGES_DIR:
            return NodeKind.PAGE
        if area == TAGS_DIR:
            return NodeKind.TAG
        return None

    def path_to_date(self, path: Path | str) -> Date | None:
        """Date implied by a blog or month path, None elsewhere."""
        kind = self.kind_of(path)
        parts = self._relative(path)
        try:
            if kind is NodeKind.MONTH:
                y, m = MONTH_FILE_PATTERN.match(parts[1]).groups()
                return Date(y=int(y), m=int(m))
            if kind is NodeKind.BLOG:
                y, m = MONTH_DIR_PATTERN.match(parts[1]).groups()
                day = BLOG_FILE_PATTERN.match(parts[2])
                if day is None:
                    return Date(y=int(y), m=int(m))
                return Date(y=int(y), m=int(m), d=int(day.group(1)))
        except ValueError:
            log.debug("Path %s does not encode a valid date", path)
        return None

    def path_to_slug(self, path: Path | str) -> str | None:
        """Slug implied by a content path; month entries have none."""
        kind = self.kind_of(path)
        name = Path(path).name
        if kind is NodeKind.MONTH or kind is None:
            return None
        if kind is NodeKind.BLOG:
            match = BLOG_FILE_PATTERN.match(name)
            return match.group(2) if match else name
        return name

    def canonical_path(self, header: Header, kind: NodeKind | None = None) -> Path:
        """Where an entry with ``header`` belongs.

        Without an explicit kind, a complete date means a blog entry, a
        month-level date a month entry, and no date a page.

        Raises:
            ValueError: If the header cannot be placed as ``kind``.
        """
        if kind is None:
            if header.date is None:
                kind = NodeKind.PAGE
            elif header.date.complete:
                kind = NodeKind.BLOG
            else:
                kind = NodeKind.MONTH
        kind = NodeKind(kind)
        date = header.date

        if kind is NodeKind.BLOG:
            if date is None or not date.complete:
                raise ValueError(f"Blog entry {header.title!r} needs a complete date")
            return self.blog_dir / f"{date.y:04d}-{date.m:02d}" / f"{date.d:02d}-{header.slug}"
        if kind is NodeKind.MONTH:
            if date is None or date.m is None:
                raise ValueError("Month entry needs a date with year and month")
            return self.blog_dir / f"{date.y:04d}-{date.m:02d}{MONTH_SUFFIX}"
        if header.slug is None:
            raise ValueError(f"{kind.name.title()} entry needs a title")
        if kind is NodeKind.PAGE:
            return self.pages_dir / header.slug
        return self.tags_dir / header.slug

    # -- entries -----------------------------------------------------------

    def entry(self, path: Path | str) -> Entry:
        """The entry at ``path``, shared across calls."""
        path = Path(path).absolute()
        with self._lock:
            found = self._entries.get(path)
            if found is None:
                found = self._entries[path] = Entry(path, self)
            return found

    def new_entry(self, header: Header, kind: NodeKind | None = None) -> Entry:
        """Create a file for ``header`` at its canonical path.

        Raises:
            FileExistsError: If the file is already there.
        """
        entry = self.entry(self.canonical_path(header, kind))
        if entry.exists():
            raise FileExistsError(f"Entry already exists: {entry.path}")
        entry.set_header(header)
        return entry

    def _blog_paths(self) -> Iterator[Path]:
        if not self.blog_dir.is_dir():
            return
        for child in sorted(self.blog_dir.iterdir()):
            if child.is_file() and MONTH_FILE_PATTERN.match(child.name):
                yield child
            elif child.is_dir() and MONTH_DIR_PATTERN.match(child.name):
                for item in sorted(child.iterdir()):
                    if item.is_file() and not item.name.startswith("."):
                        yield item

    def _flat_paths(self, directory: Path) -> Iterator[Path]:
        if not directory.is_dir():
            return
        for child in sorted(directory.iterdir()):
            if child.is_file() and not child.name.startswith("."):
                yield child

    def entries(self) -> list[Entry]:
        """All content entries: blog and months, then pages, then tags."""
        paths = [
            *self._blog_paths(),
            *self._flat_paths(self.pages_dir),
            *self._flat_paths(self.tags_dir),
        ]
        return [self.entry(path) for path in paths]

    def was_renamed(self, old_path: Path, new_path: Path) -> None:
        """Move the index record of a renamed entry."""
        old_path = Path(old_path).absolute()
        new_path = Path(new_path).absolute()
        with self._lock:
            entry = self._entries.pop(old_path, None)
            if entry is not None:
                self._entries[new_path] = entry
        log.debug("Index updated for rename %s -> %s", old_path, new_path)

    # -- map -----------------------------------------------------------------

    def map_entries(self, *, strict: bool = True) -> tuple[list[MapEntry], list[Diagnostic]]:
        """Load every entry's header as map input.

        Args:
            strict: Raise on broken headers. When False, broken entries are
                skipped and reported as error diagnostics.

        Raises:
            HeaderParseError: In strict mode, if any header is broken.
        """
        map_entries: list[MapEntry] = []
        diagnostics: list[Diagnostic] = []

        for entry in self.entries():
            kind = self.kind_of(entry.path)
            try:
                parsed = entry.parse()
            except HeaderParseError as e:
                if strict:
                    raise
                diagnostics.append(
                    Diagnostic(level="error", code="header-error", message=e.message, source=str(entry.path))
                )
                log.error("Skipping %s: %s", entry.path, e.message)
                continue

            if parsed is None:
                diagnostics.append(
                    Diagnostic(code="empty-entry", message="Empty file skipped", source=str(entry.path))
                )
                continue
            diagnostics.extend(parsed.diagnostics)
            map_entries.append(MapEntry(kind=kind, header=parsed.header, document=entry))

        return map_entries, diagnostics

    def build_map(self, *, strict: bool = True, resolve_references: bool = True) -> SiteMap:
        map_entries, diagnostics = self.map_entries(strict=strict)
        site_map = build_map(map_entries, resolve_references=resolve_references)
        site_map.diagnostics[:0] = diagnostics
        return site_map

    def make_consistent(self) -> list[Entry]:
        """Reconcile every entry with its location.

        Returns:
            Entries whose header or path changed.
        """
        changed = []
        for entry in self.entries():
            if entry.exists() and not entry.is_empty() and reconcile(entry, self):
                changed.append(entry)
        return changed

    def __repr__(self) -> str:
        return f"ContentTree({str(self.root)!r})"
