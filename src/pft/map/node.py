"""Nodes of a site map.

Every node lives in the arena owned by its :class:`~pft.map.builder.SiteMap`
and is addressed by its ``seqnr``. Link fields store seqnrs, never nodes, so
the cycles of the map (day and month, tag and tagged, prev and next) are
plain integers and the whole graph goes away with the map.
"""

from __future__ import annotations

from collections.abc import Iterator
from enum import Enum
from typing import TYPE_CHECKING

from ..models import Date, Header

if TYPE_CHECKING:
    from ..content import Entry


class NodeKind(str, Enum):
    BLOG = "b"
    MONTH = "m"
    PAGE = "p"
    TAG = "t"

    @property
    def dated(self) -> bool:
        return self in (NodeKind.BLOG, NodeKind.MONTH)


def make_node_id(kind: NodeKind, date: Date | None, slug: str | None) -> str:
    """Derive the mnemonic id of a node.

    The id is the kind letter, then the date (blog and month nodes) as
    ``YYYY.MM.DD``, then the slug (every kind but month)::

        b.2024.01.05.hello    m.2024.01    p.about    t.python
    """
    kind = NodeKind(kind)
    parts = [kind.value]

    if kind is NodeKind.MONTH:
        if date is None or date.m is None:
            raise ValueError("Month nodes need a date with year and month")
        parts.append(date.month_of().repr("."))
        return ".".join(parts)

    if kind is NodeKind.BLOG and date is not None:
        parts.append(date.repr("."))

    if not slug:
        raise ValueError(f"Nodes of kind {kind.name} need a slug")
    parts.append(slug)
    return ".".join(parts)


class Node:
    """One entry of the site map, authored or virtual."""

    __slots__ = (
        "kind",
        "id",
        "seqnr",
        "header",
        "document",
        "unresolved",
        "_arena",
        "_prev",
        "_next",
        "_month",
        "_days",
        "_tags",
        "_tagged",
        "_outlinks",
        "_inlinks",
    )

    def __init__(
        self,
        arena: list[Node],
        kind: NodeKind,
        seqnr: int,
        header: Header,
        document: Entry | None = None,
    ) -> None:
        self.kind = NodeKind(kind)
        self.seqnr = seqnr
        self.header = header
        self.document = document
        self.id = make_node_id(self.kind, header.date, None if self.kind is NodeKind.MONTH else header.slug)
        self.unresolved: list[str] = []
        self._arena = arena
        self._prev: int | None = None
        self._next: int | None = None
        self._month: int | None = None
        self._days: list[int] = []
        self._tags: list[int] = []
        self._tagged: list[int] = []
        self._outlinks: list[int] = []
        self._inlinks: list[int] = []

    # -- properties ---------------------------------------------------------

    @property
    def virtual(self) -> bool:
        """True for nodes with no backing document."""
        return self.document is None

    @property
    def date(self) -> Date | None:
        return self.header.date

    @property
    def title(self) -> str | None:
        return self.header.title

    @property
    def prev(self) -> Node | None:
        return self._resolve(self._prev)

    @property
    def next(self) -> Node | None:
        return self._resolve(self._next)

    @property
    def month(self) -> Node | None:
        return self._resolve(self._month)

    @property
    def days(self) -> list[Node]:
        return self._resolve_all(self._days)

    @property
    def tags(self) -> list[Node]:
        return self._resolve_all(self._tags)

    @property
    def tagged(self) -> list[Node]:
        return self._resolve_all(self._tagged)

    @property
    def outlinks(self) -> list[Node]:
        return self._resolve_all(self._outlinks)

    @property
    def inlinks(self) -> list[Node]:
        return self._resolve_all(self._inlinks)

    # -- linking, used by the builder ---------------------------------------

    def set_prev(self, other: Node) -> None:
        """Make ``other`` the chronological predecessor of this node."""
        self._prev = other.seqnr
        other._next = self.seqnr

    def set_month(self, month: Node) -> None:
        if self.date is None or not self.date.complete:
            raise ValueError(f"{self.id} must have a complete date to belong to a month")
        if month.kind is not NodeKind.MONTH:
            raise ValueError(f"{month.id} is not a month node")
        self._month = month.seqnr
        month._days.append(self.seqnr)

    def add_tag(self, tag: Node) -> bool:
        """Link this node and ``tag`` both ways. Returns False if already linked."""
        if tag.seqnr in self._tags:
            return False
        self._tags.append(tag.seqnr)
        tag._tagged.append(self.seqnr)
        return True

    def add_outlink(self, target: Node) -> bool:
        if target.seqnr in self._outlinks:
            return False
        self._outlinks.append(target.seqnr)
        target._inlinks.append(self.seqnr)
        return True

    # -- helpers ------------------------------------------------------------

    def walk(self) -> Iterator[Node]:
        """Follow ``next`` links starting from this node."""
        node: Node | None = self
        while node is not None:
            yield node
            node = node.next

    def _resolve(self, seqnr: int | None) -> Node | None:
        return None if seqnr is None else self._arena[seqnr]

    def _resolve_all(self, seqnrs: list[int]) -> list[Node]:
        return [self._arena[seqnr] for seqnr in seqnrs]

    def __lt__(self, other: Node) -> bool:
        return self.seqnr < other.seqnr

    def __le__(self, other: Node) -> bool:
        return self.seqnr <= other.seqnr

    def __gt__(self, other: Node) -> bool:
        return self.seqnr > other.seqnr

    def __ge__(self, other: Node) -> bool:
        return self.seqnr >= other.seqnr

    def __repr__(self) -> str:
        return f"Node[id={self.id}]"
