"""Site map construction.

:func:`build_map` turns an ordered sequence of :class:`MapEntry` values into
a fully linked :class:`SiteMap`. It works in two phases: every input entry
becomes a node first, then the linking passes run.

1. Chronological chain over blog nodes, sorted by date then id
2. Month aggregation of blog nodes with a complete date
3. Tag graph
4. Cross references between nodes (optional)

Months and tags that have no authored document get virtual nodes with a
synthesized header. The build either returns a consistent map or raises;
partial maps never escape.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from pydantic import BaseModel

from ..config import REFS_OPTION
from ..errors import DuplicateIdError, InvalidVirtualHeaderError, MapBuildError
from ..models import Date, Diagnostic, Header, slugify
from .node import Node, NodeKind, make_node_id

if TYPE_CHECKING:
    from ..content import Entry

log = logging.getLogger(__name__)


@dataclass
class MapEntry:
    """One input of the map builder.

    ``document`` is None for virtual sources (a month or tag that must
    exist even though nobody wrote it); ``header`` is then mandatory.
    """

    kind: NodeKind
    header: Header | None = None
    document: Entry | None = None

    def describe(self) -> str:
        if self.document is not None:
            return str(self.document.path)
        return f"virtual {NodeKind(self.kind).name.lower()}"


class UnresolvedReference(BaseModel):
    """A reference symbol that matched no node id."""

    node_id: str
    symbol: str
    source: str | None = None


@dataclass
class SiteMap:
    """The linked node graph of a site.

    Iteration yields nodes in ``seqnr`` order. The map owns every node;
    nodes only refer to each other through the map's arena.
    """

    _nodes: list[Node] = field(default_factory=list, repr=False)
    _index: dict[str, int] = field(default_factory=dict, repr=False)
    _chain: list[int] = field(default_factory=list, repr=False)
    unresolved: list[UnresolvedReference] = field(default_factory=list)
    diagnostics: list[Diagnostic] = field(default_factory=list)

    def __iter__(self) -> Iterator[Node]:
        return iter(self._nodes)

    def __len__(self) -> int:
        return len(self._nodes)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._index

    def node(self, node_id: str) -> Node:
        """Look up a node by id.

        Raises:
            KeyError: If no node has that id.
        """
        return self._nodes[self._index[node_id]]

    def get(self, node_id: str) -> Node | None:
        seqnr = self._index.get(node_id)
        return None if seqnr is None else self._nodes[seqnr]

    @property
    def head(self) -> Node | None:
        """First node of the chronological chain."""
        return self._nodes[self._chain[0]] if self._chain else None

    @property
    def tail(self) -> Node | None:
        """Last node of the chronological chain."""
        return self._nodes[self._chain[-1]] if self._chain else None

    def chronological(self) -> Iterator[Node]:
        head = self.head
        if head is not None:
            yield from head.walk()

    def nodes_by_kind(self, kind: NodeKind) -> list[Node]:
        kind = NodeKind(kind)
        return [node for node in self._nodes if node.kind is kind]

    @property
    def blog(self) -> list[Node]:
        return self.nodes_by_kind(NodeKind.BLOG)

    @property
    def pages(self) -> list[Node]:
        return self.nodes_by_kind(NodeKind.PAGE)

    @property
    def tags(self) -> list[Node]:
        return self.nodes_by_kind(NodeKind.TAG)

    @property
    def months(self) -> list[Node]:
        """Month nodes, oldest first."""
        return sorted(self.nodes_by_kind(NodeKind.MONTH), key=lambda node: node.date)

    @property
    def virtual_nodes(self) -> list[Node]:
        return [node for node in self._nodes if node.virtual]

    def month(self, year: int, month: int) -> Node | None:
        return self.get(make_node_id(NodeKind.MONTH, Date(y=year, m=month), None))

    def tag(self, name: str) -> Node | None:
        """Find a tag node by any spelling of the tag."""
        try:
            return self.get(make_node_id(NodeKind.TAG, None, slugify(name)))
        except ValueError:
            return None

    def tagged_with(self, name: str) -> list[Node]:
        tag = self.tag(name)
        return tag.tagged if tag is not None else []


class _Builder:
    def __init__(self) -> None:
        self.nodes: list[Node] = []
        self.index: dict[str, int] = {}
        self.sources: dict[int, str] = {}
        self.diagnostics: list[Diagnostic] = []
        self.unresolved: list[UnresolvedReference] = []

    def add(self, kind: NodeKind, header: Header, document: Entry | None, source: str) -> Node:
        try:
            node = Node(self.nodes, kind, len(self.nodes), header, document)
        except ValueError as e:
            if document is None:
                raise InvalidVirtualHeaderError(f"{source}: {e}") from e
            raise MapBuildError(f"{source}: {e}") from e

        if node.id in self.index:
            raise DuplicateIdError(node.id, self.sources[self.index[node.id]], source)

        self.nodes.append(node)
        self.index[node.id] = node.seqnr
        self.sources[node.seqnr] = source
        return node

    def warn(self, code: str, message: str, source: str | None = None) -> None:
        diagnostic = Diagnostic(code=code, message=message, source=source)
        log.warning("%s", diagnostic)
        self.diagnostics.append(diagnostic)

    # -- passes -------------------------------------------------------------

    def create(self, entries: Iterable[MapEntry]) -> None:
        for entry in entries:
            kind = NodeKind(entry.kind)
            header = entry.header
            if header is None and entry.document is not None:
                header = entry.document.header()
            if not isinstance(header, Header):
                if entry.document is None:
                    raise InvalidVirtualHeaderError(
                        f"Virtual {kind.name.lower()} entry supplied without a header"
                    )
                raise MapBuildError(f"{entry.describe()}: document has no header")
            self.add(kind, header, entry.document, entry.describe())

    def link_chronological(self) -> list[int]:
        blog = [node for node in self.nodes if node.kind is NodeKind.BLOG]
        blog.sort(key=_chronological_key)
        for before, after in zip(blog, blog[1:]):
            after.set_prev(before)
        return [node.seqnr for node in blog]

    def link_months(self, chain: list[int]) -> None:
        for seqnr in chain:
            node = self.nodes[seqnr]
            if node.date is None or not node.date.complete:
                self.warn(
                    "incomplete-date",
                    f"{node.id} has an incomplete date and is not listed under any month",
                    self.sources.get(node.seqnr),
                )
                continue
            node.set_month(self.month_node(node.date))

    def month_node(self, date: Date) -> Node:
        month_id = make_node_id(NodeKind.MONTH, date, None)
        seqnr = self.index.get(month_id)
        if seqnr is not None:
            return self.nodes[seqnr]
        log.debug("Synthesizing virtual month %s", month_id)
        return self.add(NodeKind.MONTH, Header(date=date.month_of()), None, f"virtual month {month_id}")

    def link_tags(self) -> None:
        for node in list(self.nodes):
            for name in node.header.tags:
                try:
                    tag_id = make_node_id(NodeKind.TAG, None, slugify(name))
                except ValueError:
                    self.warn("invalid-tag", f"{node.id}: tag {name!r} has no usable characters")
                    continue
                seqnr = self.index.get(tag_id)
                if seqnr is None:
                    log.debug("Synthesizing virtual tag %s", tag_id)
                    tag = self.add(NodeKind.TAG, Header(title=name), None, f"virtual tag {tag_id}")
                else:
                    tag = self.nodes[seqnr]
                if tag is not node:
                    node.add_tag(tag)

    def link_references(self) -> None:
        for node in list(self.nodes):
            for symbol in _reference_symbols(node):
                seqnr = self.index.get(symbol)
                if seqnr is not None:
                    node.add_outlink(self.nodes[seqnr])
                    continue
                if symbol in node.unresolved:
                    continue
                node.unresolved.append(symbol)
                source = self.sources.get(node.seqnr)
                self.unresolved.append(UnresolvedReference(node_id=node.id, symbol=symbol, source=source))
                self.warn("unresolved-reference", f"{node.id}: unresolved reference {symbol!r}", source)


def _chronological_key(node: Node) -> tuple[tuple[int, int, int], str]:
    date = node.date
    return ((-1, -1, -1) if date is None else (date.y, date.m or 0, date.d or 0), node.id)


def _reference_symbols(node: Node) -> list[str]:
    symbols: list[str] = []
    declared = node.header.options.get(REFS_OPTION)
    if isinstance(declared, str):
        symbols.append(declared.strip())
    elif isinstance(declared, list):
        symbols.extend(str(symbol).strip() for symbol in declared)
    if node.document is not None:
        symbols.extend(node.document.symbols())
    return [symbol for symbol in symbols if symbol]


def build_map(entries: Iterable[MapEntry], *, resolve_references: bool = True) -> SiteMap:
    """Build the site map for ``entries``.

    Args:
        entries: Map inputs in the order their seqnrs should follow.
        resolve_references: Run the cross reference pass.

    Returns:
        The linked map. Unresolved references and warnings are reported on
        ``SiteMap.unresolved`` and ``SiteMap.diagnostics``.

    Raises:
        DuplicateIdError: If two entries derive the same id.
        InvalidVirtualHeaderError: If a virtual entry has no valid header.
        MapBuildError: If an authored entry cannot become a node.
    """
    builder = _Builder()
    builder.create(entries)
    chain = builder.link_chronological()
    builder.link_months(chain)
    builder.link_tags()
    if resolve_references:
        builder.link_references()

    site_map = SiteMap(
        _nodes=builder.nodes,
        _index=builder.index,
        _chain=chain,
        unresolved=builder.unresolved,
        diagnostics=builder.diagnostics,
    )
    log.debug(
        "Built site map: %d nodes, %d virtual, %d unresolved references",
        len(site_map),
        len(site_map.virtual_nodes),
        len(site_map.unresolved),
    )
    return site_map
