"""Tests for map nodes and node ids."""

import pytest

from pft.map.node import Node, NodeKind, make_node_id
from pft.models import Date, Header


class TestMakeNodeId:
    @pytest.mark.parametrize(
        "kind,date,slug,expected",
        [
            (NodeKind.BLOG, Date(y=2024, m=1, d=5), "hi", "b.2024.01.05.hi"),
            (NodeKind.BLOG, Date(y=2024, m=1), "draft", "b.2024.01.draft"),
            (NodeKind.BLOG, None, "undated", "b.undated"),
            (NodeKind.MONTH, Date(y=2024, m=1), None, "m.2024.01"),
            (NodeKind.MONTH, Date(y=2024, m=1, d=5), "ignored", "m.2024.01"),
            (NodeKind.PAGE, None, "welcome", "p.welcome"),
            (NodeKind.PAGE, Date(y=2024, m=1, d=5), "welcome", "p.welcome"),
            (NodeKind.TAG, None, "intro", "t.intro"),
        ],
    )
    def test_ids(self, kind, date, slug, expected):
        assert make_node_id(kind, date, slug) == expected

    def test_accepts_kind_letter(self):
        assert make_node_id("t", None, "intro") == "t.intro"

    def test_equal_inputs_collide(self):
        date = Date(y=2024, m=1, d=5)
        assert make_node_id(NodeKind.BLOG, date, "hi") == make_node_id(NodeKind.BLOG, date, "hi")

    def test_month_without_month_fails(self):
        with pytest.raises(ValueError):
            make_node_id(NodeKind.MONTH, None, None)

    def test_missing_slug_fails(self):
        with pytest.raises(ValueError):
            make_node_id(NodeKind.PAGE, None, None)

    def test_unknown_kind_fails(self):
        with pytest.raises(ValueError):
            make_node_id("x", None, "slug")


def _arena_with(*specs: tuple[NodeKind, Header]) -> list[Node]:
    arena: list[Node] = []
    for kind, header in specs:
        arena.append(Node(arena, kind, len(arena), header))
    return arena


class TestNode:
    def test_virtual_without_document(self):
        (node,) = _arena_with((NodeKind.PAGE, Header(title="About")))
        assert node.virtual
        assert node.id == "p.about"
        assert node.title == "About"
        assert repr(node) == "Node[id=p.about]"

    def test_ordering_follows_seqnr(self):
        a, b = _arena_with(
            (NodeKind.PAGE, Header(title="Zeta")),
            (NodeKind.PAGE, Header(title="Alpha")),
        )
        assert a < b
        assert sorted([b, a]) == [a, b]

    def test_prev_next_are_symmetric(self):
        a, b = _arena_with(
            (NodeKind.BLOG, Header(title="One", date=Date(y=2024, m=1, d=1))),
            (NodeKind.BLOG, Header(title="Two", date=Date(y=2024, m=1, d=2))),
        )
        b.set_prev(a)
        assert a.next is b
        assert b.prev is a
        assert a.prev is None
        assert b.next is None
        assert list(a.walk()) == [a, b]

    def test_month_membership(self):
        day, month = _arena_with(
            (NodeKind.BLOG, Header(title="One", date=Date(y=2024, m=1, d=1))),
            (NodeKind.MONTH, Header(date=Date(y=2024, m=1))),
        )
        day.set_month(month)
        assert day.month is month
        assert month.days == [day]

    def test_month_requires_complete_date(self):
        draft, month = _arena_with(
            (NodeKind.BLOG, Header(title="Draft", date=Date(y=2024, m=1))),
            (NodeKind.MONTH, Header(date=Date(y=2024, m=1))),
        )
        with pytest.raises(ValueError):
            draft.set_month(month)

    def test_tags_are_symmetric_and_idempotent(self):
        page, tag = _arena_with(
            (NodeKind.PAGE, Header(title="About")),
            (NodeKind.TAG, Header(title="intro")),
        )
        assert page.add_tag(tag)
        assert not page.add_tag(tag)
        assert page.tags == [tag]
        assert tag.tagged == [page]

    def test_outlinks_and_inlinks(self):
        a, b = _arena_with(
            (NodeKind.PAGE, Header(title="A")),
            (NodeKind.PAGE, Header(title="B")),
        )
        a.add_outlink(b)
        assert a.outlinks == [b]
        assert b.inlinks == [a]
        assert b.outlinks == []
