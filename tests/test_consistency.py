"""Tests for reconciling entries with their location on disk."""

import os
from pathlib import Path

import pytest

from pft.consistency import reconcile
from pft.content import Entry
from pft.errors import FilesystemError, ReconcileError
from pft.map import NodeKind
from pft.models import Date
from pft.tree import ContentTree

from conftest import write_entry


# ─────────────────────────────────────────────────────────────────────────────
# Header completed from path
# ─────────────────────────────────────────────────────────────────────────────


class TestDateFromPath:
    def test_undated_entry_takes_path_date(self, tree: ContentTree):
        path = write_entry(tree.content_dir / "blog/2023-06/10-summer", "Title: Summer")
        entry = tree.entry(path)

        assert reconcile(entry, tree) is True
        assert entry.header().date == Date(y=2023, m=6, d=10)
        assert "Date: 2023-06-10" in path.read_text()
        assert entry.path == path

        assert reconcile(entry, tree) is False

    def test_body_survives_rewrite(self, tree: ContentTree):
        path = write_entry(
            tree.content_dir / "blog/2023-06/10-summer", "Title: Summer", "Long hot days."
        )
        reconcile(tree.entry(path), tree)
        assert tree.entry(path).body().strip() == "Long hot days."

    def test_coarser_agreeing_date_is_completed(self, tree: ContentTree):
        path = write_entry(tree.content_dir / "blog/2024-01/05-hi", "Title: Hi\nDate: 2024-01")
        entry = tree.entry(path)

        assert reconcile(entry, tree) is True
        assert entry.header().date == Date(y=2024, m=1, d=5)
        assert entry.path == path

    def test_disagreeing_month_date_is_replaced(self, tree: ContentTree):
        month_file = write_entry(tree.content_dir / "blog/2024-02.month", "Title: February\nDate: 2024-02")
        month_before = month_file.read_bytes()
        path = write_entry(tree.content_dir / "blog/2024-01/05-hi", "Title: Hi\nDate: 2024-02")
        entry = tree.entry(path)

        assert reconcile(entry, tree) is True
        assert entry.path == path
        assert tree.kind_of(entry.path) is NodeKind.BLOG
        assert entry.header().date == Date(y=2024, m=1, d=5)
        assert month_file.read_bytes() == month_before
        assert reconcile(entry, tree) is False

    def test_month_entry_takes_its_own_month(self, tree: ContentTree):
        path = write_entry(tree.content_dir / "blog/2024-01.month", "Title: January\nDate: 2024-03")
        entry = tree.entry(path)

        assert reconcile(entry, tree) is True
        assert entry.path == path
        assert entry.header().date == Date(y=2024, m=1)

    def test_header_argument_is_updated(self, tree: ContentTree):
        path = write_entry(tree.content_dir / "blog/2023-06/10-summer", "Title: Summer")
        entry = tree.entry(path)
        header = entry.header()

        assert reconcile(entry, tree, header) is True
        assert header.date == Date(y=2023, m=6, d=10)

    def test_month_entry_takes_month(self, tree: ContentTree):
        path = write_entry(tree.content_dir / "blog/2024-01.month", "Title: January")
        entry = tree.entry(path)

        assert reconcile(entry, tree) is True
        assert entry.header().date == Date(y=2024, m=1)
        assert entry.path == path
        assert reconcile(entry, tree) is False


# ─────────────────────────────────────────────────────────────────────────────
# Relocation
# ─────────────────────────────────────────────────────────────────────────────


class TestRelocation:
    def test_consistent_entry_is_untouched(self, tree: ContentTree):
        path = write_entry(tree.content_dir / "blog/2024-01/05-hi", "Title: Hi\nDate: 2024-01-05")
        before = path.read_bytes()

        assert reconcile(tree.entry(path), tree) is False
        assert path.read_bytes() == before

    def test_retitled_entry_moves(self, tree: ContentTree):
        old = write_entry(tree.content_dir / "blog/2024-01/05-hi", "Title: Hello\nDate: 2024-01-05")
        entry = tree.entry(old)

        assert reconcile(entry, tree) is True

        new = tree.content_dir / "blog/2024-01/05-hello"
        assert entry.path == new
        assert new.is_file()
        assert not old.exists()
        assert tree.entry(new) is entry
        assert reconcile(entry, tree) is False

    def test_redated_entry_moves(self, tree: ContentTree):
        old = write_entry(tree.content_dir / "blog/2024-01/05-hi", "Title: Hi\nDate: 2024-02-01")
        entry = tree.entry(old)

        assert reconcile(entry, tree) is True
        assert entry.path == tree.content_dir / "blog/2024-02/01-hi"
        assert entry.header().date == Date(y=2024, m=2, d=1)

    def test_page_keeps_its_kind(self, tree: ContentTree):
        old = write_entry(tree.content_dir / "pages/old", "Title: New Name")
        entry = tree.entry(old)

        assert reconcile(entry, tree) is True
        assert entry.path == tree.content_dir / "pages/new-name"

    def test_tag_keeps_its_kind(self, tree: ContentTree):
        old = write_entry(tree.content_dir / "tags/py", "Title: Python")
        entry = tree.entry(old)

        assert reconcile(entry, tree) is True
        assert entry.path == tree.content_dir / "tags/python"

    def test_dated_page_stays_a_page(self, tree: ContentTree):
        path = write_entry(tree.content_dir / "pages/about", "Title: About\nDate: 2024-01-05")
        assert reconcile(tree.entry(path), tree) is False

    def test_defaults_to_entry_tree(self, tree: ContentTree):
        old = write_entry(tree.content_dir / "pages/old", "Title: Fresh")
        entry = tree.entry(old)
        assert reconcile(entry) is True
        assert entry.path.name == "fresh"


# ─────────────────────────────────────────────────────────────────────────────
# Failures
# ─────────────────────────────────────────────────────────────────────────────


class TestFailures:
    def test_existing_target_is_not_overwritten(self, tree: ContentTree):
        source = write_entry(tree.content_dir / "pages/a", "Title: B")
        target = write_entry(tree.content_dir / "pages/b", "Title: B", "The real B.")
        source_before = source.read_bytes()
        target_before = target.read_bytes()

        with pytest.raises(FilesystemError) as exc_info:
            reconcile(tree.entry(source), tree)

        assert exc_info.value.path == source
        assert source.read_bytes() == source_before
        assert target.read_bytes() == target_before

    def test_failed_move_restores_file(self, tree: ContentTree, monkeypatch: pytest.MonkeyPatch):
        path = write_entry(tree.content_dir / "blog/2024-01/05-hi", "Title: Hello", "Body.")
        before = path.read_bytes()
        entry = tree.entry(path)
        header = entry.header()

        def broken_rename(src, dst):
            raise PermissionError(13, "Permission denied", str(src))

        monkeypatch.setattr(os, "rename", broken_rename)

        with pytest.raises(FilesystemError):
            reconcile(entry, tree, header)

        assert path.read_bytes() == before
        assert entry.path == path
        assert header.date is None
        assert tree.entry(path) is entry

    def test_title_without_slug(self, tree: ContentTree):
        path = write_entry(tree.content_dir / "pages/x", "Title: '!!!'")
        before = path.read_bytes()

        with pytest.raises(ReconcileError, match="no usable characters"):
            reconcile(tree.entry(path), tree)
        assert path.read_bytes() == before

    def test_title_without_slug_keeps_header_date(self, tree: ContentTree):
        path = write_entry(tree.content_dir / "blog/2024-01/05-x", "Title: '???'")
        entry = tree.entry(path)
        header = entry.header()

        with pytest.raises(ReconcileError):
            reconcile(entry, tree, header)
        assert header.date is None
        assert "Date" not in path.read_text()

    def test_no_locator(self, tmp_path: Path):
        path = write_entry(tmp_path / "loose", "Title: Loose")
        with pytest.raises(ReconcileError, match="no content locator"):
            reconcile(Entry(path))

    def test_empty_entry_is_ignored(self, tree: ContentTree):
        path = tree.content_dir / "pages/empty"
        path.write_text("")
        assert reconcile(tree.entry(path), tree) is False


# ─────────────────────────────────────────────────────────────────────────────
# Whole tree
# ─────────────────────────────────────────────────────────────────────────────


class TestMakeConsistent:
    def test_reports_changed_entries(self, tree: ContentTree):
        content = tree.content_dir
        write_entry(content / "blog/2023-06/10-summer", "Title: Summer")
        write_entry(content / "blog/2024-01/05-hi", "Title: Hi\nDate: 2024-01-05")
        write_entry(content / "pages/old", "Title: About")

        changed = tree.make_consistent()

        assert sorted(entry.path.relative_to(content).as_posix() for entry in changed) == [
            "blog/2023-06/10-summer",
            "pages/about",
        ]
        assert tree.make_consistent() == []

    def test_reconciled_tree_builds(self, tree: ContentTree):
        content = tree.content_dir
        write_entry(content / "blog/2023-06/10-summer", "Title: Summer")
        write_entry(content / "blog/2023-06/12-later", "Title: Later")

        tree.make_consistent()
        site_map = tree.build_map()

        assert [node.id for node in site_map.chronological()] == [
            "b.2023.06.10.summer",
            "b.2023.06.12.later",
        ]
