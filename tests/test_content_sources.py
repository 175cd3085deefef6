"""Tests for content sources and the source registry."""

import os
from unittest.mock import patch

import pytest

from infoscreen.core.content_sources import (
    ContentEntry,
    ContentKind,
    ContentSourceRegistry,
    ContentSourceType,
)
from infoscreen.core.errors import ContentIOError, CopyError
from infoscreen.core.hashing import hash_file
from infoscreen.core.repository import ContentRepository


@pytest.fixture
def registry(repo_root):
    return ContentSourceRegistry(ContentRepository(repo_root))


class TestRegistry:
    """Test source creation and sharing."""

    def test_get_or_create_shares_identical_feeds(self, registry, source_dir):
        a = registry.get_or_create(str(source_dir), ContentSourceType.INFO)
        b = registry.get_or_create(str(source_dir), ContentSourceType.INFO)
        c = registry.get_or_create(str(source_dir), ContentSourceType.DIA_SHOW)

        assert a is b
        assert a is not c
        assert len(registry.sources()) == 2

    def test_snapshot_sums_serials(self, registry, source_dir, make_png):
        (source_dir / "a.png").write_bytes(make_png())
        ticker_dir = source_dir / "ticker"
        ticker_dir.mkdir()
        (ticker_dir / "t.txt").write_text("hello\n")
        info = registry.get_or_create(str(source_dir), ContentSourceType.INFO)
        ticker = registry.get_or_create(str(ticker_dir), ContentSourceType.TICKER)

        assert registry.update_all() == 2
        snapshot = registry.snapshot({"content": info, "ticker": ticker})

        assert snapshot.serial == 2
        assert snapshot.feeds["ticker"] == (ContentEntry(ContentKind.TEXT, text="hello"),)

    def test_failing_source_does_not_block_others(self, registry, source_dir, make_png):
        (source_dir / "a.png").write_bytes(make_png())
        broken = registry.get_or_create("broken", ContentSourceType.INFO)
        good = registry.get_or_create(str(source_dir), ContentSourceType.INFO)

        original_poll = type(broken).poll

        def poll(source, repository):
            if source is broken:
                raise RuntimeError("boom")
            return original_poll(source, repository)

        with patch.object(type(broken), "poll", poll):
            assert registry.update_all() == 1

        assert good.serial == 1
        assert broken.serial == 0


class TestMediaSource:
    """Test info and dia show sources."""

    def test_first_poll_imports_files(self, registry, source_dir, repo_root, make_png):
        (source_dir / "b.png").write_bytes(make_png(color=(0, 0, 255)))
        (source_dir / "a.mp4").write_bytes(b"video")
        (source_dir / "ignored.txt").write_text("nope")
        source = registry.get_or_create(str(source_dir), ContentSourceType.INFO)

        assert registry.update_source(source) is True

        assert source.serial == 1
        assert [e.kind for e in source.entries] == [ContentKind.VIDEO, ContentKind.IMAGE]
        assert source.entries[0].locator == hash_file(source_dir / "a.mp4") + ".mp4"
        for entry in source.entries:
            assert (repo_root / entry.locator).is_file()

    def test_noop_poll_leaves_serial_and_entries(self, registry, source_dir, make_png):
        (source_dir / "a.png").write_bytes(make_png())
        source = registry.get_or_create(str(source_dir), ContentSourceType.DIA_SHOW)
        registry.update_source(source)
        entries = source.entries

        with patch.object(registry.repository, "ingest") as ingest:
            assert registry.update_source(source) is False

        ingest.assert_not_called()
        assert source.serial == 1
        assert source.entries is entries

    def test_change_bumps_serial_by_one(self, registry, source_dir, make_png):
        (source_dir / "a.png").write_bytes(make_png())
        source = registry.get_or_create(str(source_dir), ContentSourceType.INFO)
        registry.update_source(source)

        (source_dir / "b.jpg").write_bytes(b"jpeg")
        registry.update_source(source)

        assert source.serial == 2
        assert len(source.entries) == 2

    def test_failed_ingest_skips_file(self, registry, source_dir, make_png):
        (source_dir / "a.png").write_bytes(make_png())
        (source_dir / "b.png").write_bytes(make_png(color=(1, 2, 3)))
        source = registry.get_or_create(str(source_dir), ContentSourceType.INFO)
        real_ingest = registry.repository.ingest

        def ingest(path):
            if path.name == "a.png":
                raise CopyError("disk full")
            return real_ingest(path)

        with patch.object(registry.repository, "ingest", side_effect=ingest):
            assert registry.update_source(source) is True

        assert [e.locator for e in source.entries] == [hash_file(source_dir / "b.png") + ".png"]
        assert source.serial == 1

        assert registry.update_source(source) is True

        assert sorted(e.locator for e in source.entries) == sorted(
            hash_file(source_dir / name) + ".png" for name in ("a.png", "b.png"))
        assert source.serial == 2
        assert registry.update_source(source) is False

    def test_repeated_ingest_failure_does_not_bump_serial(self, registry, source_dir, make_png):
        (source_dir / "a.png").write_bytes(make_png())
        source = registry.get_or_create(str(source_dir), ContentSourceType.INFO)

        with patch.object(registry.repository, "ingest", side_effect=CopyError("disk full")) as ingest:
            assert registry.update_source(source) is False
            assert registry.update_source(source) is False

        assert ingest.call_count == 2
        assert source.entries == ()
        assert source.serial == 0

    def test_unreadable_directory_keeps_previous_state(self, registry, source_dir, make_png):
        (source_dir / "a.png").write_bytes(make_png())
        source = registry.get_or_create(str(source_dir), ContentSourceType.INFO)
        registry.update_source(source)
        entries = source.entries

        with patch("infoscreen.core.scanner.os.scandir", side_effect=PermissionError("denied")):
            assert registry.update_source(source) is False

        assert source.entries == entries
        assert source.serial == 1

    def test_empty_path_is_an_empty_feed(self, registry):
        source = registry.get_or_create("", ContentSourceType.INFO)

        assert registry.update_source(source) is False
        assert source.entries == ()
        assert source.serial == 0


class TestTickerSources:
    """Test ticker directories and the ticker default file."""

    def test_ticker_paragraphs_become_text_entries(self, registry, source_dir, repo_root):
        (source_dir / "1.txt").write_text("a\nb\n\nc\n")
        (source_dir / "2.txt").write_text("d\n")
        source = registry.get_or_create(str(source_dir), ContentSourceType.TICKER)

        registry.update_source(source)

        assert [e.text for e in source.entries] == ["a b", "c", "d"]
        assert all(e.kind is ContentKind.TEXT for e in source.entries)
        assert not repo_root.exists() or list(repo_root.iterdir()) == []

    def test_ticker_default_keeps_exactly_one_entry(self, registry, tmp_path):
        path = tmp_path / "default.txt"
        path.write_text("Welcome\nto the lobby\n\nsecond paragraph\n")
        source = registry.get_or_create(str(path), ContentSourceType.TICKER_DEFAULT)

        assert len(source.entries) == 1
        assert source.entries[0].text == ""

        registry.update_source(source)
        assert source.entries == (ContentEntry(ContentKind.TEXT, text="Welcome to the lobby"),)
        assert source.serial == 1

        assert registry.update_source(source) is False
        assert source.serial == 1

    def test_ticker_default_change_is_detected_by_content(self, registry, tmp_path):
        path = tmp_path / "default.txt"
        path.write_text("old\n")
        source = registry.get_or_create(str(path), ContentSourceType.TICKER_DEFAULT)
        registry.update_source(source)

        path.write_text("new\n")
        os.utime(path, (1_000_000, 1_000_000))
        registry.update_source(source)

        assert source.entries[0].text == "new"
        assert source.serial == 2

    def test_empty_ticker_default_file(self, registry, tmp_path):
        path = tmp_path / "default.txt"
        path.write_text("\n\n")
        source = registry.get_or_create(str(path), ContentSourceType.TICKER_DEFAULT)

        registry.update_source(source)

        assert source.entries == (ContentEntry(ContentKind.TEXT, text=""),)

    def test_unreadable_ticker_file_keeps_previous_entries(self, registry, source_dir):
        path = source_dir / "a.txt"
        path.write_text("hello\n")
        source = registry.get_or_create(str(source_dir), ContentSourceType.TICKER)
        registry.update_source(source)

        path.write_text("hello world\n")
        with patch("infoscreen.core.ticker.open", side_effect=PermissionError("denied"), create=True):
            assert registry.update_source(source) is False

        assert [e.text for e in source.entries] == ["hello"]
        assert source.serial == 1

        assert registry.update_source(source) is True
        assert [e.text for e in source.entries] == ["hello world"]
        assert source.serial == 2

    def test_unreadable_ticker_default_keeps_previous_text(self, registry, tmp_path):
        path = tmp_path / "default.txt"
        path.write_text("old\n")
        source = registry.get_or_create(str(path), ContentSourceType.TICKER_DEFAULT)
        registry.update_source(source)

        path.write_text("new text\n")
        with patch("infoscreen.core.content_sources.parse_ticker_file",
                   side_effect=ContentIOError("denied")):
            assert registry.update_source(source) is False

        assert source.entries[0].text == "old"
        assert source.serial == 1

        assert registry.update_source(source) is True
        assert source.entries[0].text == "new text"

    def test_missing_ticker_default_file_keeps_state(self, registry, tmp_path):
        source = registry.get_or_create(str(tmp_path / "missing.txt"), ContentSourceType.TICKER_DEFAULT)

        assert registry.update_source(source) is False
        assert source.serial == 0


class TestContentEntry:
    def test_to_dict(self):
        entry = ContentEntry(ContentKind.IMAGE, locator="abc.png")

        assert entry.to_dict() == {"type": "i", "repo_url": "abc.png", "text": ""}
