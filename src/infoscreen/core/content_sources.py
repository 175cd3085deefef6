#!/usr/bin/env python3
"""
content_sources.py: content feeds tracked from source directories.

A ContentSource follows one feed: a directory of images and videos (info
content or the dia show), a directory of ticker text files, or a single
default ticker file. On every poll the source is re-scanned; only when the
aggregate digest differs from the last one are the files imported and the
entry list rebuilt, and only then is the source's serial incremented.

All sources live in a ContentSourceRegistry, which owns the lock that request
handlers take to read entries and serials. Scanning and copying happen outside
that lock; only the final swap of entries and serial happens under it.
"""

import os
import threading
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable, Dict, List, Mapping, Optional, Tuple, Union

from .errors import InfoscreenError
from .hashing import hash_file
from .repository import ContentRepository
from .scanner import scan_directory
from .ticker import parse_ticker_file
from ..utils.log_utils import get_logger
from ..utils.utils import is_image_or_video_file, is_text_file, is_video_file

logger = get_logger(__name__)


class ContentSourceType(Enum):
    INFO = 1
    DIA_SHOW = 2
    TICKER = 3
    TICKER_DEFAULT = 4


class ContentKind(Enum):
    IMAGE = "i"
    VIDEO = "v"
    TEXT = "t"


@dataclass(frozen=True)
class ContentEntry:
    """One displayable item: a repository image/video or a line of ticker text."""
    kind: ContentKind
    locator: str = ""
    text: str = ""

    def to_dict(self) -> Dict[str, str]:
        return {"type": self.kind.value, "repo_url": self.locator, "text": self.text}


Entries = Tuple[ContentEntry, ...]

SELECTORS: Dict[ContentSourceType, Callable[[str], bool]] = {
    ContentSourceType.INFO: is_image_or_video_file,
    ContentSourceType.DIA_SHOW: is_image_or_video_file,
    ContentSourceType.TICKER: is_text_file,
}


def empty_entries(source_type: ContentSourceType) -> Entries:
    """The entry list of a source with no content."""
    if source_type is ContentSourceType.TICKER_DEFAULT:
        return (ContentEntry(ContentKind.TEXT),)
    return ()


@dataclass(frozen=True)
class SourceUpdate:
    """
    New state computed by a poll, applied under the registry lock.

    An incomplete update carries the entries that could be imported but does
    not record the digest, so the next poll imports the directory again.
    """
    digest: str
    entries: Entries
    complete: bool = True


class ContentSource:
    """State of one content feed."""

    def __init__(self, source_type: ContentSourceType, source_path: Union[str, os.PathLike]):
        self.source_type = source_type
        self.source_path = str(source_path)
        self.last_digest = ""
        self.entries: Entries = empty_entries(source_type)
        self.serial = 0

    def __repr__(self) -> str:
        return (f"ContentSource({self.source_type.name}, {self.source_path!r}, "
                f"serial={self.serial}, entries={len(self.entries)})")

    def poll(self, repository: ContentRepository) -> Optional[SourceUpdate]:
        """
        Check the feed for changes.

        Returns:
            A SourceUpdate when the feed changed, None when it did not or when
            it could not be read (the previous state is kept in that case).
        """
        if not self.source_path:
            if self.last_digest or self.entries != empty_entries(self.source_type):
                return SourceUpdate("", empty_entries(self.source_type))
            return None

        if self.source_type is ContentSourceType.TICKER_DEFAULT:
            return self._poll_ticker_default()
        return self._poll_directory(repository)

    def _poll_ticker_default(self) -> Optional[SourceUpdate]:
        try:
            digest = hash_file(self.source_path)
        except InfoscreenError as e:
            logger.error("Ticker default file unavailable: %s", e)
            return None
        if digest == self.last_digest:
            return None

        try:
            paragraphs = parse_ticker_file(self.source_path)
        except InfoscreenError as e:
            logger.error("Keeping previous ticker default: %s", e)
            return None
        text = paragraphs[0] if paragraphs else ""
        logger.info('New ticker default: "%s"', text)
        return SourceUpdate(digest, (ContentEntry(ContentKind.TEXT, text=text),))

    def _poll_directory(self, repository: ContentRepository) -> Optional[SourceUpdate]:
        result = scan_directory(self.source_path, SELECTORS[self.source_type])
        if result.root_failed:
            logger.warning("Keeping previous content of %s, directory unreadable", self.source_path)
            return None
        if result.digest == self.last_digest:
            return None

        logger.info("New content list from source: %s", self.source_path)
        if self.source_type is ContentSourceType.TICKER:
            try:
                entries = self._import_ticker(result.files)
            except InfoscreenError as e:
                logger.error("Keeping previous ticker content of %s: %s", self.source_path, e)
                return None
            return SourceUpdate(result.digest, tuple(entries))

        entries, complete = self._import_media(result.files, repository)
        if not complete and tuple(entries) == self.entries:
            return None
        return SourceUpdate(result.digest, tuple(entries), complete)

    def _import_ticker(self, files: List[Path]) -> List[ContentEntry]:
        entries = []
        for path in files:
            for text in parse_ticker_file(path):
                entries.append(ContentEntry(ContentKind.TEXT, text=text))
        return entries

    def _import_media(self, files: List[Path],
                      repository: ContentRepository) -> Tuple[List[ContentEntry], bool]:
        """Ingest `files`, skipping failures. Returns the entries and whether all files made it."""
        entries = []
        complete = True
        for path in files:
            try:
                name = repository.ingest(path)
            except InfoscreenError as e:
                logger.error("Skipping %s, retrying next cycle: %s", path, e)
                complete = False
                continue
            logger.info("  %s", name)
            kind = ContentKind.VIDEO if is_video_file(name) else ContentKind.IMAGE
            entries.append(ContentEntry(kind, locator=name))
        return entries, complete

    def apply(self, update: SourceUpdate) -> None:
        """Install `update` and bump the serial. Caller holds the registry lock."""
        self.entries = update.entries
        if update.complete:
            self.last_digest = update.digest
        self.serial += 1


@dataclass(frozen=True)
class ContentSnapshot:
    """Entries of several feeds read atomically, with the sum of their serials."""
    feeds: Dict[str, Entries]
    serial: int


class ContentSourceRegistry:
    """
    Process-wide set of content sources, keyed by (path, type) so that
    screens configured with the same feed share one source.
    """

    def __init__(self, repository: ContentRepository):
        self.repository = repository
        self._lock = threading.Lock()
        self._sources: Dict[str, ContentSource] = {}

    @staticmethod
    def key(source_path: Union[str, os.PathLike], source_type: ContentSourceType) -> str:
        return f"{source_path}_{source_type.value}"

    def get_or_create(self, source_path: Union[str, os.PathLike],
                      source_type: ContentSourceType) -> ContentSource:
        """Return the source for (path, type), creating it on first use."""
        key = self.key(source_path, source_type)
        with self._lock:
            source = self._sources.get(key)
            if source is None:
                source = ContentSource(source_type, source_path)
                self._sources[key] = source
                logger.debug("Registered %r", source)
            return source

    def sources(self) -> List[ContentSource]:
        with self._lock:
            return list(self._sources.values())

    def update_source(self, source: ContentSource) -> bool:
        """Poll one source and commit its update. Returns True if it changed."""
        update = source.poll(self.repository)
        if update is None:
            return False
        with self._lock:
            source.apply(update)
        return True

    def update_all(self) -> int:
        """
        Poll every registered source once.

        A failing source is logged and does not stop the others.

        Returns:
            Number of sources whose content changed.
        """
        changed = 0
        for source in self.sources():
            try:
                if self.update_source(source):
                    changed += 1
            except Exception:
                logger.exception("Failed to update %r", source)
        return changed

    def snapshot(self, feeds: Mapping[str, ContentSource]) -> ContentSnapshot:
        """Read the entries of `feeds` and their summed serial under the lock."""
        with self._lock:
            entries = {name: source.entries for name, source in feeds.items()}
            serial = sum(source.serial for source in feeds.values())
        return ContentSnapshot(feeds=entries, serial=serial)
