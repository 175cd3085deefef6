"""
Core functionality: content repository, content sources and the image cache.
"""

from .errors import (
    InfoscreenError,
    ContentIOError,
    NotAFileError,
    CopyError,
    TickerDecodeError,
    EvictionAccountingError,
    ImageEncodeError,
    ConfigError,
)
from .hashing import hash_file
from .repository import ContentRepository
from .scanner import scan_directory, ScanResult
from .ticker import parse_ticker_file, parse_ticker_text, repair_charset
from .content_sources import (
    ContentEntry,
    ContentKind,
    ContentSnapshot,
    ContentSource,
    ContentSourceRegistry,
    ContentSourceType,
)
from .image_cache import ImageCache, CacheEntry, build_cache_key
from .image_encoder import ImageService, render_sized_image
from .workers import ContentSyncWorker

__all__ = [
    "InfoscreenError",
    "ContentIOError",
    "NotAFileError",
    "CopyError",
    "TickerDecodeError",
    "EvictionAccountingError",
    "ImageEncodeError",
    "ConfigError",
    "hash_file",
    "ContentRepository",
    "scan_directory",
    "ScanResult",
    "parse_ticker_file",
    "parse_ticker_text",
    "repair_charset",
    "ContentEntry",
    "ContentKind",
    "ContentSnapshot",
    "ContentSource",
    "ContentSourceRegistry",
    "ContentSourceType",
    "ImageCache",
    "CacheEntry",
    "build_cache_key",
    "ImageService",
    "render_sized_image",
    "ContentSyncWorker",
]
