"""
Application context: builds the shared repository, content registry and image
cache once and hands them to the sync worker and the web servers.
"""

import threading
from dataclasses import dataclass, field
from typing import Dict, List

from .config import AppConfig, ScreenConfig
from .core.content_sources import ContentSource, ContentSourceRegistry, ContentSourceType
from .core.image_cache import MB, ImageCache
from .core.image_encoder import ImageService
from .core.repository import ContentRepository
from .core.workers import ContentSyncWorker
from .utils.log_utils import get_logger

logger = get_logger(__name__)

# feed name in the /api/content response -> (config field, source type)
SCREEN_FEEDS = {
    "content": ("content_source_dir", ContentSourceType.INFO),
    "content2": ("content2_source_dir", ContentSourceType.INFO),
    "content3": ("content3_source_dir", ContentSourceType.INFO),
    "mixin": ("image_source_dir", ContentSourceType.DIA_SHOW),
    "ticker": ("ticker_source_dir", ContentSourceType.TICKER),
    "ticker_default": ("ticker_default_file", ContentSourceType.TICKER_DEFAULT),
}


@dataclass
class Screen:
    """A configured front-end together with the content sources it shows."""
    config: ScreenConfig
    feeds: Dict[str, ContentSource] = field(default_factory=dict)


class AppContext:
    """Owns the single instance of every shared component."""

    def __init__(self, config: AppConfig):
        self.config = config
        self.repository = ContentRepository(config.repo_root)
        self.registry = ContentSourceRegistry(self.repository)
        self.cache = ImageCache(config.cache_size * MB)
        self.images = ImageService(self.repository.root, self.cache)
        self.stop_event = threading.Event()
        self.screens: List[Screen] = [self.register_screen(s) for s in config.screens]

    def register_screen(self, screen_config: ScreenConfig) -> Screen:
        """Create (or reuse) the content sources for one screen."""
        screen = Screen(screen_config)
        for feed, (attr, source_type) in SCREEN_FEEDS.items():
            path = getattr(screen_config, attr)
            screen.feeds[feed] = self.registry.get_or_create(path, source_type)
        logger.debug("Screen %s uses %d sources", screen_config.url, len(screen.feeds))
        return screen

    def create_sync_worker(self) -> ContentSyncWorker:
        return ContentSyncWorker(
            self.registry,
            interval=self.config.content_sync_interval,
            stop_event=self.stop_event,
        )
