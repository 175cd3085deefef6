"""
Infoscreen

Distributes images, videos and ticker text from watched directories to
browser-based display screens.
"""

__version__ = "0.1.0"

from .config import AppConfig, ScreenConfig, load_config
from .context import AppContext
from .core.content_sources import ContentSourceRegistry, ContentSourceType
from .core.image_cache import ImageCache
from .core.repository import ContentRepository


def main():
    """Entry point for the infoscreen command."""
    import sys
    from .cli import main as cli_main

    sys.exit(cli_main())


__all__ = [
    "AppConfig",
    "ScreenConfig",
    "load_config",
    "AppContext",
    "ContentSourceRegistry",
    "ContentSourceType",
    "ImageCache",
    "ContentRepository",
]
