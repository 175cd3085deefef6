"""
Utility functions and helpers.
"""

from .log_utils import configure_logging, get_logger
from .utils import (
    IMAGE_EXTS,
    VIDEO_EXTS,
    TEXT_EXTS,
    is_image_file,
    is_video_file,
    is_text_file,
    is_image_or_video_file,
)

__all__ = [
    "configure_logging",
    "get_logger",
    "IMAGE_EXTS",
    "VIDEO_EXTS",
    "TEXT_EXTS",
    "is_image_file",
    "is_video_file",
    "is_text_file",
    "is_image_or_video_file",
]
