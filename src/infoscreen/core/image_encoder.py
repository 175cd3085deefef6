#!/usr/bin/env python3
"""
image_encoder.py: Resize repository images to fit a screen area and encode them as PNG.

The image keeps its aspect ratio: it is scaled to the requested width unless
that would make it taller than the requested height, in which case it is
scaled to the height instead.

Usage:
    python3 -m infoscreen.core.image_encoder <input_path> <width> <height> -o out.png
"""

import argparse
import io
import logging
import os
from pathlib import Path
from typing import Optional, Tuple, Union

from PIL import Image, UnidentifiedImageError

from .errors import ImageEncodeError
from .image_cache import ImageCache
from ..utils.log_utils import configure_logging, get_logger

logger = get_logger(__name__)

PNG_COMPRESS_LEVEL = 1
PNG_MODES = {"1", "L", "LA", "P", "RGB", "RGBA"}


def fit_size(src_size: Tuple[int, int], width: int, height: int) -> Tuple[int, int]:
    """Return the size of `src_size` scaled to fit into `width` x `height`."""
    w, h = src_size
    scale = width / w
    if int(h * scale) <= height:
        return width, max(1, round(h * scale))
    scale = height / h
    return max(1, round(w * scale)), height


def render_sized_image(path: Union[str, os.PathLike], width: int, height: int) -> bytes:
    """
    Open the image at `path`, resize it to fit `width` x `height` and return PNG bytes.

    Raises:
        ImageEncodeError: if the image cannot be decoded, resized or encoded.
    """
    try:
        with Image.open(path) as img:
            logger.debug("Sizing image %s: type %s, size %dx%d", path, img.format, *img.size)
            new_size = fit_size(img.size, width, height)
            resized = img.resize(new_size, resample=Image.Resampling.BICUBIC)
            if resized.mode not in PNG_MODES:
                resized = resized.convert("RGBA" if "A" in resized.mode else "RGB")
    except (OSError, UnidentifiedImageError, ValueError, Image.DecompressionBombError) as e:
        raise ImageEncodeError(f"failed to decode image {path}: {e}") from e

    buffer = io.BytesIO()
    try:
        resized.save(buffer, format="PNG", compress_level=PNG_COMPRESS_LEVEL)
    except (OSError, ValueError) as e:
        raise ImageEncodeError(f"failed to encode image {path}: {e}") from e
    return buffer.getvalue()


class ImageService:
    """Serves resized repository images, from the cache when possible."""

    def __init__(self, image_root: Union[str, os.PathLike], cache: ImageCache):
        self.image_root = Path(image_root)
        self.cache = cache

    def get_image(self, name: str, width: int, height: int) -> bytes:
        """
        Return `name` resized to fit `width` x `height` as PNG bytes.

        Raises:
            ImageEncodeError: if the image cannot be rendered; nothing is cached then.
        """
        data = self.cache.get(name, width, height)
        if data is not None:
            return data

        data = render_sized_image(self.image_root / name, width, height)
        self.cache.put(name, width, height, data)
        return data

    def try_get_image(self, name: str, width: int, height: int) -> Optional[bytes]:
        """Like get_image, but log the failure and return None."""
        try:
            return self.get_image(name, width, height)
        except ImageEncodeError as e:
            logger.error("%s", e)
            return None


def parse_args():
    # mainly used to test
    parser = argparse.ArgumentParser(
        description="Resize an image to fit a screen area and write it as PNG."
    )
    parser.add_argument("input", help="Path to the input image file.")
    parser.add_argument("width", type=int, help="Target width in pixels.")
    parser.add_argument("height", type=int, help="Target height in pixels.")
    parser.add_argument("-o", "--output", required=True, help="Output PNG file.")
    parser.add_argument(
        "--log-level",
        choices=["debug", "info", "warning", "error", "critical", "none"],
        default="none",
        help="Set logging level (default: none)"
    )
    return parser.parse_args()


def main():
    args = parse_args()
    if args.log_level.lower() != 'none':
        configure_logging(getattr(logging, args.log_level.upper()))
    Path(args.output).write_bytes(render_sized_image(args.input, args.width, args.height))


if __name__ == "__main__":
    main()
