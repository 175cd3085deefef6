import os
from pathlib import Path
from typing import Union

IMAGE_EXTS = {'.jpg', '.png'}
VIDEO_EXTS = {'.mp4', '.mov'}
TEXT_EXTS = {'.txt'}

PathLike = Union[str, os.PathLike]


def _ext(filename: PathLike) -> str:
    return Path(filename).suffix.lower()


def is_image_file(filename: PathLike) -> bool:
    return _ext(filename) in IMAGE_EXTS


def is_video_file(filename: PathLike) -> bool:
    return _ext(filename) in VIDEO_EXTS


def is_text_file(filename: PathLike) -> bool:
    return _ext(filename) in TEXT_EXTS


def is_image_or_video_file(filename: PathLike) -> bool:
    ext = _ext(filename)
    return ext in IMAGE_EXTS or ext in VIDEO_EXTS
