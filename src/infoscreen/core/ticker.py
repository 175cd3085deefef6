"""
ticker.py: parse ticker text files into ticker entries.

A ticker file is plain text where entries are separated by one or more blank
lines. The lines of one entry are joined with single spaces. Files are
expected in UTF-8; files from older editors in Windows-1252 are converted.
"""

import os
from typing import List, Union

from .errors import ContentIOError, TickerDecodeError
from ..utils.log_utils import get_logger

logger = get_logger(__name__)

LEGACY_ENCODING = "cp1252"


def decode_legacy(raw: bytes) -> str:
    """Decode `raw` as Windows-1252, raising TickerDecodeError on undefined bytes."""
    try:
        return raw.decode(LEGACY_ENCODING)
    except UnicodeDecodeError as e:
        raise TickerDecodeError(f"decoding {LEGACY_ENCODING} failed: {e}") from e


def repair_charset(raw: bytes) -> str:
    """
    Return `raw` as text: UTF-8 if valid, else Windows-1252, else UTF-8 with
    replacement characters (logged as an error).
    """
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError:
        pass

    logger.debug("Converting ticker text from %s to UTF-8", LEGACY_ENCODING)
    try:
        return decode_legacy(raw)
    except TickerDecodeError as e:
        logger.error("%s", e)
        return raw.decode("utf-8", errors="replace")


def parse_ticker_text(text: str) -> List[str]:
    """Split `text` into blank-line separated entries, joining lines with spaces."""
    entries: List[str] = []
    collecting = False
    current: List[str] = []

    for line in text.split("\n"):
        line = line.strip()
        if not line:
            if not collecting:
                continue
            entries.append(" ".join(current))
            current = []
            collecting = False
        else:
            collecting = True
            current.append(line)

    if collecting:
        entries.append(" ".join(current))

    return entries


def parse_ticker_file(path: Union[str, os.PathLike]) -> List[str]:
    """
    Read and parse a ticker file.

    Raises:
        ContentIOError: if the file cannot be read.
    """
    try:
        with open(path, "rb") as f:
            raw = f.read()
    except OSError as e:
        raise ContentIOError(f"failed to read ticker file {path}: {e}") from e

    return parse_ticker_text(repair_charset(raw))
