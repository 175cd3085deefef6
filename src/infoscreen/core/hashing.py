"""
hashing.py: keyed content digests for files.

The digest depends on the file's bytes only, never on its name or timestamps,
so it can be used as a content address in the repository.
"""

import base64
import hashlib
import hmac
from pathlib import Path

from .errors import ContentIOError, NotAFileError
from ..utils.log_utils import get_logger

logger = get_logger(__name__)

HASH_KEY = b"infoscreen"
CHUNK_SIZE = 64 * 1024


def new_hmac() -> hmac.HMAC:
    """Return a fresh HMAC-SHA256 object keyed with the application key."""
    return hmac.new(HASH_KEY, digestmod=hashlib.sha256)


def hash_file(path) -> str:
    """
    Return the URL-safe, unpadded base64 HMAC-SHA256 digest of the file at `path`.

    Raises:
        NotAFileError: if `path` is a directory.
        ContentIOError: if the file cannot be opened or read.
    """
    path = Path(path)
    if path.is_dir():
        raise NotAFileError(f"is a directory: {path}")

    mac = new_hmac()
    try:
        with path.open("rb") as f:
            for chunk in iter(lambda: f.read(CHUNK_SIZE), b""):
                mac.update(chunk)
    except IsADirectoryError as e:
        raise NotAFileError(f"is a directory: {path}") from e
    except OSError as e:
        raise ContentIOError(f"failed to hash {path}: {e}") from e

    digest = base64.urlsafe_b64encode(mac.digest()).rstrip(b"=").decode("ascii")
    logger.debug("hash_file: %s -> %s", path, digest)
    return digest
