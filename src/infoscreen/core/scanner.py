#!/usr/bin/env python3
"""
scanner.py: recursive directory scan with an aggregate change digest.

`scan_directory` walks a source directory in name order, collects the files
accepted by a selector and folds a stamp of every collected file
(name, modification time, size) into one keyed hash. Comparing that digest
with the one from the previous scan tells a content source whether anything
was added, removed, renamed or modified without reading file contents.
"""

import hmac
import os
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, List, Union

from .hashing import new_hmac
from ..utils.log_utils import get_logger

logger = get_logger(__name__)

Selector = Callable[[str], bool]


@dataclass
class ScanResult:
    """Files found by a scan and the aggregate digest over their stamps."""
    root: Path
    files: List[Path]
    digest: str
    errors: List[Path] = field(default_factory=list)

    @property
    def root_failed(self) -> bool:
        """True if the scan root itself could not be read."""
        return self.root in self.errors


def file_stamp(name: str, stat_result: os.stat_result) -> str:
    """Return the change stamp for one file: `<name>-<mtime>-<size>`."""
    mtime = datetime.fromtimestamp(int(stat_result.st_mtime), tz=timezone.utc)
    return f"{name}-{mtime.isoformat(timespec='seconds')}-{stat_result.st_size}"


def _collect(path: Path, select: Selector, mac: hmac.HMAC,
             files: List[Path], errors: List[Path]) -> None:
    try:
        with os.scandir(path) as it:
            entries = sorted(it, key=lambda e: e.name)
    except OSError as e:
        logger.error("Failed to read directory %s: %s", path, e)
        errors.append(path)
        return

    for entry in entries:
        logger.debug("Checking file: %s", entry.name)
        if entry.is_dir(follow_symlinks=False):
            _collect(Path(entry.path), select, mac, files, errors)
            continue
        if not select(entry.name):
            continue
        try:
            st = entry.stat()
        except OSError as e:
            logger.error("Failed to stat %s: %s", entry.path, e)
            continue
        files.append(Path(entry.path))
        mac.update(file_stamp(entry.name, st).encode("utf-8"))


def scan_directory(root: Union[str, os.PathLike], select: Selector) -> ScanResult:
    """
    Recursively scan `root` for files whose name satisfies `select`.

    Directories are visited depth-first with entries sorted by name, so an
    unchanged directory always yields the same digest. Unreadable directories
    are logged, recorded in `ScanResult.errors` and contribute nothing.

    Args:
        root: Directory to scan.
        select: Predicate on the bare file name.

    Returns:
        ScanResult with the ordered file list and the hex digest.
    """
    root = Path(root)
    mac = new_hmac()
    files: List[Path] = []
    errors: List[Path] = []
    _collect(root, select, mac, files, errors)
    digest = mac.hexdigest()
    logger.debug("scan_directory: %s: %d files, digest %s", root, len(files), digest)
    return ScanResult(root=root, files=files, digest=digest, errors=errors)
