#!/usr/bin/env python3
"""
repository.py: content-addressed store for display files.

Files are copied into a flat directory under the name `<digest><ext>`, where
`digest` is the keyed content hash of the file. Two source files with the same
bytes therefore share one repository file, and an already present file is
never copied again. Files are written to a temporary name first and published
with an atomic rename, so a failed copy never leaves a partial file behind.
"""

import os
import shutil
import tempfile
from pathlib import Path
from typing import Union

from .errors import CopyError, NotAFileError
from .hashing import hash_file
from ..utils.log_utils import get_logger

logger = get_logger(__name__)


class ContentRepository:
    """Flat, content-addressed file store rooted at `root`."""

    def __init__(self, root: Union[str, os.PathLike]):
        self.root = Path(root)
        self.root.mkdir(parents=True, exist_ok=True)

    def path_for(self, name: str) -> Path:
        """Return the on-disk path of repository file `name`."""
        return self.root / name

    def ingest(self, source_path: Union[str, os.PathLike]) -> str:
        """
        Ensure a content-named copy of `source_path` exists in the repository.

        Args:
            source_path: File to ingest.

        Returns:
            The repository-relative name of the stored file.

        Raises:
            NotAFileError: if `source_path` (or the target) is a directory.
            ContentIOError: if `source_path` cannot be read for hashing.
            CopyError: if copying into the repository fails.
        """
        source_path = Path(source_path)
        name = hash_file(source_path) + source_path.suffix
        target = self.root / name

        if target.is_dir():
            raise NotAFileError(f"repository target is a directory: {target}")
        if target.is_file():
            logger.debug("Already in repo: %s -> %s", source_path, name)
            return name

        logger.info("Copying to repo: %s -> %s", source_path, target)
        self._copy_atomic(source_path, target)
        return name

    def _copy_atomic(self, source_path: Path, target: Path) -> None:
        try:
            fd, tmp_name = tempfile.mkstemp(dir=self.root, prefix=".ingest-", suffix=".part")
        except OSError as e:
            raise CopyError(f"failed to create temp file in {self.root}: {e}") from e

        tmp_path = Path(tmp_name)
        try:
            with os.fdopen(fd, "wb") as dst, source_path.open("rb") as src:
                shutil.copyfileobj(src, dst)
            # mkstemp creates 0600 files
            os.chmod(tmp_path, 0o644)
            os.replace(tmp_path, target)
        except OSError as e:
            tmp_path.unlink(missing_ok=True)
            raise CopyError(f"failed to copy {source_path} -> {target}: {e}") from e

    def __contains__(self, name: str) -> bool:
        return (self.root / name).is_file()
