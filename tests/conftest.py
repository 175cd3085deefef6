"""Pytest bootstrap and shared fixtures.

Ensures ``import infoscreen`` resolves to the local ``src`` package even when
the project is not installed.
"""

import io
import sys
from pathlib import Path

import pytest
from PIL import Image

SRC_ROOT = Path(__file__).resolve().parent.parent / "src"

if str(SRC_ROOT) not in sys.path:
    sys.path.insert(0, str(SRC_ROOT))


def png_bytes(width: int = 40, height: int = 20, color=(200, 30, 30)) -> bytes:
    """Return a solid-color PNG image."""
    buffer = io.BytesIO()
    Image.new("RGB", (width, height), color).save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def make_png():
    return png_bytes


@pytest.fixture
def repo_root(tmp_path):
    return tmp_path / "rep"


@pytest.fixture
def source_dir(tmp_path):
    path = tmp_path / "source"
    path.mkdir()
    return path
