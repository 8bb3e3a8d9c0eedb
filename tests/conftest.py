import os
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"

if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")


@pytest.fixture(scope="session")
def qapp():
    from PySide6.QtCore import QCoreApplication

    app = QCoreApplication.instance()
    if app is None:
        app = QCoreApplication([])
    yield app


@pytest.fixture
def make_image(tmp_path):
    """Write a solid-colour image and return its path."""

    from PIL import Image

    def _make(name="source.png", size=(120, 80), color=(200, 120, 40)):
        path = tmp_path / name
        Image.new("RGB", size, color).save(path)
        return path

    return _make
