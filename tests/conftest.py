from pathlib import Path

import numpy as np
import pytest
from PIL import Image


@pytest.fixture()
def write_png(tmp_path: Path):
    """Return a helper that saves a numpy array as PNG under tmp_path."""

    def _write(name: str, arr, folder: Path = None) -> Path:
        target = (folder or tmp_path) / name
        target.parent.mkdir(parents=True, exist_ok=True)
        Image.fromarray(np.asarray(arr, dtype=np.uint8)).save(target)
        return target

    return _write
