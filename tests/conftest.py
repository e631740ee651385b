import numpy as np
import cv2 as cv
import pytest

from config import Settings


@pytest.fixture
def rng():
    return np.random.default_rng(0)


@pytest.fixture
def source_file(tmp_path, rng):
    # 120 rows x 100 cols, halves to 60 x 50
    path = tmp_path / "source.png"
    cv.imwrite(str(path), rng.integers(0, 256, (120, 100, 3), dtype=np.uint8))
    return path


@pytest.fixture
def target_file(tmp_path, rng):
    path = tmp_path / "target.png"
    cv.imwrite(str(path), rng.integers(0, 256, (200, 240, 3), dtype=np.uint8))
    return path


@pytest.fixture
def settings(tmp_path, source_file, target_file):
    return Settings(
        source_path=str(source_file),
        target_path=str(target_file),
        output_path=str(tmp_path / "clone.png"),
        resize_factor=2,
        selection_mode="fixed",
        show_windows=False,
    )
