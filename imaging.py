import logging
from pathlib import Path

import cv2 as cv

logger = logging.getLogger(__name__)


class ImageLoadError(FileNotFoundError):
    """Raised when an input image is missing or OpenCV cannot decode it."""

    def __init__(self, path):
        self.path = str(path)
        super().__init__(f"Cannot open image: {self.path}")


class ImageWriteError(OSError):
    def __init__(self, path):
        self.path = str(path)
        super().__init__(f"Cannot write image: {self.path}")


def load_image(path):
    """Read a 3-channel BGR image. No retry: a failed read raises ImageLoadError."""
    img = cv.imread(str(path), cv.IMREAD_COLOR)
    if img is None or img.size == 0:
        raise ImageLoadError(path)
    logger.debug("Loaded %s with shape %s", path, img.shape)
    return img


def save_image(path, image):
    # format follows the extension, .jpg gives a lossy file
    if not cv.imwrite(str(Path(path)), image):
        raise ImageWriteError(path)


def downscale(image, factor):
    # integer shrink on both axes: (cols // factor, rows // factor)
    if not isinstance(factor, int) or factor <= 0:
        raise ValueError(f"resize factor must be a positive integer, got {factor!r}")
    rows, cols = image.shape[:2]
    return cv.resize(image, (cols // factor, rows // factor))


def show_image(window, image, wait=False):
    cv.namedWindow(window, cv.WINDOW_AUTOSIZE)
    cv.imshow(window, image)
    if wait:
        cv.waitKey(0)
