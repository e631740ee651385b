import logging

import numpy as np
import cv2 as cv

from imaging import downscale

logger = logging.getLogger(__name__)

# Recorded lasso around the kayak, paddlers and reflection (downscaled source coordinates).
SOURCE_POINTS = (
    (383, 196), (239, 199), (136, 211), (26, 103),
    (71, 1), (124, 1), (383, 104),
)

# Tourist in the foreground of the target photo, which must survive cloning untouched.
FOREGROUND_POINTS = (
    (860, 1184), (848, 1112), (844, 1060), (832, 980), (836, 916),
    (828, 908), (856, 796), (912, 748), (1084, 748), (1084, 1180),
)


# Water in the source sits around 100..180 per channel, the target's around 100..140
def tonal_remap(i, low=100, high=180):
    if i <= low or i > high:
        return i
    # 140 -> 120, 160 -> 130, 180 -> 140
    return (i - low) // 2 + low


def build_lookup_table(low=100, high=180):
    return np.array([tonal_remap(i, low, high) for i in range(256)], dtype=np.uint8)


def apply_lookup_table(image, table):
    return cv.LUT(image, table)


def blur(image, ksize=3):
    return cv.blur(image, (ksize, ksize))


def prepare_source(image, settings):
    """
    Make the source look like it was shot with the target's camera:
    shrink so the kayak has a believable size, soften the sharper focus,
    then darken the mid-tone water band.
    """
    logger.info("Resize the source image")
    image = downscale(image, settings.resize_factor)
    logger.info("Blur the source image")
    image = blur(image, settings.blur_ksize)
    logger.info("Apply color lookup table to source image")
    return apply_lookup_table(image, build_lookup_table())


def polygon_mask(shape, points):
    # Zero image of `shape`, the polygon through `points` filled with 255 on every channel
    if len(points) < 3:
        raise ValueError(f"a polygon needs at least 3 points, got {len(points)}")
    mask = np.zeros(shape, np.uint8)
    contour = np.array(points, dtype=np.int32).reshape(-1, 1, 2)
    fill = (255,) * (shape[2] if len(shape) == 3 else 1)
    cv.drawContours(mask, [contour], 0, fill, cv.FILLED)
    return mask


def select_region(image, mask):
    return cv.bitwise_and(image, mask)


class PointCollector:
    """Owns the clicked points; its handler is what the window calls back."""

    def __init__(self):
        self.points = []

    def onMouseAction(self, event, x, y, flags, param):
        if event == cv.EVENT_LBUTTONDOWN:
            logger.info("Left button of the mouse is clicked - position (%d, %d)", x, y)
            self.points.append((x, y))


class ClickSelector:
    # Left click adds a lasso vertex, any key ends the selection
    def __init__(self, window="Kayak"):
        self.window = window

    def select(self, image):
        collector = PointCollector()
        cv.namedWindow(self.window, cv.WINDOW_AUTOSIZE)
        cv.setMouseCallback(self.window, lambda event, x, y, flags,
                            param: collector.onMouseAction(event, x, y, flags, param))
        cv.imshow(self.window, image)
        cv.waitKey(0)
        cv.setMouseCallback(self.window, lambda *args: None)
        return tuple(collector.points)


class FixedSelector:
    def __init__(self, points=SOURCE_POINTS):
        self.points = tuple(tuple(p) for p in points)

    def select(self, image):
        return self.points


def make_selector(mode):
    if mode == "interactive":
        return ClickSelector()
    if mode == "fixed":
        return FixedSelector()
    raise ValueError(f"unknown selection mode: {mode!r}")
