"""
Clone a lasso-selected region of one photo into another.

The source (kayakers, 2012) is shrunk, softened and tone-matched, the user
lassoes the kayak, and the selection is seamlessly cloned into the target
(a tourist in Koln, 1997). The tourist in the foreground is restored after
cloning so they stay in front of the kayak.
"""
import logging
import sys

from config import Settings
from imaging import ImageLoadError, downscale, load_image, save_image, show_image
from kernel import Poisson, anchor_point, restore_foreground
from preprocessing import (FOREGROUND_POINTS, make_selector, polygon_mask,
                           prepare_source, select_region)

logger = logging.getLogger(__name__)


def run(settings, selector=None, foreground_points=FOREGROUND_POINTS):
    """
    Run the pipeline once. Returns 0 on success or when fewer than three
    points were picked, -1 when either input image cannot be read.
    """
    try:
        img = load_image(settings.source_path)
    except ImageLoadError as err:
        logger.error("Cannot open image: %s", err.path)
        return -1

    img = prepare_source(img, settings)

    logger.info("Obtain source image mask")
    selector = selector or make_selector(settings.selection_mode)
    pts = selector.select(img)
    if len(pts) < 3:
        logger.info("Only %d point(s) selected, nothing to clone", len(pts))
        return 0

    mouseMask = polygon_mask(img.shape, pts)
    if settings.show_windows:
        logger.info("Show source image mask")
        show_image("Selected Region", select_region(img, mouseMask))

    logger.info("Load target image")
    try:
        imgTarget = load_image(settings.target_path)
    except ImageLoadError as err:
        logger.error("Cannot open image: %s", err.path)
        return -1

    logger.info("Create a mask for the foreground of the target image")
    fgMask = polygon_mask(imgTarget.shape, foreground_points)

    logger.info("Seamless cloning in progress")
    imgFinal = Poisson.seamlessClone(img, imgTarget, mouseMask, anchor_point(imgTarget.shape),
                                     Poisson.NORMAL_CLONE, backend=settings.clone_backend)

    logger.info("Restore foreground portion of target image")
    imgFinal = restore_foreground(imgFinal, imgTarget, fgMask)

    logger.info("Write output image to %s", settings.output_path)
    save_image(settings.output_path, imgFinal)

    if settings.show_windows:
        logger.info("Resize and show final image")
        show_image("Clone", downscale(imgFinal, settings.display_factor), wait=True)
    return 0


def main():
    settings = Settings.from_env()
    logging.basicConfig(
        level=settings.log_level,
        format='%(asctime)s - %(name)-25s - %(levelname)-8s - %(message)s',
        datefmt='%H:%M:%S'
    )
    return run(settings)


if __name__ == '__main__':
    sys.exit(main())
