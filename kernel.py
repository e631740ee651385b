import logging

import numpy as np
import cv2 as cv
from scipy.sparse import coo_matrix, linalg

logger = logging.getLogger(__name__)

# 4-neighbourhood as (dy, dx)
NEIGHBOURS = ((0, 1), (1, 0), (0, -1), (-1, 0))


class CloneError(Exception):
    """The cloned region is empty or does not fit the destination."""


def anchor_point(shape):
    # Where the kayak lands in the target: 2/5 across, 3/4 down
    rows, cols = shape[:2]
    return (cols * 2 // 5, rows * 3 // 4)


def restore_foreground(cloned, original, mask):
    """Masked overwrite: inside `mask` the result is `original`, elsewhere `cloned`."""
    keep = mask != 0
    if keep.ndim < cloned.ndim:
        keep = keep[:, :, np.newaxis]
    return np.where(keep, original, cloned).astype(cloned.dtype)


class Poisson:
    NORMAL_CLONE = 1
    MIXED_CLONE = 2

    _CV_FLAGS = {NORMAL_CLONE: cv.NORMAL_CLONE, MIXED_CLONE: cv.MIXED_CLONE}

    # src and dst may differ in size but share the channel count.
    # mask is src-sized; point is the (x, y) in dst where the centre of the mask's bounding box lands.
    @classmethod
    def seamlessClone(cls, src, dst, mask, point, flag=NORMAL_CLONE, backend="opencv"):
        if flag not in cls._CV_FLAGS:
            raise ValueError(f"unknown clone flag: {flag!r}")
        if not np.any(mask):
            raise CloneError("mask selects no pixels")
        point = (int(point[0]), int(point[1]))
        if backend == "opencv":
            try:
                return cv.seamlessClone(src, dst, mask, point, cls._CV_FLAGS[flag])
            except cv.error as err:
                raise CloneError(f"OpenCV seamlessClone failed at {point}: {err}") from err
        if backend == "sparse":
            return cls._sparseClone(src, dst, mask, point, flag)
        raise ValueError(f"unknown clone backend: {backend!r}")

    @classmethod
    def _sparseClone(cls, src, dst, mask, point, flag):
        selected = mask != 0
        if selected.ndim == 3:
            selected = selected.any(axis=2)
        ys, xs = np.nonzero(selected)
        top, left = ys.min(), xs.min()
        h, w = ys.max() - top + 1, xs.max() - left + 1
        # top-left corner of the region inside dst
        y0, x0 = point[1] - h // 2, point[0] - w // 2
        # one pixel of dst must surround the region to act as the boundary
        if y0 < 1 or x0 < 1 or y0 + h > dst.shape[0] - 1 or x0 + w > dst.shape[1] - 1:
            raise CloneError(f"region of {w}x{h} centred at {point} does not fit a "
                             f"{dst.shape[1]}x{dst.shape[0]} destination")

        dstF = np.float64(dst).reshape(dst.shape[0], dst.shape[1], -1)
        srcF = np.float64(src).reshape(src.shape[0], src.shape[1], -1)
        if flag == cls.MIXED_CLONE:
            guide = cls._mixedGuide(srcF, dstF, (top, left), (y0, x0), (h, w))
        else:
            laplacian = cv.Laplacian(srcF, -1, ksize=1).reshape(srcF.shape)
            guide = laplacian[top:top + h, left:left + w]

        region = np.zeros(dst.shape[:2], dtype=bool)
        region[y0:y0 + h, x0:x0 + w] = selected[top:top + h, left:left + w]
        guideFull = np.zeros_like(dstF)
        guideFull[y0:y0 + h, x0:x0 + w] = guide

        ret = cls._solve(dstF, region, guideFull)
        logger.debug("Solved %d unknowns per channel", int(region.sum()))
        return ret.reshape(dst.shape)

    @classmethod
    def _mixedGuide(cls, srcF, dstF, srcCorner, dstCorner, size):
        # Per direction keep whichever of source/target has the stronger gradient
        (top, left), (y0, x0), (h, w) = srcCorner, dstCorner, size
        kernels = [np.array([[0, -1, 1]]), np.array([[0], [-1], [1]]),
                   np.array([[1, -1, 0]]), np.array([[1], [-1], [0]])]
        guide = np.zeros((h, w, dstF.shape[2]))
        for k in kernels:
            s = cv.filter2D(srcF, -1, k).reshape(srcF.shape)[top:top + h, left:left + w]
            d = cv.filter2D(dstF, -1, k).reshape(dstF.shape)[y0:y0 + h, x0:x0 + w]
            guide += np.where(np.abs(s) > np.abs(d), s, d)
        return guide

    # Sparse LU on the discrete Poisson equation; dst supplies the Dirichlet boundary.
    # The system matrix depends only on the region, so it is factored once for all channels.
    @classmethod
    def _solve(cls, dstF, region, guide):
        ys, xs = np.nonzero(region)
        size = ys.size
        index = np.full(region.shape, -1, dtype=np.int64)
        index[ys, xs] = np.arange(size)

        rows, cols, vals = [np.arange(size)], [np.arange(size)], [np.full(size, -4.0)]
        b = guide[ys, xs].copy()
        for dy, dx in NEIGHBOURS:
            ny, nx = ys + dy, xs + dx
            nb = index[ny, nx]
            inner = nb >= 0
            rows.append(np.nonzero(inner)[0])
            cols.append(nb[inner])
            vals.append(np.ones(int(inner.sum())))
            b[~inner] -= dstF[ny[~inner], nx[~inner]]

        A = coo_matrix((np.concatenate(vals), (np.concatenate(rows), np.concatenate(cols))),
                       shape=(size, size)).tocsc()
        LU = linalg.splu(A)
        X = np.column_stack([LU.solve(b[:, c]) for c in range(b.shape[1])])
        ret = np.copy(dstF)
        ret[ys, xs] = np.clip(np.rint(X), 0, 255)
        return ret.astype(np.uint8)
