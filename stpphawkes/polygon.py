"""Bounding boxes and point-in-polygon tests for study regions."""

from __future__ import annotations

import numpy as np

__all__ = [
    "bbox",
    "bboxx",
    "sbox",
    "buffer_region",
    "larger_region",
    "point_in_polygon",
    "inout",
]

_ROUNDING = 0.000001


def _as_matrix(poly) -> np.ndarray:
    arr = np.asarray(poly, dtype=float)
    if arr.ndim != 2 or arr.shape[1] != 2:
        raise ValueError("polygon must be an (N, 2) array of vertices")
    return arr


def bbox(poly) -> np.ndarray:
    """Bounding box as ``[[xmin, ymin], [xmax, ymax]]``."""
    p = _as_matrix(poly)
    return np.array([p.min(axis=0), p.max(axis=0)])


def bboxx(poly) -> np.ndarray:
    """Four box corners from a 2x2 matrix whose rows are the x and y ranges."""
    p = np.asarray(poly, dtype=float)
    (xl, xu), (yl, yu) = p[0], p[1]
    return np.array([[xl, yl], [xu, yl], [xu, yu], [xl, yu]])


def sbox(poly, xfrac: float, yfrac: float) -> np.ndarray:
    """Corners of the bounding box enlarged by a fraction of its width and height."""
    p = _as_matrix(poly)
    xl, yl = p.min(axis=0)
    xu, yu = p.max(axis=0)
    xw = xu - xl
    yw = yu - yl
    xl, xu = xl - xfrac * xw, xu + xfrac * xw
    yl, yu = yl - yfrac * yw, yu + yfrac * yw
    return np.array([[xl, yl], [xu, yl], [xu, yu], [xl, yu]])


def buffer_region(poly, d: float) -> np.ndarray:
    """Shift the four corners of a rectangle by ``d``."""
    out = np.array(poly, dtype=float)
    if out.shape != (4, 2):
        raise ValueError("buffer_region expects a 4x2 rectangle")
    out[0] += d
    out[2] -= d
    out[1, 0] += d
    out[1, 1] -= d
    out[3, 0] -= d
    out[3, 1] += d
    return out


def larger_region(poly, xfrac: float, yfrac: float) -> np.ndarray:
    """Enlarged bounding box as ``[[xmin, ymin], [xmax, ymax]]``."""
    return bbox(sbox(poly, xfrac, yfrac))


def _ring_status(xpt: float, ypt: float, xs: np.ndarray, ys: np.ndarray) -> int:
    """Classify one point against a closed ring: -1 inside, 0 on the edge, 1 outside.

    A horizontal ray towards minus infinity is counted against every segment;
    vertices lying on the ray are resolved by the direction of the segments
    around them.
    """
    numpts = len(xs)
    ptr = numpts - 2
    while ys[0] == ys[ptr] and ptr != 0:
        ptr -= 1
    lastyup = bool(ys[0] > ys[ptr])
    thisyup = False
    crosses = 0

    for x0, y0, x1, y1 in zip(xs[:-1], ys[:-1], xs[1:], ys[1:]):
        if y0 < y1:
            thisyup = True
        if y0 > y1:
            thisyup = False

        if min(y0, y1) < ypt < max(y0, y1):
            if xpt >= min(x0, x1):
                if xpt <= max(x0, x1):
                    ydif = y1 - y0
                    if ydif != 0.0:
                        xcross = x0 + (ypt - y0) / ydif * (x1 - x0)
                        if xcross < xpt:
                            crosses += 1
                        if -_ROUNDING < xcross - xpt < _ROUNDING:
                            return 0
                    else:
                        return 0
                else:
                    crosses += 1
        elif ypt == y0:
            if xpt == x0:
                return 0
            if y0 == y1:
                if min(x0, x1) <= xpt <= max(x0, x1):
                    return 0
            elif xpt > x0 and thisyup == lastyup:
                crosses += 1
        lastyup = thisyup

    return -1 if crosses % 2 else 1


def point_in_polygon(x, y, xp, yp, bb) -> np.ndarray:
    """Locate points relative to a closed polygon ring.

    ``xp``/``yp`` hold the ring with its first vertex repeated at the end and
    ``bb`` is a box as returned by :func:`larger_region`. Each result is -1
    inside, 0 on the boundary and 1 outside.
    """
    box = np.asarray(bb, dtype=float)
    xl, xu = box[0, 0], box[1, 0]
    yl, yu = box[0, 1], box[1, 1]
    xmid = (xu + xl) / 2
    ymid = (yu + yl) / 2

    def scale_x(v):
        return (np.asarray(v, dtype=float) - xmid) / (xu - xmid)

    def scale_y(v):
        return (np.asarray(v, dtype=float) - ymid) / (yu - ymid)

    xs, ys = scale_x(xp), scale_y(yp)
    px, py = np.atleast_1d(scale_x(x)), np.atleast_1d(scale_y(y))
    return np.array(
        [_ring_status(float(a), float(b), xs, ys) for a, b in zip(px, py)], dtype=int
    )


def inout(x, y, poly, bound: bool) -> np.ndarray:
    """Boolean mask of points inside ``poly``; boundary points count when ``bound``."""
    p = _as_matrix(poly)
    ring = np.vstack([p, p[:1]])
    result = point_in_polygon(x, y, ring[:, 0], ring[:, 1], larger_region(p, 0.1, 0.1))
    return result <= 0 if bound else result < 0