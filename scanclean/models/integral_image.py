from __future__ import annotations
from dataclasses import dataclass
from typing import Tuple, Union
import cv2
import numpy as np

# 16843009^2 * 255^2 < 2^64
WINDOW_SIZE_LIMIT = 16843009
INTEGRAL_DTYPE = np.uint64

Index = Union[int, np.ndarray]


@dataclass
class IntegralImage:
    """
    Paired sum / sum-of-squares integral images over a padded grayscale buffer.

    Both grids have shape (padded_h + 1, padded_w + 1); row and column 0 are
    the empty prefix, so ``sum[y, x]`` is the sum of every padded pixel with
    row < y and column < x.

    The window belonging to output pixel (x, y) covers padded rows
    y+1 .. y+window and columns x+1 .. x+window. With the leading padding of
    ceil(window / 2) that puts floor((window - 1) / 2) samples before the
    centre pixel and floor(window / 2) after it.
    """
    sum: np.ndarray
    sum_sq: np.ndarray
    window: int

    # ── Construction ────────────────────────────────────────────────
    @staticmethod
    def padding(window: int) -> Tuple[int, int]:
        """(leading, trailing) padding for *window*; they add up to *window*."""
        return (window + 1) // 2, window // 2

    @classmethod
    def pad(cls, gray: np.ndarray, window: int) -> np.ndarray:
        """Replicate-border extend *gray* so every pixel has a full window."""
        lead, trail = cls.padding(window)
        return cv2.copyMakeBorder(gray, lead, trail, lead, trail, cv2.BORDER_REPLICATE)

    @classmethod
    def build(cls, padded: np.ndarray, window: int) -> "IntegralImage":
        values = padded.astype(INTEGRAL_DTYPE)
        grids = []
        for plane in (values, values * values):
            grid = np.zeros((plane.shape[0] + 1, plane.shape[1] + 1), dtype=INTEGRAL_DTYPE)
            grid[1:, 1:] = plane.cumsum(axis=1, dtype=INTEGRAL_DTYPE).cumsum(axis=0, dtype=INTEGRAL_DTYPE)
            grids.append(grid)
        return cls(sum=grids[0], sum_sq=grids[1], window=window)

    @classmethod
    def from_image(cls, gray: np.ndarray, window: int) -> "IntegralImage":
        return cls.build(cls.pad(gray, window), window)

    # ── Geometry ────────────────────────────────────────────────────
    @property
    def image_shape(self) -> Tuple[int, int]:
        """(h, w) of the unpadded image the grids were built for."""
        return (self.sum.shape[0] - 1 - self.window,
                self.sum.shape[1] - 1 - self.window)

    # ── Queries ─────────────────────────────────────────────────────
    def _block_total(self, grid: np.ndarray, x: Index, y: Index) -> np.ndarray:
        """
        Four-corner inclusion-exclusion over the window of output pixel (x, y).

        *x* and *y* may be ints or broadcastable index arrays. The two
        differences are taken first so no unsigned intermediate goes negative.
        """
        w = self.window
        y0, x0 = y + 1, x + 1
        y1, x1 = y0 + w, x0 + w
        return (grid[y1, x1] - grid[y1, x0]) - (grid[y0, x1] - grid[y0, x0])

    def _stats(self, x: Index, y: Index):
        h, w = self.image_shape
        if np.any(np.asarray(x) < 0) or np.any(np.asarray(x) >= w) \
                or np.any(np.asarray(y) < 0) or np.any(np.asarray(y) >= h):
            raise IndexError(f"pixel outside {w}x{h} image")

        inv_area = 1.0 / self.window / self.window
        mean = self._block_total(self.sum, x, y) * inv_area
        variance = self._block_total(self.sum_sq, x, y) * inv_area - mean * mean
        # Uniform blocks can come out slightly negative
        stddev = np.sqrt(np.maximum(variance, 0.0))
        return mean, stddev

    def query(self, x: int, y: int) -> Tuple[float, float]:
        """Mean and population standard deviation of the window at (x, y)."""
        mean, stddev = self._stats(x, y)
        return float(mean), float(stddev)

    def window_stats(self) -> Tuple[np.ndarray, np.ndarray]:
        """Mean and stddev maps, shape (h, w) float64, for every output pixel."""
        h, w = self.image_shape
        ys = np.arange(h)[:, None]
        xs = np.arange(w)[None, :]
        return self._stats(xs, ys)
