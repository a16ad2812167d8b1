"""
Diffusion inpainting after Oliveira et al. (2001) "Fast Digital Image Inpainting".
"""
from __future__ import annotations

import logging
import os
from typing import Iterator, Tuple

import cv2
import numpy as np
from dotenv import load_dotenv
from tqdm import trange

from ..errors import DegenerateInputError
from ..models.isolation_params import InpaintInitMode

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)

_A = 0.073235
_B = 0.176765
DIFFUSION_KERNEL = np.array([[_A, _B, _A],
                             [_B, 0.0, _B],
                             [_A, _B, _A]], dtype=np.float32)


def l1_ring_offsets(d: int) -> Iterator[Tuple[int, int]]:
    """
    The 4*d offsets (dx, dy) at L1 distance *d*, in search order.

    For k = 0 .. d-1 the four quadrants are visited clockwise starting at the
    top: (k, -d+k), (d-k, k), (-k, d-k), (-d+k, -k).
    """
    for k in range(d):
        yield k, -d + k
        yield d - k, k
        yield -k, d - k
        yield -d + k, -k


def l1_search_offsets(max_distance: int) -> Iterator[Tuple[int, int]]:
    """Every ring from 1 to *max_distance*, nearest first."""
    for d in range(1, max_distance + 1):
        yield from l1_ring_offsets(d)


class InpaintService:
    """
    Reconstructs masked pixels (mask != 0) from the unmasked ones.
    Works on (H, W) or (H, W, 3) uint8 images.
    """

    def __init__(self, show_progress: bool = None):
        if show_progress is None:
            show_progress = os.getenv("INPAINT_SHOW_PROGRESS", "0") == "1"
        self.show_progress = show_progress

    # ─── Public API ────────────────────────────────────────────────
    def inpaint(self, src: np.ndarray, mask: np.ndarray,
                init_mode: InpaintInitMode = InpaintInitMode.NEAREST_L1,
                iterations: int = 16) -> np.ndarray:
        """
        Initialise every masked pixel, then run *iterations* diffusion passes
        that overwrite masked pixels only. Returns a new uint8 image.
        """
        masked = mask != 0
        dst = self.initialize(src, masked, init_mode)
        if iterations == 0:
            return dst
        return self.diffuse(dst, masked, iterations)

    def initialize(self, src: np.ndarray, masked: np.ndarray,
                   init_mode: InpaintInitMode) -> np.ndarray:
        if masked.all():
            raise DegenerateInputError("no unmasked pixels to inpaint from.")
        if init_mode is InpaintInitMode.MEAN:
            return self.mean_fill(src, masked)
        return self.nearest_fill(src, masked)

    @staticmethod
    def mean_fill(src: np.ndarray, masked: np.ndarray) -> np.ndarray:
        """Every masked pixel becomes the (floored) per-channel mean of the rest."""
        known = src[~masked].astype(np.int64)
        if known.shape[0] == 0:
            raise DegenerateInputError("no unmasked pixels to inpaint from.")
        mean = known.sum(axis=0) // known.shape[0]
        dst = src.copy()
        dst[masked] = mean.astype(src.dtype)
        return dst

    @staticmethod
    def nearest_fill(src: np.ndarray, masked: np.ndarray) -> np.ndarray:
        """
        Every masked pixel copies the nearest unmasked pixel by L1 distance.
        Ties go to whichever offset l1_ring_offsets yields first.
        """
        h, w = masked.shape
        known = ~masked
        if not known.any():
            raise DegenerateInputError("no unmasked pixels to inpaint from.")

        dst = src.copy()
        ys, xs = np.nonzero(masked)
        pending = np.arange(ys.size)
        for dx, dy in l1_search_offsets(h + w):
            if pending.size == 0:
                break
            cy = ys[pending] + dy
            cx = xs[pending] + dx
            hit = (cy >= 0) & (cy < h) & (cx >= 0) & (cx < w)
            hit[hit] = known[cy[hit], cx[hit]]
            found = pending[hit]
            dst[ys[found], xs[found]] = src[cy[hit], cx[hit]]
            pending = pending[~hit]
        return dst

    def diffuse(self, img: np.ndarray, masked: np.ndarray, iterations: int) -> np.ndarray:
        work = img.astype(np.float32)
        for _ in trange(iterations, desc="inpaint", ncols=70, disable=not self.show_progress):
            blurred = cv2.filter2D(work, -1, DIFFUSION_KERNEL, borderType=cv2.BORDER_REPLICATE)
            work[masked] = blurred[masked]
        logger.debug("Diffused %d masked pixels over %d iterations", int(masked.sum()), iterations)
        return np.clip(np.rint(work), 0, 255).astype(np.uint8)
