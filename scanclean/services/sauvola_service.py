"""
Sauvola's local thresholding on top of integral images.

Shafait et al. (2008) "Efficient Implementation of Local Adaptive
Thresholding Techniques Using Integral Images".
"""
from __future__ import annotations

import logging
from typing import Tuple

import numpy as np

from ..errors import ConfigurationError
from ..models.integral_image import IntegralImage
from ..models.sauvola_params import (
    BinaryOutput,
    MultiWindowOutput,
    OutputPolicy,
    PixelInfoOutput,
    SauvolaParams,
    ThresholdOutput,
    VariableOutput,
)
from .image_service import ImageService

logger = logging.getLogger(__name__)


def _to_u8(values: np.ndarray) -> np.ndarray:
    """Clamp to 0..255 and truncate, as an integer pixel store does."""
    return np.clip(values, 0.0, 255.0).astype(np.uint8)


class SauvolaService:
    """
    Turns per-pixel (mean, stddev, centre intensity) into an output sample
    under one of the output policies.
    *   Works only on grayscale numpy arrays; no I/O here.
    *   Parameters must already be validated.
    """

    def __init__(self, image_service: ImageService = None):
        self.image_service = image_service or ImageService()

    # ─── Public API ────────────────────────────────────────────────
    def apply(self, gray: np.ndarray, params: SauvolaParams,
              policy: OutputPolicy = BinaryOutput()) -> np.ndarray:
        """
        Args:
            gray: (H, W) uint8 image.
            params: validated Sauvola parameters.
            policy: which output to produce.

        Returns:
            (H, W) uint8 for Binary / Threshold / Variable,
            (H, W, 3) uint8 RGB for PixelInfo / MultiWindow.
        """
        if gray.ndim != 2:
            raise ValueError(f"expected a single-channel image, got shape {gray.shape}")
        self.image_service.check_not_empty(gray)
        for window in params.window_sizes_for(policy):
            self.image_service.check_padded_size(gray, window)

        logger.debug("Sauvola %s on %dx%d: %s", type(policy).__name__,
                     gray.shape[1], gray.shape[0], params)

        if isinstance(policy, BinaryOutput):
            mean, stddev = self.local_stats(gray, params.window_size)
            return np.where(gray > self.threshold(mean, stddev, params), 255, 0).astype(np.uint8)
        if isinstance(policy, ThresholdOutput):
            mean, stddev = self.local_stats(gray, params.window_size)
            return _to_u8(self.threshold(mean, stddev, params))
        if isinstance(policy, VariableOutput):
            return self.variable(gray, params.window_size, params)
        if isinstance(policy, PixelInfoOutput):
            return self.pixel_info(gray, params.window_size)
        if isinstance(policy, MultiWindowOutput):
            return self.multi_window(gray, policy, params)
        raise ConfigurationError(f"unknown output policy: {policy!r}")

    def binarize(self, gray: np.ndarray, params: SauvolaParams) -> np.ndarray:
        return self.apply(gray, params, BinaryOutput())

    # ─── Building blocks ───────────────────────────────────────────
    @staticmethod
    def local_stats(gray: np.ndarray, window: int) -> Tuple[np.ndarray, np.ndarray]:
        """Windowed mean and stddev maps for every pixel of *gray*."""
        return IntegralImage.from_image(gray, window).window_stats()

    @staticmethod
    def threshold(mean: np.ndarray, stddev: np.ndarray, params: SauvolaParams) -> np.ndarray:
        """Sauvola threshold, truncated toward zero to an integer."""
        raw = params.t_scale * mean * (1 + params.k * (stddev / params.r - 1)) + params.bias
        return np.trunc(raw)

    def variable(self, gray: np.ndarray, window: int, params: SauvolaParams) -> np.ndarray:
        """
        Variable threshold image.

        th1 is the K=0 threshold and th0 the K=1 threshold; th0 <= th1 while
        r_scale >= 1. The centre intensity is clamped into [th0, th1] and
        rescaled to 0..255. Where th0 == th1 the pixel is 255 only if it
        is strictly brighter than th1, matching the binary comparison.
        """
        mean, stddev = self.local_stats(gray, window)
        th1 = params.t_scale * mean
        th0 = th1 * (1 + (stddev / params.r - 1))
        th0 += params.bias
        th1 += params.bias

        v = np.maximum(np.minimum(gray.astype(np.float64), th1), th0)
        span = th1 - th0
        flat = span <= 0
        scaled = 255.0 * (v - th0) / np.where(flat, 1.0, span)
        return _to_u8(np.where(flat, np.where(gray > th1, 255.0, 0.0), scaled))

    def pixel_info(self, gray: np.ndarray, window: int) -> np.ndarray:
        mean, stddev = self.local_stats(gray, window)
        return np.dstack([
            255 - gray,
            _to_u8(stddev * 2.0),
            _to_u8(mean),
        ])

    def multi_window(self, gray: np.ndarray, policy: MultiWindowOutput,
                     params: SauvolaParams) -> np.ndarray:
        """One variable-threshold run per channel (R, G, B)."""
        channels = []
        done = {}
        for window in policy.channel_windows():
            if window not in done:
                done[window] = self.variable(gray, window, params)
            channels.append(done[window])
        return np.dstack(channels)
