"""
Global and adaptive thresholding through OpenCV.
"""
import logging
from typing import Optional, Tuple

import cv2
import numpy as np

from ..models.threshold_params import ThresholdMode, ThresholdParams
from .image_service import ImageService

logger = logging.getLogger(__name__)

_ADAPTIVE_METHODS = {
    ThresholdMode.ADAPTIVE_MEAN: cv2.ADAPTIVE_THRESH_MEAN_C,
    ThresholdMode.ADAPTIVE_GAUSSIAN: cv2.ADAPTIVE_THRESH_GAUSSIAN_C,
}


class ThresholdService:
    """
    Wraps cv2.threshold / cv2.adaptiveThreshold on (H, W) uint8 arrays.
    Parameters must already be validated.
    """

    def __init__(self, image_service: ImageService = None):
        self.image_service = image_service or ImageService()

    def apply(self, gray: np.ndarray, params: ThresholdParams) -> Tuple[np.ndarray, Optional[float]]:
        """
        Returns the binary image and, for Otsu's method, the threshold it
        picked as a fraction of the intensity range (None otherwise).
        """
        if gray.ndim != 2:
            raise ValueError(f"expected a single-channel image, got shape {gray.shape}")
        self.image_service.check_not_empty(gray)

        if params.mode is ThresholdMode.CONST:
            _, out = cv2.threshold(gray, params.absolute_threshold, 255.0, cv2.THRESH_BINARY)
            return out, None
        if params.mode is ThresholdMode.OTSU:
            picked, out = cv2.threshold(gray, 0.0, 255.0, cv2.THRESH_BINARY | cv2.THRESH_OTSU)
            logger.debug("Otsu threshold: %s", picked)
            return out, picked / 255.0
        out = cv2.adaptiveThreshold(gray, 255.0, _ADAPTIVE_METHODS[params.mode],
                                    cv2.THRESH_BINARY, params.window_size, params.absolute_c)
        return out, None
