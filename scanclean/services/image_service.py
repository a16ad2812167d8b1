from pathlib import Path
from typing import Union
import logging
import cv2
import numpy as np
from ..config import require_finite
from ..errors import ConfigurationError, DegenerateInputError, ResourceExhaustionError
from ..models.image import Image
from ..repositories.image_repository import ImageRepository

logger = logging.getLogger(__name__)

# Largest image dimension / pixel count the buffers are allowed to address
INT_MAX = 2 ** 31 - 1


class ImageService:
    """I/O helpers plus the size checks every algorithm runs before allocating."""
    def __init__(self):
        self.image_repository = ImageRepository()

    def create_image(self, pixels: np.ndarray, path: Union[str, Path] = None) -> Image:
        return self.image_repository.create_image(pixels, path)

    def load(self, path: Union[str, Path], grayscale: bool = False) -> Image:
        """Load a single image from disk into an Image object."""
        img = self.image_repository.load(path, grayscale=grayscale)
        self.check_not_empty(img.pixels, f"{path}: image is empty.")
        return img

    def save(self, image: Image, bilevel: bool = False) -> None:
        """
        Business-level method to save the image to its path.
        """
        self.image_repository.save(image, bilevel=bilevel)

    @staticmethod
    def to_grayscale(pixels: np.ndarray) -> np.ndarray:
        """Grayscale view; single-channel input is passed through."""
        if pixels.ndim == 2:
            return pixels
        return cv2.cvtColor(pixels, cv2.COLOR_RGB2GRAY)

    @staticmethod
    def check_not_empty(pixels: np.ndarray, message: str = "image is empty.") -> None:
        h, w = pixels.shape[:2]
        if w == 0 or h == 0:
            raise DegenerateInputError(message)

    @staticmethod
    def check_padded_size(pixels: np.ndarray, window: int) -> None:
        """
        Raise ResourceExhaustionError when the image padded by *window* on
        each axis would not be addressable.
        """
        h, w = pixels.shape[:2]
        if (
            INT_MAX - window < w
            or INT_MAX - window < h
            or INT_MAX // (w + window) < h + window
        ):
            raise ResourceExhaustionError("image size plus window size is too big to pad.")

    def prescale(self, pixels: np.ndarray, factor: float) -> np.ndarray:
        """
        Resize by *factor* with a Lanczos filter (no-op for 1.0 or when the
        truncated size does not change).
        """
        if factor == 1.0:
            return pixels
        require_finite(factor, "prescale value must be a finite number.")
        if factor <= 0:
            raise ConfigurationError("prescale value must be positive.")
        h, w = pixels.shape[:2]
        if factor * h + 1 >= INT_MAX or factor * w + 1 >= INT_MAX:
            raise ResourceExhaustionError("image is too big after prescaling.")
        nw = int(factor * w)
        nh = int(factor * h)
        if nw == 0 or nh == 0:
            raise DegenerateInputError("image is empty after prescaling.")
        if INT_MAX // nw < nh:
            raise ResourceExhaustionError("image is too big after prescaling.")
        if (nw, nh) == (w, h):
            return pixels
        logger.debug("Prescaling %dx%d → %dx%d", w, h, nw, nh)
        return cv2.resize(pixels, (nw, nh), interpolation=cv2.INTER_LANCZOS4)
