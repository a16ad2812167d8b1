from pathlib import Path
from typing import Union
import logging
import numpy as np
import cv2
from PIL import Image as PILImage
from ..models.image import Image

logger = logging.getLogger(__name__)

BILEVEL_EXTS = {".png"}


class ImageRepository:
    """
    Handles file I/O and pixel updates for Image entities.
    Pixels are kept in RGB order (or single channel).
    """

    @staticmethod
    def create_image(pixels: np.ndarray, path: Union[str, Path] = None) -> Image:
        if path is None:
            return Image(pixels)
        return Image(pixels=pixels, path=Path(path))

    @staticmethod
    def load(path: Union[str, Path], grayscale: bool = False) -> Image:
        """
        grayscale=True  → (H, W) intensity image
        grayscale=False → whatever the file holds: (H, W) or (H, W, 3) RGB
        """
        path = Path(path)
        flags = cv2.IMREAD_GRAYSCALE if grayscale else cv2.IMREAD_ANYCOLOR
        arr = cv2.imread(str(path), flags)

        if arr is None:
            raise FileNotFoundError(f"Image not found or unreadable: {path}")

        if arr.ndim == 3:
            arr = cv2.cvtColor(arr, cv2.COLOR_BGR2RGB)
        logger.debug("Loaded %s: %s", path, arr.shape)
        return Image(pixels=arr, path=path)

    @staticmethod
    def save(image: Image, bilevel: bool = False) -> None:
        """
        bilevel=True packs a strictly 0/255 image as 1 bit per pixel when the
        format allows it (PNG).
        """
        if image.path is None:
            raise ValueError("Image has no destination path")
        path = Path(image.path)
        pil_obj = PILImage.fromarray(np.ascontiguousarray(image.pixels))
        if bilevel and path.suffix.lower() in BILEVEL_EXTS:
            pil_obj.convert("1", dither=PILImage.Dither.NONE).save(path, optimize=True)
        else:
            pil_obj.save(path)
        logger.debug("Saved %s", path)
