# pipeline/mask_processor.py
import logging
from typing import Sequence

import numpy as np

from ..models.image import Image
from ..models.mask_command import MaskCommand
from ..services.image_service import ImageService
from ..services.mask_service import MaskService

logger = logging.getLogger(__name__)


def process_mask(
    img: Image,
    commands: Sequence[MaskCommand],
    *,
    image_service: ImageService = ImageService(),
    mask_service: MaskService = MaskService(),
) -> Image:
    """
    Apply *commands* in order to a copy of *img* viewed as a grayscale mask.
    Returns a new Image (no path yet); *img* is left untouched.
    """
    mask = np.ascontiguousarray(image_service.to_grayscale(img.pixels)).copy()
    logger.info("Applying %d mask command(s) to %s", len(commands), img.path or "<memory>")
    mask_service.apply_commands(mask, commands)
    return image_service.create_image(mask)
