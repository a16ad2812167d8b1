# pipeline/threshold_binarizer.py
import logging
from typing import Optional, Tuple

from ..models.image import Image
from ..models.threshold_params import ThresholdParams
from ..services.image_service import ImageService
from ..services.threshold_service import ThresholdService

logger = logging.getLogger(__name__)


def binarize_threshold(
    img: Image,
    params: ThresholdParams,
    *,
    image_service: ImageService = ImageService(),
    threshold_service: ThresholdService = ThresholdService(),
) -> Tuple[Image, Optional[float]]:
    """
    For one grayscale (or colour, converted) Image:
        • validate params
        • optionally prescale with Lanczos
        • threshold with a constant, Otsu's or an adaptive threshold
    Returns a new Image (no path yet) and Otsu's threshold when it was used.
    """
    params.validate()

    gray = image_service.to_grayscale(img.pixels)
    image_service.check_not_empty(gray)
    gray = image_service.prescale(gray, params.prescale)

    logger.info("Binarizing %s (%s)", img.path or "<memory>", params.mode.value)
    out, picked = threshold_service.apply(gray, params)
    return image_service.create_image(out), picked
