# pipeline/binarizer.py
import logging

from ..models.image import Image
from ..models.sauvola_params import BinaryOutput, OutputPolicy, SauvolaParams
from ..services.image_service import ImageService
from ..services.sauvola_service import SauvolaService

logger = logging.getLogger(__name__)


def binarize_sauvola(
    img: Image,
    params: SauvolaParams,
    policy: OutputPolicy = BinaryOutput(),
    *,
    image_service: ImageService = ImageService(),
    sauvola_service: SauvolaService = SauvolaService(),
) -> Image:
    """
    For one grayscale (or colour, converted) Image:
        • validate params against the requested output policy
        • optionally prescale with Lanczos
        • run Sauvola's algorithm under *policy*
    Returns a new Image (no path yet).
    """
    params.validate(policy)

    gray = image_service.to_grayscale(img.pixels)
    image_service.check_not_empty(gray)
    gray = image_service.prescale(gray, params.prescale)

    logger.info("Binarizing %s (%s, window %s)", img.path or "<memory>",
                type(policy).__name__, params.window_sizes_for(policy))
    out = sauvola_service.apply(gray, params, policy)
    return image_service.create_image(out)
