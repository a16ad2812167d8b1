# pipeline/background_isolator.py
"""
Background isolation based on Sauvola's algorithm.

Sauvola binarization → mask denoise → inpaint → blur → normalize.
"""
import logging
from typing import List

import cv2
import numpy as np

from ..models.image import Image
from ..models.isolation_params import IsolationParams, OutputMode
from ..models.mask_command import Inset, MaskCommand, Negate
from ..services.image_service import ImageService
from ..services.inpaint_service import InpaintService
from ..services.mask_service import MaskService
from ..services.sauvola_service import SauvolaService

logger = logging.getLogger(__name__)


def denoise_commands(params: IsolationParams) -> List[MaskCommand]:
    """
    Binary page (ink = 0) → inpaint mask (ink = 255):
    drop small ink specks, grow the remaining ink by the second distance.
    """
    return [
        Negate(),
        Inset(params.mask_denoise_distance1),
        Negate(),
        Inset(params.mask_denoise_distance2),
        Negate(),
    ]


def normalize_by_background(img: np.ndarray, bg: np.ndarray, alpha: float) -> np.ndarray:
    """
    clamp(alpha * I / B, 0, 1) * 255 per channel.
    Samples whose background is 0 keep their input value.
    """
    img_f = img.astype(np.float64)
    bg_f = bg.astype(np.float64)
    zero = bg == 0
    ratio = np.clip(alpha * img_f / np.where(zero, 1.0, bg_f), 0.0, 1.0) * 255.0
    return np.where(zero, img, ratio.astype(np.uint8)).astype(np.uint8)


def stretch_brightness(img: np.ndarray, image_service: ImageService = ImageService()) -> np.ndarray:
    """
    Map the darkest intensity to 0 and the brightest to 255. All channels
    share one scale so hues are kept. Images with a single intensity are
    returned unchanged.
    """
    gray = image_service.to_grayscale(img)
    e_min = float(gray.min())
    e_max = float(gray.max())
    if not e_min < e_max:
        return img
    scaled = (img.astype(np.float64) - e_min) * 255.0 / (e_max - e_min)
    return np.clip(scaled, 0.0, 255.0).astype(np.uint8)


def isolate_background(
    img: Image,
    params: IsolationParams = IsolationParams(),
    *,
    image_service: ImageService = ImageService(),
    sauvola_service: SauvolaService = SauvolaService(),
    mask_service: MaskService = MaskService(),
    inpaint_service: InpaintService = InpaintService(),
) -> Image:
    """
    For one Image:
        • binarize its grayscale view with Sauvola's algorithm
        • turn the binary page into an inpaint mask over the ink
        • inpaint the ink away → background estimate
        • blur the estimate, then emit it or the input normalized by it
        • optionally stretch the brightness of the result
    Returns a new Image (no path yet).
    """
    params.validate()

    pixels = img.pixels
    if params.input_as_grayscale:
        pixels = image_service.to_grayscale(pixels)
    image_service.check_not_empty(pixels)
    h, w = pixels.shape[:2]

    logger.info("Step 1: Sauvola binarization (%dx%d, window %d)", w, h, params.window_size)
    gray = image_service.to_grayscale(pixels)
    mask = sauvola_service.binarize(gray, params.sauvola_params())

    logger.info("Step 2: Mask denoise (%.2f, %.2f)",
                params.mask_denoise_distance1, params.mask_denoise_distance2)
    mask_service.apply_commands(mask, denoise_commands(params))

    logger.info("Step 3: Inpainting (%s, %d iterations)",
                params.inpaint_init_mode.value, params.inpaint_iterations)
    bg = inpaint_service.inpaint(pixels, mask, params.inpaint_init_mode, params.inpaint_iterations)

    if params.background_blur != 1:
        size = params.background_blur
        bg = cv2.GaussianBlur(bg, (size, size), 0.0, sigmaY=0.0, borderType=cv2.BORDER_REPLICATE)

    if params.output_mode is OutputMode.NORMALIZED:
        logger.info("Step 4: Normalizing by background (alpha %.2f)", params.background_alpha)
        out = normalize_by_background(pixels, bg, params.background_alpha)
    else:
        out = bg

    if params.adjust_brightness:
        out = stretch_brightness(out, image_service)

    return image_service.create_image(out)
