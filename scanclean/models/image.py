from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
import numpy as np


@dataclass
class Image:
    """
    Simple data object: pixels (+ optional source path for bookkeeping).
    No OpenCV logic outside the repository / services.
    """
    pixels: np.ndarray # Shape (H, W) or (H, W, 3), dtype uint8, RGB order.
    path: Path | None = None # Source or destination of the image.
