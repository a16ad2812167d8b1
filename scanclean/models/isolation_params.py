from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Dict

from .sauvola_params import DEFAULT_K, DEFAULT_WINDOW_SIZE, SauvolaParams
from ..config import env_value, require_finite
from ..errors import ConfigurationError


class InpaintInitMode(Enum):
    MEAN = "mean"               # mean of the whole unmasked image
    NEAREST_L1 = "nearest"      # nearest unmasked pixel by L1 distance


# Names accepted by --inpaint-initmode / INPAINT_INIT_MODE
INIT_MODES: Dict[str, InpaintInitMode] = {
    "mean": InpaintInitMode.MEAN,
    "nearest": InpaintInitMode.NEAREST_L1,
    "neighbor": InpaintInitMode.NEAREST_L1,
    "neighbor-L1": InpaintInitMode.NEAREST_L1,
    "default": InpaintInitMode.NEAREST_L1,
}


class OutputMode(Enum):
    NORMALIZED = "normalized"   # input divided by the background estimate
    BACKGROUND = "background"   # the background estimate itself


def parse_init_mode(name: str) -> InpaintInitMode:
    try:
        return INIT_MODES[name]
    except KeyError:
        raise ConfigurationError(f"unknown inpaint initialization mode: {name}") from None


@dataclass(frozen=True)
class IsolationParams:
    """
    Everything the background isolation pipeline needs, in one immutable
    object. Defaults match the command-line tool.
    """
    window_size: int = DEFAULT_WINDOW_SIZE
    k: float = DEFAULT_K
    r_scale: float = 1.0

    inpaint_init_mode: InpaintInitMode = InpaintInitMode.NEAREST_L1
    inpaint_iterations: int = 16

    mask_denoise_distance1: float = 1.0     # mask shrinking
    mask_denoise_distance2: float = 5.0     # mask growing

    background_blur: int = 9
    background_alpha: float = 0.9

    output_mode: OutputMode = OutputMode.NORMALIZED
    input_as_grayscale: bool = False
    adjust_brightness: bool = False

    @classmethod
    def from_env(cls) -> "IsolationParams":
        return cls(
            window_size=env_value("SAUVOLA_WINDOW_SIZE", DEFAULT_WINDOW_SIZE, int),
            k=env_value("SAUVOLA_K", DEFAULT_K, float),
            r_scale=env_value("SAUVOLA_R_SCALE", 1.0, float),
            inpaint_init_mode=env_value("INPAINT_INIT_MODE", InpaintInitMode.NEAREST_L1, parse_init_mode),
            inpaint_iterations=env_value("INPAINT_ITERATIONS", 16, int),
            mask_denoise_distance1=env_value("MASK_DENOISE_DIST1", 1.0, float),
            mask_denoise_distance2=env_value("MASK_DENOISE_DIST2", 5.0, float),
            background_blur=env_value("BACKGROUND_BLUR", 9, int),
            background_alpha=env_value("BACKGROUND_ALPHA", 0.9, float),
        )

    def sauvola_params(self) -> SauvolaParams:
        """Parameters for the initial binarization (no threshold scale or bias)."""
        return SauvolaParams(window_size=self.window_size, k=self.k, r_scale=self.r_scale)

    def validate(self) -> None:
        self.sauvola_params().validate()
        for name in ("mask_denoise_distance1", "mask_denoise_distance2", "background_alpha"):
            require_finite(getattr(self, name), f"{name} must be a finite number.")
        if self.inpaint_iterations < 0:
            raise ConfigurationError("inpaint iteration count must not be negative.")
        if self.mask_denoise_distance1 < 0 or self.mask_denoise_distance2 < 0:
            raise ConfigurationError("denoise distance must not be negative.")
        if self.background_blur < 1:
            raise ConfigurationError("background blur size must be positive.")
        if self.background_blur % 2 != 1:
            raise ConfigurationError("background blur size must be an odd integer.")
        if not 0 <= self.background_alpha <= 1:
            raise ConfigurationError("background alpha must be in between 0 and 1.")
