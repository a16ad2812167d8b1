from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Dict

from ..config import env_value, require_finite
from ..errors import ConfigurationError

DEFAULT_ADAPTIVE_WINDOW_SIZE = 3


class ThresholdMode(Enum):
    CONST = "const"                         # one global threshold
    OTSU = "otsu"                           # global threshold picked by Otsu's method
    ADAPTIVE_MEAN = "adaptive-mean"         # local mean minus C
    ADAPTIVE_GAUSSIAN = "adaptive-gaussian" # Gaussian-weighted local mean minus C


# Names accepted by --mode / BINARIZE_MODE
THRESHOLD_MODES: Dict[str, ThresholdMode] = {
    "b": ThresholdMode.CONST,
    "binarize": ThresholdMode.CONST,
    "binarize-static": ThresholdMode.CONST,
    "binarize-const": ThresholdMode.CONST,
    "threshold": ThresholdMode.CONST,
    "threshold-static": ThresholdMode.CONST,
    "threshold-const": ThresholdMode.CONST,
    "adaptive-mean": ThresholdMode.ADAPTIVE_MEAN,
    "mean": ThresholdMode.ADAPTIVE_MEAN,
    "adaptive": ThresholdMode.ADAPTIVE_GAUSSIAN,
    "adaptive-gauss": ThresholdMode.ADAPTIVE_GAUSSIAN,
    "adaptive-gaussian": ThresholdMode.ADAPTIVE_GAUSSIAN,
    "gauss": ThresholdMode.ADAPTIVE_GAUSSIAN,
    "gaussian": ThresholdMode.ADAPTIVE_GAUSSIAN,
    "otsu": ThresholdMode.OTSU,
    "get-threshold": ThresholdMode.OTSU,
}


def parse_threshold_mode(name: str) -> ThresholdMode:
    try:
        return THRESHOLD_MODES[name]
    except KeyError:
        raise ConfigurationError(f"unknown binarization mode: {name}") from None


@dataclass(frozen=True)
class ThresholdParams:
    """
    Parameters of the OpenCV threshold wrappers.

    threshold and c are fractions of the intensity range (0.5 -> 127.5).
    """
    mode: ThresholdMode = ThresholdMode.CONST
    threshold: float = 0.5
    window_size: int = DEFAULT_ADAPTIVE_WINDOW_SIZE
    c: float = 0.0
    prescale: float = 1.0

    @property
    def absolute_threshold(self) -> float:
        return self.threshold * 255.0

    @property
    def absolute_c(self) -> float:
        return self.c * 255.0

    @classmethod
    def from_env(cls) -> "ThresholdParams":
        return cls(
            mode=env_value("BINARIZE_MODE", ThresholdMode.CONST, parse_threshold_mode),
            threshold=env_value("BINARIZE_THRESHOLD", 0.5, float),
            window_size=env_value("BINARIZE_WINDOW_SIZE", DEFAULT_ADAPTIVE_WINDOW_SIZE, int),
            c=env_value("BINARIZE_C", 0.0, float),
        )

    def validate(self) -> None:
        for name in ("prescale", "threshold", "c"):
            require_finite(getattr(self, name), f"{name} must be a finite number.")
        if self.prescale <= 0:
            raise ConfigurationError("prescale value must be positive.")
        if self.threshold < 0:
            raise ConfigurationError("constant threshold must not be negative.")
        if self.threshold > 1:
            raise ConfigurationError("constant threshold must not exceed one.")
        if self.window_size <= 1:
            raise ConfigurationError("window size is too small.")
        if self.window_size % 2 != 1:
            raise ConfigurationError("window size must be an odd number greater than one.")
        if self.c < 0:
            raise ConfigurationError("C parameter must not be negative.")
        if self.c > 1:
            raise ConfigurationError("C parameter must not exceed one.")
