from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, Tuple, Union

from .integral_image import WINDOW_SIZE_LIMIT
from ..config import env_value, require_finite
from ..errors import ConfigurationError

DEFAULT_WINDOW_SIZE = 60
DEFAULT_K = 0.4
MAX_MULTI_WINDOWS = 3


# ── Output policies ─────────────────────────────────────────────────
@dataclass(frozen=True)
class BinaryOutput:
    """255 where the pixel is brighter than its Sauvola threshold, else 0."""


@dataclass(frozen=True)
class ThresholdOutput:
    """The threshold itself, clamped to 0..255."""


@dataclass(frozen=True)
class VariableOutput:
    """
    Lowest K that turns the pixel white, mapped to an intensity.
    White: K == 0, black: K >= 1.
    """


@dataclass(frozen=True)
class PixelInfoOutput:
    """RGB diagnostic: R = inverted intensity, G = 2 * stddev, B = mean."""


@dataclass(frozen=True)
class MultiWindowOutput:
    """Variable output for up to three window sizes packed as R, G, B."""
    window_sizes: Tuple[int, ...]

    def channel_windows(self) -> Tuple[int, int, int]:
        """Window size per output channel; the last size fills the rest."""
        sizes = tuple(self.window_sizes)
        return sizes + (sizes[-1],) * (MAX_MULTI_WINDOWS - len(sizes))


OutputPolicy = Union[BinaryOutput, ThresholdOutput, VariableOutput,
                     PixelInfoOutput, MultiWindowOutput]

# Names accepted by --output-type
OUTPUT_TYPES: Dict[str, type] = {
    "b": BinaryOutput,
    "binary": BinaryOutput,
    "binarized": BinaryOutput,
    "t": ThresholdOutput,
    "threshold": ThresholdOutput,
    "v": VariableOutput,
    "variable": VariableOutput,
    "p": PixelInfoOutput,
    "pixels": PixelInfoOutput,
    "pixelinfo": PixelInfoOutput,
    "multiw": MultiWindowOutput,
    "variable-multiw": MultiWindowOutput,
}


def is_variable(policy: OutputPolicy) -> bool:
    return isinstance(policy, (VariableOutput, MultiWindowOutput))


def validate_window_size(window: int, option: str = "window size") -> None:
    if window < 1:
        raise ConfigurationError(f"{option}: window size is too small.")
    if window > WINDOW_SIZE_LIMIT:
        raise ConfigurationError(f"{option}: window size is too large.")


@dataclass(frozen=True)
class SauvolaParams:
    """
    Value-object holding Sauvola's parameters.

    t_bias is a fraction of the full intensity range (0.1 -> +25.5).
    """
    window_size: int = DEFAULT_WINDOW_SIZE
    k: float = DEFAULT_K
    r_scale: float = 1.0         # 1.0 -> R is the largest possible stddev
    t_scale: float = 1.0
    t_bias: float = 0.0
    prescale: float = 1.0

    @property
    def r(self) -> float:
        return self.r_scale * (255.0 * 0.5)

    @property
    def bias(self) -> float:
        return 255.0 * self.t_bias

    @classmethod
    def from_env(cls) -> "SauvolaParams":
        """Defaults overridable through SAUVOLA_* environment variables."""
        return cls(
            window_size=env_value("SAUVOLA_WINDOW_SIZE", DEFAULT_WINDOW_SIZE, int),
            k=env_value("SAUVOLA_K", DEFAULT_K, float),
            r_scale=env_value("SAUVOLA_R_SCALE", 1.0, float),
            t_scale=env_value("SAUVOLA_THRESHOLD_SCALE", 1.0, float),
            t_bias=env_value("SAUVOLA_THRESHOLD_BIAS", 0.0, float),
        )

    def validate(self, policy: OutputPolicy = BinaryOutput()) -> None:
        """Raise ConfigurationError unless these params can run *policy*."""
        for name in ("prescale", "k", "r_scale", "t_scale", "t_bias"):
            require_finite(getattr(self, name), f"{name} must be a finite number.")
        if self.prescale <= 0:
            raise ConfigurationError("prescale value must be positive.")
        validate_window_size(self.window_size)
        if self.k < 0:
            raise ConfigurationError("k parameter is too small.")
        if self.r_scale <= 0:
            raise ConfigurationError("R scale must be positive.")
        if self.t_scale <= 0:
            raise ConfigurationError("threshold scale must be larger than zero.")
        if is_variable(policy) and self.r_scale < 1:
            raise ConfigurationError(
                "R scale must not be less than 1 if variable output is enabled.")
        if isinstance(policy, MultiWindowOutput):
            if not policy.window_sizes:
                raise ConfigurationError("multi-window output requires at least one window size.")
            if len(policy.window_sizes) > MAX_MULTI_WINDOWS:
                raise ConfigurationError("too many window sizes.")
            for size in policy.window_sizes:
                validate_window_size(size, "multi-window")

    def window_sizes_for(self, policy: OutputPolicy) -> Tuple[int, ...]:
        if isinstance(policy, MultiWindowOutput):
            return policy.channel_windows()
        return (self.window_size,)
