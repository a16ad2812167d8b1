"""
Environment-variable defaults for the parameter objects.
"""
import math
import os
from typing import Callable, TypeVar

from .errors import ConfigurationError

T = TypeVar("T")


def env_value(name: str, default: T, cast: Callable[[str], T]) -> T:
    """
    os.getenv(name) converted by *cast*, or *default* when unset.
    Malformed values raise ConfigurationError naming the variable.
    """
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return cast(raw)
    except ConfigurationError:
        raise
    except ValueError:
        raise ConfigurationError(f"{name}: invalid value {raw!r}") from None


def require_finite(value: float, message: str) -> None:
    """NaN and infinities compare false against every bound, so reject them up front."""
    if not math.isfinite(value):
        raise ConfigurationError(message)
