from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Union


class DistanceNorm(Enum):
    L2 = "L2"   # Euclidean
    L1 = "L1"   # Manhattan


@dataclass(frozen=True)
class Negate:
    """Complement every sample (255 - v)."""


@dataclass(frozen=True)
class ClearBorder:
    """Zero every foreground region touching the image border."""


@dataclass(frozen=True)
class Inset:
    """Shrink the foreground by *distance*."""
    distance: float
    norm: DistanceNorm = DistanceNorm.L2


@dataclass(frozen=True)
class Outset:
    """Grow the foreground by *distance* (negate, inset, negate)."""
    distance: float
    norm: DistanceNorm = DistanceNorm.L2


MaskCommand = Union[Negate, ClearBorder, Inset, Outset]


def normalize_command(cmd: MaskCommand) -> MaskCommand:
    """A negative inset is a positive outset and vice versa."""
    if isinstance(cmd, Inset) and cmd.distance < 0:
        return Outset(-cmd.distance, cmd.norm)
    if isinstance(cmd, Outset) and cmd.distance < 0:
        return Inset(-cmd.distance, cmd.norm)
    return cmd
