from typing import Iterable
import logging
import cv2
import numpy as np

from ..models.mask_command import (
    ClearBorder,
    DistanceNorm,
    Inset,
    MaskCommand,
    Negate,
    Outset,
    normalize_command,
)

logger = logging.getLogger(__name__)

_CV_DIST = {
    DistanceNorm.L2: (cv2.DIST_L2, cv2.DIST_MASK_PRECISE),
    DistanceNorm.L1: (cv2.DIST_L1, 3),
}


class MaskService:
    """
    In-place operations on uint8 masks (nonzero inside, zero outside).
    """

    @staticmethod
    def negate(mask: np.ndarray) -> np.ndarray:
        np.subtract(255, mask, out=mask)
        return mask

    @staticmethod
    def clear_border_regions(mask: np.ndarray) -> np.ndarray:
        """Flood-fill every foreground blob touching the border with 0."""
        h, w = mask.shape
        for x in range(w):
            if mask[0, x]:
                cv2.floodFill(mask, None, (x, 0), 0)
            if mask[h - 1, x]:
                cv2.floodFill(mask, None, (x, h - 1), 0)
        for y in range(h):
            if mask[y, 0]:
                cv2.floodFill(mask, None, (0, y), 0)
            if mask[y, w - 1]:
                cv2.floodFill(mask, None, (w - 1, y), 0)
        return mask

    @staticmethod
    def inset(mask: np.ndarray, distance: float, norm: DistanceNorm = DistanceNorm.L2) -> np.ndarray:
        """Pixels within *distance* of a zero pixel become 0, the rest 255."""
        dist_type, mask_size = _CV_DIST[norm]
        dist = cv2.distanceTransform(mask, dist_type, mask_size)
        mask[...] = np.where(dist <= distance, 0, 255)
        return mask

    def outset(self, mask: np.ndarray, distance: float, norm: DistanceNorm = DistanceNorm.L2) -> np.ndarray:
        self.negate(mask)
        self.inset(mask, distance, norm)
        return self.negate(mask)

    def apply(self, mask: np.ndarray, cmd: MaskCommand) -> np.ndarray:
        cmd = normalize_command(cmd)
        if isinstance(cmd, Negate):
            return self.negate(mask)
        if isinstance(cmd, ClearBorder):
            return self.clear_border_regions(mask)
        if isinstance(cmd, Inset):
            return self.inset(mask, cmd.distance, cmd.norm)
        if isinstance(cmd, Outset):
            return self.outset(mask, cmd.distance, cmd.norm)
        raise ValueError(f"unknown mask command: {cmd!r}")

    def apply_commands(self, mask: np.ndarray, commands: Iterable[MaskCommand]) -> np.ndarray:
        """Run *commands* in order on the same buffer."""
        for cmd in commands:
            logger.debug("mask command: %s", cmd)
            self.apply(mask, cmd)
        return mask
