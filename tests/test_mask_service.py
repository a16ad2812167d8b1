"""
Unit tests for mask morphology and command sequencing.
"""

import numpy as np
import pytest

from scanclean.models.mask_command import (
    ClearBorder,
    DistanceNorm,
    Inset,
    Negate,
    Outset,
    normalize_command,
)
from scanclean.pipeline.mask_processor import process_mask
from scanclean.models.image import Image
from scanclean.services.mask_service import MaskService


@pytest.fixture
def service():
    return MaskService()


@pytest.fixture
def square():
    """11x11 mask with a 7x7 foreground square at [2:9, 2:9]."""
    mask = np.zeros((11, 11), dtype=np.uint8)
    mask[2:9, 2:9] = 255
    return mask


def speck():
    mask = np.zeros((9, 9), dtype=np.uint8)
    mask[4, 4] = 255
    return mask


class TestNegate:
    """Test negation."""

    def test_involution(self, service):
        """negate(negate(mask)) == mask."""
        rng = np.random.default_rng(7)
        mask = rng.integers(0, 256, size=(6, 9), dtype=np.uint8)
        original = mask.copy()
        service.negate(service.negate(mask))
        np.testing.assert_array_equal(mask, original)

    def test_in_place(self, service):
        """The buffer itself is complemented."""
        mask = np.array([[0, 255, 100]], dtype=np.uint8)
        result = service.negate(mask)
        assert result is mask
        np.testing.assert_array_equal(mask, [[255, 0, 155]])


class TestClearBorder:
    """Test border-connected region clearing."""

    def test_empty_mask_unchanged(self, service):
        """No foreground, nothing to clear."""
        mask = np.zeros((8, 8), dtype=np.uint8)
        service.clear_border_regions(mask)
        assert not mask.any()

    def test_clears_only_border_blobs(self, service):
        """Blobs touching any edge vanish, interior blobs survive."""
        mask = np.zeros((10, 10), dtype=np.uint8)
        mask[0:3, 0:3] = 255      # top-left corner
        mask[4:6, 8:10] = 255     # right edge
        mask[9, 4] = 255          # bottom edge
        mask[4:6, 3:6] = 255      # interior
        service.clear_border_regions(mask)
        expected = np.zeros((10, 10), dtype=np.uint8)
        expected[4:6, 3:6] = 255
        np.testing.assert_array_equal(mask, expected)

    def test_region_reaching_inside(self, service):
        """The whole connected component is removed, not just its border pixels."""
        mask = np.zeros((8, 8), dtype=np.uint8)
        mask[0:6, 3] = 255
        mask[5, 3:6] = 255
        service.clear_border_regions(mask)
        assert not mask.any()


class TestInsetOutset:
    """Test distance-based shrinking and growing."""

    @pytest.mark.parametrize("norm", [DistanceNorm.L2, DistanceNorm.L1])
    def test_inset_shrinks_square(self, service, square, norm):
        """Inset by 1 peels one pixel off every side."""
        service.inset(square, 1.0, norm)
        expected = np.zeros((11, 11), dtype=np.uint8)
        expected[3:8, 3:8] = 255
        np.testing.assert_array_equal(square, expected)

    def test_inset_zero_keeps_foreground(self, service, square):
        """Zero distance only clears pixels that were already zero."""
        original = square.copy()
        service.inset(square, 0.0)
        np.testing.assert_array_equal(square, original)

    def test_inset_removes_thin_lines(self, service):
        """A one-pixel line disappears under any positive inset."""
        mask = np.zeros((7, 7), dtype=np.uint8)
        mask[3, 1:6] = 255
        service.inset(mask, 1.0)
        assert not mask.any()

    def test_outset_grows(self, service):
        """Outset by 1 (L1) turns one pixel into a diamond."""
        mask = speck()
        service.outset(mask, 1.0, DistanceNorm.L1)
        assert mask[4, 4] == 255
        assert mask[3, 4] == mask[5, 4] == mask[4, 3] == mask[4, 5] == 255
        assert mask[3, 3] == 0
        assert np.count_nonzero(mask) == 5

    def test_outset_after_inset_is_bounded(self, service, square):
        """inset then outset keeps the inset core and stays inside the original."""
        original = square.copy()
        service.inset(square, 1.0, DistanceNorm.L2)
        core = square.copy()
        service.outset(square, 1.0, DistanceNorm.L2)
        assert np.all(square[core == 255] == 255)
        assert np.all(original[square == 255] == 255)
        assert np.all(square[2, 3:8] == 255)
        assert square[2, 2] == 0


class TestCommands:
    """Test command normalization and ordered application."""

    def test_negative_inset_is_outset(self):
        """Sign flips swap inset and outset, keeping the norm."""
        assert normalize_command(Inset(-2.0, DistanceNorm.L1)) == Outset(2.0, DistanceNorm.L1)
        assert normalize_command(Outset(-3.0)) == Inset(3.0)
        assert normalize_command(Inset(1.0)) == Inset(1.0)
        assert normalize_command(Negate()) == Negate()

    def test_negative_inset_applies_as_outset(self, service):
        """Inset(-1) behaves exactly like Outset(1)."""
        a = speck()
        b = speck()
        service.apply_commands(a, [Inset(-1.0)])
        service.outset(b, 1.0)
        np.testing.assert_array_equal(a, b)

    def test_order_matters(self, service):
        """Opening removes a speck, closing keeps it."""
        opened = service.apply_commands(speck(), [Inset(1.0), Outset(1.0)])
        closed = service.apply_commands(speck(), [Outset(1.0), Inset(1.0)])
        assert not opened.any()
        np.testing.assert_array_equal(closed, speck())

    def test_outset_equals_negate_inset_negate(self, service, square):
        """Outset is defined through inset on the complement."""
        a = square.copy()
        service.apply_commands(a, [Outset(2.0)])
        b = square.copy()
        service.apply_commands(b, [Negate(), Inset(2.0), Negate()])
        np.testing.assert_array_equal(a, b)

    def test_process_mask_leaves_input(self, square):
        """The pipeline step works on a copy."""
        img = Image(pixels=square)
        original = square.copy()
        out = process_mask(img, [Negate(), ClearBorder()])
        np.testing.assert_array_equal(img.pixels, original)
        # negated square: the frame touches the border and is cleared,
        # the inner zero-valued square stays zero
        assert not out.pixels.any()
