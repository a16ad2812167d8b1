"""
Unit tests for the diffusion inpainter and its initialization strategies.
"""

import numpy as np
import pytest

from scanclean.errors import DegenerateInputError
from scanclean.models.isolation_params import InpaintInitMode
from scanclean.services.inpaint_service import (
    DIFFUSION_KERNEL,
    InpaintService,
    l1_ring_offsets,
    l1_search_offsets,
)


@pytest.fixture
def service():
    return InpaintService(show_progress=False)


class TestRingOffsets:
    """Test the L1 ring iterator."""

    def test_first_ring_order(self):
        """Ring 1 is visited up, right, down, left."""
        assert list(l1_ring_offsets(1)) == [(0, -1), (1, 0), (0, 1), (-1, 0)]

    @pytest.mark.parametrize("d", [1, 2, 3, 6])
    def test_ring_is_complete(self, d):
        """Ring d holds each of the 4d offsets at L1 distance d exactly once."""
        ring = list(l1_ring_offsets(d))
        assert len(ring) == 4 * d
        assert len(set(ring)) == 4 * d
        assert all(abs(dx) + abs(dy) == d for dx, dy in ring)

    def test_search_is_nearest_first(self):
        """Rings come out in increasing distance."""
        distances = [abs(dx) + abs(dy) for dx, dy in l1_search_offsets(4)]
        assert distances == sorted(distances)
        assert len(distances) == 4 * (1 + 2 + 3 + 4)


class TestInitialization:
    """Test mean and nearest-neighbour fills (no diffusion)."""

    def test_mean_fill_gray(self, service):
        """Masked pixels get the floored mean of the unmasked ones."""
        src = np.array([[10, 20, 0], [30, 41, 0]], dtype=np.uint8)
        mask = np.array([[0, 0, 255], [0, 0, 255]], dtype=np.uint8)
        out = service.inpaint(src, mask, InpaintInitMode.MEAN, iterations=0)
        np.testing.assert_array_equal(out, [[10, 20, 25], [30, 41, 25]])

    def test_mean_fill_color(self, service):
        """The mean is taken per channel."""
        src = np.zeros((2, 2, 3), dtype=np.uint8)
        src[0, 0] = (10, 100, 200)
        src[0, 1] = (20, 50, 0)
        mask = np.array([[0, 0], [255, 255]], dtype=np.uint8)
        out = service.inpaint(src, mask, InpaintInitMode.MEAN, iterations=0)
        assert tuple(out[1, 0]) == (15, 75, 100)
        assert tuple(out[1, 1]) == (15, 75, 100)
        assert tuple(out[0, 0]) == (10, 100, 200)

    def test_nearest_fill_row(self, service):
        """Ties between equally near donors follow the ring order (right before left)."""
        src = np.array([[10, 0, 0, 0, 50]], dtype=np.uint8)
        mask = np.array([[0, 1, 1, 1, 0]], dtype=np.uint8)
        out = service.inpaint(src, mask, InpaintInitMode.NEAREST_L1, iterations=0)
        np.testing.assert_array_equal(out, [[10, 10, 50, 50, 50]])

    def test_nearest_fill_prefers_up(self, service):
        """Up is the first candidate of every ring."""
        src = np.array([[0, 7, 0],
                        [5, 0, 9],
                        [0, 3, 0]], dtype=np.uint8)
        mask = np.zeros((3, 3), dtype=np.uint8)
        mask[1, 1] = 255
        mask[0, 0] = mask[0, 2] = mask[2, 0] = mask[2, 2] = 255
        out = service.inpaint(src, mask, InpaintInitMode.NEAREST_L1, iterations=0)
        assert out[1, 1] == 7
        # corner (0, 0): up is outside, right is (1, 0) → 7
        assert out[0, 0] == 7
        # corner (2, 2): up is (2, 1) → 9
        assert out[2, 2] == 9

    def test_nearest_fill_color(self, service):
        """All channels come from the same donor."""
        src = np.zeros((1, 3, 3), dtype=np.uint8)
        src[0, 0] = (1, 2, 3)
        mask = np.array([[0, 255, 255]], dtype=np.uint8)
        out = service.inpaint(src, mask, iterations=0)
        assert tuple(out[0, 2]) == (1, 2, 3)

    @pytest.mark.parametrize("mode", [InpaintInitMode.MEAN, InpaintInitMode.NEAREST_L1])
    def test_fully_masked(self, service, mode):
        """Nothing to copy from."""
        src = np.full((3, 3), 100, dtype=np.uint8)
        mask = np.full((3, 3), 255, dtype=np.uint8)
        with pytest.raises(DegenerateInputError):
            service.inpaint(src, mask, mode, iterations=4)


class TestDiffusion:
    """Test the iterative smoothing."""

    def test_kernel_weights(self):
        """Isotropic, zero centre, weights sum to one."""
        assert DIFFUSION_KERNEL[1, 1] == 0
        assert DIFFUSION_KERNEL.sum() == pytest.approx(1.0)
        np.testing.assert_array_equal(DIFFUSION_KERNEL, DIFFUSION_KERNEL.T)

    def test_zero_iterations_returns_initialization(self, service):
        """No diffusion pass at all."""
        rng = np.random.default_rng(3)
        src = rng.integers(0, 256, size=(12, 12), dtype=np.uint8)
        mask = np.zeros((12, 12), dtype=np.uint8)
        mask[4:8, 4:8] = 255
        masked = mask != 0
        expected = service.nearest_fill(src, masked)
        np.testing.assert_array_equal(service.inpaint(src, mask, iterations=0), expected)

    def test_unmasked_pixels_untouched(self, service):
        """Only masked pixels are overwritten."""
        rng = np.random.default_rng(5)
        src = rng.integers(0, 256, size=(16, 16, 3), dtype=np.uint8)
        mask = np.zeros((16, 16), dtype=np.uint8)
        mask[3:9, 5:12] = 255
        out = service.inpaint(src, mask, iterations=10)
        np.testing.assert_array_equal(out[mask == 0], src[mask == 0])

    def test_values_stay_in_known_range(self, service):
        """Averaging never leaves the range of the known pixels."""
        src = np.tile(np.linspace(40, 160, 20).astype(np.uint8), (20, 1))
        mask = np.zeros((20, 20), dtype=np.uint8)
        mask[5:15, 5:15] = 255
        out = service.inpaint(src, mask, InpaintInitMode.MEAN, iterations=50)
        known = src[mask == 0]
        assert out[mask != 0].min() >= known.min()
        assert out[mask != 0].max() <= known.max()

    def test_constant_background(self, service):
        """A hole in a flat image is filled with the same value."""
        src = np.full((10, 10), 123, dtype=np.uint8)
        src[3:6, 3:6] = 0
        mask = np.zeros((10, 10), dtype=np.uint8)
        mask[3:6, 3:6] = 255
        out = service.inpaint(src, mask, InpaintInitMode.MEAN, iterations=16)
        assert np.all(out == 123)

    def test_smooths_between_donors(self, service):
        """After enough passes a hole between two levels holds intermediate values."""
        src = np.zeros((5, 9), dtype=np.uint8)
        src[:, :3] = 40
        src[:, 6:] = 200
        mask = np.zeros((5, 9), dtype=np.uint8)
        mask[:, 3:6] = 255
        out = service.inpaint(src, mask, InpaintInitMode.NEAREST_L1, iterations=100)
        row = out[2, 3:6].astype(int)
        assert 40 < row[0] < row[1] < row[2] < 200
