"""
Tests for the convolution evaluator and 8-bit narrowing.
"""

import numpy as np
import pytest

from rasterstag import InvalidKernelError
from rasterstag.filters import Convolution, apply_convolution, narrow_to_u8
from rasterstag.filters.convolution import as_kernel, convolve_interior


class TestNarrowing:
    """Tests for truncating, saturating conversion to 0-255."""

    @pytest.mark.parametrize("value,expected", [
        (0.0, 0),
        (12.9, 12),
        (255.0, 255),
        (255.7, 255),
        (256.0, 255),
        (1e9, 255),
        (-0.5, 0),
        (-300.0, 0),
        (float("nan"), 0),
    ])
    def test_scalar(self, value, expected):
        assert narrow_to_u8(value) == expected

    def test_array(self):
        result = narrow_to_u8(np.array([-1.0, 0.4, 99.99, 300.0, np.nan]))
        assert result.dtype == np.uint8
        assert result.tolist() == [0, 0, 99, 255, 0]


class TestApplyConvolution:
    """Tests for the single neighbourhood evaluator."""

    def test_weighted_sum(self):
        neighbourhood = np.arange(9, dtype=np.uint8).reshape(3, 3)
        kernel = np.ones((3, 3))
        assert apply_convolution(neighbourhood, kernel) == 36

    def test_identity(self):
        neighbourhood = np.array([[1, 2, 3], [4, 200, 6], [7, 8, 9]], dtype=np.uint8)
        assert apply_convolution(neighbourhood, as_kernel([[0, 0, 0], [0, 1, 0], [0, 0, 0]])) == 200

    def test_no_uint8_overflow(self):
        neighbourhood = np.full((3, 3), 200, dtype=np.uint8)
        neighbourhood[1, 1] = 205
        # 1805 / 9 = 200.56
        assert apply_convolution(neighbourhood, np.full((3, 3), 1 / 9)) == 200
        assert apply_convolution(neighbourhood, np.ones((3, 3))) == 255

    def test_negative_sum(self):
        neighbourhood = np.full((3, 3), 10, dtype=np.uint8)
        assert apply_convolution(neighbourhood, -np.ones((3, 3))) == 0

    def test_shape_mismatch(self):
        with pytest.raises(InvalidKernelError):
            apply_convolution(np.zeros((3, 3)), np.zeros((5, 5)))

    @pytest.mark.parametrize("shape", [(9,), (3, 4), (2, 2)])
    def test_rejects_non_square_odd_shapes(self, shape):
        with pytest.raises(InvalidKernelError):
            apply_convolution(np.zeros(shape), np.zeros(shape))

    def test_agrees_with_plane_evaluator(self):
        rng = np.random.default_rng(7)
        plane = rng.integers(0, 256, (6, 7), dtype=np.uint8)
        kernel = as_kernel(rng.random((3, 3)) - 0.3)
        sums = convolve_interior(plane, kernel)
        for row in range(4):
            for col in range(5):
                window = plane[row:row + 3, col:col + 3]
                assert apply_convolution(window, kernel) == narrow_to_u8(sums[row, col])


class TestKernelValidation:
    """Tests for kernel construction."""

    def test_kernel_is_read_only(self):
        kernel = as_kernel([[1, 2, 3]] * 3)
        assert kernel.dtype == np.float64
        with pytest.raises(ValueError):
            kernel[0, 0] = 5

    @pytest.mark.parametrize("kernel", [
        [[1, 2], [3, 4]],
        [[0] * 5] * 5,
        [[1, 2, 3], [4, 5]],
        [[0, 0, 0], [0, float("inf"), 0], [0, 0, 0]],
        "abc",
    ])
    def test_invalid_kernels(self, kernel):
        with pytest.raises(InvalidKernelError):
            Convolution(kernel)

    def test_invalid_kernel_is_value_error(self):
        with pytest.raises(ValueError):
            Convolution([[1]])

    def test_larger_kernel_size(self):
        assert as_kernel([[0] * 5] * 5, size=5).shape == (5, 5)

    def test_convolution_does_not_normalize(self):
        assert Convolution([[1, 1, 1]] * 3).kernel.sum() == 9


class TestConvolveInterior:
    """Tests for the whole-plane evaluator."""

    def test_output_shape(self):
        plane = np.zeros((6, 8), dtype=np.uint8)
        assert convolve_interior(plane, as_kernel([[0] * 3] * 3)).shape == (4, 6)
        assert convolve_interior(plane, as_kernel([[0] * 5] * 5, size=5)).shape == (2, 4)

    def test_orientation(self):
        plane = np.zeros((3, 3), dtype=np.uint8)
        plane[0, 2] = 1
        kernel = np.zeros((3, 3))
        kernel[0, 2] = 7
        assert convolve_interior(plane, kernel)[0, 0] == 7
