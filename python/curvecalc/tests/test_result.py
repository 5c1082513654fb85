# Tests for result.py - Sample formatting and arrays

import math

import numpy as np
import pytest

from curvecalc import RealNumber, ComplexNumber
from curvecalc.result import split_value, format_sample, format_samples, samples_to_array


class TestSplitValue:

    def test_real(self):
        assert split_value(RealNumber(2.0)) == (2.0, 0.0)

    def test_complex(self):
        assert split_value(ComplexNumber(1.0, -3.0)) == (1.0, -3.0)

    def test_missing(self):
        re, im = split_value(None)
        assert math.isnan(re) and math.isnan(im)


class TestFormat:
    """Tests for text output of samples."""

    def test_1d(self):
        assert format_sample((0.5, RealNumber(2.0))) == '0.5 2.0 0.0'

    def test_2d_missing(self):
        assert format_sample((0.5, 1.0, None)) == '0.5 1.0 nan nan'

    def test_complex(self):
        assert format_sample((1.0, ComplexNumber(0.0, 1.0))) == '1.0 0.0 1.0'

    def test_lines(self):
        samples = [(0.0, RealNumber(1.0)), (1.0, RealNumber(2.0))]
        assert format_samples(samples) == '0.0 1.0 0.0\n1.0 2.0 0.0'


class TestArray:
    """Tests for samples_to_array."""

    def test_1d(self):
        arr = samples_to_array([(0.0, RealNumber(1.0)), (1.0, ComplexNumber(2.0, 3.0))])
        assert arr.shape == (2, 3)
        assert arr.dtype == np.float64
        np.testing.assert_array_equal(arr, [[0.0, 1.0, 0.0], [1.0, 2.0, 3.0]])

    def test_2d_with_missing(self):
        arr = samples_to_array([(0.0, 1.0, None), (0.0, 2.0, RealNumber(4.0))])
        assert arr.shape == (2, 4)
        assert np.isnan(arr[0, 2:]).all()
        assert arr[1, 2] == 4.0

    def test_empty(self):
        assert samples_to_array([]).shape == (0, 0)

    def test_mixed_widths(self):
        with pytest.raises(ValueError):
            samples_to_array([(0.0, RealNumber(1.0)), (0.0, 1.0, RealNumber(1.0))])
