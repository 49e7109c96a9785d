"""Tests for subscript syntax on trees and index standardization."""

import pytest
import numpy as np
from lazy_ndtree import SegmentTree, Cube
from lazy_ndtree.utils import normalize_slice, standardize_indices


class TestStandardizeIndices:
    def test_full_slices(self):
        assert standardize_indices((4, 3), (slice(None), slice(None))) == Cube((0, 0), (4, 3))

    def test_integer_collapses_to_unit_extent(self):
        assert standardize_indices((4, 3), (2, slice(0, 2))) == Cube((2, 0), (3, 2))

    def test_negative_indices(self):
        assert standardize_indices((4, 3), (-1, slice(-2, None))) == Cube((3, 1), (4, 3))

    def test_padding_and_ellipsis(self):
        assert standardize_indices((4, 3, 2), 1) == Cube((1, 0, 0), (2, 3, 2))
        assert standardize_indices((4, 3, 2), (..., 1)) == Cube((0, 0, 1), (4, 3, 2))
        assert standardize_indices((4, 3, 2), (0, ..., slice(0, 1))) == Cube((0, 0, 0), (1, 3, 1))

    def test_numpy_integers(self):
        assert standardize_indices((4,), np.int64(2)) == Cube(2, 3)

    def test_reversed_slice_is_empty(self):
        assert standardize_indices((10,), slice(7, 3)).is_empty

    @pytest.mark.parametrize("indices", [
        (0, 0, 0),
        (4, 0),
        (0, -4),
        (slice(0, 4, 2), 0),
        (..., ..., 0),
        ("a", 0),
    ])
    def test_invalid(self, indices):
        with pytest.raises(IndexError):
            standardize_indices((4, 3), indices)

    def test_normalize_slice(self):
        assert normalize_slice(5, 10) == slice(5, 6)
        assert normalize_slice(slice(None, 4), 10) == slice(0, 4)
        assert normalize_slice(slice(3, None), 10) == slice(3, 10)


class TestTreeSubscripts:
    def test_getitem_sums_region(self, sequential_tree_2d, sequential_values_2d):
        assert sequential_tree_2d[1:4, 1:] == int(sequential_values_2d[1:4, 1:].sum())
        assert sequential_tree_2d[2, 1] == int(sequential_values_2d[2, 1])
        assert sequential_tree_2d[...] == int(sequential_values_2d.sum())
        assert sequential_tree_2d[-1] == int(sequential_values_2d[-1].sum())

    def test_setitem_assigns_region(self, zeros_tree_2d):
        zeros_tree_2d[1:3, :] = 4
        assert zeros_tree_2d.total() == 32
        assert zeros_tree_2d[1, 0] == 4
        assert zeros_tree_2d[0, :] == 0

    def test_one_dimensional(self, sequential_tree_1d):
        assert sequential_tree_1d[2:5] == 9
        sequential_tree_1d[0] = 100
        assert sequential_tree_1d.get(0) == 100

    def test_empty_region(self, sequential_tree_1d):
        assert sequential_tree_1d[5:5] == 0
        sequential_tree_1d[5:5] = 3
        assert sequential_tree_1d.total() == 45

    def test_slice_past_end_is_rejected(self, sequential_tree_1d):
        with pytest.raises(IndexError):
            sequential_tree_1d[0:11]
