"""Shared test fixtures and configuration for segment tree tests."""

import pytest
import numpy as np
from lazy_ndtree import SegmentTree, Cube


@pytest.fixture
def rng():
    """Seeded generator so randomized tests are reproducible."""
    return np.random.default_rng(42)


@pytest.fixture
def zeros_tree_2d():
    """4x4 grid of zeros."""
    return SegmentTree.zeros((4, 4))


@pytest.fixture
def sequential_values_2d():
    """5x3 grid holding 0..14 in row-major order (odd extents on purpose)."""
    return np.arange(15, dtype=np.int64).reshape(5, 3)


@pytest.fixture
def sequential_tree_2d(sequential_values_2d):
    return SegmentTree(sequential_values_2d)


@pytest.fixture
def sequential_tree_1d():
    """1-D tree over 0..9."""
    return SegmentTree(list(range(10)))


@pytest.fixture
def ones_tree_3d():
    """3x4x5 grid of ones."""
    return SegmentTree.full((3, 4, 5), 1)


@pytest.fixture
def whole_2d():
    return Cube((0, 0), (4, 4))
