from .cube import Cube
from .operation import Operation
from .segment_tree import (
    SegmentTree,
    SegmentTreeError,
    ValidationError,
    InvalidExtentError,
    DimensionMismatchError,
    OutOfBoundsError,
    node_capacity,
)
from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("lazy-ndtree")
except PackageNotFoundError:
    __version__ = "0.0.0"

__all__ = [
    'Cube',
    'Operation',
    'SegmentTree',
    'SegmentTreeError',
    'ValidationError',
    'InvalidExtentError',
    'DimensionMismatchError',
    'OutOfBoundsError',
    'node_capacity',
]
