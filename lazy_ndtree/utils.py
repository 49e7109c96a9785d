"""Utility functions for turning subscript syntax into tree domains.

These helpers let ``tree[1:3, 0]`` style indexing address a region of a
SegmentTree. They normalize ints, slices, ellipsis and negative indices into
explicit half-open bounds and finally into a Cube.
"""

from numbers import Integral

from lazy_ndtree.cube import Cube


def normalize_slice(idx: int|slice, dim: int) -> slice:
    """Convert an index or slice to an explicit step-1 slice.

    Args:
        idx: Integer index or slice, with negative values already resolved
        dim: Extent of the axis being indexed

    Returns:
        slice: Slice with explicit start and stop, stop >= start

    Examples:
        normalize_slice(5, 10) -> slice(5, 6)
        normalize_slice(slice(None, 4), 10) -> slice(0, 4)
        normalize_slice(slice(7, 3), 10) -> slice(7, 7)  # Empty
    """
    if isinstance(idx, Integral):
        return slice(int(idx), int(idx) + 1)
    if idx.step not in (None, 1):
        raise IndexError(f"Only step 1 slices are supported, got step {idx.step}")
    start = 0 if idx.start is None else int(idx.start)
    stop = dim if idx.stop is None else int(idx.stop)
    return slice(start, max(start, stop))


def standardize_indices(dims: tuple[int, ...], indices) -> Cube:
    """Convert subscript syntax to the Cube it addresses.

    Processing Steps:
        1. Convert single indices to tuples
        2. Expand ellipsis (...) to full slices
        3. Pad with full slices if too few indices were given
        4. Resolve negative indices against the axis extent
        5. Bounds-check integer indices
        6. Normalize everything to slices and build the Cube

    Args:
        dims: Per-axis extents of the indexed tree
        indices: User-provided indices (ints, slices, ellipsis)

    Returns:
        Cube covering the indexed region. May be empty.

    Raises:
        IndexError: On too many indices, an out-of-range integer index
            or a slice with a step other than 1
    """
    if isinstance(indices, list):
        indices = tuple(indices)
    if not isinstance(indices, tuple):
        indices = (indices,)

    if Ellipsis in indices:
        if indices.count(Ellipsis) != 1:
            raise IndexError("Only one ellipsis is allowed")
        ellipsis_idx = indices.index(Ellipsis)
        n_missing = len(dims) - len(indices) + 1
        indices = (
            indices[:ellipsis_idx] +
            (slice(None),) * n_missing +
            indices[ellipsis_idx + 1:]
        )

    if len(indices) < len(dims):
        indices = indices + (slice(None),) * (len(dims) - len(indices))

    if len(indices) != len(dims):
        raise IndexError(f"Too many indices for tree of dimension {len(dims)}")

    processed = []
    for idx, dim in zip(indices, dims):
        if isinstance(idx, Integral):
            if idx < 0:
                idx = dim + idx
            if idx < 0 or idx >= dim:
                raise IndexError(f"Index {idx} is out of bounds for axis with extent {dim}")
        elif isinstance(idx, slice):
            start = idx.start if idx.start is None or idx.start >= 0 else dim + idx.start
            stop = idx.stop if idx.stop is None or idx.stop >= 0 else dim + idx.stop
            idx = slice(start, stop, idx.step)
        else:
            raise IndexError(f"Unsupported index type {type(idx).__name__}")
        processed.append(normalize_slice(idx, dim))

    return Cube.from_slices(processed)
