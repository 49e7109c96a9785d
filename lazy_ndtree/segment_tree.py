from functools import lru_cache
from numbers import Integral
import logging
from typing import Optional, Sequence, Union

import numpy as np
import torch

from lazy_ndtree.cube import Cube, _as_point
from lazy_ndtree.operation import IDENTITY, Operation
from lazy_ndtree.utils import standardize_indices

# ADDRESSING:
# node 0 is the root and covers the entire domain
# only non-empty nodes get a slot; the non-empty children of node v occupy
# consecutive slots starting at first_child[v], in orthant order
# orthant i of a node is Cube.subdivide()[i] of the node's domain

# CONSTANTS
DEFAULT_DTYPE = np.int64

# ERROR MESSAGES
OUT_OF_BOUNDS_ERROR_MSG = "{what} {value} lies outside the tree domain {domain}"
AXES_MISMATCH_ERROR_MSG = "{what} has {actual} axes but the tree has {expected}"
LENGTH_MISMATCH_ERROR_MSG = "Got {actual} initial values but dims {dims} hold {expected} cells"

# Set up logging
logger = logging.getLogger(__name__)

Domain = Union[Cube, tuple, slice]


# CUSTOM EXCEPTIONS
class SegmentTreeError(Exception):
    """Base exception for segment tree operations."""
    pass

class ValidationError(SegmentTreeError, ValueError):
    """Raised when parameter validation fails."""
    pass

class InvalidExtentError(ValidationError):
    """Raised when a configured axis extent is not positive."""
    pass

class DimensionMismatchError(SegmentTreeError, ValueError):
    """Raised when sizes or axis counts don't match the tree's dims."""
    pass

class OutOfBoundsError(SegmentTreeError, IndexError):
    """Raised when a domain or coordinate reaches outside the tree domain."""
    pass


def _validate_dims(dims) -> tuple[int, ...]:
    """Validate per-axis extents and return them as a tuple of ints."""
    if isinstance(dims, Integral):
        dims = (dims,)
    try:
        dims = tuple(dims)
    except TypeError:
        raise ValidationError(f"dims must be an int or a sequence of ints, got {type(dims)}") from None
    if len(dims) == 0:
        raise ValidationError("dims cannot be empty")
    for i, dim in enumerate(dims):
        if not isinstance(dim, Integral):
            raise ValidationError(f"Extent of axis {i} must be an integer, got {dim!r}")
        if dim <= 0:
            raise InvalidExtentError(f"Extent of axis {i} must be positive, got {dim}")
    return tuple(int(d) for d in dims)

def _validate_dtype(dtype) -> np.dtype:
    dtype = np.dtype(dtype)
    if not np.issubdtype(dtype, np.integer):
        raise ValidationError(f"dtype must be an integer dtype, got {dtype}")
    return dtype

def _validate_scalar(value) -> int:
    if not isinstance(value, Integral):
        raise ValidationError(f"Cell values must be integers, got {value!r}")
    return int(value)

def _prepare_values(values, dims) -> tuple[np.ndarray, tuple[int, ...]]:
    """Flatten the initial values row-major and settle the tree dims.

    Args:
        values: Flat sequence, numpy array or torch tensor of integers
        dims: Per-axis extents, or None to take them from the array shape

    Returns:
        Flat integer array and the validated dims
    """
    if isinstance(values, torch.Tensor):
        array = values.detach().cpu().numpy()
    else:
        array = np.asarray(values)

    if dims is None:
        if array.ndim == 0:
            raise ValidationError("dims are required when values is a scalar")
        dims = array.shape
    dims = _validate_dims(dims)

    flat = array.reshape(-1)
    expected = int(np.prod(dims))
    if flat.size != expected:
        raise DimensionMismatchError(
            LENGTH_MISMATCH_ERROR_MSG.format(actual=flat.size, dims=dims, expected=expected)
        )
    if flat.dtype.kind not in "biu":
        raise ValidationError(f"Initial values must be integers, got dtype {flat.dtype}")
    return flat, dims


@lru_cache(maxsize=None)
def _subtree_size(shape: tuple[int, ...]) -> int:
    """Number of non-empty nodes below and including a node of this shape.

    Subdivision depends only on extents: the lower half of an axis of extent
    e holds e // 2 cells and the upper half e - e // 2. Equal shapes therefore
    share a count, and only O(height * 2**ndim) distinct shapes ever occur.
    """
    if all(e == 1 for e in shape):
        return 1
    halves = [(e - e // 2, e // 2) for e in shape]
    total = 1
    for i in range(1 << len(shape)):
        child = tuple(halves[k][(i >> k) & 1] for k in range(len(shape)))
        if all(child):
            total += _subtree_size(child)
    return total


def node_capacity(dims) -> int:
    """Number of array slots used by a tree over [0, dims).

    Only non-empty nodes get a slot. Every internal node has at least two
    non-empty children, so the count never exceeds 2 * volume - 1.

    Args:
        dims: Per-axis extents of the tree

    Returns:
        The number of non-empty nodes, i.e. the node array length.
    """
    return _subtree_size(_validate_dims(dims))


class SegmentTree:
    """Sum aggregate over an N-dimensional integer grid with lazy range updates.

    The grid [0, dims) is split recursively into 2**ndim orthants down to
    single cells. Every node stores the current sum over its domain and an
    Operation that has been applied to that sum but not yet to its children.
    Range updates and range queries stop descending as soon as the target
    region equals a node's domain, so their cost follows the region's
    boundary rather than its volume.

    Nodes live in flat numpy arrays, numbered in build order. Empty orthants
    get no slot, and the non-empty children of a node sit next to each other
    starting at its first-child slot. The arrays are allocated once at
    construction, sized by node_capacity.

    The tree is not thread-safe. Queries push pending operations down the
    visited path, so even reads mutate internal state; wrap every call in one
    lock if the tree is shared between threads.

    Example:
        >>> tree = SegmentTree.zeros((4, 4))
        >>> tree.add_range(Cube((0, 0), (2, 2)), 3)
        >>> tree[0:2, :]
        12
    """

    def __init__(self,
                 values,
                 dims: Optional[Union[int, Sequence[int]]] = None,
                 *,
                 dtype=DEFAULT_DTYPE):
        """Build the tree over initial cell values.

        Args:
            values: Initial cell values. Either a flat sequence in row-major
                    order, or a numpy array / torch tensor whose shape gives
                    the dims when dims is omitted. A flat sequence without
                    dims builds a one-dimensional tree.
            dims: Per-axis extents. An int means a one-dimensional tree.
            dtype: Integer numpy dtype of the node arrays. All sums must fit.

        Raises:
            InvalidExtentError: If an extent is not positive.
            DimensionMismatchError: If the number of values differs from the
                                    product of dims.
            ValidationError: On a non-integer dtype or non-integer values.
        """
        flat, dims = _prepare_values(values, dims)
        dtype = _validate_dtype(dtype)
        capacity = node_capacity(dims)

        self._dims = dims
        self._ndim = len(dims)
        self._branching = 1 << self._ndim
        self._entire_domain = Cube.from_extents(dims)
        self._dtype = dtype
        self._values = np.zeros(capacity, dtype=dtype)
        self._pending_reset = np.zeros(capacity, dtype=bool)
        self._pending_delta = np.zeros(capacity, dtype=dtype)
        self._first_child = np.zeros(capacity, dtype=np.int64)

        self._next_free = 1
        self._build(flat, self._entire_domain, 0)
        logger.debug(f"Built tree over dims {dims} with {capacity} node slots, total {self.total()}")

    @classmethod
    def zeros(cls, dims, **kwargs) -> "SegmentTree":
        """Tree over [0, dims) with every cell 0."""
        return cls.full(dims, 0, **kwargs)

    @classmethod
    def full(cls, dims, value: int, **kwargs) -> "SegmentTree":
        """Tree over [0, dims) with every cell set to value."""
        dims = _validate_dims(dims)
        value = _validate_scalar(value)
        dtype = kwargs.get("dtype", DEFAULT_DTYPE)
        return cls(np.full(int(np.prod(dims)), value, dtype=dtype), dims, **kwargs)

    # --- Properties ---
    @property
    def dims(self) -> tuple[int, ...]:
        return self._dims

    @property
    def ndim(self) -> int:
        return self._ndim

    @property
    def branching(self) -> int:
        return self._branching

    @property
    def entire_domain(self) -> Cube:
        return self._entire_domain

    @property
    def node_capacity(self) -> int:
        return len(self._values)

    @property
    def dtype(self) -> np.dtype:
        return self._dtype

    def __len__(self) -> int:
        return self._entire_domain.volume

    def __repr__(self) -> str:
        return f"SegmentTree(dims={self._dims}, total={self.total()})"

    # --- Public API ---
    def apply_to_range(self, domain: Domain, op: Operation) -> None:
        """Apply op to every cell inside domain.

        Args:
            domain: Cube, or subscript-style tuple of slices/ints
            op: Operation to apply

        Raises:
            DimensionMismatchError: If domain has the wrong number of axes.
            OutOfBoundsError: If domain reaches outside the tree.
        """
        domain = self._check_domain(domain)
        logger.debug(f"Applying {op} to {domain}")
        if domain.is_empty or op.is_identity:
            return
        self._apply(0, domain, self._entire_domain, op)

    def assign_range(self, domain: Domain, value: int) -> None:
        self.apply_to_range(domain, Operation.assign(_validate_scalar(value)))

    def add_range(self, domain: Domain, delta: int) -> None:
        self.apply_to_range(domain, Operation.add(_validate_scalar(delta)))

    def query_range(self, domain: Domain) -> int:
        """Sum of the current cell values inside domain.

        Pending operations along the visited path are pushed to the children,
        which changes internal state but never an observable sum.

        Raises:
            DimensionMismatchError: If domain has the wrong number of axes.
            OutOfBoundsError: If domain reaches outside the tree.
        """
        domain = self._check_domain(domain)
        logger.debug(f"Querying {domain}")
        if domain.is_empty:
            return 0
        return self._query(0, domain, self._entire_domain)

    def get(self, coordinates: Union[int, Sequence[int]]) -> int:
        """Current value of a single cell.

        Raises:
            ValueError: If a coordinate is not an integer.
            DimensionMismatchError: If the coordinate has the wrong number of axes.
            OutOfBoundsError: If the cell lies outside the tree.
        """
        point = _as_point(coordinates)
        if len(point) != self._ndim:
            raise DimensionMismatchError(
                AXES_MISMATCH_ERROR_MSG.format(what="Coordinate", actual=len(point), expected=self._ndim)
            )
        if not self._entire_domain.contains_point(point):
            raise OutOfBoundsError(
                OUT_OF_BOUNDS_ERROR_MSG.format(what="Coordinate", value=point, domain=self._entire_domain)
            )
        return self.query_range(Cube.unit(point))

    def total(self) -> int:
        """Sum over the entire grid. The root value is always current."""
        return int(self._values[0])

    def to_numpy(self) -> np.ndarray:
        """Materialize all cell values as an array of shape dims.

        Walks every node once and pushes all pending operations down to
        the leaves on the way.
        """
        out = np.zeros(self._dims, dtype=self._dtype)
        self._materialize(0, self._entire_domain, out)
        return out

    def to_tensor(self) -> torch.Tensor:
        """Same as to_numpy, as a CPU torch tensor."""
        return torch.from_numpy(self.to_numpy())

    def __getitem__(self, indices) -> int:
        """Sum over the region addressed by subscript syntax, e.g. tree[1:3, 0]."""
        return self.query_range(standardize_indices(self._dims, indices))

    def __setitem__(self, indices, value: int) -> None:
        """Assign value to every cell of the addressed region.

        Note that ``tree[r] += k`` reads the sum over r and assigns it to
        every cell; use add_range for bulk additions.
        """
        self.assign_range(standardize_indices(self._dims, indices), value)

    # --- Boundary validation ---
    def _check_domain(self, domain: Domain) -> Cube:
        if not isinstance(domain, Cube):
            domain = standardize_indices(self._dims, domain)
        if domain.ndim != self._ndim:
            raise DimensionMismatchError(
                AXES_MISMATCH_ERROR_MSG.format(what="Domain", actual=domain.ndim, expected=self._ndim)
            )
        if not self._entire_domain.contains(domain):
            raise OutOfBoundsError(
                OUT_OF_BOUNDS_ERROR_MSG.format(what="Domain", value=domain, domain=self._entire_domain)
            )
        return domain

    # --- Node helpers ---
    def _child(self, v: int, rank: int) -> int:
        """Slot of the rank-th non-empty child of v, counted in orthant order."""
        return int(self._first_child[v]) + rank

    def _children(self, v: int, orthants: tuple[Cube, ...]):
        """Yield (slot, orthant) for every non-empty orthant of v."""
        rank = 0
        for orthant in orthants:
            if not orthant.is_empty:
                yield self._child(v, rank), orthant
                rank += 1

    def _pending(self, v: int) -> Operation:
        return Operation(bool(self._pending_reset[v]), int(self._pending_delta[v]))

    def _set_pending(self, v: int, op: Operation) -> None:
        self._pending_reset[v] = op.is_reset
        self._pending_delta[v] = op.delta

    def _apply_to_node(self, v: int, domain: Cube, op: Operation) -> None:
        """Apply op to the whole domain of node v.

        The node value is brought up to date right away, while op is composed
        into the node's pending operation for its children. Cells have no
        children, so nothing stays pending there.
        """
        self._values[v] = op.evaluate(int(self._values[v]), domain.volume)
        if domain.is_point:
            self._set_pending(v, IDENTITY)
        else:
            self._set_pending(v, op.compose(self._pending(v)))

    def _update_from_children(self, v: int, orthants: tuple[Cube, ...]) -> None:
        total = 0
        for child, _ in self._children(v, orthants):
            total += int(self._values[child])
        self._values[v] = total

    def _push(self, v: int, orthants: tuple[Cube, ...]) -> None:
        """Hand the pending operation of v to its children and clear it."""
        op = self._pending(v)
        if op.is_identity:
            return
        for child, orthant in self._children(v, orthants):
            self._apply_to_node(child, orthant, op)
        self._set_pending(v, IDENTITY)

    # --- Recursion ---
    # Callers guarantee target is a non-empty subset of domain.
    def _apply(self, v: int, target: Cube, domain: Cube, op: Operation) -> None:
        if target == domain:
            self._apply_to_node(v, domain, op)
            return
        orthants = domain.subdivide()
        self._push(v, orthants)
        for child, orthant in self._children(v, orthants):
            sub = orthant.intersect_with(target)
            if not sub.is_empty:
                self._apply(child, sub, orthant, op)
        self._update_from_children(v, orthants)

    def _query(self, v: int, target: Cube, domain: Cube) -> int:
        if target == domain:
            return int(self._values[v])
        orthants = domain.subdivide()
        self._push(v, orthants)
        total = 0
        for child, orthant in self._children(v, orthants):
            sub = orthant.intersect_with(target)
            if not sub.is_empty:
                total += self._query(child, sub, orthant)
        return total

    def _linear(self, coords: tuple[int, ...]) -> int:
        """Row-major flat index of a cell."""
        idx = 0
        for c, d in zip(coords, self._dims):
            idx = idx * d + c
        return idx

    def _build(self, flat: np.ndarray, domain: Cube, v: int) -> None:
        if domain.is_point:
            self._values[v] = int(flat[self._linear(domain.low)])
            return
        orthants = domain.subdivide()
        # reserve consecutive slots for all children before any grandchild
        self._first_child[v] = self._next_free
        self._next_free += sum(1 for orthant in orthants if not orthant.is_empty)
        for child, orthant in self._children(v, orthants):
            self._build(flat, orthant, child)
        self._update_from_children(v, orthants)

    def _materialize(self, v: int, domain: Cube, out: np.ndarray) -> None:
        if domain.is_point:
            out[domain.low] = self._values[v]
            return
        orthants = domain.subdivide()
        self._push(v, orthants)
        for child, orthant in self._children(v, orthants):
            self._materialize(child, orthant, out)
