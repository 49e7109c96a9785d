"""Axis-aligned integer hyper-rectangles.

A Cube is the domain bookkeeping type used by the segment tree. Each axis is a
half-open interval [low, high) so adjacent cubes share no cells and a cube whose
extent on any axis is zero contains no cells at all.
"""

from dataclasses import dataclass
import itertools
from numbers import Integral
from typing import Iterator, Sequence, Union

Point = Union[int, Sequence[int]]


def _as_point(p: Point) -> tuple[int, ...]:
    """Normalize an int (1-D shorthand) or a coordinate sequence to a tuple of ints.

    Raises:
        ValueError: If any coordinate is not an integer.
    """
    if isinstance(p, Integral):
        return (int(p),)
    try:
        coords = tuple(p)
    except TypeError:
        raise ValueError(f"Coordinates must be integers, got {p!r}") from None
    for x in coords:
        if not isinstance(x, Integral):
            raise ValueError(f"Coordinates must be integers, got {x!r}")
    return tuple(int(x) for x in coords)


@dataclass(frozen=True)
class Cube:
    """Half-open box [low, high) in N-dimensional integer coordinates.

    Cubes are immutable values: equality is structural and they hash, so they
    can key dictionaries and sets.

    Args:
        low: Inclusive lower corner. An int is accepted for 1-D cubes.
        high: Exclusive upper corner. An int is accepted for 1-D cubes.

    Raises:
        ValueError: If the corners differ in length, are empty, or
            low > high on some axis.

    Example:
        Cube((0, 0), (4, 2)) covers the 8 cells (0..3) x (0..1).
    """

    low: tuple[int, ...]
    high: tuple[int, ...]

    def __init__(self, low: Point, high: Point):
        low_t = _as_point(low)
        high_t = _as_point(high)
        if len(low_t) == 0:
            raise ValueError("Cube must have at least one axis")
        if len(low_t) != len(high_t):
            raise ValueError(f"low has {len(low_t)} axes but high has {len(high_t)}")
        for axis, (lo, hi) in enumerate(zip(low_t, high_t)):
            if lo > hi:
                raise ValueError(f"Axis {axis} is inverted: low={lo} > high={hi}")
        object.__setattr__(self, "low", low_t)
        object.__setattr__(self, "high", high_t)

    # --- Alternate constructors ---
    @classmethod
    def empty(cls, ndim: int) -> "Cube":
        """The canonical empty cube: every bound is zero."""
        return cls((0,) * ndim, (0,) * ndim)

    @classmethod
    def unit(cls, point: Point) -> "Cube":
        """The single-cell cube [point, point + 1)."""
        p = _as_point(point)
        return cls(p, tuple(x + 1 for x in p))

    @classmethod
    def from_extents(cls, dims: Point) -> "Cube":
        """The cube [0, dims) anchored at the origin."""
        d = _as_point(dims)
        return cls((0,) * len(d), d)

    @classmethod
    def from_slices(cls, slices: Sequence[slice]) -> "Cube":
        """Build a cube from step-1 slices with explicit start and stop."""
        for s in slices:
            if s.start is None or s.stop is None:
                raise ValueError(f"Slice must have explicit start and stop, got {s}")
            if s.step not in (None, 1):
                raise ValueError(f"Only step 1 slices describe a cube, got {s}")
        return cls(tuple(s.start for s in slices), tuple(s.stop for s in slices))

    def to_slices(self) -> tuple[slice, ...]:
        return tuple(slice(lo, hi) for lo, hi in zip(self.low, self.high))

    # --- Geometry ---
    @property
    def ndim(self) -> int:
        return len(self.low)

    @property
    def shape(self) -> tuple[int, ...]:
        """Per-axis extents high - low."""
        return tuple(hi - lo for lo, hi in zip(self.low, self.high))

    @property
    def volume(self) -> int:
        vol = 1
        for extent in self.shape:
            vol *= extent
        return vol

    @property
    def is_empty(self) -> bool:
        return self.volume == 0

    @property
    def is_point(self) -> bool:
        return self.volume == 1

    def center(self) -> tuple[int, ...]:
        """Per-axis floor midpoint. Subdivision splits every axis here."""
        return tuple((lo + hi) // 2 for lo, hi in zip(self.low, self.high))

    def subdivide(self) -> tuple["Cube", ...]:
        """Split the cube into its 2**ndim orthants.

        Bit k of the orthant index picks the half along axis k: a set bit
        selects the lower half [low, mid), a clear bit the upper half
        [mid, high). Orthant 0 therefore holds the upper half on every axis.
        With floor midpoints the upper half is the larger one on odd extents,
        and on an axis of extent 1 the lower half is empty.

        Returns:
            Tuple of 2**ndim cubes partitioning this one. Some may be empty.

        Example:
            Cube((-3, 0), (4, 2)) has center (0, 1). Orthant 2 (binary 10)
            takes the upper half on axis 0 and the lower half on axis 1,
            giving Cube((0, 0), (4, 1)).
        """
        mid = self.center()
        orthants = []
        for i in range(1 << self.ndim):
            low = []
            high = []
            for k in range(self.ndim):
                if i & (1 << k):
                    low.append(self.low[k])
                    high.append(mid[k])
                else:
                    low.append(mid[k])
                    high.append(self.high[k])
            orthants.append(Cube(tuple(low), tuple(high)))
        return tuple(orthants)

    def intersect_with(self, other: "Cube") -> "Cube":
        """Per-axis overlap. Any axis without overlap yields Cube.empty()."""
        low = []
        high = []
        for a_lo, a_hi, b_lo, b_hi in zip(self.low, self.high, other.low, other.high):
            lo = max(a_lo, b_lo)
            hi = min(a_hi, b_hi)
            if lo >= hi:
                return Cube.empty(self.ndim)
            low.append(lo)
            high.append(hi)
        return Cube(tuple(low), tuple(high))

    def __and__(self, other: "Cube") -> "Cube":
        return self.intersect_with(other)

    def is_disjoint_from(self, other: "Cube") -> bool:
        """True when the cubes share no cell. Empty cubes are disjoint from everything."""
        for a_lo, a_hi, b_lo, b_hi in zip(self.low, self.high, other.low, other.high):
            if b_lo >= a_hi or b_hi <= a_lo or a_lo == a_hi or b_lo == b_hi:
                return True
        return False

    def contains(self, other: "Cube") -> bool:
        """Subset test. The empty cube is contained in every cube."""
        if other.is_empty:
            return True
        return all(
            a_lo <= b_lo and b_hi <= a_hi
            for a_lo, a_hi, b_lo, b_hi in zip(self.low, self.high, other.low, other.high)
        )

    def contains_point(self, point: Point) -> bool:
        p = _as_point(point)
        if len(p) != self.ndim:
            return False
        return all(lo <= x < hi for x, lo, hi in zip(p, self.low, self.high))

    def points(self) -> Iterator[tuple[int, ...]]:
        """Iterate every cell coordinate in row-major order."""
        return itertools.product(*(range(lo, hi) for lo, hi in zip(self.low, self.high)))

    def __repr__(self) -> str:
        axes = " x ".join(f"[{lo}, {hi})" for lo, hi in zip(self.low, self.high))
        return f"Cube({axes})"
