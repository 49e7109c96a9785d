"""Stamp rectangles onto a 2-D occupancy grid and read back region counts.

Run with: python examples/occupancy.py
"""
import torch
from lazy_ndtree import SegmentTree, Cube

GRID = (64, 64)

# (low, high, value) rectangles; later stamps overwrite earlier ones
STAMPS = [
    ((0, 0), (32, 32), 1),
    ((16, 16), (48, 48), 2),
    ((40, 0), (64, 8), 0),
]


def build_grid() -> SegmentTree:
    tree = SegmentTree.zeros(GRID)
    for low, high, value in STAMPS:
        tree.assign_range(Cube(low, high), value)
    # every cell in the lower-right quadrant accrues one extra unit of cost
    tree.add_range(Cube((32, 32), GRID), 1)
    return tree


def main():
    tree = build_grid()
    print(f"total:        {tree.total()}")
    print(f"top-left:     {tree[0:32, 0:32]}")
    print(f"overlap:      {tree[16:32, 16:32]}")
    print(f"bottom-right: {tree[32:, 32:]}")

    dense = tree.to_tensor()
    print(f"distinct values: {torch.unique(dense).tolist()}")


if __name__ == "__main__":
    main()
