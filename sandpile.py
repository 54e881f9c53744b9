"""
Bak-Tang-Wiesenfeld sandpile on top of the generic 2-D driver.

The pile is an open system: border cells are reset to zero every tick, so
grains that topple onto the border are lost.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Iterator, List, Tuple

import numpy as np

from rules import SandpileRule
from simulate import BoundaryPolicy, StableResult, run_until_stable


@dataclass(frozen=True)
class Avalanche:
    """One perturbation trial: where the grain fell, T (duration) and S (size)."""
    grid: List[List[int]]
    position: Tuple[int, int]
    duration: int
    size: int


def make_pile(dim: int, level: int) -> List[List[int]]:
    """A dim x dim pile with `level` grains on every interior cell and an empty border."""
    if dim < 3:
        raise ValueError("a pile needs at least one interior cell (dim >= 3)")
    return [
        [level if 0 < r < dim - 1 and 0 < c < dim - 1 else 0 for c in range(dim)]
        for r in range(dim)
    ]


def relax(grid: List[List[int]], threshold: int = 3) -> StableResult:
    """Topple until no interior cell exceeds `threshold`."""
    return run_until_stable(grid, SandpileRule(threshold), BoundaryPolicy.RESET, fill=0)


def drop_grain(grid: List[List[int]], rng: np.random.Generator) -> Tuple[List[List[int]], Tuple[int, int]]:
    """
    Add one grain to a uniformly chosen interior cell. Returns a new grid and
    the chosen (row, col).
    """
    h, w = len(grid), len(grid[0])
    r = int(rng.integers(1, h - 1))
    c = int(rng.integers(1, w - 1))
    out = [row[:] for row in grid]
    out[r][c] += 1
    return out, (r, c)


def avalanches(
    grid: List[List[int]],
    n_drops: int,
    rng: np.random.Generator,
    threshold: int = 3,
) -> Iterator[Avalanche]:
    '''
    Drop `n_drops` grains one at a time, relaxing after each, and yield the
    outcome of every drop. Histogramming is left to the consumer.
    '''
    curr = grid
    for _ in range(n_drops):
        curr, pos = drop_grain(curr, rng)
        result = relax(curr, threshold)
        curr = result.grid
        yield Avalanche(grid=curr, position=pos, duration=result.iterations, size=result.affected)
