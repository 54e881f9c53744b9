from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import List

from rules import Rule


class BoundaryPolicy(Enum):
    FROZEN = "frozen"  # border cells keep their previous value
    RESET = "reset"    # border cells are overwritten with `fill` every tick
    WRAP = "wrap"      # toroidal, every cell is updated


@dataclass(frozen=True)
class StableResult:
    grid: List[List[int]]
    iterations: int
    affected: int
    stable: bool = True


def _reach(rule: Rule) -> int:
    return max((abs(d) for offset in rule.neighborhood for d in offset), default=0)


def step_1d(state: List[int], rule: Rule, boundary: BoundaryPolicy = BoundaryPolicy.FROZEN, fill: int = 0) -> List[int]:
    '''
    One synchronous step of a 1-D automaton. Every cell reads the previous
    tick only; end cells follow `boundary`.
    '''
    n = len(state)
    if boundary is BoundaryPolicy.WRAP:
        return [
            rule(s, [state[(i + off) % n] for (off,) in rule.neighborhood])
            for i, s in enumerate(state)
        ]

    r = _reach(rule)
    next_state = list(state) if boundary is BoundaryPolicy.FROZEN else [fill] * n
    for i in range(r, n - r):
        next_state[i] = rule(state[i], [state[i + off] for (off,) in rule.neighborhood])
    return next_state


def simulate(
    state: List[int], rule: Rule, t: int = 1, boundary: BoundaryPolicy = BoundaryPolicy.FROZEN, fill: int = 0
) -> List[int]:
    curr = state
    for _ in range(t):
        curr = step_1d(curr, rule, boundary, fill)
    return curr


def evolve(
    state: List[int], rule: Rule, t: int = 1, boundary: BoundaryPolicy = BoundaryPolicy.FROZEN, fill: int = 0
) -> List[List[int]]:
    '''
    Like `simulate`, but keep every snapshot: returns t + 1 states, the initial one first.
    '''
    history = [list(state)]
    for _ in range(t):
        history.append(step_1d(history[-1], rule, boundary, fill))
    return history


def _neighbors(grid: List[List[int]], r: int, c: int, rule: Rule, wrap: bool) -> List[int]:
    """
    Gather the neighbor values of (r, c) in the rule's neighborhood order.
    Without `wrap` the caller guarantees every offset stays in bounds.
    """
    if wrap:
        h, w = len(grid), len(grid[0])
        return [grid[(r + dr) % h][(c + dc) % w] for dr, dc in rule.neighborhood]
    return [grid[r + dr][c + dc] for dr, dc in rule.neighborhood]


def _interior(grid: List[List[int]], rule: Rule, boundary: BoundaryPolicy):
    """Yield the (r, c) cells that get updated under `boundary`."""
    h, w = len(grid), len(grid[0]) if grid else 0
    r0 = 0 if boundary is BoundaryPolicy.WRAP else _reach(rule)
    for r in range(r0, h - r0):
        for c in range(r0, w - r0):
            yield r, c


def step_2d(
    grid: List[List[int]],
    rule: Rule,
    boundary: BoundaryPolicy = BoundaryPolicy.FROZEN,
    fill: int = 0,
) -> List[List[int]]:
    """
    One synchronous update of a 2-D automaton. The result is a new grid;
    `grid` is never written to.
    """
    if not grid:
        return []
    w = len(grid[0])
    if boundary is BoundaryPolicy.RESET:
        nxt = [[fill] * w for _ in grid]
    else:
        nxt = [row[:] for row in grid]

    wrap = boundary is BoundaryPolicy.WRAP
    for r, c in _interior(grid, rule, boundary):
        nxt[r][c] = rule(grid[r][c], _neighbors(grid, r, c, rule, wrap))
    return nxt


def simulate_2d(
    grid: List[List[int]],
    rule: Rule,
    timesteps: int = 1,
    boundary: BoundaryPolicy = BoundaryPolicy.FROZEN,
    fill: int = 0,
) -> List[List[int]]:
    curr = [row[:] for row in grid]
    for _ in range(timesteps):
        curr = step_2d(curr, rule, boundary, fill)
    return curr


def evolve_2d(
    grid: List[List[int]],
    rule: Rule,
    timesteps: int = 1,
    boundary: BoundaryPolicy = BoundaryPolicy.FROZEN,
    fill: int = 0,
) -> List[List[List[int]]]:
    history = [[row[:] for row in grid]]
    for _ in range(timesteps):
        history.append(step_2d(history[-1], rule, boundary, fill))
    return history


def count_affected(
    grid: List[List[int]],
    nxt: List[List[int]],
    rule: Rule,
    boundary: BoundaryPolicy = BoundaryPolicy.FROZEN,
) -> int:
    """
    Number of updated cells the step grid -> nxt acted on. Rules with a
    `fires` predicate (the sandpile) count firing cells; others count changes.
    """
    fires = getattr(rule, "fires", None)
    if fires is not None:
        return sum(1 for r, c in _interior(grid, rule, boundary) if fires(grid[r][c]))
    return sum(1 for r, c in _interior(grid, rule, boundary) if nxt[r][c] != grid[r][c])


def run_until_stable(
    grid: List[List[int]],
    rule: Rule,
    boundary: BoundaryPolicy = BoundaryPolicy.FROZEN,
    fill: int = 0,
    max_iterations: int = 100_000,
) -> StableResult:
    """
    Step until an application affects zero cells. `iterations` includes that
    last, quiet application, so an already stable grid reports 1 iteration.
    Gives up after `max_iterations` applications with `stable=False`
    (oscillators never settle).
    """
    total = 0
    iterations = 0
    curr = grid
    while iterations < max_iterations:
        nxt = step_2d(curr, rule, boundary, fill)
        affected = count_affected(curr, nxt, rule, boundary)
        total += affected
        iterations += 1
        curr = nxt
        if affected == 0:
            return StableResult(grid=curr, iterations=iterations, affected=total)
    return StableResult(grid=curr, iterations=iterations, affected=total, stable=False)
