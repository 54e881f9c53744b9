"""
Ready-made starting configurations and colour maps.

Game of Life patterns come padded with a dead border so that they can be run
with the frozen boundary policy.
"""

from __future__ import annotations
from typing import Dict, List, Optional, Sequence, Tuple

from loaders import embed, parse_state

# Langton's loop start layout (8 states, von Neumann rule table).
LANGTON_START = """\
022222222000000
217014014200000
202222220200000
272000021200000
212000021200000
202000021200000
272000021200000
212222221222220
207107107111112
022222222222220
"""

# Symbol -> colour name, handed to renderers together with each snapshot.
PALETTES: Dict[str, Dict[int, str]] = {
    "1d": {0: "lightgrey", 1: "grey"},
    "life": {0: "grey", 1: "lightgreen"},
    "langton": {
        0: "black",
        1: "blue",
        2: "red",
        3: "green",
        4: "yellow",
        5: "magenta",
        6: "white",
        7: "cyan",
    },
    "sandpile": {0: "black", 1: "dimgrey", 2: "darkgrey", 3: "lightgrey"},
}


def single_seed(size: int, center: Optional[int] = None) -> List[int]:
    """A line of dead cells with one live cell, in the middle unless `center` is given."""
    state = [0] * size
    state[size // 2 if center is None else center] = 1
    return state


def _place(dims: Tuple[int, int], cells: Sequence[Tuple[int, int]]) -> List[List[int]]:
    rows, cols = dims
    grid = [[0] * cols for _ in range(rows)]
    for r, c in cells:
        grid[r][c] = 1
    return grid


def beehive() -> List[List[int]]:
    """Still life."""
    return _place((5, 6), [(1, 2), (1, 3), (2, 1), (2, 4), (3, 2), (3, 3)])


def toad() -> List[List[int]]:
    """Period-2 oscillator."""
    return _place((6, 6), [(2, 2), (2, 3), (2, 4), (3, 1), (3, 2), (3, 3)])


def glider() -> List[List[int]]:
    """Moves one cell down and one right every 4 steps."""
    return _place((8, 8), [(1, 2), (2, 3), (3, 1), (3, 2), (3, 3)])


def r_pentomino() -> List[List[int]]:
    """Methuselah: five cells that take over a thousand steps to settle."""
    return _place((66, 66), [(27, 27), (27, 28), (28, 26), (28, 27), (29, 27)])


def langton_start(dims: Tuple[int, int] = (20, 20)) -> List[List[int]]:
    return embed(parse_state(LANGTON_START.splitlines()), dims)
