"""
loaders.py

Read rule tables and initial states from the plain-text formats:

- rule files: one rule per line, '<current><neighbors...><next>', one digit per field
- state files: one grid row per line, one digit per cell
- tape programs: one transition per line, '<state> <read> <write> <L|R> <next>'
"""

from __future__ import annotations
import pathlib
from typing import Iterable, List, Sequence, Tuple

from rules import RotationalRule
from tape import TapeProgram


def read_rule_file(path: pathlib.Path) -> RotationalRule:
    return RotationalRule.from_lines(pathlib.Path(path).read_text(encoding="utf-8").splitlines())


def parse_state(lines: Iterable[str]) -> List[List[int]]:
    """
    Turn text rows into a grid. Blank lines are ignored; every remaining row
    must have the same length and contain digits only.
    """
    grid: List[List[int]] = []
    width = None
    for lineno, raw in enumerate(lines, 1):
        row = raw.strip()
        if not row:
            continue
        if not row.isdigit():
            raise ValueError(f"line {lineno}: cells must be digits, got {row!r}")
        if width is None:
            width = len(row)
        elif len(row) != width:
            raise ValueError(f"line {lineno}: row has {len(row)} cells, expected {width}")
        grid.append([int(c) for c in row])
    return grid


def read_state_file(path: pathlib.Path) -> List[List[int]]:
    return parse_state(pathlib.Path(path).read_text(encoding="utf-8").splitlines())


def embed(pattern: Sequence[Sequence[int]], dims: Tuple[int, int]) -> List[List[int]]:
    """
    Centre `pattern` in a zero grid of shape `dims`. Each dimension must leave
    room for at least one layer of zeros around the pattern.
    """
    rows, cols = dims
    p_rows = len(pattern)
    p_cols = len(pattern[0]) if pattern else 0
    if rows <= p_rows + 1:
        raise ValueError(f"grid rows {rows} must exceed pattern rows {p_rows} + 1")
    if cols <= p_cols + 1:
        raise ValueError(f"grid columns {cols} must exceed pattern columns {p_cols} + 1")

    top = round((rows - p_rows) / 2)
    left = round((cols - p_cols) / 2)
    grid = [[0] * cols for _ in range(rows)]
    for r, row in enumerate(pattern):
        grid[top + r][left:left + p_cols] = list(row)
    return grid


def read_tape_program(path: pathlib.Path, start: str, halting: Iterable[str]) -> TapeProgram:
    return TapeProgram.from_lines(
        pathlib.Path(path).read_text(encoding="utf-8").splitlines(), start=start, halting=halting
    )
