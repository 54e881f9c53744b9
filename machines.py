"""Concrete tape programs: the 3-state busy beaver and a palindrome checker."""

from __future__ import annotations
from typing import Dict, Hashable, Iterable, Sequence, Tuple

from tape import ControlState, Move, TapeMachine, TapeProgram, Transition

BUSY_BEAVER_3 = """\
# state read write move next
A 0 1 R B
A 1 1 L C
B 0 1 L A
B 1 1 R B
C 0 1 L B
C 1 1 R H
"""

Q1 = ControlState("q1")
Q2 = ControlState("q2")
ACCEPT = ControlState("qy")
REJECT = ControlState("qn")


def busy_beaver_3() -> TapeProgram:
    return TapeProgram.from_lines(BUSY_BEAVER_3.splitlines(), start="A", halting={"H"})


def palindrome_checker(alphabet: Iterable[int] = range(10)) -> TapeProgram:
    """
    Palindrome checker over `alphabet`, with 0 as the blank end marker.

    q1 erases the leftmost symbol n and remembers it as p<n>; p<n> runs right
    to the end marker and turns into r<n>; r<n> compares the rightmost symbol
    with n (an empty remainder also matches, for odd lengths) and either
    rejects or erases it and hands over to q2, which runs back left to the
    start marker and restarts q1.
    """
    symbols = tuple(sorted(set(alphabet) | {0}))
    letters = [s for s in symbols if s != 0]
    table: Dict[Tuple[Hashable, int], Transition] = {
        (Q1, 0): Transition(0, Move.RIGHT, ACCEPT),
        (Q2, 0): Transition(0, Move.RIGHT, Q1),
    }
    for s in letters:
        table[(Q1, s)] = Transition(0, Move.RIGHT, ControlState("p", s))
        table[(Q2, s)] = Transition(s, Move.LEFT, Q2)

    for n in letters:
        seek, compare = ControlState("p", n), ControlState("r", n)
        table[(seek, 0)] = Transition(0, Move.LEFT, compare)
        table[(compare, 0)] = Transition(0, Move.LEFT, Q2)
        for s in letters:
            table[(seek, s)] = Transition(s, Move.RIGHT, seek)
            if s == n:
                table[(compare, s)] = Transition(0, Move.LEFT, Q2)
            else:
                table[(compare, s)] = Transition(s, Move.LEFT, REJECT)

    return TapeProgram(table, start=Q1, halting=frozenset({ACCEPT, REJECT}), alphabet=symbols)


def palindrome_machine(word: Sequence[int], program: TapeProgram) -> TapeMachine:
    """Tape [0, *word, 0] with the head on the first symbol of `word`."""
    return TapeMachine.start(program, (0, *word, 0), head=1)
