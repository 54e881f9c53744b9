"""Turing-style tape machine: a lazily grown tape, a head, and a control state."""

from __future__ import annotations
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Dict, FrozenSet, Hashable, Iterable, List, Mapping, NamedTuple, Optional, Tuple

from rules import RuleParseError


class Move(Enum):
    LEFT = -1
    RIGHT = 1

    @classmethod
    def parse(cls, text: str) -> Move:
        try:
            return {"L": cls.LEFT, "R": cls.RIGHT}[text.upper()]
        except KeyError:
            raise ValueError(f"move must be 'L' or 'R', got {text!r}") from None


class ControlState(NamedTuple):
    """
    Control state key. Plain states leave `symbol` unset; a family of states
    that remembers a tape symbol (the palindrome checker's p<n> and r<n>)
    shares a tag and differs by `symbol`.
    """
    tag: str
    symbol: Optional[int] = None

    def __str__(self) -> str:
        return self.tag if self.symbol is None else f"{self.tag}{self.symbol}"


class Transition(NamedTuple):
    write: int
    move: Move
    next_state: Hashable


class MachineHalted(RuntimeError):
    """Raised when stepping a machine that already sits in a halting state."""


@dataclass(frozen=True)
class TapeProgram:
    """
    Transition table keyed by (state, symbol read), plus the start state,
    the halting states and the tape alphabet. Checked for totality on
    construction: every non-halting state reachable from the table must
    handle every alphabet symbol.
    """
    transitions: Mapping[Tuple[Hashable, int], Transition]
    start: Hashable
    halting: FrozenSet[Hashable]
    alphabet: Tuple[int, ...] = (0, 1)
    blank: int = 0

    def __post_init__(self) -> None:
        object.__setattr__(self, "halting", frozenset(self.halting))
        object.__setattr__(self, "alphabet", tuple(self.alphabet))
        if self.blank not in self.alphabet:
            raise ValueError(f"blank symbol {self.blank} is not in the alphabet {self.alphabet}")

        states = {self.start}
        for (state, read), tr in self.transitions.items():
            if state in self.halting:
                raise ValueError(f"halting state {state} must not have transitions")
            if read not in self.alphabet:
                raise ValueError(f"state {state} reads {read}, which is not in the alphabet")
            if tr.write not in self.alphabet:
                raise ValueError(f"state {state} writes {tr.write}, which is not in the alphabet")
            states.add(state)
            states.add(tr.next_state)

        for state in states - self.halting:
            for symbol in self.alphabet:
                if (state, symbol) not in self.transitions:
                    raise ValueError(f"no transition for state {state} reading {symbol}")

    def lookup(self, state: Hashable, read: int) -> Transition:
        return self.transitions[(state, read)]

    def is_halting(self, state: Hashable) -> bool:
        return state in self.halting

    @classmethod
    def from_lines(
        cls,
        lines: Iterable[str],
        start: str,
        halting: Iterable[str],
        alphabet: Optional[Iterable[int]] = None,
        blank: int = 0,
    ) -> TapeProgram:
        '''
        Parse one transition per line: '<state> <read> <write> <L|R> <next>'.
        Blank lines and '#' comments are skipped. The alphabet defaults to
        every symbol the table mentions.
        '''
        transitions: Dict[Tuple[Hashable, int], Transition] = {}
        for lineno, raw in enumerate(lines, 1):
            line = raw.split("#", 1)[0].strip()
            if not line:
                continue
            fields = line.split()
            if len(fields) != 5:
                raise RuleParseError(f"line {lineno}: expected 5 fields, got {len(fields)} in {line!r}")
            state, read, write, move, nxt = fields
            try:
                key = (state, int(read))
                tr = Transition(int(write), Move.parse(move), nxt)
            except ValueError as exc:
                raise RuleParseError(f"line {lineno}: {exc}") from exc
            if key in transitions:
                raise RuleParseError(f"line {lineno}: duplicate transition for state {state} reading {read}")
            transitions[key] = tr

        if alphabet is None:
            symbols = {blank}
            for (_, read), tr in transitions.items():
                symbols.update((read, tr.write))
            alphabet = sorted(symbols)
        return cls(transitions, start, frozenset(halting), tuple(alphabet), blank)


@dataclass(frozen=True)
class TapeMachine:
    tape: Tuple[int, ...]
    head: int
    state: Hashable

    def __post_init__(self) -> None:
        object.__setattr__(self, "tape", tuple(self.tape))
        if not 0 <= self.head < len(self.tape):
            raise ValueError(f"head {self.head} is outside a tape of length {len(self.tape)}")

    @classmethod
    def start(cls, program: TapeProgram, tape: Iterable[int] = (), head: int = 0) -> TapeMachine:
        cells = tuple(tape) or (program.blank,)
        for i, symbol in enumerate(cells):
            if symbol not in program.alphabet:
                raise ValueError(f"tape cell {i} holds {symbol}, which is not in the alphabet {program.alphabet}")
        return cls(cells, head, program.start)

    def read(self) -> int:
        return self.tape[self.head]

    def step(self, program: TapeProgram) -> TapeMachine:
        """Apply one transition and return the resulting machine."""
        if program.is_halting(self.state):
            raise MachineHalted(f"machine already halted in state {self.state}")
        write, move, next_state = program.lookup(self.state, self.read())

        cells = list(self.tape)
        cells[self.head] = write
        head = self.head + move.value
        if head < 0:
            cells.insert(0, program.blank)
            head = 0
        elif head == len(cells):
            cells.append(program.blank)
        return replace(self, tape=tuple(cells), head=head, state=next_state)

    def ones(self, blank: int = 0) -> int:
        """Count non-blank cells (the busy beaver score for a 0/1 alphabet)."""
        return sum(1 for s in self.tape if s != blank)

    def __str__(self) -> str:
        return f"{self.head} - {self.state}: {list(self.tape)}"


@dataclass(frozen=True)
class TapeRun:
    machine: TapeMachine
    steps: int
    halted: bool
    history: List[TapeMachine] = field(default_factory=list)


def run_machine(
    machine: TapeMachine,
    program: TapeProgram,
    max_steps: int = 10_000,
    keep_history: bool = False,
) -> TapeRun:
    """
    Step until the machine halts or `max_steps` transitions have run.
    A clean halt ends the loop through MachineHalted.
    """
    history = [machine] if keep_history else []
    steps = 0
    while True:
        try:
            nxt = machine.step(program)
        except MachineHalted:
            return TapeRun(machine, steps, True, history)
        if steps == max_steps:
            return TapeRun(machine, steps, False, history)
        machine = nxt
        steps += 1
        if keep_history:
            history.append(machine)
