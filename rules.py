from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Protocol, Sequence, Tuple

Offset = Tuple[int, ...]

# Neighborhood shapes. Each rule carries one; step functions gather neighbor
# values in exactly this order.
LINEAR: Tuple[Offset, ...] = ((-1,), (1,))  # left, right
MOORE: Tuple[Offset, ...] = (
    (-1, -1), (-1, 0), (-1, 1),
    (0, -1),           (0, 1),
    (1, -1),  (1, 0),  (1, 1),
)
VON_NEUMANN: Tuple[Offset, ...] = ((-1, 0), (0, 1), (1, 0), (0, -1))  # top, right, bottom, left


class RuleParseError(ValueError):
    """A rule definition could not be turned into a transition table."""


class MissingTransitionError(LookupError):
    """A configuration arose that the transition table has no entry for."""


class Rule(Protocol):
    neighborhood: Tuple[Offset, ...]

    def __call__(self, self_state: int, neighbors: Sequence[int]) -> int:
        ...


@dataclass(frozen=True)
class ElementaryRule:
    """
    Wolfram elementary rule: outputs[i] is the next state for configuration i,
    where i = 4*left + 2*centre + right (the triple read as a 3-bit number).
    """
    outputs: Tuple[int, ...]
    neighborhood: Tuple[Offset, ...] = field(default=LINEAR, repr=False)

    def __post_init__(self):
        if len(self.outputs) != 8:
            raise ValueError(f"elementary rule needs 8 outputs, got {len(self.outputs)}")
        if any(bit not in (0, 1) for bit in self.outputs):
            raise ValueError("elementary rule outputs must be 0 or 1")

    def __call__(self, self_state: int, neighbors: Sequence[int]) -> int:
        left, right = neighbors
        return self.outputs[4 * left + 2 * self_state + right]

    @classmethod
    def from_int(cls, code: int) -> ElementaryRule:
        """Decode a Wolfram rule number (0..255); missing high bits pad with 0."""
        if not 0 <= code <= 255:
            raise ValueError(f"Wolfram rule number must be in 0..255, got {code}")
        bits = [int(c) for c in reversed(bin(code)[2:])]
        bits += [0] * (8 - len(bits))
        return cls(tuple(bits))

    def to_int(self) -> int:
        return sum(bit << i for i, bit in enumerate(self.outputs))


@dataclass(frozen=True)
class OuterTotalisticRule:
    """
    Outer-totalistic rule for the 2-D Moore neighborhood.
    Bitstring layout (length = num_states x (neighbor_count + 1)):
        state 0 outcomes: indices 0 .. 8   (sum = 0-8)
        state 1 outcomes: indices 9 .. 17
    """
    rule_bits: str
    num_states: int = 2
    neighbor_count: int = 8
    neighborhood: Tuple[Offset, ...] = field(default=MOORE, repr=False)

    def __post_init__(self) -> None:
        expected = self.num_states * (self.neighbor_count + 1)
        if len(self.rule_bits) != expected:
            raise ValueError(
                f"rule_bits length {len(self.rule_bits)} "
                f"does not match expected {expected} "
                f"({self.num_states} states × {self.neighbor_count + 1} sums)."
            )
        if len(self.neighborhood) != self.neighbor_count:
            raise ValueError("neighborhood size does not match neighbor_count")

    def __call__(self, self_state: int, neighbors: Sequence[int]) -> int:
        """Return next-state bit (0/1) for given cell state & neighbor values."""
        if not (0 <= self_state < self.num_states):
            raise ValueError("invalid self_state")
        neighbor_sum = sum(neighbors)
        if not (0 <= neighbor_sum <= self.neighbor_count):
            raise ValueError("invalid neighbor sum")
        idx = self_state * (self.neighbor_count + 1) + neighbor_sum
        return int(self.rule_bits[idx])

    @classmethod
    def from_int(
        cls, code: int, *, num_states: int = 2, neighborhood: Tuple[Offset, ...] = MOORE
    ) -> OuterTotalisticRule:
        """
        Build a rule from an integer in the range
            0 .. 2**(num_states*(neighbor_count+1)) - 1
        """
        neighbor_count = len(neighborhood)
        bit_len = num_states * (neighbor_count + 1)
        rule_bits = f"{code:0{bit_len}b}"
        return cls(rule_bits, num_states=num_states, neighbor_count=neighbor_count, neighborhood=neighborhood)

    @classmethod
    def from_string(cls, rule_str: str) -> OuterTotalisticRule:
        """Parse Birth/Survival notation like 'B3/S23' or 'B36S23'."""
        text = rule_str.upper().replace(" ", "").replace("/", "")
        if not text.startswith("B") or "S" not in text:
            raise RuleParseError(f"expected B<digits>/S<digits>, got {rule_str!r}")
        birth_part, survival_part = text[1:].split("S", 1)
        digits = birth_part + survival_part
        if not all(c in "012345678" for c in digits):
            raise RuleParseError(f"neighbor counts must be digits 0-8 in {rule_str!r}")
        birth = {int(c) for c in birth_part}
        survival = {int(c) for c in survival_part}
        bits = "".join("1" if n in birth else "0" for n in range(9))
        bits += "".join("1" if n in survival else "0" for n in range(9))
        return cls(bits)

    def to_string(self) -> str:
        """Convert a two-state rule back to 'B3/S23' notation."""
        birth = "".join(str(n) for n in range(9) if self.rule_bits[n] == "1")
        survival = "".join(str(n) for n in range(9) if self.rule_bits[9 + n] == "1")
        return f"B{birth}/S{survival}"


GAME_OF_LIFE = OuterTotalisticRule.from_string("B3/S23")


@dataclass(frozen=True)
class RotationalRule:
    """
    Sparse lookup table keyed by (current state, von Neumann neighbors).

    Built from Langton-style lines '<current><top><right><bottom><left><next>'.
    Langton's rule is rotation-symmetric, so every cyclic rotation of the
    neighbor tuple maps to the same next state.
    """
    table: Dict[Tuple[int, Tuple[int, ...]], int]
    neighborhood: Tuple[Offset, ...] = field(default=VON_NEUMANN, repr=False)

    def __call__(self, self_state: int, neighbors: Sequence[int]) -> int:
        key = (self_state, tuple(neighbors))
        try:
            return self.table[key]
        except KeyError:
            raise MissingTransitionError(
                f"no rule for state {self_state} with neighbors {tuple(neighbors)}"
            ) from None

    def __len__(self) -> int:
        return len(self.table)

    @classmethod
    def from_lines(cls, lines: Iterable[str]) -> RotationalRule:
        table: Dict[Tuple[int, Tuple[int, ...]], int] = {}
        width = len(VON_NEUMANN) + 2
        for lineno, raw in enumerate(lines, 1):
            line = raw.strip()
            if not line:
                continue
            current, neighbors, nxt = parse_rule_line(line, width, lineno)
            for rotated in rotations(neighbors):
                key = (current, rotated)
                if table.get(key, nxt) != nxt:
                    raise RuleParseError(
                        f"line {lineno}: {line!r} conflicts with an earlier rule "
                        f"for state {current} with neighbors {rotated}"
                    )
                table[key] = nxt
        return cls(table)


def parse_rule_line(line: str, width: int, lineno: int = 1) -> Tuple[int, Tuple[int, ...], int]:
    '''
    Split one fixed-width rule line into (current, neighbors, next).
    '''
    if len(line) != width:
        raise RuleParseError(f"line {lineno}: expected {width} fields, got {len(line)} in {line!r}")
    if not line.isdigit():
        raise RuleParseError(f"line {lineno}: non-numeric state in {line!r}")
    digits = [int(c) for c in line]
    return digits[0], tuple(digits[1:-1]), digits[-1]


def rotations(neighbors: Sequence[int]) -> List[Tuple[int, ...]]:
    n = len(neighbors)
    return [tuple(neighbors[(i + k) % n] for i in range(n)) for k in range(n)]


@dataclass(frozen=True)
class SandpileRule:
    """
    Bak-Tang-Wiesenfeld toppling on the von Neumann neighborhood: a cell
    holding more than `threshold` grains sheds one to each of its 4 neighbors.
    """
    threshold: int = 3
    neighborhood: Tuple[Offset, ...] = field(default=VON_NEUMANN, repr=False)

    def fires(self, value: int) -> bool:
        return value > self.threshold

    def __call__(self, self_state: int, neighbors: Sequence[int]) -> int:
        shed = len(self.neighborhood) if self.fires(self_state) else 0
        received = sum(1 for n in neighbors if self.fires(n))
        return self_state - shed + received
