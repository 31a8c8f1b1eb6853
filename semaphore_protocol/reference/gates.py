"""
Gates of the reference constraint system.

Every gate is both a witness generator (``run``: derive outputs once inputs
are known) and a constraint (``check``: holds on a full assignment).
Targets are referenced by wire index. ``describe`` gives the structural,
witness-independent encoding hashed into the circuit digest.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

from ..bits import le_sum
from ..interfaces import Hasher

Values = Dict[int, int]


def _get(values: Values, wires: Sequence[int]) -> Optional[List[int]]:
    out = []
    for wire in wires:
        if wire not in values:
            return None
        out.append(values[wire])
    return out


def _assign(values: Values, wires: Sequence[int], data: Sequence[int]) -> None:
    # Never overwrite: a conflicting value is reported by check()
    for wire, value in zip(wires, data):
        values.setdefault(wire, value)


@dataclass(frozen=True)
class ConstantGate:
    wire: int
    value: int

    def run(self, values: Values, hasher: Hasher) -> bool:
        values.setdefault(self.wire, self.value)
        return True

    def check(self, values: Values, hasher: Hasher) -> bool:
        return values[self.wire] == self.value

    def describe(self) -> list:
        return ["const", self.wire, self.value]


@dataclass(frozen=True)
class HashGate:
    """outputs == hasher.hash_no_pad(inputs)"""

    inputs: Tuple[int, ...]
    outputs: Tuple[int, ...]

    def run(self, values: Values, hasher: Hasher) -> bool:
        data = _get(values, self.inputs)
        if data is None:
            return False
        _assign(values, self.outputs, hasher.hash_no_pad(data))
        return True

    def check(self, values: Values, hasher: Hasher) -> bool:
        data = _get(values, self.inputs)
        return tuple(_get(values, self.outputs)) == tuple(hasher.hash_no_pad(data))

    def describe(self) -> list:
        return ["hash", list(self.inputs), list(self.outputs)]


@dataclass(frozen=True)
class SplitGate:
    """bits are boolean and sum(bits[i] * 2^i) == value (as integers)."""

    value: int
    bits: Tuple[int, ...]

    def run(self, values: Values, hasher: Hasher) -> bool:
        if self.value not in values:
            return False
        v = values[self.value]
        # Out-of-range values keep only their low bits and fail check()
        _assign(values, self.bits, [(v >> i) & 1 for i in range(len(self.bits))])
        return True

    def check(self, values: Values, hasher: Hasher) -> bool:
        bits = _get(values, self.bits)
        if any(b not in (0, 1) for b in bits):
            return False
        return le_sum(bits) == values[self.value]

    def describe(self) -> list:
        return ["split_le", self.value, list(self.bits)]


@dataclass(frozen=True)
class SwapGate:
    """(left, right) = (b, a) if bit else (a, b); bit is boolean."""

    bit: int
    a: Tuple[int, ...]
    b: Tuple[int, ...]
    left: Tuple[int, ...]
    right: Tuple[int, ...]

    def _expected(self, values: Values):
        bit = values[self.bit]
        a = _get(values, self.a)
        b = _get(values, self.b)
        if bit == 1:
            return b, a
        return a, b

    def run(self, values: Values, hasher: Hasher) -> bool:
        if _get(values, (self.bit,) + self.a + self.b) is None:
            return False
        left, right = self._expected(values)
        _assign(values, self.left, left)
        _assign(values, self.right, right)
        return True

    def check(self, values: Values, hasher: Hasher) -> bool:
        if values[self.bit] not in (0, 1):
            return False
        left, right = self._expected(values)
        return (
            _get(values, self.left) == list(left)
            and _get(values, self.right) == list(right)
        )

    def describe(self) -> list:
        return [
            "swap",
            self.bit,
            list(self.a),
            list(self.b),
            list(self.left),
            list(self.right),
        ]


@dataclass(frozen=True)
class RandomAccessGate:
    """output == items[le_sum(index_bits)]; bits are boolean."""

    index_bits: Tuple[int, ...]
    items: Tuple[Tuple[int, ...], ...]
    output: Tuple[int, ...]

    def _selected(self, values: Values) -> Optional[List[int]]:
        bits = _get(values, self.index_bits)
        if bits is None or any(b not in (0, 1) for b in bits):
            return None
        index = le_sum(bits)
        if index >= len(self.items):
            return None
        return _get(values, self.items[index])

    def run(self, values: Values, hasher: Hasher) -> bool:
        selected = self._selected(values)
        if selected is None:
            return False
        _assign(values, self.output, selected)
        return True

    def check(self, values: Values, hasher: Hasher) -> bool:
        selected = self._selected(values)
        return selected is not None and _get(values, self.output) == selected

    def describe(self) -> list:
        return [
            "random_access",
            list(self.index_bits),
            [list(item) for item in self.items],
            list(self.output),
        ]


@dataclass(frozen=True)
class CopyConstraint:
    """a == b; the generator copies whichever side is known."""

    a: int
    b: int

    def run(self, values: Values, hasher: Hasher) -> bool:
        if self.a in values:
            values.setdefault(self.b, values[self.a])
            return True
        if self.b in values:
            values.setdefault(self.a, values[self.b])
            return True
        return False

    def check(self, values: Values, hasher: Hasher) -> bool:
        return values[self.a] == values[self.b]

    def describe(self) -> list:
        return ["copy", self.a, self.b]
