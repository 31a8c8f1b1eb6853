"""Circuit builder of the reference backend."""

from __future__ import annotations

import logging
from typing import Dict, List, Sequence

from ..interfaces import ConstraintSystemBuilder, Hasher
from ..types import (
    BoolTarget,
    HashTarget,
    MerkleCapTarget,
    MerkleProofTarget,
    Target,
)
from .circuit_data import CircuitData
from .gates import (
    ConstantGate,
    CopyConstraint,
    HashGate,
    RandomAccessGate,
    SplitGate,
    SwapGate,
)

log = logging.getLogger(__name__)


def _wires(targets: Sequence[Target]) -> tuple:
    return tuple(t.index for t in targets)


class CircuitBuilder(ConstraintSystemBuilder):
    """
    Records targets, gates and public inputs; ``build()`` freezes them.

    Example:
        >>> builder = CircuitBuilder(PoseidonHash())
        >>> x = builder.add_virtual_target()
        >>> builder.register_public_input(x)
        >>> data = builder.build()
    """

    def __init__(self, hasher: Hasher) -> None:
        self._hasher = hasher
        self._num_targets = 0
        self._public_inputs: List[Target] = []
        self._constants: Dict[int, Target] = {}
        self._gates: list = []
        self._built = False

    @property
    def hasher(self) -> Hasher:
        return self._hasher

    @property
    def num_gates(self) -> int:
        return len(self._gates)

    def _add_gate(self, gate) -> None:
        if self._built:
            raise RuntimeError("circuit already built")
        self._gates.append(gate)

    def add_virtual_target(self) -> Target:
        if self._built:
            raise RuntimeError("circuit already built")
        target = Target(self._num_targets)
        self._num_targets += 1
        return target

    def constant(self, value: int) -> Target:
        value = self._hasher.field.reduce(value)
        if value not in self._constants:
            target = self.add_virtual_target()
            self._add_gate(ConstantGate(target.index, value))
            self._constants[value] = target
        return self._constants[value]

    def register_public_input(self, target: Target) -> None:
        if self._built:
            raise RuntimeError("circuit already built")
        self._public_inputs.append(target)

    def split_le(self, target: Target, num_bits: int) -> List[BoolTarget]:
        if num_bits < 0:
            raise ValueError(f"num_bits must be non-negative, got {num_bits}")
        if num_bits >= self._hasher.field.bits:
            # Recomposition would wrap around the modulus
            raise ValueError(
                f"cannot split into {num_bits} bits in a {self._hasher.field.bits}-bit field"
            )
        bits = self.add_virtual_targets(num_bits)
        self._add_gate(SplitGate(target.index, _wires(bits)))
        return [BoolTarget(bit) for bit in bits]

    def hash_n_to_hash_no_pad(self, inputs: Sequence[Target]) -> HashTarget:
        output = self.add_virtual_hash()
        self._add_gate(HashGate(_wires(inputs), _wires(output.elements)))
        return output

    def _swap_if(self, bit: BoolTarget, a: HashTarget, b: HashTarget):
        left = self.add_virtual_hash()
        right = self.add_virtual_hash()
        self._add_gate(
            SwapGate(
                bit.target.index,
                _wires(a.elements),
                _wires(b.elements),
                _wires(left.elements),
                _wires(right.elements),
            )
        )
        return left, right

    def _random_access_hash(
        self, index_bits: Sequence[BoolTarget], items: Sequence[HashTarget]
    ) -> HashTarget:
        if len(items) != 1 << len(index_bits):
            raise ValueError(
                f"{len(items)} items cannot be indexed by {len(index_bits)} bits"
            )
        if not index_bits:
            return items[0]
        output = self.add_virtual_hash()
        self._add_gate(
            RandomAccessGate(
                tuple(bit.target.index for bit in index_bits),
                tuple(_wires(item.elements) for item in items),
                _wires(output.elements),
            )
        )
        return output

    def verify_merkle_proof_to_cap(
        self,
        leaf_data: Sequence[Target],
        leaf_index_bits: Sequence[BoolTarget],
        merkle_cap: MerkleCapTarget,
        proof: MerkleProofTarget,
    ) -> None:
        path_len = len(proof.siblings)
        cap_height = len(merkle_cap.hashes).bit_length() - 1
        if len(leaf_index_bits) != path_len + cap_height:
            raise ValueError(
                f"expected {path_len + cap_height} index bits, got {len(leaf_index_bits)}"
            )

        current = self.hash_or_noop(leaf_data)
        for bit, sibling in zip(leaf_index_bits[:path_len], proof.siblings):
            left, right = self._swap_if(bit, current, sibling)
            current = self.hash_n_to_hash_no_pad(
                list(left.elements) + list(right.elements)
            )

        cap_entry = self._random_access_hash(
            leaf_index_bits[path_len:], merkle_cap.hashes
        )
        self.connect_hashes(current, cap_entry)

    def connect(self, a: Target, b: Target) -> None:
        self._add_gate(CopyConstraint(a.index, b.index))

    def build(self) -> CircuitData:
        self._built = True
        data = CircuitData(
            hasher=self._hasher,
            num_targets=self._num_targets,
            public_inputs=_wires(self._public_inputs),
            gates=tuple(self._gates),
        )
        log.debug(
            "circuit built: targets=%d gates=%d public_inputs=%d",
            self._num_targets,
            len(self._gates),
            len(self._public_inputs),
        )
        return data
