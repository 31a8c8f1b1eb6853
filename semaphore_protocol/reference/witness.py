"""Partial witness and witness generation for the reference backend."""

from __future__ import annotations

import logging
from typing import Dict, Sequence

from ..exceptions import ProofConstructionError, UnsatisfiedConstraintError
from ..interfaces import Hasher, PartialWitness
from ..types import Target

log = logging.getLogger(__name__)


class ReferenceWitness(PartialWitness):
    """Map of wire index -> field element."""

    def __init__(self) -> None:
        self.values: Dict[int, int] = {}

    def __len__(self) -> int:
        return len(self.values)

    def set_target(self, target: Target, value: int) -> None:
        if not isinstance(target, Target):
            raise TypeError(f"target must be Target, got {type(target)}")
        if not isinstance(value, int) or isinstance(value, bool):
            raise TypeError(f"witness value must be int, got {type(value)}")
        existing = self.values.get(target.index)
        if existing is not None and existing != value:
            raise ValueError(
                f"target {target.index} was set twice with different values"
            )
        self.values[target.index] = value

    def get_target(self, target: Target) -> int:
        return self.values[target.index]


def generate_witness(
    witness: ReferenceWitness,
    num_targets: int,
    gates: Sequence,
    hasher: Hasher,
) -> Dict[int, int]:
    """
    Extend a partial witness to a full assignment and check every constraint.

    Generators run until no gate makes progress. Any target still unknown,
    any non-canonical value, or any failing gate aborts proving.

    Returns:
        Full assignment (wire index -> value)

    Raises:
        ProofConstructionError: If the witness cannot be completed
        UnsatisfiedConstraintError: If a constraint does not hold
    """
    field = hasher.field
    values = dict(witness.values)

    for wire, value in values.items():
        if not 0 <= wire < num_targets:
            raise ProofConstructionError(f"witness sets unknown target {wire}")
        if not field.is_canonical(value):
            raise ProofConstructionError(
                f"witness value for target {wire} is not a canonical field element"
            )

    pending = list(gates)
    rounds = 0
    while pending:
        rounds += 1
        remaining = [gate for gate in pending if not gate.run(values, hasher)]
        if len(remaining) == len(pending):
            break
        pending = remaining

    missing = num_targets - len(values)
    if missing:
        raise ProofConstructionError(
            f"witness incomplete: {missing} of {num_targets} targets unassigned"
        )

    for i, gate in enumerate(gates):
        if not gate.check(values, hasher):
            raise UnsatisfiedConstraintError(
                f"constraint {i} ({gate.describe()[0]}) is not satisfied"
            )

    log.debug(
        "witness generated: targets=%d gates=%d rounds=%d",
        num_targets,
        len(gates),
        rounds,
    )
    return values
