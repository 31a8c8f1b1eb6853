"""
Statement registry for Semaphore proofs.
Defines statement types, versions and the public-input layout.
"""

from enum import Enum
from dataclasses import dataclass
from typing import Dict, List, Sequence, Tuple

from .config import DIGEST_LENGTH


class StatementType(Enum):
    """Statement types for Semaphore proofs"""

    SEMAPHORE_SIGNAL = "semaphore_signal_v1"


@dataclass
class StatementSpec:
    """
    Specification for a proof statement.

    Attributes:
        statement_type: Type identifier
        version: Statement version (for future upgrades)
        public_input_segments: Ordered segment names of the public-input vector
        witness_schema: Private inputs (for documentation)
        description: Human-readable statement description
    """

    statement_type: StatementType
    version: int
    public_input_segments: Tuple[str, ...]
    witness_schema: Dict[str, str]
    description: str


STATEMENT_REGISTRY: Dict[StatementType, StatementSpec] = {
    StatementType.SEMAPHORE_SIGNAL: StatementSpec(
        statement_type=StatementType.SEMAPHORE_SIGNAL,
        version=1,
        public_input_segments=("merkle_cap", "nullifier", "topic"),
        witness_schema={
            "private_key": "Digest",
            "public_key_index": "int",
            "merkle_proof": "Tuple[Digest, ...]",
        },
        description=(
            "Prove H(sk || 0) is a leaf under the committed cap and "
            "nullifier == H(sk || topic)"
        ),
    ),
}


def get_statement_spec(statement_type: StatementType) -> StatementSpec:
    """Get specification for a statement type"""
    if statement_type not in STATEMENT_REGISTRY:
        raise ValueError(f"Unknown statement type: {statement_type}")
    return STATEMENT_REGISTRY[statement_type]


def public_input_layout(cap_height: int) -> List[Tuple[str, int, int]]:
    """
    Public-input layout of the Semaphore statement.

    Returns:
        List of (segment, start, length) in vector order
    """
    if cap_height < 0:
        raise ValueError(f"cap_height must be non-negative, got {cap_height}")
    lengths = {
        "merkle_cap": DIGEST_LENGTH * (1 << cap_height),
        "nullifier": DIGEST_LENGTH,
        "topic": DIGEST_LENGTH,
    }
    spec = get_statement_spec(StatementType.SEMAPHORE_SIGNAL)
    layout = []
    start = 0
    for segment in spec.public_input_segments:
        layout.append((segment, start, lengths[segment]))
        start += lengths[segment]
    return layout


def num_public_inputs(cap_height: int) -> int:
    _, start, length = public_input_layout(cap_height)[-1]
    return start + length


def split_public_inputs(
    public_inputs: Sequence[int], cap_height: int
) -> Dict[str, Tuple[int, ...]]:
    """
    Split a public-input vector into its named segments.

    Raises:
        ValueError: If the vector length does not match the layout
    """
    expected = num_public_inputs(cap_height)
    if len(public_inputs) != expected:
        raise ValueError(
            f"public input vector must have {expected} elements for "
            f"cap_height={cap_height}, got {len(public_inputs)}"
        )
    return {
        segment: tuple(public_inputs[start: start + length])
        for segment, start, length in public_input_layout(cap_height)
    }
