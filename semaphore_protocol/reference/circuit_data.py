"""
⚠️ DRAFT — requires crypto review before production use

Built circuits, verifier data and proofs of the reference backend.

The reference proof is a transcript tag

    tag = SHA3-256(domain || circuit_digest || CBOR(public_inputs) || nonce)

produced only after the prover has checked that its witness satisfies every
constraint. The tag binds the proof to one circuit structure and one
public-input vector, and carries nothing derived from the witness. It is NOT
a succinct argument of knowledge: it does not convince a verifier that a
witness exists. It stands in for a SNARK/STARK backend behind the same
interface.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Sequence, Tuple

import cbor2

from ..config import DOMAIN_SEPARATORS, PROOF_VERSION, TRANSCRIPT_NONCE_BYTES
from ..exceptions import SerializationError
from ..interfaces import ConstraintSystem, Hasher, VerifierArtifact
from ..security import RandomnessSource, constant_time_compare, transcript_hash
from ..types import ProofWithPublicInputs
from .witness import ReferenceWitness, generate_witness

log = logging.getLogger(__name__)

BACKEND_NAME = "reference"
BACKEND_VERSION = "0.1.0"


def _transcript_tag(
    circuit_digest: bytes, public_inputs: Sequence[int], nonce: bytes
) -> bytes:
    return transcript_hash(
        DOMAIN_SEPARATORS["proof_transcript"],
        [
            BACKEND_VERSION.encode("utf-8"),
            circuit_digest,
            cbor2.dumps([int(x) for x in public_inputs]),
            nonce,
        ],
    )


def _loads_dict(data: bytes, what: str) -> dict:
    if not isinstance(data, (bytes, bytearray)):
        raise SerializationError(f"{what} data must be bytes")
    try:
        obj = cbor2.loads(bytes(data))
    except Exception as e:
        raise SerializationError(f"Failed to deserialize {what}: {e}") from e
    if not isinstance(obj, dict):
        raise SerializationError(f"Invalid {what} format")
    version = obj.get("v")
    if version != PROOF_VERSION:
        raise SerializationError(
            f"Unsupported {what} version: {version} (expected {PROOF_VERSION})"
        )
    return obj


# ============================================================================
# PROOF
# ============================================================================


@dataclass(frozen=True)
class Proof:
    nonce: bytes
    tag: bytes

    def to_bytes(self) -> bytes:
        return cbor2.dumps(
            {"v": PROOF_VERSION, "b": BACKEND_NAME, "n": self.nonce, "t": self.tag}
        )

    @classmethod
    def from_bytes(cls, data: bytes) -> "Proof":
        obj = _loads_dict(data, "proof")
        if obj.get("b") != BACKEND_NAME:
            raise SerializationError(
                f"proof was not produced by the {BACKEND_NAME} backend"
            )
        nonce, tag = obj.get("n"), obj.get("t")
        if not isinstance(nonce, bytes) or not isinstance(tag, bytes):
            raise SerializationError("Invalid proof format: missing required fields")
        return cls(nonce=nonce, tag=tag)


# ============================================================================
# VERIFIER DATA
# ============================================================================


@dataclass(frozen=True)
class VerifierCircuitData(VerifierArtifact):
    """Witness-independent material needed to check proofs of one circuit."""

    circuit_digest: bytes
    public_input_count: int
    modulus: int
    hasher_name: str

    @property
    def num_public_inputs(self) -> int:
        return self.public_input_count

    def verify(self, proof_with_public_inputs: ProofWithPublicInputs) -> bool:
        """
        Check a proof against this circuit and a public-input vector.

        Returns:
            True if accepted; any malformed input yields False
        """
        try:
            proof = proof_with_public_inputs.proof
            public_inputs = tuple(proof_with_public_inputs.public_inputs)
            if not isinstance(proof, Proof):
                return False
            if len(public_inputs) != self.public_input_count:
                return False
            for x in public_inputs:
                if not isinstance(x, int) or isinstance(x, bool):
                    return False
                if not 0 <= x < self.modulus:
                    return False
            expected = _transcript_tag(self.circuit_digest, public_inputs, proof.nonce)
            return constant_time_compare(expected, proof.tag)
        except Exception:
            return False

    def to_bytes(self) -> bytes:
        return cbor2.dumps(
            {
                "v": PROOF_VERSION,
                "b": BACKEND_NAME,
                "d": self.circuit_digest,
                "n": self.public_input_count,
                "m": self.modulus,
                "h": self.hasher_name,
            }
        )

    @classmethod
    def from_bytes(cls, data: bytes) -> "VerifierCircuitData":
        obj = _loads_dict(data, "verifier data")
        try:
            return cls(
                circuit_digest=bytes(obj["d"]),
                public_input_count=int(obj["n"]),
                modulus=int(obj["m"]),
                hasher_name=str(obj["h"]),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise SerializationError(f"Invalid verifier data format: {e}") from e


# ============================================================================
# CIRCUIT DATA
# ============================================================================


class CircuitData(ConstraintSystem):
    """Frozen circuit: gates, wire count and public input wires."""

    def __init__(
        self,
        hasher: Hasher,
        num_targets: int,
        public_inputs: Tuple[int, ...],
        gates: Tuple[Any, ...],
    ) -> None:
        self.hasher = hasher
        self.num_targets = num_targets
        self.public_inputs = public_inputs
        self.gates = gates
        self._rng = RandomnessSource()
        self.circuit_digest = transcript_hash(
            DOMAIN_SEPARATORS["circuit_digest"],
            [
                hasher.fingerprint(),
                cbor2.dumps(
                    [
                        hasher.field.modulus,
                        num_targets,
                        list(public_inputs),
                        [gate.describe() for gate in gates],
                    ]
                ),
            ],
        )

    @property
    def num_public_inputs(self) -> int:
        return len(self.public_inputs)

    def verifier_data(self) -> VerifierCircuitData:
        return VerifierCircuitData(
            circuit_digest=self.circuit_digest,
            public_input_count=len(self.public_inputs),
            modulus=self.hasher.field.modulus,
            hasher_name=self.hasher.name,
        )

    def prove(self, witness: ReferenceWitness) -> ProofWithPublicInputs:
        """
        Complete ``witness``, check all constraints and emit a proof.

        Raises:
            ProofConstructionError: If the witness cannot satisfy the circuit
        """
        if not isinstance(witness, ReferenceWitness):
            raise TypeError("witness must be ReferenceWitness")
        values = generate_witness(witness, self.num_targets, self.gates, self.hasher)
        public_inputs = tuple(values[wire] for wire in self.public_inputs)
        nonce = self._rng.get_random_bytes(TRANSCRIPT_NONCE_BYTES)
        proof = Proof(
            nonce=nonce,
            tag=_transcript_tag(self.circuit_digest, public_inputs, nonce),
        )
        log.debug("proof generated: circuit=%s", self.circuit_digest.hex()[:16])
        return ProofWithPublicInputs(proof=proof, public_inputs=public_inputs)
