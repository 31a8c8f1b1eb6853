from __future__ import annotations

from typing import Any, Dict

from ..exceptions import ProofConstructionError
from ..interfaces import (
    ConstraintSystem,
    Hasher,
    PartialWitness,
    ProvingBackend,
    VerifierArtifact,
)
from ..types import ProofWithPublicInputs
from .builder import CircuitBuilder
from .circuit_data import (
    BACKEND_NAME,
    BACKEND_VERSION,
    CircuitData,
    Proof,
    VerifierCircuitData,
)
from .witness import ReferenceWitness


class ReferenceBackend(ProvingBackend):
    """
    Pure-Python proving backend.

    Notes:
    - Proving checks that the witness satisfies every constraint.
    - Proofs bind circuit and public inputs but are NOT zero-knowledge
      arguments; a party that knows the scheme can forge them.
    - For development, tests and as the reference for real backends.
    """

    _BACKEND_NAME = BACKEND_NAME
    _BACKEND_VERSION = BACKEND_VERSION

    @property
    def backend_name(self) -> str:
        return self._BACKEND_NAME

    @property
    def backend_version(self) -> str:
        return self._BACKEND_VERSION

    def new_builder(self, hasher: Hasher) -> CircuitBuilder:
        if not isinstance(hasher, Hasher):
            raise TypeError("hasher must implement Hasher")
        return CircuitBuilder(hasher)

    def new_witness(self) -> ReferenceWitness:
        return ReferenceWitness()

    def prove(
        self, system: ConstraintSystem, witness: PartialWitness
    ) -> ProofWithPublicInputs:
        if not isinstance(system, CircuitData):
            raise ProofConstructionError(
                f"{self.backend_name} backend cannot prove {type(system).__name__}"
            )
        if not isinstance(witness, ReferenceWitness):
            raise ProofConstructionError(
                f"{self.backend_name} backend cannot use {type(witness).__name__}"
            )
        return system.prove(witness)

    def verify(
        self,
        verifier_data: VerifierArtifact,
        proof_with_public_inputs: ProofWithPublicInputs,
    ) -> bool:
        try:
            if not isinstance(verifier_data, VerifierCircuitData):
                return False
            if not isinstance(proof_with_public_inputs, ProofWithPublicInputs):
                return False
            return verifier_data.verify(proof_with_public_inputs)
        except Exception:
            return False

    def proof_from_bytes(self, data: bytes) -> Proof:
        return Proof.from_bytes(data)

    def verifier_data_from_bytes(self, data: bytes) -> VerifierCircuitData:
        return VerifierCircuitData.from_bytes(data)

    def get_backend_info(self) -> Dict[str, Any]:
        return {
            "name": self.backend_name,
            "version": self.backend_version,
            "proof": "transcript_tag",
            "features": ["semaphore_signal", "merkle_cap"],
            "security": "reference_only",
        }
