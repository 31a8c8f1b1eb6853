"""
Backend-neutral capability interfaces.

The Semaphore circuit and protocol are written only against these
interfaces, so any proving system able to express "hash", "bit split",
"Merkle path to cap" and "equality" constraints can be substituted behind
them. The hash primitive is a separate capability shared by the access set
(outside the circuit) and the constraint system (inside it).
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Sequence

from .config import DIGEST_LENGTH
from .types import (
    BoolTarget,
    Digest,
    HashTarget,
    MerkleCapTarget,
    MerkleProofTarget,
    ProofWithPublicInputs,
    Target,
)

# ============================================================================
# HASH PRIMITIVE
# ============================================================================


class Hasher(ABC):
    """Field-native hash producing DIGEST_LENGTH-element digests."""

    #: PrimeField the hash operates over
    field: Any
    #: Stable identifier, bound into circuit digests
    name: str

    @abstractmethod
    def hash_no_pad(self, inputs: Sequence[int]) -> Digest:
        """Hash any number of field elements without padding."""

    @abstractmethod
    def fingerprint(self) -> bytes:
        """Bytes identifying the exact parameter set of this hasher."""

    def hash_or_noop(self, inputs: Sequence[int]) -> Digest:
        """
        Return short inputs as a zero-padded digest, hash longer ones.

        Merkle leaves go through this: a 4-element public key is its own
        leaf digest.
        """
        if len(inputs) <= DIGEST_LENGTH:
            return tuple(inputs) + (0,) * (DIGEST_LENGTH - len(inputs))
        return self.hash_no_pad(inputs)

    def two_to_one(self, left: Digest, right: Digest) -> Digest:
        """Compress two digests into their parent node."""
        return self.hash_no_pad(tuple(left) + tuple(right))


# ============================================================================
# CONSTRAINT SYSTEM
# ============================================================================


class VerifierArtifact(ABC):
    """Public verification material derived from a built constraint system."""

    @property
    @abstractmethod
    def num_public_inputs(self) -> int:
        """Length of the public-input vector proofs are checked against."""

    @abstractmethod
    def to_bytes(self) -> bytes:
        """Serialize for transport."""


class ConstraintSystem(ABC):
    """Finalized, immutable constraint system."""

    @property
    @abstractmethod
    def num_public_inputs(self) -> int:
        """Number of registered public inputs."""

    @abstractmethod
    def verifier_data(self) -> VerifierArtifact:
        """Derive the matching verifier artifact."""


class ConstraintSystemBuilder(ABC):
    """
    Capability interface for declaring variables and constraints.

    Public inputs are serialized in exactly the order of
    ``register_public_input(s)`` calls.
    """

    @property
    @abstractmethod
    def hasher(self) -> Hasher:
        """Hash primitive used by hash gadgets."""

    # Variable allocation ----------------------------------------------------

    @abstractmethod
    def add_virtual_target(self) -> Target:
        """Allocate one unconstrained variable."""

    def add_virtual_targets(self, n: int) -> List[Target]:
        return [self.add_virtual_target() for _ in range(n)]

    def add_virtual_hash(self) -> HashTarget:
        return HashTarget(tuple(self.add_virtual_targets(DIGEST_LENGTH)))

    def add_virtual_hashes(self, n: int) -> List[HashTarget]:
        return [self.add_virtual_hash() for _ in range(n)]

    def add_virtual_cap(self, cap_height: int) -> MerkleCapTarget:
        return MerkleCapTarget(tuple(self.add_virtual_hashes(1 << cap_height)))

    @abstractmethod
    def constant(self, value: int) -> Target:
        """Variable fixed to ``value``."""

    def zero(self) -> Target:
        return self.constant(0)

    # Public inputs ----------------------------------------------------------

    @abstractmethod
    def register_public_input(self, target: Target) -> None:
        """Append ``target`` to the public-input vector."""

    def register_public_inputs(self, targets: Sequence[Target]) -> None:
        for target in targets:
            self.register_public_input(target)

    # Gadgets ----------------------------------------------------------------

    @abstractmethod
    def split_le(self, target: Target, num_bits: int) -> List[BoolTarget]:
        """
        Little-endian bit decomposition of ``target`` into ``num_bits`` bits.

        Also constrains ``target < 2**num_bits``.
        """

    @abstractmethod
    def hash_n_to_hash_no_pad(self, inputs: Sequence[Target]) -> HashTarget:
        """In-circuit ``Hasher.hash_no_pad``."""

    def hash_or_noop(self, inputs: Sequence[Target]) -> HashTarget:
        """In-circuit ``Hasher.hash_or_noop``."""
        if len(inputs) <= DIGEST_LENGTH:
            zero = self.zero()
            padded = tuple(inputs) + (zero,) * (DIGEST_LENGTH - len(inputs))
            return HashTarget(padded)
        return self.hash_n_to_hash_no_pad(inputs)

    @abstractmethod
    def verify_merkle_proof_to_cap(
        self,
        leaf_data: Sequence[Target],
        leaf_index_bits: Sequence[BoolTarget],
        merkle_cap: MerkleCapTarget,
        proof: MerkleProofTarget,
    ) -> None:
        """
        Assert that ``hash_or_noop(leaf_data)`` is the leaf at the index
        given by ``leaf_index_bits`` under ``merkle_cap``.

        The low ``len(proof.siblings)`` bits choose the child side at each
        level; the remaining bits select the cap entry.
        """

    # Equality ---------------------------------------------------------------

    @abstractmethod
    def connect(self, a: Target, b: Target) -> None:
        """Assert ``a == b``."""

    def connect_hashes(self, a: HashTarget, b: HashTarget) -> None:
        for x, y in zip(a.elements, b.elements):
            self.connect(x, y)

    # Finalization -----------------------------------------------------------

    @abstractmethod
    def build(self) -> ConstraintSystem:
        """Freeze the declared constraints."""


# ============================================================================
# WITNESS
# ============================================================================


class PartialWitness(ABC):
    """Concrete values for a subset of targets; the backend derives the rest."""

    @abstractmethod
    def set_target(self, target: Target, value: int) -> None:
        """
        Bind ``value`` to ``target``.

        Raises:
            ValueError: If the target already holds a different value
        """

    def set_targets(self, targets: Sequence[Target], values: Sequence[int]) -> None:
        if len(targets) != len(values):
            raise ValueError(
                f"length mismatch: {len(targets)} targets, {len(values)} values"
            )
        for target, value in zip(targets, values):
            self.set_target(target, value)

    def set_hash_target(self, target: HashTarget, digest: Digest) -> None:
        self.set_targets(target.elements, tuple(digest))

    def set_bool_target(self, target: BoolTarget, value: bool) -> None:
        self.set_target(target.target, int(bool(value)))


# ============================================================================
# PROVING BACKEND
# ============================================================================


class ProvingBackend(ABC):
    """Produces and checks proofs for constraint systems it built."""

    @property
    @abstractmethod
    def backend_name(self) -> str:
        """Human-readable backend name."""

    @property
    @abstractmethod
    def backend_version(self) -> str:
        """Backend implementation version."""

    @abstractmethod
    def new_builder(self, hasher: Hasher) -> ConstraintSystemBuilder:
        """Fresh builder whose hash gadgets use ``hasher``."""

    @abstractmethod
    def new_witness(self) -> PartialWitness:
        """Fresh, empty partial witness."""

    @abstractmethod
    def prove(
        self, system: ConstraintSystem, witness: PartialWitness
    ) -> ProofWithPublicInputs:
        """
        Prove that ``witness`` extends to a satisfying assignment.

        Raises:
            ProofConstructionError: If no satisfying assignment is reachable
        """

    @abstractmethod
    def verify(
        self,
        verifier_data: VerifierArtifact,
        proof_with_public_inputs: ProofWithPublicInputs,
    ) -> bool:
        """Accept or reject; never raises."""

    @abstractmethod
    def proof_from_bytes(self, data: bytes) -> Any:
        """Decode a proof produced by ``proof.to_bytes()``."""

    @abstractmethod
    def verifier_data_from_bytes(self, data: bytes) -> VerifierArtifact:
        """Decode a verifier artifact produced by ``to_bytes()``."""

    def get_backend_info(self) -> Dict[str, Any]:
        return {
            "name": self.backend_name,
            "version": self.backend_version,
        }
