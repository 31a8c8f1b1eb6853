"""
⚠️ DRAFT — requires crypto review before production use

The Semaphore circuit.

Public inputs, in this order:
    1. merkle cap of the access set (4 * 2^cap_height elements)
    2. nullifier (4)
    3. topic (4)

Private inputs:
    private key (4), leaf index (1), authentication path
    (height - cap_height digests)

Constraints:
    1. Membership: H(sk || 0^4) is the leaf selected by split_le(index, height)
       under the cap.
    2. Nullifier: H(sk || topic) == nullifier, element-wise.

The leaf index only feeds the bit decomposition that orders each Merkle
step, so nothing public depends on it.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from .access_set import AccessSet
from .config import DIGEST_LENGTH
from .interfaces import ConstraintSystemBuilder, PartialWitness
from .types import (
    HashTarget,
    MerkleCapTarget,
    MerkleProofTarget,
    Target,
    as_digest,
)


@dataclass(frozen=True)
class SemaphoreTargets:
    merkle_cap: MerkleCapTarget
    nullifier: HashTarget
    topic: HashTarget
    merkle_proof: MerkleProofTarget
    private_key: HashTarget
    public_key_index: Target


def semaphore_circuit(
    access_set: AccessSet, builder: ConstraintSystemBuilder
) -> SemaphoreTargets:
    """
    Declare the Semaphore statement for ``access_set`` on ``builder``.

    The access set fixes the structure only (height and cap height); no
    member data is baked into the constraints.

    Returns:
        SemaphoreTargets to be filled by ``fill_semaphore_targets``
    """
    height = access_set.height()
    cap_height = access_set.cap_height

    # Public inputs (order is part of the statement)
    merkle_cap = builder.add_virtual_cap(cap_height)
    for cap_hash in merkle_cap.hashes:
        builder.register_public_inputs(cap_hash.elements)
    nullifier = builder.add_virtual_hash()
    builder.register_public_inputs(nullifier.elements)
    topic = builder.add_virtual_hash()
    builder.register_public_inputs(topic.elements)

    # Private inputs
    merkle_proof = MerkleProofTarget(
        tuple(builder.add_virtual_hashes(height - cap_height))
    )
    private_key = builder.add_virtual_hash()
    public_key_index = builder.add_virtual_target()

    # Exactly `height` bits, LSB first; also range-checks the index
    public_key_index_bits = builder.split_le(public_key_index, height)
    zero = builder.zero()

    # Constraint 1: membership of H(sk || 0^4)
    builder.verify_merkle_proof_to_cap(
        list(private_key.elements) + [zero] * DIGEST_LENGTH,
        public_key_index_bits,
        merkle_cap,
        merkle_proof,
    )

    # Constraint 2: nullifier consistency, H(sk || topic) without padding
    should_be_nullifier = builder.hash_n_to_hash_no_pad(
        list(private_key.elements) + list(topic.elements)
    )
    builder.connect_hashes(nullifier, should_be_nullifier)

    return SemaphoreTargets(
        merkle_cap=merkle_cap,
        nullifier=nullifier,
        topic=topic,
        merkle_proof=merkle_proof,
        private_key=private_key,
        public_key_index=public_key_index,
    )


def fill_semaphore_targets(
    access_set: AccessSet,
    witness: PartialWitness,
    private_key: Sequence[int],
    topic: Sequence[int],
    public_key_index: int,
    targets: SemaphoreTargets,
) -> None:
    """
    Assign a member's secret data to the circuit targets.

    The nullifier target is left unassigned: the backend derives it from the
    nullifier constraint, so it always reflects the private key actually
    used. A private key that is not the leaf at ``public_key_index`` leaves
    the membership constraint unsatisfiable.

    Raises:
        IndexOutOfRangeError: If public_key_index is not a member position
        ValueError: If private_key or topic is not a valid digest
    """
    field = access_set.field
    private_key = as_digest(private_key, field)
    topic = as_digest(topic, field)
    path = access_set.authentication_path(public_key_index)

    for cap_target, cap_digest in zip(
        targets.merkle_cap.hashes, access_set.tree.cap.hashes
    ):
        witness.set_hash_target(cap_target, cap_digest)
    witness.set_hash_target(targets.private_key, private_key)
    witness.set_hash_target(targets.topic, topic)
    witness.set_target(targets.public_key_index, field.reduce(public_key_index))

    for sibling_target, sibling in zip(targets.merkle_proof.siblings, path):
        witness.set_hash_target(sibling_target, sibling)
