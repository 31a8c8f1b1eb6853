"""
Key material and nullifier derivation.

    public_key = H(private_key || ZERO_DIGEST)
    nullifier  = H(private_key || topic)

Both use ``hash_no_pad`` over 8 field elements. The zero padding of the
public key keeps it in a different domain from every nullifier except the
one for the all-zero topic.
"""

from __future__ import annotations

from typing import Any, List, Optional, Sequence, Tuple

from .field import GOLDILOCKS, PrimeField
from .interfaces import Hasher
from .types import ZERO_DIGEST, Digest, as_digest


def generate_private_key(field: PrimeField = GOLDILOCKS, rng: Any = None) -> Digest:
    """Uniformly random private key (DIGEST_LENGTH field elements)."""
    return field.sample_digest(rng)


def derive_public_key(private_key: Sequence[int], hasher: Hasher) -> Digest:
    """Public key (access set leaf) for ``private_key``."""
    sk = as_digest(private_key, hasher.field)
    return hasher.hash_no_pad(sk + ZERO_DIGEST)


def derive_nullifier(
    private_key: Sequence[int], topic: Sequence[int], hasher: Hasher
) -> Digest:
    """
    Canonical nullifier of ``private_key`` on ``topic``.

    Deterministic: the same pair always yields the same nullifier, which is
    what lets a caller detect a member signalling twice on one topic.
    """
    sk = as_digest(private_key, hasher.field)
    t = as_digest(topic, hasher.field)
    return hasher.hash_no_pad(sk + t)


def generate_keypairs(
    count: int, hasher: Hasher, rng: Optional[Any] = None
) -> Tuple[List[Digest], List[Digest]]:
    """
    Sample ``count`` private keys and derive their public keys.

    Returns:
        (private_keys, public_keys), index-aligned
    """
    if count < 0:
        raise ValueError(f"count must be non-negative, got {count}")
    private_keys = [generate_private_key(hasher.field, rng) for _ in range(count)]
    public_keys = [derive_public_key(sk, hasher) for sk in private_keys]
    return private_keys, public_keys
