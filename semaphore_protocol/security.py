"""
⚠️ DRAFT — requires crypto review before production use

Security utilities for randomness, transcripts and parameter derivation.

This is a PROTOTYPE implementation for testing and validation.
DO NOT use in production without security audit.
"""

import os
import secrets
import hashlib
import hmac
from typing import Iterable, List

from .config import TRANSCRIPT_HASH


# ============================================================================
# RANDOMNESS SOURCE (Fork-Safe)
# ============================================================================


class RandomnessSource:
    """
    Cryptographically secure randomness with fork detection.

    Prevents catastrophic randomness reuse if process forks. Exposes
    ``randrange`` so it can be passed anywhere a ``random.Random`` is
    accepted (e.g. ``PrimeField.sample``).

    Example:
        >>> rng = RandomnessSource()
        >>> value = rng.randrange(0, 97)
        >>> # After fork, RNG automatically reinitializes
    """

    def __init__(self):
        """Initialize randomness source with fork detection."""
        self._pid = os.getpid()
        self._rng = secrets.SystemRandom()

    def _check_fork(self) -> None:
        if os.getpid() != self._pid:
            self.__init__()

    def randrange(self, start: int, stop: int) -> int:
        """
        Get random integer in [start, stop).

        Args:
            start: Lower bound (inclusive)
            stop: Upper bound (exclusive)

        Returns:
            Random integer in [start, stop)
        """
        self._check_fork()
        return self._rng.randrange(start, stop)

    def get_random_bytes(self, n: int) -> bytes:
        """
        Get n cryptographically secure random bytes.

        Args:
            n: Number of bytes to generate

        Returns:
            n random bytes
        """
        self._check_fork()
        return secrets.token_bytes(n)


# ============================================================================
# HASH FUNCTIONS
# ============================================================================


def transcript_hash(domain_sep: bytes, parts: Iterable[bytes]) -> bytes:
    """
    Hash a sequence of byte strings with domain separation.

    Every part is length-prefixed (4-byte big endian) so that different
    splits of the same concatenation never collide.

    Args:
        domain_sep: Domain separator (must be non-empty)
        parts: Byte strings to absorb in order

    Returns:
        32-byte digest

    Raises:
        TypeError: If a part is not bytes
        ValueError: If domain separator is empty
    """
    if not isinstance(domain_sep, bytes):
        raise TypeError(f"domain_sep must be bytes, got {type(domain_sep)}")
    if not domain_sep:
        raise ValueError("Domain separator cannot be empty")

    h = hashlib.sha3_256() if TRANSCRIPT_HASH == "SHA3-256" else hashlib.sha256()

    h.update(len(domain_sep).to_bytes(4, "big"))
    h.update(domain_sep)

    for part in parts:
        if not isinstance(part, bytes):
            raise TypeError(f"transcript parts must be bytes, got {type(part)}")
        h.update(len(part).to_bytes(4, "big"))
        h.update(part)

    return h.digest()


def expand_field_elements(seed: bytes, count: int, modulus: int) -> List[int]:
    """
    Derive ``count`` field elements from a public seed (nothing-up-my-sleeve).

    Reads 8-byte little-endian words from SHAKE-256(seed) and keeps those
    below ``modulus`` (rejection sampling, no modular bias). Moduli above
    2^64 are not supported.

    Args:
        seed: Public seed bytes
        count: Number of elements to produce
        modulus: Field modulus (2 < modulus <= 2^64)

    Returns:
        List of ``count`` canonical field elements

    Raises:
        ValueError: If modulus or count is out of range
    """
    if not 2 < modulus <= 2**64:
        raise ValueError(f"modulus must be in (2, 2^64], got {modulus}")
    if count < 0:
        raise ValueError(f"count must be non-negative, got {count}")

    out: List[int] = []
    # Over-provision; most words are accepted for Goldilocks-sized moduli
    buffer_words = max(2 * count, 16)
    counter = 0
    while len(out) < count:
        stream = hashlib.shake_256(
            seed + counter.to_bytes(4, "big")
        ).digest(8 * buffer_words)
        for i in range(buffer_words):
            word = int.from_bytes(stream[8 * i: 8 * i + 8], "little")
            word &= (1 << modulus.bit_length()) - 1
            if word < modulus:
                out.append(word)
                if len(out) == count:
                    break
        counter += 1
    return out


# ============================================================================
# CONSTANT-TIME OPERATIONS
# ============================================================================


def constant_time_compare(a: bytes, b: bytes) -> bool:
    """
    Constant-time comparison to prevent timing attacks.

    Args:
        a: First byte string
        b: Second byte string

    Returns:
        True if a == b, False otherwise
    """
    return hmac.compare_digest(a, b)
