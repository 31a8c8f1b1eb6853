"""
Poseidon hash over a prime field (Goldilocks by default).

Permutation
-----------
State of ``width`` field elements. ``full_rounds / 2`` full rounds, then
``partial_rounds`` partial rounds, then ``full_rounds / 2`` full rounds.
Each round: add round constants, S-box ``x^alpha`` (all lanes in full rounds,
lane 0 only in partial rounds), then the MDS layer

    new[r] = sum_i state[(i + r) % width] * circ[i] + state[r] * diag[r]

Sponge
------
Overwrite mode, no padding: every ``rate``-element chunk overwrites the
front of the state and is followed by one permutation. The digest is the
first DIGEST_LENGTH state elements. Empty input therefore hashes to the zero
digest.

Parameters are data (``PoseidonParams``), so the same code serves the
default Goldilocks instance and small toy fields in tests. Round constants
are expanded from a public seed; they are not interchangeable with other
Poseidon deployments.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from functools import lru_cache
from typing import List, Sequence, Tuple

import cbor2

from .config import (
    DIGEST_LENGTH,
    DOMAIN_SEPARATORS,
    HASH_NAME,
    POSEIDON_ALPHA,
    POSEIDON_CONSTANTS_SEED,
    POSEIDON_FULL_ROUNDS,
    POSEIDON_MDS_CIRC,
    POSEIDON_MDS_DIAG,
    POSEIDON_PARTIAL_ROUNDS,
    POSEIDON_RATE,
    POSEIDON_WIDTH,
)
from .field import GOLDILOCKS, PrimeField
from .interfaces import Hasher
from .security import expand_field_elements, transcript_hash
from .types import Digest

# ---------------------------
# Parameters
# ---------------------------


@dataclass(frozen=True)
class PoseidonParams:
    field: PrimeField
    width: int
    rate: int
    full_rounds: int  # R_F, split half before / half after
    partial_rounds: int  # R_P
    alpha: int  # S-box exponent
    mds_circ: Tuple[int, ...]
    mds_diag: Tuple[int, ...]
    round_constants: Tuple[int, ...]  # flat, (R_F + R_P) * width

    @property
    def num_rounds(self) -> int:
        return self.full_rounds + self.partial_rounds

    def validate(self) -> None:
        if self.width < 2:
            raise ValueError("width must be >= 2")
        if not DIGEST_LENGTH <= self.rate < self.width:
            raise ValueError(
                f"rate must be in [{DIGEST_LENGTH}, width), got {self.rate}"
            )
        if self.width - self.rate < 1:
            raise ValueError("capacity must be at least one element")
        if self.full_rounds % 2 != 0:
            raise ValueError(
                "full_rounds must be even (split half-before/after partial rounds)"
            )
        if self.alpha < 3:
            raise ValueError("alpha must be >= 3")
        if math.gcd(self.alpha, self.field.modulus - 1) != 1:
            raise ValueError(
                f"alpha={self.alpha} is not a permutation of {self.field!r} "
                "(gcd(alpha, p - 1) != 1)"
            )
        if len(self.mds_circ) != self.width or len(self.mds_diag) != self.width:
            raise ValueError("mds_circ and mds_diag must have width entries")
        expected = self.num_rounds * self.width
        if len(self.round_constants) != expected:
            raise ValueError(
                f"round_constants must have (R_F+R_P)*width = {expected} entries"
            )
        if not all(self.field.is_canonical(c) for c in self.round_constants):
            raise ValueError("round constants must be canonical field elements")

    @classmethod
    def derive(
        cls,
        field: PrimeField = GOLDILOCKS,
        *,
        width: int = POSEIDON_WIDTH,
        rate: int = POSEIDON_RATE,
        full_rounds: int = POSEIDON_FULL_ROUNDS,
        partial_rounds: int = POSEIDON_PARTIAL_ROUNDS,
        alpha: int = POSEIDON_ALPHA,
        mds_circ: Sequence[int] = POSEIDON_MDS_CIRC,
        mds_diag: Sequence[int] = POSEIDON_MDS_DIAG,
        seed: bytes = POSEIDON_CONSTANTS_SEED,
    ) -> "PoseidonParams":
        """
        Build a parameter set, expanding round constants from ``seed``.

        The seed is bound to the field modulus and width so two fields never
        share a constant stream.
        """
        rc_seed = b"%s|%d|%d" % (seed, field.modulus, width)
        params = cls(
            field=field,
            width=width,
            rate=rate,
            full_rounds=full_rounds,
            partial_rounds=partial_rounds,
            alpha=alpha,
            mds_circ=tuple(field.reduce(x) for x in mds_circ),
            mds_diag=tuple(field.reduce(x) for x in mds_diag),
            round_constants=tuple(
                expand_field_elements(
                    rc_seed, (full_rounds + partial_rounds) * width, field.modulus
                )
            ),
        )
        params.validate()
        return params


@lru_cache(maxsize=1)
def default_params() -> PoseidonParams:
    """Goldilocks parameter set (cached; derivation hashes ~3KB of SHAKE output)."""
    return PoseidonParams.derive(GOLDILOCKS)


# ---------------------------
# Permutation
# ---------------------------


def poseidon_permute(state: Sequence[int], params: PoseidonParams) -> List[int]:
    """Apply the Poseidon permutation to ``state`` (length ``params.width``)."""
    width = params.width
    if len(state) != width:
        raise ValueError(f"state must have {width} elements, got {len(state)}")

    p = params.field.modulus
    alpha = params.alpha
    circ = params.mds_circ
    diag = params.mds_diag
    rc = params.round_constants
    half_full = params.full_rounds // 2
    partial_end = half_full + params.partial_rounds

    s = [x % p for x in state]
    for rnd in range(params.num_rounds):
        base = rnd * width
        s = [(s[i] + rc[base + i]) % p for i in range(width)]
        if rnd < half_full or rnd >= partial_end:
            s = [pow(x, alpha, p) for x in s]
        else:
            s[0] = pow(s[0], alpha, p)
        s = [
            (
                sum(s[(i + r) % width] * circ[i] for i in range(width))
                + s[r] * diag[r]
            )
            % p
            for r in range(width)
        ]
    return s


# ---------------------------
# Hasher
# ---------------------------


class PoseidonHash(Hasher):
    """
    Poseidon sponge as a ``Hasher`` capability.

    Example:
        >>> h = PoseidonHash()
        >>> h.hash_no_pad([1, 2, 3, 4, 0, 0, 0, 0])  # doctest: +SKIP
    """

    def __init__(self, params: PoseidonParams | None = None) -> None:
        self.params = params if params is not None else default_params()
        self.params.validate()
        self.field = self.params.field
        if self.field == GOLDILOCKS:
            self.name = HASH_NAME
        else:
            self.name = f"poseidon-{self.field.modulus}"
        self._fingerprint: bytes | None = None

    def __repr__(self) -> str:
        return f"PoseidonHash({self.name})"

    def permute(self, state: Sequence[int]) -> List[int]:
        return poseidon_permute(state, self.params)

    def hash_no_pad(self, inputs: Sequence[int]) -> Digest:
        rate = self.params.rate
        state = [0] * self.params.width
        for start in range(0, len(inputs), rate):
            chunk = inputs[start: start + rate]
            for i, value in enumerate(chunk):
                if not self.field.is_canonical(value):
                    raise ValueError(f"hash input {value!r} is not in {self.field!r}")
                state[i] = value
            state = poseidon_permute(state, self.params)
        return tuple(state[:DIGEST_LENGTH])

    def fingerprint(self) -> bytes:
        if self._fingerprint is None:
            p = self.params
            encoded = cbor2.dumps(
                [
                    self.name,
                    p.field.modulus,
                    p.width,
                    p.rate,
                    p.full_rounds,
                    p.partial_rounds,
                    p.alpha,
                    list(p.mds_circ),
                    list(p.mds_diag),
                    list(p.round_constants),
                ]
            )
            self._fingerprint = transcript_hash(
                DOMAIN_SEPARATORS["hasher_fingerprint"], [encoded]
            )
        return self._fingerprint
