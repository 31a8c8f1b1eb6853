"""
⚠️ DRAFT — requires crypto review before production use

Common types for Semaphore signals.

This module provides:
1. Digest helpers - fixed-width (4 element) field vectors
2. Target handles - backend-neutral references to circuit variables
3. ProofWithPublicInputs - proof paired with the vector it was made for
4. Signal - nullifier + proof, with CBOR serialization
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Sequence, Tuple

try:
    import cbor2
except ImportError:
    raise ImportError(
        "cbor2 is required for signal serialization. "
        "Install with: pip install cbor2"
    )

from .config import (
    DIGEST_LENGTH,
    FIELD_ELEMENT_BYTES,
    MAX_SERIALIZED_SIGNAL_BYTES,
    PROOF_VERSION,
)
from .exceptions import SerializationError

# ============================================================================
# DIGESTS
# ============================================================================

Digest = Tuple[int, int, int, int]

ZERO_DIGEST: Digest = (0,) * DIGEST_LENGTH


def as_digest(values: Iterable[int], field=None) -> Digest:
    """
    Validate and normalize a digest.

    Args:
        values: Exactly DIGEST_LENGTH ints
        field: Optional PrimeField; when given, every element must be
            canonical in it

    Returns:
        Digest tuple

    Raises:
        ValueError: If width or element range is wrong
        TypeError: If elements are not ints
    """
    try:
        digest = tuple(values)
    except TypeError as exc:
        raise TypeError("digest must be an iterable of ints") from exc

    if len(digest) != DIGEST_LENGTH:
        raise ValueError(
            f"digest must have exactly {DIGEST_LENGTH} elements, got {len(digest)}"
        )
    for element in digest:
        if not isinstance(element, int) or isinstance(element, bool):
            raise TypeError(f"digest elements must be int, got {type(element)}")
        if element < 0:
            raise ValueError("digest elements must be non-negative")
        if field is not None and not field.is_canonical(element):
            raise ValueError(f"digest element {element} is not in {field!r}")
    return digest


def digest_to_hex(digest: Sequence[int]) -> str:
    """Encode a digest as 4 little-endian 8-byte limbs (64 hex chars)."""
    digest = as_digest(digest)
    return b"".join(
        element.to_bytes(FIELD_ELEMENT_BYTES, "little") for element in digest
    ).hex()


def digest_from_hex(text: str, field=None) -> Digest:
    """Inverse of digest_to_hex."""
    try:
        raw = bytes.fromhex(text.strip())
    except ValueError as exc:
        raise ValueError(f"invalid digest hex: {exc}") from exc
    if len(raw) != DIGEST_LENGTH * FIELD_ELEMENT_BYTES:
        raise ValueError(
            f"digest hex must encode {DIGEST_LENGTH * FIELD_ELEMENT_BYTES} bytes"
        )
    return as_digest(
        (
            int.from_bytes(raw[i: i + FIELD_ELEMENT_BYTES], "little")
            for i in range(0, len(raw), FIELD_ELEMENT_BYTES)
        ),
        field,
    )


# ============================================================================
# CIRCUIT TARGETS
# ============================================================================


@dataclass(frozen=True)
class Target:
    """Handle to one field-element variable of a constraint system."""

    index: int


@dataclass(frozen=True)
class BoolTarget:
    """Target constrained to 0 or 1."""

    target: Target


@dataclass(frozen=True)
class HashTarget:
    """DIGEST_LENGTH targets holding a digest."""

    elements: Tuple[Target, ...]

    def __post_init__(self) -> None:
        if len(self.elements) != DIGEST_LENGTH:
            raise ValueError(
                f"HashTarget needs {DIGEST_LENGTH} targets, got {len(self.elements)}"
            )


@dataclass(frozen=True)
class MerkleCapTarget:
    hashes: Tuple[HashTarget, ...]


@dataclass(frozen=True)
class MerkleProofTarget:
    siblings: Tuple[HashTarget, ...]


# ============================================================================
# PROOFS AND SIGNALS
# ============================================================================


@dataclass(frozen=True)
class ProofWithPublicInputs:
    """A backend proof together with the public-input vector it attests."""

    proof: Any
    public_inputs: Tuple[int, ...]


@dataclass(frozen=True)
class Signal:
    """
    Anonymous signal: nullifier plus membership/nullifier proof.

    The proof object is opaque and backend specific; it must expose
    ``to_bytes()`` for serialization.

    Example:
        >>> data = signal.serialize()
        >>> restored = Signal.deserialize(data)
        >>> assert restored.nullifier == signal.nullifier
    """

    nullifier: Digest
    proof: Any

    def serialize(self) -> bytes:
        """
        Serialize signal to bytes using CBOR.

        Returns:
            bytes: CBOR-encoded signal

        Raises:
            SerializationError: If the proof cannot be encoded
        """
        to_bytes = getattr(self.proof, "to_bytes", None)
        if not callable(to_bytes):
            raise SerializationError("signal proof does not support to_bytes()")
        try:
            data = {
                "v": PROOF_VERSION,
                "n": list(self.nullifier),
                "p": to_bytes(),
            }
            return cbor2.dumps(data)
        except SerializationError:
            raise
        except Exception as e:
            raise SerializationError(f"Failed to serialize signal: {e}") from e

    @classmethod
    def deserialize(cls, data: bytes, backend=None) -> "Signal":
        """
        Deserialize signal from CBOR bytes.

        Args:
            data: CBOR-encoded signal
            backend: ProvingBackend used to decode the proof (defaults to the
                backend selected by feature flags)

        Returns:
            Signal

        Raises:
            SerializationError: If data is malformed or version unsupported
        """
        if not isinstance(data, (bytes, bytearray)):
            raise SerializationError("signal data must be bytes")
        if len(data) > MAX_SERIALIZED_SIGNAL_BYTES:
            raise SerializationError("signal data too large")
        try:
            obj = cbor2.loads(bytes(data))
        except Exception as e:
            raise SerializationError(f"Failed to deserialize signal: {e}") from e

        if not isinstance(obj, dict) or "n" not in obj or "p" not in obj:
            raise SerializationError("Invalid signal format: missing required fields")

        version = obj.get("v")
        if version != PROOF_VERSION:
            raise SerializationError(
                f"Unsupported signal version: {version} (expected {PROOF_VERSION})"
            )

        try:
            nullifier = as_digest(obj["n"])
        except (TypeError, ValueError) as e:
            raise SerializationError(f"Invalid nullifier: {e}") from e

        if not isinstance(obj["p"], bytes):
            raise SerializationError("Invalid signal format: proof must be bytes")

        if backend is None:
            from .factory import get_proving_backend

            backend = get_proving_backend()
        proof = backend.proof_from_bytes(obj["p"])
        return cls(nullifier=nullifier, proof=proof)

    def to_dict(self) -> dict:
        """JSON-compatible view; proof bytes are hex-encoded."""
        to_bytes = getattr(self.proof, "to_bytes", None)
        return {
            "nullifier": digest_to_hex(self.nullifier),
            "proof": to_bytes().hex() if callable(to_bytes) else None,
        }

