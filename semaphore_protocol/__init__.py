"""Public API for semaphore_protocol.

Anonymous signalling by members of a committed set of public keys, with
per-topic nullifiers for double-signal detection.
"""
from __future__ import annotations

from importlib import import_module

from .access_set import AccessSet
from .exceptions import (
    ConfigurationError,
    IndexOutOfRangeError,
    InvalidSetSizeError,
    ProofConstructionError,
    SemaphoreError,
    SerializationError,
    UnsatisfiedConstraintError,
    VerificationError,
)
from .factory import get_proving_backend
from .feature_flags import get_backend_type, set_backend_type
from .field import GOLDILOCKS, PrimeField
from .interfaces import (
    ConstraintSystem,
    ConstraintSystemBuilder,
    Hasher,
    PartialWitness,
    ProvingBackend,
    VerifierArtifact,
)
from .keys import (
    derive_nullifier,
    derive_public_key,
    generate_keypairs,
    generate_private_key,
)
from .poseidon import PoseidonHash
from .protocol import SignalProtocol, make_signal, public_input_vector, verify_signal
from .types import ZERO_DIGEST, Digest, ProofWithPublicInputs, Signal

__version__ = "0.1.0"

__all__ = [
    "AccessSet",
    "Signal",
    "SignalProtocol",
    "make_signal",
    "verify_signal",
    "public_input_vector",
    "generate_private_key",
    "derive_public_key",
    "derive_nullifier",
    "generate_keypairs",
    "PoseidonHash",
    "PrimeField",
    "GOLDILOCKS",
    "Digest",
    "ZERO_DIGEST",
    "ProofWithPublicInputs",
    "get_proving_backend",
    "get_backend_type",
    "set_backend_type",
    "Hasher",
    "ConstraintSystem",
    "ConstraintSystemBuilder",
    "PartialWitness",
    "ProvingBackend",
    "VerifierArtifact",
    "SemaphoreError",
    "InvalidSetSizeError",
    "IndexOutOfRangeError",
    "ProofConstructionError",
    "UnsatisfiedConstraintError",
    "VerificationError",
    "ConfigurationError",
    "SerializationError",
    "ReferenceBackend",
    "semaphore_circuit",
]

_LAZY_EXPORTS = {
    "ReferenceBackend": "reference.backend",
    "semaphore_circuit": "circuit",
}


def __getattr__(name: str):
    if name in _LAZY_EXPORTS:
        module = import_module(f"{__name__}.{_LAZY_EXPORTS[name]}")
        value = getattr(module, name)
        globals()[name] = value
        return value
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
