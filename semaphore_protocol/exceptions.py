"""
⚠️ DRAFT — requires crypto review before production use

Custom exceptions for the Semaphore protocol.

These exceptions provide structured error handling for access set
construction, proving and verification. Verification failures are
deliberately collapsed into a single type so callers cannot tell a forged
proof from mismatched public inputs.
"""


class SemaphoreError(Exception):
    """Base exception for Semaphore protocol errors."""

    pass


class InvalidSetSizeError(SemaphoreError, ValueError):
    """Access set leaf count is zero or not a power of two."""

    pass


class IndexOutOfRangeError(SemaphoreError, IndexError):
    """Leaf index outside [0, leaf_count)."""

    pass


class ProofConstructionError(SemaphoreError):
    """The backend could not produce a proof for the given witness."""

    pass


class UnsatisfiedConstraintError(ProofConstructionError):
    """A constraint of the circuit does not hold under the witness."""

    pass


class VerificationError(SemaphoreError):
    """Signal rejected (bad proof, tampered inputs or wrong verifier data)."""

    pass


class ConfigurationError(SemaphoreError):
    """Configuration error."""

    pass


class SerializationError(SemaphoreError):
    """Malformed or unsupported serialized data."""

    pass
