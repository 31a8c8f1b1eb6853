"""
⚠️ DRAFT — requires crypto review before production use

Protocol configuration for Semaphore signalling.

This is a PROTOTYPE implementation for testing and validation.
DO NOT use in production without security audit.

All values here are structural: changing any of them changes every public
key, nullifier, tree root and circuit digest derived by this package.
"""

# ============================================================================
# FIELD SELECTION
# ============================================================================

# IMPLEMENTATION: Goldilocks prime field p = 2^64 - 2^32 + 1
# - 64-bit elements, fast reduction on real backends
# - p - 1 = 2^32 * 3 * 5 * 17 * 257 * 65537 (large 2-adic subgroup)
# - Native field of the plonky2 family of provers

FIELD_NAME = "goldilocks"
GOLDILOCKS_MODULUS = 2**64 - 2**32 + 1
FIELD_ELEMENT_BYTES = 8

# Keys, hashes, topics and nullifiers are all 4 field elements wide
DIGEST_LENGTH = 4

# ============================================================================
# HASH FUNCTION (Poseidon over Goldilocks)
# ============================================================================

HASH_NAME = "poseidon-goldilocks"

POSEIDON_WIDTH = 12
POSEIDON_RATE = 8
POSEIDON_CAPACITY = POSEIDON_WIDTH - POSEIDON_RATE
POSEIDON_FULL_ROUNDS = 8  # split 4 before / 4 after the partial rounds
POSEIDON_PARTIAL_ROUNDS = 22
POSEIDON_ALPHA = 7  # smallest exponent coprime to p - 1

# Circulant MDS matrix plus diagonal correction
POSEIDON_MDS_CIRC = (17, 15, 41, 16, 2, 28, 13, 13, 39, 18, 34, 20)
POSEIDON_MDS_DIAG = (8, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0)

# Round constants are expanded from this seed with SHAKE-256
POSEIDON_CONSTANTS_SEED = b"SEMAPHORE_V1_POSEIDON_ROUND_CONSTANTS"

# ============================================================================
# ACCESS SET
# ============================================================================

# Number of top tree levels published as the commitment ("cap").
# 0 publishes only the root; h publishes 2^h digests and shortens every
# authentication path by h siblings.
DEFAULT_CAP_HEIGHT = 0

# Leaf indices must fit in a single field element bit decomposition
MAX_TREE_HEIGHT = 32

# ============================================================================
# PROOF TRANSCRIPT
# ============================================================================

TRANSCRIPT_HASH = "SHA3-256"
TRANSCRIPT_NONCE_BYTES = 32

DOMAIN_SEPARATOR_PREFIX = b"SEMAPHORE_V1_"

DOMAIN_SEPARATORS = {
    "circuit_digest": DOMAIN_SEPARATOR_PREFIX + b"CIRCUIT",
    "proof_transcript": DOMAIN_SEPARATOR_PREFIX + b"TRANSCRIPT",
    "hasher_fingerprint": DOMAIN_SEPARATOR_PREFIX + b"HASHER",
}

# ============================================================================
# SERIALIZATION
# ============================================================================

SERIALIZATION_FORMAT = "CBOR"
PROOF_VERSION = 1  # Increment for breaking changes

MAX_SERIALIZED_SIGNAL_BYTES = 64 * 1024

# ============================================================================
# VALIDATION
# ============================================================================


def validate_config() -> bool:
    """
    Validate configuration parameters.

    Returns:
        True if configuration is valid

    Raises:
        AssertionError: If configuration is invalid
    """
    assert GOLDILOCKS_MODULUS == 0xFFFFFFFF00000001, "Unexpected field modulus"
    assert DIGEST_LENGTH == 4, "Digest width is fixed at 4 field elements"
    assert POSEIDON_RATE + POSEIDON_CAPACITY == POSEIDON_WIDTH
    assert POSEIDON_RATE >= 2 * DIGEST_LENGTH, "Rate must absorb two digests"
    assert POSEIDON_CAPACITY >= DIGEST_LENGTH, "Capacity too small for output"
    assert POSEIDON_FULL_ROUNDS % 2 == 0, "Full rounds are split in halves"
    assert len(POSEIDON_MDS_CIRC) == POSEIDON_WIDTH
    assert len(POSEIDON_MDS_DIAG) == POSEIDON_WIDTH
    assert 0 <= DEFAULT_CAP_HEIGHT <= MAX_TREE_HEIGHT
    assert 2**MAX_TREE_HEIGHT < GOLDILOCKS_MODULUS, "Leaf index must fit in field"
    assert TRANSCRIPT_HASH in ["SHA3-256"], "Invalid transcript hash"
    assert TRANSCRIPT_NONCE_BYTES >= 16, "Transcript nonce too short"
    assert SERIALIZATION_FORMAT == "CBOR", "Only CBOR serialization supported"

    return True


# Auto-validate on import
validate_config()
