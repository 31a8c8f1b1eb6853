"""
Unit tests for digests, target handles and Signal serialization.
"""

import cbor2
import pytest

from semaphore_protocol.config import GOLDILOCKS_MODULUS, PROOF_VERSION
from semaphore_protocol.exceptions import SerializationError
from semaphore_protocol.field import GOLDILOCKS
from semaphore_protocol.reference.backend import ReferenceBackend
from semaphore_protocol.reference.circuit_data import Proof
from semaphore_protocol.types import (
    ZERO_DIGEST,
    HashTarget,
    Signal,
    Target,
    as_digest,
    digest_from_hex,
    digest_to_hex,
)


class TestDigest:
    def test_as_digest_normalizes_to_tuple(self):
        assert as_digest([1, 2, 3, 4]) == (1, 2, 3, 4)

    def test_wrong_width(self):
        with pytest.raises(ValueError):
            as_digest([1, 2, 3])
        with pytest.raises(ValueError):
            as_digest([1, 2, 3, 4, 5])

    def test_non_int_elements(self):
        with pytest.raises(TypeError):
            as_digest([1, 2, 3, "4"])
        with pytest.raises(TypeError):
            as_digest([1, 2, 3, True])

    def test_not_iterable(self):
        with pytest.raises(TypeError):
            as_digest(5)

    def test_negative(self):
        with pytest.raises(ValueError):
            as_digest([1, 2, 3, -4])

    def test_field_range(self):
        assert as_digest([0, 0, 0, GOLDILOCKS_MODULUS - 1], GOLDILOCKS)
        with pytest.raises(ValueError):
            as_digest([0, 0, 0, GOLDILOCKS_MODULUS], GOLDILOCKS)

    def test_hex_encoding(self):
        digest = (1, 2, GOLDILOCKS_MODULUS - 1, 0)
        text = digest_to_hex(digest)
        assert len(text) == 64
        assert text.startswith("0100000000000000")
        assert digest_from_hex(text) == digest

    def test_hex_rejects_bad_input(self):
        with pytest.raises(ValueError):
            digest_from_hex("zz")
        with pytest.raises(ValueError):
            digest_from_hex("00" * 31)
        with pytest.raises(ValueError):
            digest_from_hex("ff" * 32, GOLDILOCKS)

    def test_zero_digest(self):
        assert ZERO_DIGEST == (0, 0, 0, 0)


class TestTargets:
    def test_hash_target_width(self):
        HashTarget(tuple(Target(i) for i in range(4)))
        with pytest.raises(ValueError):
            HashTarget((Target(0),))

    def test_targets_hashable(self):
        assert {Target(1), Target(1)} == {Target(1)}


class TestSignalSerialization:
    def _signal(self):
        return Signal(
            nullifier=(1, 2, 3, 4), proof=Proof(nonce=b"\x01" * 32, tag=b"\x02" * 32)
        )

    def test_roundtrip(self):
        signal = self._signal()
        restored = Signal.deserialize(signal.serialize(), backend=ReferenceBackend())
        assert restored == signal

    def test_default_backend(self):
        signal = self._signal()
        assert Signal.deserialize(signal.serialize()) == signal

    def test_cbor_layout(self):
        obj = cbor2.loads(self._signal().serialize())
        assert obj["v"] == PROOF_VERSION
        assert obj["n"] == [1, 2, 3, 4]
        assert isinstance(obj["p"], bytes)

    def test_to_dict(self):
        data = self._signal().to_dict()
        assert data["nullifier"] == digest_to_hex((1, 2, 3, 4))
        assert isinstance(data["proof"], str)

    def test_proof_without_to_bytes(self):
        with pytest.raises(SerializationError):
            Signal(nullifier=(1, 2, 3, 4), proof=object()).serialize()

    def test_invalid_cbor(self):
        with pytest.raises(SerializationError):
            Signal.deserialize(b"\xff\xff")

    def test_not_bytes(self):
        with pytest.raises(SerializationError):
            Signal.deserialize("data")

    def test_missing_fields(self):
        with pytest.raises(SerializationError, match="missing"):
            Signal.deserialize(cbor2.dumps({"v": PROOF_VERSION}))

    def test_wrong_version(self):
        data = cbor2.dumps({"v": 99, "n": [1, 2, 3, 4], "p": b""})
        with pytest.raises(SerializationError, match="version"):
            Signal.deserialize(data)

    def test_bad_nullifier(self):
        data = cbor2.dumps({"v": PROOF_VERSION, "n": [1, 2], "p": b""})
        with pytest.raises(SerializationError, match="nullifier"):
            Signal.deserialize(data)

    def test_bad_proof_bytes(self):
        data = cbor2.dumps({"v": PROOF_VERSION, "n": [1, 2, 3, 4], "p": b"\x00"})
        with pytest.raises(SerializationError):
            Signal.deserialize(data)

    def test_oversized(self):
        with pytest.raises(SerializationError, match="too large"):
            Signal.deserialize(b"\x00" * (64 * 1024 + 1))
