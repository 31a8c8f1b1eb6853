"""
⚠️ DRAFT — requires crypto review before production use

Tests for Semaphore signal creation and verification.

Covers completeness over every member position, soundness against altered
public inputs and artifacts, nullifier behaviour and index independence.
"""

import logging
import os
import random
from dataclasses import replace

import pytest

from semaphore_protocol.access_set import AccessSet
from semaphore_protocol.config import TRANSCRIPT_NONCE_BYTES
from semaphore_protocol.exceptions import (
    ConfigurationError,
    IndexOutOfRangeError,
    ProofConstructionError,
    VerificationError,
)
from semaphore_protocol.field import GOLDILOCKS
from semaphore_protocol.keys import derive_nullifier, generate_keypairs
from semaphore_protocol.protocol import (
    SignalProtocol,
    make_signal,
    public_input_vector,
    verify_signal,
)
from semaphore_protocol.reference.backend import ReferenceBackend
from semaphore_protocol.reference.circuit_data import (
    Proof,
    VerifierCircuitData,
    _transcript_tag,
)
from semaphore_protocol.types import Signal

TOPIC = (101, 202, 303, 404)
OTHER_TOPIC = (505, 606, 707, 808)


@pytest.fixture(scope="module")
def protocol():
    return SignalProtocol(backend=ReferenceBackend())


class TestCompleteness:
    @pytest.mark.parametrize(
        "height,cap_height",
        [(0, 0), (1, 0), (1, 1), (2, 0), (2, 1), (3, 0), (3, 2), (3, 3)],
    )
    def test_every_member_can_signal(self, protocol, make_members, height, cap_height):
        sks, _, access_set = make_members(height, cap_height)
        for i, sk in enumerate(sks):
            signal, vd = protocol.make_signal(access_set, sk, TOPIC, i)
            assert signal.nullifier == derive_nullifier(sk, TOPIC, access_set.hasher)
            protocol.verify_signal(access_set, TOPIC, signal, vd)

    def test_module_level_functions(self, make_members):
        sks, _, access_set = make_members(2)
        signal, vd = make_signal(access_set, sks[1], TOPIC, 1)
        verify_signal(access_set, TOPIC, signal, vd)

    def test_serialized_signal_verifies(self, protocol, make_members):
        sks, _, access_set = make_members(2)
        signal, vd = protocol.make_signal(access_set, sks[3], TOPIC, 3)
        restored = Signal.deserialize(signal.serialize(), backend=protocol.backend)
        restored_vd = protocol.backend.verifier_data_from_bytes(vd.to_bytes())
        protocol.verify_signal(access_set, TOPIC, restored, restored_vd)

    def test_verifier_data_without_signal(self, protocol, make_members):
        sks, _, access_set = make_members(2)
        signal, vd = protocol.make_signal(access_set, sks[0], TOPIC, 0)
        assert protocol.verifier_data(access_set) == vd

    def test_toy_field(self, toy_hasher):
        sks, pks = generate_keypairs(4, toy_hasher, random.Random(8))
        access_set = AccessSet.build(pks, hasher=toy_hasher)
        protocol = SignalProtocol(backend=ReferenceBackend(), hasher=toy_hasher)
        signal, vd = protocol.make_signal(access_set, sks[2], (1, 2, 3, 4), 2)
        protocol.verify_signal(access_set, (1, 2, 3, 4), signal, vd)


class TestSoundness:
    @pytest.fixture(scope="class")
    def signed(self, make_members):
        sks, _, access_set = make_members(3)
        protocol = SignalProtocol(backend=ReferenceBackend())
        signal, vd = protocol.make_signal(access_set, sks[5], TOPIC, 5)
        return protocol, access_set, signal, vd

    def test_valid_signal_accepted(self, signed):
        protocol, access_set, signal, vd = signed
        protocol.verify_signal(access_set, TOPIC, signal, vd)

    def test_other_topic_rejected(self, signed):
        protocol, access_set, signal, vd = signed
        with pytest.raises(VerificationError):
            protocol.verify_signal(access_set, OTHER_TOPIC, signal, vd)

    @pytest.mark.parametrize("position", range(4))
    def test_altered_nullifier_rejected(self, signed, position):
        protocol, access_set, signal, vd = signed
        nullifier = list(signal.nullifier)
        nullifier[position] = GOLDILOCKS.add(nullifier[position], 1)
        forged = Signal(nullifier=tuple(nullifier), proof=signal.proof)
        with pytest.raises(VerificationError):
            protocol.verify_signal(access_set, TOPIC, forged, vd)

    def test_other_access_set_rejected(self, signed, make_members):
        protocol, _, signal, vd = signed
        _, _, other_set = make_members(3, 0, seed=999)
        with pytest.raises(VerificationError):
            protocol.verify_signal(other_set, TOPIC, signal, vd)

    def test_other_height_rejected(self, signed, make_members):
        protocol, _, signal, vd = signed
        _, _, smaller = make_members(2)
        with pytest.raises(VerificationError):
            protocol.verify_signal(smaller, TOPIC, signal, vd)

    def test_same_root_other_height_rejected(self, signed):
        protocol, access_set, signal, vd = signed
        # Level-1 nodes form a height-2 set under the same root
        inner = AccessSet.build(access_set.tree._layers[1], hasher=access_set.hasher)
        assert inner.height() == 2
        assert inner.root_commitment() == access_set.root_commitment()
        with pytest.raises(VerificationError, match="does not match the access set"):
            protocol.verify_signal(inner, TOPIC, signal, vd)

    def test_other_artifact_rejected(self, signed, make_members):
        protocol, access_set, signal, _ = signed
        _, _, smaller = make_members(2)
        other_vd = protocol.verifier_data(smaller)
        with pytest.raises(VerificationError):
            protocol.verify_signal(access_set, TOPIC, signal, other_vd)

    def test_tampered_artifact_rejected(self, signed):
        protocol, access_set, signal, vd = signed
        tampered = replace(vd, circuit_digest=bytes(32))
        with pytest.raises(VerificationError):
            protocol.verify_signal(access_set, TOPIC, signal, tampered)

    def test_tampered_proof_rejected(self, signed):
        protocol, access_set, signal, vd = signed
        forged = Signal(
            nullifier=signal.nullifier,
            proof=replace(signal.proof, tag=bytes(len(signal.proof.tag))),
        )
        with pytest.raises(VerificationError):
            protocol.verify_signal(access_set, TOPIC, forged, vd)

    def test_proof_of_wrong_type_rejected(self, signed):
        protocol, access_set, signal, vd = signed
        forged = Signal(nullifier=signal.nullifier, proof=b"not a proof")
        with pytest.raises(VerificationError):
            protocol.verify_signal(access_set, TOPIC, forged, vd)

    @pytest.mark.parametrize(
        "topic", [(1, 2, 3), (1, 2, 3, 4, 5), (1, 2, 3, -1), (1, 2, 3, 2**64)]
    )
    def test_malformed_topic_rejected(self, signed, topic):
        protocol, access_set, signal, vd = signed
        with pytest.raises(VerificationError):
            protocol.verify_signal(access_set, topic, signal, vd)

    def test_not_a_signal_rejected(self, signed):
        protocol, access_set, _, vd = signed
        with pytest.raises(VerificationError):
            protocol.verify_signal(access_set, TOPIC, object(), vd)

    def test_not_an_artifact_rejected(self, signed):
        protocol, access_set, signal, _ = signed
        with pytest.raises(VerificationError):
            protocol.verify_signal(access_set, TOPIC, signal, b"vd")


class TestNullifiers:
    def test_same_key_same_topic_same_nullifier(self, protocol, make_members):
        sks, _, access_set = make_members(2)
        first, _ = protocol.make_signal(access_set, sks[1], TOPIC, 1)
        second, _ = protocol.make_signal(access_set, sks[1], TOPIC, 1)
        assert first.nullifier == second.nullifier
        assert first.proof != second.proof

    def test_topics_give_unlinkable_nullifiers(self, protocol, make_members):
        sks, _, access_set = make_members(2)
        a, _ = protocol.make_signal(access_set, sks[1], TOPIC, 1)
        b, _ = protocol.make_signal(access_set, sks[1], OTHER_TOPIC, 1)
        assert a.nullifier != b.nullifier

    def test_members_give_distinct_nullifiers(self, protocol, make_members):
        sks, _, access_set = make_members(3)
        nullifiers = {
            protocol.make_signal(access_set, sk, TOPIC, i)[0].nullifier
            for i, sk in enumerate(sks)
        }
        assert len(nullifiers) == len(sks)


class TestIndexIndependence:
    def test_public_inputs_and_artifact_independent_of_index(
        self, protocol, make_members
    ):
        sks, _, access_set = make_members(3)
        vds = set()
        vectors = []
        for i, sk in enumerate(sks):
            signal, vd = protocol.make_signal(access_set, sk, TOPIC, i)
            vds.add(vd)
            vector = public_input_vector(access_set, signal.nullifier, TOPIC)
            vectors.append(vector[:4] + vector[8:])
        assert len(vds) == 1
        assert len(set(vectors)) == 1

    def test_public_input_vector_layout(self, make_members):
        _, _, access_set = make_members(2, 1)
        nullifier = (1, 2, 3, 4)
        vector = public_input_vector(access_set, nullifier, TOPIC)
        assert len(vector) == 16
        assert vector[:8] == access_set.root_commitment()
        assert vector[8:12] == nullifier
        assert vector[12:] == TOPIC


class TestProverErrors:
    def test_wrong_key_for_index(self, protocol, make_members):
        sks, _, access_set = make_members(3)
        with pytest.raises(ProofConstructionError):
            protocol.make_signal(access_set, sks[0], TOPIC, 1)

    def test_index_out_of_range(self, protocol, make_members):
        sks, _, access_set = make_members(2)
        with pytest.raises(IndexOutOfRangeError):
            protocol.make_signal(access_set, sks[0], TOPIC, 4)
        with pytest.raises(IndexOutOfRangeError):
            protocol.make_signal(access_set, sks[0], TOPIC, -1)

    def test_malformed_private_key(self, protocol, make_members):
        _, _, access_set = make_members(1)
        with pytest.raises(ValueError):
            protocol.make_signal(access_set, (1, 2, 3), TOPIC, 0)

    def test_malformed_topic(self, protocol, make_members):
        sks, _, access_set = make_members(1)
        with pytest.raises(ValueError):
            protocol.make_signal(access_set, sks[0], (1, 2, 3, 2**64), 0)

    def test_hasher_mismatch(self, make_members, toy_hasher):
        sks, _, access_set = make_members(1)
        protocol = SignalProtocol(backend=ReferenceBackend(), hasher=toy_hasher)
        with pytest.raises(ConfigurationError):
            protocol.make_signal(access_set, sks[0], TOPIC, 0)

    def test_public_input_mismatch_detected(self, make_members, monkeypatch):
        sks, _, access_set = make_members(1)
        protocol = SignalProtocol(backend=ReferenceBackend())
        monkeypatch.setattr(
            "semaphore_protocol.protocol.derive_nullifier",
            lambda sk, topic, hasher: (0, 0, 0, 0),
        )
        with pytest.raises(ProofConstructionError, match="public inputs"):
            protocol.make_signal(access_set, sks[0], TOPIC, 0)

    def test_backend_type_checked(self):
        with pytest.raises(TypeError):
            SignalProtocol(backend=object())


class TestReferenceBackendLimits:
    def test_construction_warns(self, caplog):
        with caplog.at_level(logging.WARNING, logger="semaphore_protocol.protocol"):
            SignalProtocol(backend=ReferenceBackend())
        assert "does not produce sound proofs" in caplog.text

    def test_tag_computable_from_public_data(self, protocol, make_members):
        _, _, access_set = make_members(2)
        vd = protocol.verifier_data(access_set)
        nullifier = (7, 7, 7, 7)
        nonce = bytes(TRANSCRIPT_NONCE_BYTES)
        tag = _transcript_tag(
            vd.circuit_digest,
            public_input_vector(access_set, nullifier, TOPIC),
            nonce,
        )
        forged = Signal(nullifier=nullifier, proof=Proof(nonce=nonce, tag=tag))
        protocol.verify_signal(access_set, TOPIC, forged, vd)
        assert protocol.backend.get_backend_info()["security"] == "reference_only"


def test_artifact_is_reference_verifier_data(protocol, make_members):
    sks, _, access_set = make_members(1)
    _, vd = protocol.make_signal(access_set, sks[0], TOPIC, 0)
    assert isinstance(vd, VerifierCircuitData)
    assert vd.num_public_inputs == 12


def test_concrete_scenario_small(protocol, hasher):
    """Member 12 of 2^5 signals on a random topic."""
    rng = random.Random(20)
    sks, pks = generate_keypairs(1 << 5, hasher, rng)
    access_set = AccessSet.build(pks, hasher=hasher)
    topic = GOLDILOCKS.sample_digest(rng)
    signal, vd = protocol.make_signal(access_set, sks[12], topic, 12)
    protocol.verify_signal(access_set, topic, signal, vd)


@pytest.mark.skipif(
    os.environ.get("SEMAPHORE_RUN_SLOW") != "1",
    reason="builds 2^20 keys; set SEMAPHORE_RUN_SLOW=1",
)
def test_concrete_scenario_2_20(protocol, hasher):
    """Member 12 of 2^20 signals on a random topic."""
    sks, pks = generate_keypairs(1 << 20, hasher)
    access_set = AccessSet.build(pks, hasher=hasher)
    topic = GOLDILOCKS.sample_digest()
    signal, vd = protocol.make_signal(access_set, sks[12], topic, 12)
    protocol.verify_signal(access_set, topic, signal, vd)
