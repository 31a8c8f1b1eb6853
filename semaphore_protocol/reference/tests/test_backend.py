"""
DRAFT - requires crypto review before production use.

Unit tests for the reference proving backend and its artifacts.
"""

from __future__ import annotations

from dataclasses import replace

import cbor2
import pytest

from semaphore_protocol.config import PROOF_VERSION
from semaphore_protocol.exceptions import ProofConstructionError, SerializationError
from semaphore_protocol.interfaces import ProvingBackend
from semaphore_protocol.reference.backend import ReferenceBackend
from semaphore_protocol.reference.builder import CircuitBuilder
from semaphore_protocol.reference.circuit_data import Proof, VerifierCircuitData
from semaphore_protocol.reference.witness import ReferenceWitness
from semaphore_protocol.types import ProofWithPublicInputs, Target


@pytest.fixture
def proved(hasher):
    """A one-hash circuit with its proof."""
    backend = ReferenceBackend()
    builder = backend.new_builder(hasher)
    inputs = builder.add_virtual_targets(4)
    out = builder.hash_n_to_hash_no_pad(inputs)
    builder.register_public_inputs(inputs)
    builder.register_public_inputs(out.elements)
    data = builder.build()
    witness = backend.new_witness()
    witness.set_targets(inputs, [1, 2, 3, 4])
    return backend, data, backend.prove(data, witness)


def test_backend_identity() -> None:
    backend = ReferenceBackend()
    assert isinstance(backend, ProvingBackend)
    assert backend.backend_name == "reference"
    assert backend.backend_version == "0.1.0"
    assert isinstance(backend.new_witness(), ReferenceWitness)


def test_new_builder_requires_hasher() -> None:
    with pytest.raises(TypeError):
        ReferenceBackend().new_builder(object())


def test_new_builder(hasher) -> None:
    assert isinstance(ReferenceBackend().new_builder(hasher), CircuitBuilder)


def test_prove_returns_public_inputs(proved, hasher) -> None:
    _, _, pwpi = proved
    assert isinstance(pwpi, ProofWithPublicInputs)
    assert pwpi.public_inputs[:4] == (1, 2, 3, 4)
    assert pwpi.public_inputs[4:] == hasher.hash_no_pad([1, 2, 3, 4])


def test_verify_accepts(proved) -> None:
    backend, data, pwpi = proved
    assert backend.verify(data.verifier_data(), pwpi) is True


def test_verify_rejects_changed_public_input(proved) -> None:
    backend, data, pwpi = proved
    changed = list(pwpi.public_inputs)
    changed[0] = 9
    forged = ProofWithPublicInputs(proof=pwpi.proof, public_inputs=tuple(changed))
    assert backend.verify(data.verifier_data(), forged) is False


def test_verify_rejects_wrong_length(proved) -> None:
    backend, data, pwpi = proved
    forged = ProofWithPublicInputs(
        proof=pwpi.proof, public_inputs=pwpi.public_inputs[:-1]
    )
    assert backend.verify(data.verifier_data(), forged) is False


def test_verify_rejects_non_canonical_input(proved) -> None:
    backend, data, pwpi = proved
    vd = data.verifier_data()
    forged = ProofWithPublicInputs(
        proof=pwpi.proof,
        public_inputs=(vd.modulus,) + pwpi.public_inputs[1:],
    )
    assert backend.verify(vd, forged) is False


def test_verify_rejects_other_circuit(proved) -> None:
    backend, data, pwpi = proved
    vd = replace(data.verifier_data(), circuit_digest=b"\x00" * 32)
    assert backend.verify(vd, pwpi) is False


def test_verify_never_raises_on_garbage(proved) -> None:
    backend, data, _ = proved
    assert backend.verify(data.verifier_data(), "garbage") is False
    assert backend.verify("garbage", "garbage") is False
    bogus = ProofWithPublicInputs(proof=None, public_inputs=None)
    assert backend.verify(data.verifier_data(), bogus) is False


def test_proofs_are_randomized(proved, hasher) -> None:
    backend, data, pwpi = proved
    witness = backend.new_witness()
    for wire, value in zip(data.public_inputs[:4], [1, 2, 3, 4]):
        witness.set_target(Target(wire), value)
    again = backend.prove(data, witness)
    assert again.public_inputs == pwpi.public_inputs
    assert again.proof != pwpi.proof


def test_prove_rejects_foreign_system(proved) -> None:
    backend, _, _ = proved
    with pytest.raises(ProofConstructionError):
        backend.prove(object(), ReferenceWitness())


def test_prove_rejects_foreign_witness(proved) -> None:
    backend, data, _ = proved
    with pytest.raises(ProofConstructionError):
        backend.prove(data, object())


def test_circuit_digest_depends_on_hasher(hasher, toy_hasher) -> None:
    def build(h):
        builder = CircuitBuilder(h)
        builder.hash_n_to_hash_no_pad(builder.add_virtual_targets(4))
        return builder.build().circuit_digest

    assert build(hasher) == build(hasher)
    assert build(hasher) != build(toy_hasher)


class TestSerialization:
    def test_proof_roundtrip(self, proved) -> None:
        backend, data, pwpi = proved
        restored = backend.proof_from_bytes(pwpi.proof.to_bytes())
        assert restored == pwpi.proof
        assert backend.verify(
            data.verifier_data(),
            ProofWithPublicInputs(proof=restored, public_inputs=pwpi.public_inputs),
        )

    def test_verifier_data_roundtrip(self, proved) -> None:
        backend, data, _ = proved
        vd = data.verifier_data()
        assert backend.verifier_data_from_bytes(vd.to_bytes()) == vd

    def test_proof_from_other_backend(self) -> None:
        data = cbor2.dumps({"v": PROOF_VERSION, "b": "plonky2", "n": b"", "t": b""})
        with pytest.raises(SerializationError, match="not produced"):
            Proof.from_bytes(data)

    def test_proof_missing_fields(self) -> None:
        data = cbor2.dumps({"v": PROOF_VERSION, "b": "reference"})
        with pytest.raises(SerializationError, match="missing"):
            Proof.from_bytes(data)

    def test_proof_wrong_version(self) -> None:
        data = cbor2.dumps({"v": 2, "b": "reference", "n": b"", "t": b""})
        with pytest.raises(SerializationError, match="version"):
            Proof.from_bytes(data)

    def test_verifier_data_malformed(self) -> None:
        with pytest.raises(SerializationError):
            VerifierCircuitData.from_bytes(cbor2.dumps({"v": PROOF_VERSION}))
        with pytest.raises(SerializationError):
            VerifierCircuitData.from_bytes(b"\xff")
        with pytest.raises(SerializationError):
            VerifierCircuitData.from_bytes("text")


def test_backend_info() -> None:
    info = ReferenceBackend().get_backend_info()
    assert info["name"] == "reference"
    assert info["security"] == "reference_only"
    assert "semaphore_signal" in info["features"]
