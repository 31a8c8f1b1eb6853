"""
⚠️ DRAFT — requires crypto review before production use

Semaphore signalling: anonymous membership proofs with per-topic nullifiers.

A member of an AccessSet proves, for a topic of its choosing, that it knows
the private key behind one of the committed public keys, and publishes the
nullifier H(sk || topic). Two signals from the same key on the same topic
carry the same nullifier; signals on different topics are unlinkable.

Example:
    >>> protocol = SignalProtocol()
    >>> signal, verifier_data = protocol.make_signal(
    ...     access_set, private_key, topic, index
    ... )
    >>> protocol.verify_signal(access_set, topic, signal, verifier_data)
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence, Tuple

from .access_set import AccessSet
from .circuit import fill_semaphore_targets, semaphore_circuit
from .exceptions import (
    ConfigurationError,
    ProofConstructionError,
    SemaphoreError,
    VerificationError,
)
from .interfaces import Hasher, ProvingBackend, VerifierArtifact
from .keys import derive_nullifier
from .types import ProofWithPublicInputs, Signal, as_digest

log = logging.getLogger(__name__)


def public_input_vector(
    access_set: AccessSet, nullifier: Sequence[int], topic: Sequence[int]
) -> Tuple[int, ...]:
    """
    Public inputs of a signal, in circuit order: root ‖ nullifier ‖ topic.

    Raises:
        ValueError: If nullifier or topic is not a valid digest
    """
    field = access_set.field
    return (
        tuple(access_set.root_commitment())
        + as_digest(nullifier, field)
        + as_digest(topic, field)
    )


class SignalProtocol:
    """
    Prover and verifier for Semaphore signals over one proving backend.

    Stateless apart from the backend and hasher handles, so one instance may
    serve concurrent callers.

    Soundness is whatever the backend provides. The built-in ``reference``
    backend reports ``security="reference_only"``: its proof tag is computed
    from public data only, so anyone can make ``verify_signal`` accept an
    arbitrary nullifier without holding a key. Use it for testing and
    interoperability work, never to gate real signals.
    """

    def __init__(
        self,
        backend: Optional[ProvingBackend] = None,
        hasher: Optional[Hasher] = None,
    ) -> None:
        if backend is None:
            from .factory import get_proving_backend

            backend = get_proving_backend()
        if not isinstance(backend, ProvingBackend):
            raise TypeError("backend must implement ProvingBackend")
        if hasher is not None and not isinstance(hasher, Hasher):
            raise TypeError("hasher must implement Hasher")
        self.backend = backend
        self.hasher = hasher
        if backend.get_backend_info().get("security") == "reference_only":
            log.warning(
                "backend %s does not produce sound proofs; signals it verifies "
                "can be forged",
                backend.backend_name,
            )

    def _hasher_for(self, access_set: AccessSet) -> Hasher:
        if not isinstance(access_set, AccessSet):
            raise TypeError("access_set must be AccessSet")
        hasher = access_set.hasher
        if self.hasher is not None and (
            self.hasher.fingerprint() != hasher.fingerprint()
        ):
            raise ConfigurationError(
                f"protocol hasher {self.hasher.name} does not match the "
                f"access set hasher {hasher.name}"
            )
        return hasher

    def _build(self, access_set: AccessSet, hasher: Hasher):
        builder = self.backend.new_builder(hasher)
        targets = semaphore_circuit(access_set, builder)
        return builder.build(), targets

    def make_signal(
        self,
        access_set: AccessSet,
        private_key: Sequence[int],
        topic: Sequence[int],
        public_key_index: int,
    ) -> Tuple[Signal, VerifierArtifact]:
        """
        Produce a signal by member ``public_key_index`` on ``topic``.

        Args:
            access_set: Set the signer belongs to
            private_key: Signer's private key
            topic: Topic digest
            public_key_index: Position of the signer's public key

        Returns:
            (Signal, VerifierArtifact) where the artifact depends only on the
            access set shape and the backend

        Raises:
            IndexOutOfRangeError: If public_key_index is not a member position
            ProofConstructionError: If the key does not match the leaf or the
                backend fails
            ConfigurationError: If the protocol hasher differs from the set's
            ValueError: If private_key or topic is malformed
        """
        hasher = self._hasher_for(access_set)
        private_key = as_digest(private_key, hasher.field)
        topic = as_digest(topic, hasher.field)

        nullifier = derive_nullifier(private_key, topic, hasher)

        system, targets = self._build(access_set, hasher)
        witness = self.backend.new_witness()
        fill_semaphore_targets(
            access_set, witness, private_key, topic, public_key_index, targets
        )

        log.debug(
            "proving signal: backend=%s members=%d cap_height=%d",
            self.backend.backend_name,
            len(access_set),
            access_set.cap_height,
        )
        try:
            proof_with_public_inputs = self.backend.prove(system, witness)
        except SemaphoreError:
            raise
        except Exception as e:
            raise ProofConstructionError(f"Failed to generate proof: {e}") from e

        expected = public_input_vector(access_set, nullifier, topic)
        if tuple(proof_with_public_inputs.public_inputs) != expected:
            raise ProofConstructionError(
                "proof public inputs do not match root, nullifier and topic"
            )

        return (
            Signal(nullifier=nullifier, proof=proof_with_public_inputs.proof),
            system.verifier_data(),
        )

    def verify_signal(
        self,
        access_set: AccessSet,
        topic: Sequence[int],
        signal: Signal,
        verifier_data: VerifierArtifact,
    ) -> None:
        """
        Accept ``signal`` as a valid signal on ``topic`` by some member.

        Raises:
            VerificationError: On any rejection, including malformed input
        """
        try:
            hasher = self._hasher_for(access_set)
            if not isinstance(signal, Signal):
                raise TypeError("signal must be Signal")
            if not isinstance(verifier_data, VerifierArtifact):
                raise TypeError("verifier_data must be a VerifierArtifact")
            topic = as_digest(topic, hasher.field)
            public_inputs = public_input_vector(access_set, signal.nullifier, topic)
        except (TypeError, ValueError, ConfigurationError) as e:
            raise VerificationError(f"Invalid signal input: {e}") from e

        # Same root under another height is a different circuit
        if verifier_data != self.verifier_data(access_set):
            raise VerificationError("verifier data does not match the access set")

        accepted = self.backend.verify(
            verifier_data,
            ProofWithPublicInputs(proof=signal.proof, public_inputs=public_inputs),
        )
        log.debug(
            "signal verification: backend=%s accepted=%s",
            self.backend.backend_name,
            accepted,
        )
        if not accepted:
            raise VerificationError("signal proof rejected")

    def verifier_data(self, access_set: AccessSet) -> VerifierArtifact:
        """
        Verifier artifact for ``access_set`` without producing a signal.

        The circuit depends only on the set's height and cap height, so this
        equals the artifact returned by ``make_signal``.
        """
        hasher = self._hasher_for(access_set)
        system, _ = self._build(access_set, hasher)
        return system.verifier_data()


def make_signal(
    access_set: AccessSet,
    private_key: Sequence[int],
    topic: Sequence[int],
    public_key_index: int,
) -> Tuple[Signal, VerifierArtifact]:
    """Make a signal with the backend selected by feature flags."""
    return SignalProtocol().make_signal(
        access_set, private_key, topic, public_key_index
    )


def verify_signal(
    access_set: AccessSet,
    topic: Sequence[int],
    signal: Signal,
    verifier_data: VerifierArtifact,
) -> None:
    """Verify a signal with the backend selected by feature flags."""
    SignalProtocol().verify_signal(access_set, topic, signal, verifier_data)
