"""Reference (pure-Python) proving backend."""

from .backend import ReferenceBackend
from .builder import CircuitBuilder
from .circuit_data import CircuitData, Proof, VerifierCircuitData
from .witness import ReferenceWitness

__all__ = [
    "ReferenceBackend",
    "CircuitBuilder",
    "CircuitData",
    "Proof",
    "VerifierCircuitData",
    "ReferenceWitness",
]
