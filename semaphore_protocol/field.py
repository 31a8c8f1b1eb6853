"""
Prime field arithmetic.

Field elements are canonical Python ints in ``[0, p)``; the field object is
the capability that knows the modulus. Passing a different ``PrimeField``
(e.g. a small toy prime in tests) swaps the arithmetic everywhere it is used.
"""

from __future__ import annotations

from typing import Any, Optional, Tuple

from .config import DIGEST_LENGTH, FIELD_NAME, GOLDILOCKS_MODULUS
from .security import RandomnessSource


class PrimeField:
    """
    Prime field F_p.

    Example:
        >>> f = PrimeField(97)
        >>> f.mul(50, 2)
        3
    """

    def __init__(self, modulus: int, name: Optional[str] = None) -> None:
        if not isinstance(modulus, int) or modulus < 3:
            raise ValueError(f"modulus must be an int >= 3, got {modulus!r}")
        if modulus % 2 == 0:
            raise ValueError("modulus must be an odd prime")
        self.modulus = modulus
        self.name = name or f"F_{modulus}"

    def __repr__(self) -> str:
        return f"PrimeField({self.name})"

    def __eq__(self, other: object) -> bool:
        return isinstance(other, PrimeField) and other.modulus == self.modulus

    def __hash__(self) -> int:
        return hash(("PrimeField", self.modulus))

    @property
    def bits(self) -> int:
        return self.modulus.bit_length()

    def reduce(self, value: int) -> int:
        return value % self.modulus

    def is_canonical(self, value: Any) -> bool:
        return (
            isinstance(value, int)
            and not isinstance(value, bool)
            and 0 <= value < self.modulus
        )

    def add(self, a: int, b: int) -> int:
        return (a + b) % self.modulus

    def sub(self, a: int, b: int) -> int:
        return (a - b) % self.modulus

    def mul(self, a: int, b: int) -> int:
        return (a * b) % self.modulus

    def neg(self, a: int) -> int:
        return (-a) % self.modulus

    def pow(self, a: int, e: int) -> int:
        return pow(a % self.modulus, e, self.modulus)

    def sample(self, rng: Any = None) -> int:
        """
        Sample a uniform field element.

        Args:
            rng: Any object with ``randrange(start, stop)``. Pass
                ``random.Random(seed)`` for reproducible sampling; defaults
                to a fork-safe system RNG.
        """
        rng = rng if rng is not None else RandomnessSource()
        return rng.randrange(0, self.modulus)

    def sample_digest(self, rng: Any = None) -> Tuple[int, ...]:
        """Sample DIGEST_LENGTH uniform field elements."""
        rng = rng if rng is not None else RandomnessSource()
        return tuple(self.sample(rng) for _ in range(DIGEST_LENGTH))


GOLDILOCKS = PrimeField(GOLDILOCKS_MODULUS, name=FIELD_NAME)
