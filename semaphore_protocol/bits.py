"""
Little-endian bit decomposition of leaf indices.

Bit ``i`` of a leaf index is the direction taken at tree level ``i``
(level 0 is the leaf layer):

    False -> the running node is the LEFT child:  parent = H(node || sibling)
    True  -> the running node is the RIGHT child: parent = H(sibling || node)

A wrong bit order still produces a well-formed path, just for another leaf,
so this is kept isolated and tested exhaustively.
"""

from __future__ import annotations

from typing import List, Sequence


def split_le(value: int, num_bits: int) -> List[bool]:
    """
    Decompose ``value`` into exactly ``num_bits`` bits, least significant first.

    Args:
        value: Non-negative integer below ``2**num_bits``
        num_bits: Number of bits (the tree height)

    Returns:
        List of ``num_bits`` booleans

    Raises:
        TypeError: If value or num_bits is not an int
        ValueError: If num_bits is negative or value does not fit

    Example:
        >>> split_le(6, 3)
        [False, True, True]
    """
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"value must be int, got {type(value)}")
    if not isinstance(num_bits, int) or isinstance(num_bits, bool):
        raise TypeError(f"num_bits must be int, got {type(num_bits)}")
    if num_bits < 0:
        raise ValueError(f"num_bits must be non-negative, got {num_bits}")
    if not 0 <= value < (1 << num_bits):
        raise ValueError(f"{value} does not fit in {num_bits} bits")
    return [bool((value >> i) & 1) for i in range(num_bits)]


def le_sum(bits: Sequence[bool]) -> int:
    """Recompose little-endian bits into an integer (inverse of split_le)."""
    return sum(1 << i for i, bit in enumerate(bits) if bit)
