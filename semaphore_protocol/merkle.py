"""
Merkle tree over field digests, committed through a cap.

Leaves are hashed with ``hash_or_noop`` and nodes with ``two_to_one`` of the
injected hasher. The commitment is the "cap": the 2^cap_height digests at
level ``height - cap_height``. A cap height of 0 is the plain root.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from .bits import split_le
from .exceptions import ConfigurationError, IndexOutOfRangeError, InvalidSetSizeError
from .interfaces import Hasher
from .types import Digest

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class MerkleCap:
    hashes: Tuple[Digest, ...]

    @property
    def height(self) -> int:
        return len(self.hashes).bit_length() - 1

    def flatten(self) -> Tuple[int, ...]:
        return tuple(element for digest in self.hashes for element in digest)


@dataclass(frozen=True)
class MerkleProof:
    """Sibling digests from the leaf level up to (excluding) the cap."""

    siblings: Tuple[Digest, ...]

    def __len__(self) -> int:
        return len(self.siblings)


def log2_strict(n: int) -> int:
    """
    Exact base-2 logarithm.

    Raises:
        InvalidSetSizeError: If n is not a positive power of two
    """
    if not isinstance(n, int) or n <= 0 or n & (n - 1):
        raise InvalidSetSizeError(f"leaf count must be a power of two, got {n}")
    return n.bit_length() - 1


class MerkleTree:
    """
    Immutable binary Merkle tree with a configurable cap.

    Example:
        >>> tree = MerkleTree(public_keys, cap_height=0, hasher=PoseidonHash())
        >>> proof = tree.prove(3)
        >>> verify_merkle_proof_to_cap(public_keys[3], 3, tree.cap, proof, tree.hasher)
        True
    """

    def __init__(
        self,
        leaves: Sequence[Sequence[int]],
        cap_height: int = 0,
        hasher: Optional[Hasher] = None,
    ) -> None:
        if hasher is None:
            from .poseidon import PoseidonHash

            hasher = PoseidonHash()

        height = log2_strict(len(leaves))
        if not isinstance(cap_height, int) or not 0 <= cap_height <= height:
            raise ConfigurationError(
                f"cap_height must be in [0, {height}] for {len(leaves)} leaves, "
                f"got {cap_height!r}"
            )

        self.hasher = hasher
        self.height = height
        self.cap_height = cap_height
        self.leaves: Tuple[Tuple[int, ...], ...] = tuple(tuple(leaf) for leaf in leaves)

        # layers[0] are leaf digests, layers[-1] is the cap
        layer: List[Digest] = [hasher.hash_or_noop(leaf) for leaf in self.leaves]
        self._layers: List[List[Digest]] = [layer]
        while len(layer) > (1 << cap_height):
            layer = [
                hasher.two_to_one(layer[i], layer[i + 1])
                for i in range(0, len(layer), 2)
            ]
            self._layers.append(layer)

        self.cap = MerkleCap(tuple(self._layers[-1]))
        log.debug(
            "built merkle tree: leaves=%d height=%d cap_height=%d",
            len(self.leaves),
            height,
            cap_height,
        )

    def __len__(self) -> int:
        return len(self.leaves)

    def _check_index(self, index: int) -> None:
        if not isinstance(index, int) or isinstance(index, bool):
            raise TypeError(f"leaf index must be int, got {type(index)}")
        if not 0 <= index < len(self.leaves):
            raise IndexOutOfRangeError(
                f"leaf index {index} out of range [0, {len(self.leaves)})"
            )

    def leaf_digest(self, index: int) -> Digest:
        self._check_index(index)
        return self._layers[0][index]

    def prove(self, index: int) -> MerkleProof:
        """
        Authentication path for leaf ``index``.

        Returns:
            MerkleProof with ``height - cap_height`` siblings, leaf level first

        Raises:
            IndexOutOfRangeError: If index is outside [0, leaf_count)
        """
        self._check_index(index)
        siblings = []
        position = index
        for layer in self._layers[:-1]:
            siblings.append(layer[position ^ 1])
            position >>= 1
        return MerkleProof(tuple(siblings))


def verify_merkle_proof_to_cap(
    leaf_data: Sequence[int],
    leaf_index: int,
    cap: MerkleCap,
    proof: MerkleProof,
    hasher: Hasher,
) -> bool:
    """
    Verify a Merkle authentication path against a cap.

    Args:
        leaf_data: Leaf content (hashed with ``hash_or_noop``)
        leaf_index: Position of the leaf
        cap: Committed cap
        proof: Sibling digests, leaf level first
        hasher: Hash primitive the tree was built with

    Returns:
        True if path is valid, False otherwise
    """
    height = len(proof.siblings) + cap.height
    try:
        bits = split_le(leaf_index, height)
    except (TypeError, ValueError):
        return False

    current = hasher.hash_or_noop(leaf_data)
    for bit, sibling in zip(bits, proof.siblings):
        if bit:
            # Sibling is on left, current on right
            current = hasher.two_to_one(sibling, current)
        else:
            # Sibling is on right, current on left
            current = hasher.two_to_one(current, sibling)

    cap_index = leaf_index >> len(proof.siblings)
    return tuple(current) == tuple(cap.hashes[cap_index])
