"""
⚠️ DRAFT — requires crypto review before production use

Access set: the committed collection of public keys allowed to signal.

An AccessSet wraps a MerkleTree whose leaves are public keys. It is built
once from a finalized list and never mutated afterwards, so any number of
provers and verifiers may share one instance across threads.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional, Sequence, Tuple

from .config import DEFAULT_CAP_HEIGHT, MAX_TREE_HEIGHT
from .exceptions import InvalidSetSizeError
from .interfaces import Hasher
from .merkle import MerkleTree
from .types import Digest, as_digest

log = logging.getLogger(__name__)


class AccessSet:
    """
    Merkle commitment to an ordered list of public keys.

    Example:
        >>> access_set = AccessSet.build(public_keys)
        >>> access_set.height()
        3
        >>> path = access_set.authentication_path(5)
        >>> len(path) == access_set.height()
        True
    """

    def __init__(self, tree: MerkleTree) -> None:
        if not isinstance(tree, MerkleTree):
            raise TypeError("tree must be MerkleTree")
        self._tree = tree
        self._index = None

    @classmethod
    def build(
        cls,
        public_keys: Iterable[Sequence[int]],
        *,
        cap_height: int = DEFAULT_CAP_HEIGHT,
        hasher: Optional[Hasher] = None,
    ) -> "AccessSet":
        """
        Commit to ``public_keys``.

        Args:
            public_keys: Power-of-two many public keys (digests)
            cap_height: Number of top levels published as the commitment
            hasher: Hash primitive (defaults to Poseidon over Goldilocks)

        Returns:
            Immutable AccessSet

        Raises:
            InvalidSetSizeError: If the key count is not a power of two
            ConfigurationError: If cap_height exceeds the tree height
            ValueError: If a key is not a valid digest
        """
        if hasher is None:
            from .poseidon import PoseidonHash

            hasher = PoseidonHash()

        keys = [as_digest(pk, hasher.field) for pk in public_keys]
        if len(keys) > (1 << MAX_TREE_HEIGHT):
            raise InvalidSetSizeError(
                f"access set larger than 2^{MAX_TREE_HEIGHT} keys"
            )
        tree = MerkleTree(keys, cap_height=cap_height, hasher=hasher)
        log.debug(
            "access set built: members=%d height=%d cap_height=%d hasher=%s",
            len(keys),
            tree.height,
            cap_height,
            hasher.name,
        )
        return cls(tree)

    def __len__(self) -> int:
        return len(self._tree)

    def __repr__(self) -> str:
        return (
            f"AccessSet(members={len(self)}, height={self.height()}, "
            f"cap_height={self.cap_height})"
        )

    @property
    def tree(self) -> MerkleTree:
        return self._tree

    @property
    def hasher(self) -> Hasher:
        return self._tree.hasher

    @property
    def field(self):
        return self._tree.hasher.field

    @property
    def cap_height(self) -> int:
        return self._tree.cap_height

    def height(self) -> int:
        """log2 of the member count."""
        return self._tree.height

    tree_height = height

    def root_commitment(self) -> Tuple[int, ...]:
        """
        Cap digests flattened in cap order.

        This is the first segment of every public-input vector.
        """
        return self._tree.cap.flatten()

    def authentication_path(self, index: int) -> Tuple[Digest, ...]:
        """
        Sibling digests from leaf ``index`` up to the cap.

        Length is ``height() - cap_height``.

        Raises:
            IndexOutOfRangeError: If index is outside [0, len(self))
        """
        return self._tree.prove(index).siblings

    def public_key(self, index: int) -> Digest:
        """Public key stored at ``index``."""
        return self._tree.leaf_digest(index)

    def index_of(self, public_key: Sequence[int]) -> Optional[int]:
        """Position of ``public_key`` in the set, or None."""
        if self._index is None:
            # First occurrence wins for duplicate keys
            index = {}
            for i, leaf in enumerate(self._tree.leaves):
                index.setdefault(leaf, i)
            self._index = index
        return self._index.get(tuple(public_key))
