"""Tests for AccessSet construction and queries"""

import random
import threading

import pytest

from semaphore_protocol.access_set import AccessSet
from semaphore_protocol.config import GOLDILOCKS_MODULUS
from semaphore_protocol.exceptions import (
    ConfigurationError,
    IndexOutOfRangeError,
    InvalidSetSizeError,
)
from semaphore_protocol.keys import generate_keypairs
from semaphore_protocol.merkle import MerkleProof, verify_merkle_proof_to_cap


class TestBuild:
    def test_height_and_len(self, make_members):
        _, pks, access_set = make_members(3)
        assert len(access_set) == 8
        assert access_set.height() == 3
        assert access_set.tree_height() == 3
        assert access_set.cap_height == 0
        assert "members=8" in repr(access_set)

    def test_single_member(self, hasher):
        _, pks = generate_keypairs(1, hasher, random.Random(1))
        access_set = AccessSet.build(pks, hasher=hasher)
        assert access_set.height() == 0
        assert access_set.root_commitment() == tuple(pks[0])
        assert access_set.authentication_path(0) == ()

    @pytest.mark.parametrize("count", [0, 3, 5, 7])
    def test_non_power_of_two_rejected(self, hasher, count):
        _, pks = generate_keypairs(count, hasher, random.Random(2))
        with pytest.raises(InvalidSetSizeError):
            AccessSet.build(pks, hasher=hasher)

    def test_invalid_set_size_is_value_error(self, hasher):
        _, pks = generate_keypairs(3, hasher, random.Random(2))
        with pytest.raises(ValueError):
            AccessSet.build(pks, hasher=hasher)

    def test_cap_height_above_height(self, make_members, hasher):
        _, pks, _ = make_members(2)
        with pytest.raises(ConfigurationError):
            AccessSet.build(pks, cap_height=3, hasher=hasher)

    def test_malformed_key_rejected(self, hasher):
        with pytest.raises(ValueError):
            AccessSet.build([(1, 2, 3)], hasher=hasher)
        with pytest.raises(ValueError):
            AccessSet.build([(GOLDILOCKS_MODULUS, 0, 0, 0)], hasher=hasher)

    def test_requires_tree(self):
        with pytest.raises(TypeError):
            AccessSet([(1, 2, 3, 4)])

    def test_default_hasher(self, hasher):
        access_set = AccessSet.build([(1, 2, 3, 4), (5, 6, 7, 8)])
        assert access_set.hasher.fingerprint() == hasher.fingerprint()


class TestQueries:
    def test_root_commitment_length(self, make_members):
        for cap_height in range(4):
            _, _, access_set = make_members(3, cap_height)
            assert len(access_set.root_commitment()) == 4 * (1 << cap_height)

    def test_root_commitment_is_deterministic(self, make_members, hasher):
        _, pks, access_set = make_members(3)
        rebuilt = AccessSet.build(pks, hasher=hasher)
        assert rebuilt.root_commitment() == access_set.root_commitment()

    def test_root_changes_with_any_key(self, make_members, hasher):
        _, pks, access_set = make_members(2)
        changed = list(pks)
        changed[3] = (1, 1, 1, 1)
        assert (
            AccessSet.build(changed, hasher=hasher).root_commitment()
            != access_set.root_commitment()
        )

    def test_authentication_paths_verify(self, make_members):
        for cap_height in (0, 1, 3):
            _, pks, access_set = make_members(3, cap_height)
            for i, pk in enumerate(pks):
                path = access_set.authentication_path(i)
                assert len(path) == 3 - cap_height
                assert verify_merkle_proof_to_cap(
                    pk, i, access_set.tree.cap, MerkleProof(path), access_set.hasher
                )

    def test_authentication_path_out_of_range(self, make_members):
        _, _, access_set = make_members(2)
        with pytest.raises(IndexOutOfRangeError):
            access_set.authentication_path(4)
        with pytest.raises(IndexError):
            access_set.authentication_path(-1)

    def test_public_key_and_index_of(self, make_members):
        _, pks, access_set = make_members(3)
        for i, pk in enumerate(pks):
            assert access_set.public_key(i) == pk
            assert access_set.index_of(pk) == i
        assert access_set.index_of((0, 0, 0, 7)) is None

    def test_concurrent_reads(self, make_members):
        _, pks, access_set = make_members(3)
        expected = [access_set.authentication_path(i) for i in range(len(pks))]
        errors = []

        def worker():
            for i in range(len(pks)):
                if access_set.authentication_path(i) != expected[i]:
                    errors.append(i)

        threads = [threading.Thread(target=worker) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert not errors
