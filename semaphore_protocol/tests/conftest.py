import random

import pytest

from semaphore_protocol import feature_flags
from semaphore_protocol.access_set import AccessSet
from semaphore_protocol.field import PrimeField
from semaphore_protocol.keys import generate_keypairs
from semaphore_protocol.poseidon import PoseidonHash, PoseidonParams


@pytest.fixture(autouse=True)
def reset_feature_flags(monkeypatch: pytest.MonkeyPatch) -> None:
    feature_flags.set_backend_type(None)
    monkeypatch.delenv("SEMAPHORE_BACKEND", raising=False)
    yield
    feature_flags.set_backend_type(None)
    monkeypatch.delenv("SEMAPHORE_BACKEND", raising=False)


@pytest.fixture(scope="session")
def hasher() -> PoseidonHash:
    return PoseidonHash()


@pytest.fixture(scope="session")
def toy_hasher() -> PoseidonHash:
    """Poseidon over the Mersenne prime 2^31 - 1 (x^7 is not a permutation there)."""
    return PoseidonHash(PoseidonParams.derive(PrimeField(2**31 - 1), alpha=5))


@pytest.fixture(scope="session")
def make_members(hasher):
    """Factory: (private_keys, public_keys, access_set) for 2^height members."""
    cache = {}

    def _make(height: int, cap_height: int = 0, seed: int = 1234):
        key = (height, cap_height, seed)
        if key not in cache:
            sks, pks = generate_keypairs(1 << height, hasher, random.Random(seed))
            access_set = AccessSet.build(pks, cap_height=cap_height, hasher=hasher)
            cache[key] = (sks, pks, access_set)
        return cache[key]

    return _make
