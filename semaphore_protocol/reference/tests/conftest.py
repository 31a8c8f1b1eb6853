import pytest

from semaphore_protocol.field import PrimeField
from semaphore_protocol.poseidon import PoseidonHash, PoseidonParams


@pytest.fixture(scope="session")
def hasher() -> PoseidonHash:
    return PoseidonHash()


@pytest.fixture(scope="session")
def toy_hasher() -> PoseidonHash:
    return PoseidonHash(PoseidonParams.derive(PrimeField(2**31 - 1), alpha=5))
