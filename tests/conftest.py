import pytest

from pymauth.crypto import RandomSource
from pymauth.registry import DeviceRegistry
from pymauth.roles.base_station import BaseStation, ParameterAuthority
from pymauth.roles.device import Device
from pymauth.storage.registry_store import InMemoryCommitmentStore

TEST_SEED = b"pymauth-test-seed"


@pytest.fixture(scope="session")
def context():
    return ParameterAuthority.initialize(128, curve="bn128", rng=RandomSource(TEST_SEED))


@pytest.fixture(scope="session")
def group(context):
    return context.group


@pytest.fixture(scope="session")
def registered(context):
    registry = DeviceRegistry(context, InMemoryCommitmentStore())
    identity, commitment = registry.register("Device123")
    return registry, identity, commitment


@pytest.fixture(scope="session")
def device(context, registered):
    _, identity, _ = registered
    return Device(context, identity)


@pytest.fixture(scope="session")
def base_station(context):
    return BaseStation(context)
