import pytest
from protean import current_domain
from protean.integrations.pytest import DomainFixture

from fleetops.adapters import reset_adapters


@pytest.fixture(scope="session")
def fleetops_bed():
    from fleetops.domain import fleetops

    bed = DomainFixture(fleetops)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(fleetops_bed):
    """Push domain context and fresh adapters before each test, cleanup after."""
    reset_adapters()
    with fleetops_bed.domain_context():
        yield

        for _, provider in current_domain.providers.items():
            provider._data_reset()

        for _, broker in current_domain.brokers.items():
            broker._data_reset()
    reset_adapters()


@pytest.fixture(scope="session", autouse=True)
def setup_db(fleetops_bed):
    from fleetops.domain import fleetops
    from fleetops.utils.db import drop_db, setup_db

    setup_db(fleetops)

    yield

    drop_db(fleetops)
