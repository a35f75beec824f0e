import pytest
from protean.integrations.pytest import DomainFixture


@pytest.fixture(scope="session")
def laundry_bed():
    from laundry.domain import laundry

    bed = DomainFixture(laundry)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(laundry_bed):
    with laundry_bed.domain_context():
        yield


@pytest.fixture(autouse=True)
def _printer():
    from laundry.printer import get_printer, reset_printer

    reset_printer()
    yield get_printer()
    reset_printer()
