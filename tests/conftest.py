import os
from pathlib import Path

import pytest
from protean.integrations.pytest import DomainFixture


def pytest_addoption(parser):
    parser.addoption(
        "--env",
        action="store",
        default="test",
        help="Config environment to run tests on",
    )


def pytest_sessionstart(session):
    """Select the config overlay before the domain is imported."""
    os.environ["PROTEAN_ENV"] = session.config.option.env


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their directory location."""
    for item in items:
        test_path = str(Path(item.fspath))

        if "/domain/" in test_path:
            item.add_marker(pytest.mark.domain)
        elif "/application/" in test_path:
            item.add_marker(pytest.mark.application)
        elif "/bdd/" in test_path:
            item.add_marker(pytest.mark.bdd)
        elif "/integration/" in test_path:
            item.add_marker(pytest.mark.integration)
            # Integration tests are often slower
            if not any(m.name == "fast" for m in item.iter_markers()):
                item.add_marker(pytest.mark.slow)


@pytest.fixture(scope="session")
def stockflow_bed():
    from stockflow.domain import stockflow

    bed = DomainFixture(stockflow)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(scope="session", autouse=True)
def setup_db(stockflow_bed):
    from stockflow.domain import stockflow
    from stockflow.utils.db import drop_db, setup_db

    setup_db(stockflow)

    yield

    drop_db(stockflow)


@pytest.fixture(autouse=True)
def _ctx(stockflow_bed):
    with stockflow_bed.domain_context():
        yield


@pytest.fixture(autouse=True)
def run_around_tests(_ctx):
    """Fixture to automatically cleanup infrastructure after every test"""
    yield

    from protean import current_domain

    from stockflow.inventory.locks import reset_lock_registry

    # Clear all databases
    for _, provider in current_domain.providers.items():
        provider._data_reset()

    # Drain event stores
    current_domain.event_store.store._data_reset()

    reset_lock_registry()


# ---------------------------------------------------------------------------
# Shared builders
# ---------------------------------------------------------------------------
@pytest.fixture()
def make_user():
    from protean import current_domain

    from stockflow.identity.registration import RegisterUser

    counter = iter(range(1, 1000))

    def _make(name="Ana Pérez", email=None, role="customer"):
        email = email or f"buyer{next(counter)}@example.com"
        return current_domain.process(RegisterUser(name=name, email=email, role=role), asynchronous=False)

    return _make


@pytest.fixture()
def make_product():
    """Register a product and, unless ``quantity`` is None, give it a stock record."""
    from protean import current_domain

    from stockflow import service
    from stockflow.catalogue.registration import RegisterProduct

    def _make(name="Laptop", price="5000.00", quantity=100, reorder_threshold=10):
        product_id = current_domain.process(RegisterProduct(name=name, price=price), asynchronous=False)
        if quantity is not None:
            service.initialize_stock(product_id, quantity, reorder_threshold=reorder_threshold)
        return product_id

    return _make


@pytest.fixture()
def user_id(make_user):
    return make_user()
