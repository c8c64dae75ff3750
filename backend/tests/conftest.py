"""
Pytest fixtures for VendorDB backend tests.

Provides an in-memory database, a per-test clean slate, and a few
ready-made rows (vendor, location, catalog item, sample data set).
"""

import pytest
from sqlalchemy import text

from vendordb import create_app
from vendordb.config import TestingConfig
from vendordb.extensions import db
from vendordb.models import ChangeLog
from vendordb.services import catalog_service, location_service, seed_service, user_service


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app(TestingConfig)

    with app.app_context():
        db.create_all()
        yield app
        db.drop_all()


@pytest.fixture(scope='function')
def db_session(app):
    """Empty every table (and reset AUTOINCREMENT counters) before each test."""
    with app.app_context():
        # Clear all data but keep schema
        meta = db.metadata
        for table in reversed(meta.sorted_tables):
            db.session.execute(table.delete())
        db.session.execute(text("DELETE FROM sqlite_sequence"))
        db.session.commit()
        db.session.expunge_all()

        yield db.session

        # Cleanup after test
        db.session.rollback()


@pytest.fixture(scope='function')
def vendor(db_session):
    """Vendor account that owns test locations."""
    return user_service.create_user(
        first_name="Vera",
        last_name="Vendor",
        email="vera@example.com",
        password="s3cret",
        role="vendor",
    )


@pytest.fixture(scope='function')
def location(db_session, vendor):
    """Open location owned by the vendor (writes one LOCATION_ADD row)."""
    return location_service.register_location(
        user_id=vendor.id,
        vendor_name="Taco Stand",
        availability="Y",
        address="1 Pike St, Seattle WA",
        lat="47.609700",
        long="-122.342300",
        hours="9am - 5pm",
        phone="206-555-0100",
    )


@pytest.fixture(scope='function')
def burger(db_session):
    """Catalog item."""
    return catalog_service.create_item("Vegan Burger")


@pytest.fixture(scope='function')
def sample_data(db_session):
    """The four-vendor sample data set."""
    assert seed_service.seed_sample_data() is True
    return db_session


@pytest.fixture(scope='function')
def purge_change_log(db_session):
    """
    Remove a location's change log rows behind the ORM's back.

    Simulates a location that has no history so its delete is not blocked
    by the change log.
    """
    def _purge(location_id: int) -> None:
        db.session.execute(ChangeLog.__table__.delete().where(ChangeLog.__table__.c.location_id == location_id))
        db.session.commit()

    return _purge
