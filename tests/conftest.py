"""
Shared fixtures: an app bound to an in-memory SQLite database with one salon,
one staff member and a customer ready to check in.
"""
import sys
from datetime import datetime, timezone
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from salon_api.app import create_app  # noqa: E402
from salon_api.config import TestConfig  # noqa: E402
from salon_api.extensions import db as database  # noqa: E402
from salon_api.models import Customer, Salon, Staff  # noqa: E402

T0 = datetime(2026, 10, 19, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def app():
    app = create_app(TestConfig)
    with app.app_context():
        database.create_all()
        yield app
        database.session.remove()
        database.drop_all()


@pytest.fixture
def db(app):
    return database


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def staff_headers(app):
    return {"Authorization": f"Bearer {app.config['STAFF_API_TOKEN']}"}


@pytest.fixture
def salon(db):
    salon = Salon(name="Test Kuaför")
    db.session.add(salon)
    db.session.commit()
    return salon


@pytest.fixture
def staff(db, salon):
    member = Staff(salon_id=salon.id, full_name="Ayşe Usta")
    db.session.add(member)
    db.session.commit()
    return member


@pytest.fixture
def customer(db, salon):
    customer = Customer(salon_id=salon.id, full_name="Zeynep Kaya", phone="+90 555 123 4567")
    db.session.add(customer)
    db.session.commit()
    return customer


@pytest.fixture
def make_customer(db, salon):
    def _make(name="Customer", **kwargs):
        row = Customer(salon_id=salon.id, full_name=name, **kwargs)
        db.session.add(row)
        db.session.commit()
        return row
    return _make
