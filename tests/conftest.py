"""
Shared pytest fixtures.

Each test gets a fresh in-memory database and a pushed application
context, so tests use ``db.session`` directly and the test client reuses
the same session.
"""
import pytest

from stampcard import create_app
from stampcard.extensions import db
from stampcard.models import Business, Customer


@pytest.fixture
def app():
    """Application with a clean schema."""
    app = create_app('testing')

    ctx = app.app_context()
    ctx.push()
    db.create_all()

    yield app

    db.session.remove()
    db.drop_all()
    ctx.pop()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def sample_business(app):
    """Barber shop: a free haircut every 10th visit, valid for 30 days."""
    business = Business(
        name='Kinyozi Cuts',
        phone='+254711000000',
        address='Moi Avenue, Nairobi',
        visits_required=10,
        reward_description='Free haircut',
        reward_expiry_days=30,
        sms_enabled=True
    )
    db.session.add(business)
    db.session.commit()
    return business


@pytest.fixture
def quick_business(app):
    """Business rewarding every 3rd visit."""
    business = Business(
        name='Mama Njeri Salon',
        visits_required=3,
        reward_description='Free manicure',
        reward_expiry_days=14,
        sms_enabled=True
    )
    db.session.add(business)
    db.session.commit()
    return business


@pytest.fixture
def sample_customer(sample_business):
    customer = Customer(
        business_id=sample_business.id,
        name='Amina Wanjiru',
        phone='+254700000001',
        email='amina@example.com'
    )
    db.session.add(customer)
    db.session.commit()
    return customer


@pytest.fixture
def make_customer(app):
    """Factory for customers of any business."""
    counter = {'n': 100}

    def _make(business, name=None, **fields):
        counter['n'] += 1
        customer = Customer(
            business_id=business.id,
            name=name or f'Customer {counter["n"]}',
            phone=fields.pop('phone', f'+254700000{counter["n"]}'),
            **fields
        )
        db.session.add(customer)
        db.session.commit()
        return customer

    return _make
