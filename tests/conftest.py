import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["RATE_LIMIT_ENABLED"] = "false"

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from biztrack.billing.client import BillingClient
from biztrack.billing.notifier import Notifier
from biztrack.database import Base, get_db
from biztrack.main import app
from biztrack.models.inventory import Inventory
from biztrack.models.products import Product


class RecordingNotifier(Notifier):
    def __init__(self):
        self.messages = []

    def notify(self, severity, title, description=None):
        self.messages.append((severity, title, description))

    def titles(self, severity=None):
        return [title for sev, title, _ in self.messages if severity is None or sev == severity]


@pytest.fixture
def db_engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)

    yield engine

    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=db_engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db

    yield TestClient(app)

    app.dependency_overrides.clear()


@pytest.fixture
def api(client):
    return BillingClient(base_url="http://testserver", session=client)


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def make_product(db):
    def _make_product(name, price, stock, barcode=None, category="General", threshold=5):
        price = Decimal(str(price))
        product = Product(
            name=name,
            barcode=barcode,
            category=category,
            cost_price=price / 2,
            selling_price=price,
        )
        db.add(product)
        db.flush()

        db.add(
            Inventory(
                product_id=product.id,
                quantity_available=stock,
                low_stock_threshold=threshold,
            )
        )
        db.commit()
        db.refresh(product)

        return product

    return _make_product
