import os

# before any storefront import: the module level engine must never point at postgres
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.pop("TWILIO_ACCOUNT_SID", None)
os.environ.pop("TWILIO_AUTH_TOKEN", None)

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from storefront.api.deps import get_message_dispatcher
from storefront.data.database import get_db, init_db
from storefront.data.models import CartItemModel, CartModel, ProductModel, UserModel
from storefront.main import create_app
from storefront.services.broadcast import Broadcaster
from storefront.services.notification_service import EventNotifier


class RecordingBroadcaster(Broadcaster):
    """Broadcaster that keeps every event in memory for assertions."""

    def __init__(self):
        self.events: list[tuple[str, dict]] = []
        self.should_fail = False

    def publish(self, event: str, payload: dict) -> None:
        if self.should_fail:
            raise ConnectionError("broadcast channel down")
        self.events.append((event, payload))

    def named(self, event: str) -> list[dict]:
        return [payload for name, payload in self.events if name == event]


class RecordingDispatcher:
    """Stands in for the celery enqueue of outbound messages."""

    def __init__(self):
        self.calls: list[dict] = []
        self.should_fail = False

    def __call__(self, order_event: dict) -> None:
        if self.should_fail:
            raise ConnectionError("broker unavailable")
        self.calls.append(order_event)


@pytest.fixture()
def engine(tmp_path):
    # file backed so separate sessions really use separate connections
    engine = create_engine(
        f"sqlite:///{tmp_path / 'storefront.db'}",
        connect_args={"check_same_thread": False},
    )
    init_db(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@pytest.fixture()
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture()
def broadcaster():
    return RecordingBroadcaster()


@pytest.fixture()
def dispatcher():
    return RecordingDispatcher()


def run_now(fn, *args):
    fn(*args)


@pytest.fixture()
def notifier(broadcaster, dispatcher):
    # service tests assert on the events right away
    return EventNotifier(broadcaster, run_now, dispatcher)


@pytest.fixture()
def client(session_factory, broadcaster, dispatcher):
    app = create_app(broadcaster=broadcaster, create_tables=False)

    def _get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_message_dispatcher] = lambda: dispatcher
    return TestClient(app)


@pytest.fixture()
def make_product(db):
    def _make(name="Brake Pads", price="100.00", stock=5, cost_price="60.00", selling_price=None):
        product = ProductModel(
            name=name,
            price=Decimal(price),
            selling_price=Decimal(selling_price) if selling_price is not None else None,
            cost_price=Decimal(cost_price),
            stock=stock,
        )
        db.add(product)
        db.commit()
        return product

    return _make


@pytest.fixture()
def make_user(db):
    def _make(user_id, name="Jane Doe", email="jane@example.com", phone="9876543210", role="user"):
        user = UserModel(id=user_id, name=name, email=email, phone=phone, role=role)
        db.add(user)
        db.commit()
        return user

    return _make


@pytest.fixture()
def fill_cart(db):
    """Writes cart lines directly, bypassing the soft stock check."""

    def _fill(user_id, *lines):
        cart = db.query(CartModel).filter_by(user_id=user_id).one_or_none()
        if cart is None:
            cart = CartModel(user_id=user_id, version=1)
            db.add(cart)
            db.flush()
        for product_id, quantity in lines:
            db.add(CartItemModel(cart_id=cart.id, product_id=product_id, quantity=quantity))
        db.commit()
        return cart

    return _fill
