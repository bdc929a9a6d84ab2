import os
import sys
import tempfile

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

_TEST_DB = os.path.join(tempfile.gettempdir(), "shop_api_test.db")
os.environ["DATABASE_URL"] = f"sqlite:///{_TEST_DB}"
os.environ["TESTING"] = "1"

from datetime import datetime
from itertools import count
from typing import Optional, Sequence

import pytest

from shop_api import models  # noqa: F401
from shop_api.core.database import Base, SessionLocal, engine
from shop_api.models import Order, OrderProduct, OrderStatus, Product, User


@pytest.fixture(autouse=True)
def setup_db():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    session = SessionLocal()
    yield session
    session.close()


class Factory:
    """Writes rows straight to the test database."""

    def __init__(self, db):
        self.db = db
        self._seq = count(1)

    def product(self, title: str = "Product", price: Optional[float] = 10.0) -> Product:
        product = Product(title=title, price=price)
        self.db.add(product)
        self.db.commit()
        return product

    def customer(self, name: str = "Customer", created_at: Optional[datetime] = None, **fields) -> User:
        n = next(self._seq)
        customer = User(
            name=name,
            email=fields.pop("email", f"customer{n}@example.com"),
            **fields,
        )
        if created_at is not None:
            customer.created_at = created_at
        self.db.add(customer)
        self.db.commit()
        return customer

    def order(
        self,
        customer: User,
        products: Sequence[Product],
        created_at: Optional[datetime] = None,
        status: OrderStatus = OrderStatus.CREATED,
        delivery_address: str = "1 Main street",
        total_amount: Optional[float] = None,
        order_number: Optional[int] = None,
    ) -> Order:
        order = Order(
            order_number=order_number or next(self._seq) + 1000,
            status=status,
            total_amount=(
                total_amount if total_amount is not None
                else sum(p.price or 0 for p in products)
            ),
            customer_id=customer.id,
            delivery_address=delivery_address,
            phone="+1234567890",
            email=customer.email,
            payment="card",
            comment="",
            items=[OrderProduct(product_id=p.id, position=i) for i, p in enumerate(products)],
        )
        if created_at is not None:
            order.created_at = created_at
        self.db.add(order)
        self.db.commit()
        return order

    def set_last_order(self, customer: User, order: Order) -> None:
        customer.last_order_id = order.id
        customer.last_order_date = order.created_at
        self.db.commit()


@pytest.fixture
def factory(db):
    return Factory(db)


class _Headers:
    """Auth gateway headers."""

    @staticmethod
    def admin(user_id: int = 1) -> dict:
        return {"X-Auth-Request-User": str(user_id), "X-Auth-Request-Groups": "admin"}

    @staticmethod
    def user(user_id: int) -> dict:
        return {"X-Auth-Request-User": str(user_id)}


@pytest.fixture
def headers():
    return _Headers


@pytest.fixture
def client():
    from fastapi.testclient import TestClient
    from shop_api.main import app

    yield TestClient(app)
    app.dependency_overrides.clear()
