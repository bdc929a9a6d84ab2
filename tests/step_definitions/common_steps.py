# tests/step_definitions/common_steps.py
import pytest
from pytest_bdd import given, when, then, parsers
from fastapi.testclient import TestClient
from sqlalchemy import func, select

from shop_api.core.config import settings
from shop_api.core.security import AuthContext, require_user
from shop_api.main import app
from shop_api.models import Order, Product

STAFF = AuthContext(user_id=0, email="staff@example.com", roles=[settings.ROLE_ADMIN])


@pytest.fixture
def scenario_data():
    return {"products": {}, "customers": {}, "orders": {}}


@pytest.fixture
def client(scenario_data):
    # The gateway identity is whatever the scenario signed in as
    app.dependency_overrides[require_user] = lambda: scenario_data["auth"]
    yield TestClient(app)
    app.dependency_overrides.clear()


def checkout_body(product_ids, total, phone="+1234567890"):
    return {
        "address": "1 Main street",
        "payment": "card",
        "phone": phone,
        "total": total,
        "email": "buyer@example.com",
        "items": product_ids,
    }


def ensure_customer(factory, scenario_data, name):
    if name not in scenario_data["customers"]:
        customer = factory.customer(name)
        scenario_data["customers"][name] = customer.id
        scenario_data["orders"][name] = []
    return scenario_data["customers"][name]


def catalog_price(factory, product_id):
    return factory.db.get(Product, product_id).price


def latest_order(scenario_data, name):
    return scenario_data["orders"][name][-1]


def as_staff(scenario_data, call):
    previous = scenario_data.get("auth")
    scenario_data["auth"] = STAFF
    try:
        return call()
    finally:
        scenario_data["auth"] = previous


# ---------- GIVEN ----------
@given("the shop API is available")
def step_api_available(client):
    assert client.get("/health").status_code == 200


@given(parsers.parse('a product "{title}" priced {price:g}'))
def step_product(factory, scenario_data, title, price):
    scenario_data["products"][title] = factory.product(title, price).id


@given(parsers.parse('a product "{title}" without a price'))
def step_product_without_price(factory, scenario_data, title):
    scenario_data["products"][title] = factory.product(title, None).id


@given(parsers.parse('I am signed in as customer "{name}"'))
def step_signed_in_customer(factory, scenario_data, name):
    customer_id = ensure_customer(factory, scenario_data, name)
    scenario_data["auth"] = AuthContext(user_id=customer_id)


@given("I am signed in as staff")
def step_signed_in_staff(scenario_data):
    scenario_data["auth"] = STAFF


@given(parsers.parse('customer "{name}" has ordered "{title}" {times:d} times'))
def step_customer_has_ordered(client, factory, scenario_data, name, title, times):
    customer_id = ensure_customer(factory, scenario_data, name)
    product_id = scenario_data["products"][title]
    previous = scenario_data.get("auth")
    scenario_data["auth"] = AuthContext(user_id=customer_id)
    for _ in range(times):
        resp = client.post("/orders", json=checkout_body([product_id], catalog_price(factory, product_id)))
        assert resp.status_code == 201
        scenario_data["orders"][name].append(resp.json())
    scenario_data["auth"] = previous


# ---------- THEN ----------
@then(parsers.parse("the response status should be {status_code:d}"))
def step_status(scenario_data, status_code):
    assert scenario_data["response"].status_code == status_code


@then(parsers.parse('the error message should be "{message}"'))
def step_error_message(scenario_data, message):
    assert scenario_data["response"].json() == {"message": message}


@then(parsers.parse('customer "{name}" should have {count:d} orders worth {total:g}'))
def step_customer_stats(client, scenario_data, name, count, total):
    customer_id = scenario_data["customers"][name]
    resp = as_staff(scenario_data, lambda: client.get(f"/customers/{customer_id}"))
    assert resp.status_code == 200
    data = resp.json()
    assert data["orderCount"] == count
    assert data["totalAmount"] == total


@then("no order should exist")
def step_no_order(db):
    assert db.scalar(select(func.count(Order.id))) == 0
