import pytest
from datetime import datetime
from unittest.mock import MagicMock

from shop_api.core.errors import NotFoundError
from shop_api.filters.sanitizer import CustomerSortField, SortOrder
from shop_api.models import User
from shop_api.schemas.customer_schemas import CustomerUpdate
from shop_api.services.customer_services import CustomerService


@pytest.fixture
def repo():
    return MagicMock()


@pytest.fixture
def service(repo):
    return CustomerService(repo)


def _customer(cid=1, name="Anna"):
    return User(
        id=cid,
        name=name,
        email=f"{name.lower()}@example.com",
        created_at=datetime(2023, 1, 1),
        total_amount=0.0,
        order_count=0,
        orders=[],
    )


def test_list_customers_defaults(service, repo):
    repo.list.return_value = ([_customer()], 1)

    result = service.list_customers({"sortField": "bogus", "limit": "100"})

    descriptor = repo.list.call_args.args[0]
    assert descriptor.sort_field is CustomerSortField.CREATED_AT
    assert descriptor.sort_order is SortOrder.DESC
    assert descriptor.limit == 10
    assert result.model_dump(by_alias=True)["pagination"] == {
        "totalCustomers": 1, "totalPages": 1, "currentPage": 1, "pageSize": 10,
    }


def test_get_customer_not_found(service, repo):
    repo.get.return_value = None
    with pytest.raises(NotFoundError):
        service.get_customer(99)


def test_update_customer_passes_only_given_fields(service, repo):
    customer = _customer()
    repo.get.return_value = customer
    repo.update.return_value = customer

    service.update_customer(1, CustomerUpdate(name="Anna K."))
    repo.update.assert_called_once_with(customer, {"name": "Anna K."})


def test_delete_customer_returns_snapshot(service, repo):
    customer = _customer(cid=5, name="Boris")
    repo.get.return_value = customer

    deleted = service.delete_customer(5)

    assert deleted.id == 5
    assert deleted.name == "Boris"
    repo.delete.assert_called_once_with(customer)
