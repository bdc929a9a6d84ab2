from __future__ import annotations

import logging
from typing import Any, Mapping

from shop_api.core.errors import NotFoundError
from shop_api.filters.composer import compose_customer_filters
from shop_api.models.customer_models import User
from shop_api.repositories.customer_repositories import CustomerRepository
from shop_api.schemas.customer_schemas import (
    CustomerListResponse,
    CustomerPagination,
    CustomerResponse,
    CustomerUpdate,
)
from shop_api.services.order_services import total_pages

logger = logging.getLogger(__name__)

CUSTOMER_NOT_FOUND = "Customer not found"


class CustomerService:
    """Business layer for the staff view of customers."""

    def __init__(self, repository: CustomerRepository):
        self.repository = repository

    def list_customers(self, params: Mapping[str, Any]) -> CustomerListResponse:
        descriptor = compose_customer_filters(params)
        customers, total = self.repository.list(descriptor)
        return CustomerListResponse(
            customers=[CustomerResponse.model_validate(c) for c in customers],
            pagination=CustomerPagination(
                total_customers=total,
                total_pages=total_pages(total, descriptor.limit),
                current_page=descriptor.page,
                page_size=descriptor.limit,
            ),
        )

    def get_customer(self, customer_id: int) -> User:
        customer = self.repository.get(customer_id)
        if not customer:
            logger.debug("customer not found", extra={"customer_id": customer_id})
            raise NotFoundError(CUSTOMER_NOT_FOUND)
        return customer

    def update_customer(self, customer_id: int, customer_in: CustomerUpdate) -> User:
        customer = self.get_customer(customer_id)
        changes = customer_in.model_dump(exclude_unset=True, exclude_none=True)
        updated = self.repository.update(customer, changes)
        logger.info("customer updated", extra={"customer_id": customer_id, "fields": sorted(changes)})
        return updated

    def delete_customer(self, customer_id: int) -> CustomerResponse:
        customer = self.get_customer(customer_id)
        snapshot = CustomerResponse.model_validate(customer)
        self.repository.delete(customer)
        logger.info("customer deleted", extra={"customer_id": customer_id})
        return snapshot
