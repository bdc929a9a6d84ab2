# shop_api/services/order_services.py
from __future__ import annotations

import logging
import math
from typing import Any, Mapping

from shop_api.core.errors import NotFoundError
from shop_api.filters.composer import (
    FilterDescriptor,
    compose_order_filters,
    compose_own_order_filters,
)
from shop_api.models.order_models import Order, OrderStatus
from shop_api.repositories.customer_repositories import CustomerRepository
from shop_api.repositories.order_repositories import OrderRepository
from shop_api.repositories.product_repositories import ProductRepository
from shop_api.schemas.order_schemas import (
    OrderCreate,
    OrderListResponse,
    OrderPagination,
    OrderResponse,
)
from shop_api.services.order_validation import OrderCreationValidator

logger = logging.getLogger(__name__)

ORDER_NOT_FOUND = "Order not found"


def total_pages(total: int, limit: int) -> int:
    return math.ceil(total / limit)


class OrderService:
    """
    Business layer for orders.
    - Listings go through the flatten/regroup pipeline of the repository.
    - Checkout rebuilds the basket from the catalog before anything is written.
    """

    def __init__(
        self,
        repository: OrderRepository,
        products: ProductRepository,
        customers: CustomerRepository,
    ):
        self.repository = repository
        self.validator = OrderCreationValidator(products)
        self.customers = customers

    # ==========================================================
    # === Read =================================================
    # ==========================================================

    def _page(self, descriptor: FilterDescriptor, customer_id: int | None = None) -> OrderListResponse:
        orders, total = self.repository.list(descriptor, customer_id=customer_id)
        return OrderListResponse(
            orders=[OrderResponse.model_validate(o) for o in orders],
            pagination=OrderPagination(
                total_orders=total,
                total_pages=total_pages(total, descriptor.limit),
                current_page=descriptor.page,
                page_size=descriptor.limit,
            ),
        )

    def list_orders(self, params: Mapping[str, Any]) -> OrderListResponse:
        return self._page(compose_order_filters(params))

    def list_customer_orders(self, customer_id: int, params: Mapping[str, Any]) -> OrderListResponse:
        if self.customers.get(customer_id) is None:
            raise NotFoundError("Customer not found")
        return self._page(compose_own_order_filters(params), customer_id=customer_id)

    def get_order_by_number(self, order_number: int) -> Order:
        order = self.repository.get_by_number(order_number)
        if not order:
            logger.debug("order not found", extra={"order_number": order_number})
            raise NotFoundError(ORDER_NOT_FOUND)
        return order

    def get_customer_order_by_number(self, order_number: int, customer_id: int) -> Order:
        order = self.get_order_by_number(order_number)
        if order.customer_id != customer_id:
            # Someone else's order looks exactly like a missing one
            logger.info(
                "order requested by another customer",
                extra={"order_number": order_number, "customer_id": customer_id},
            )
            raise NotFoundError(ORDER_NOT_FOUND)
        return order

    # ==========================================================
    # === Write ================================================
    # ==========================================================

    def create_order(self, order_in: OrderCreate, customer_id: int) -> Order:
        customer = self.customers.get(customer_id)
        if customer is None:
            raise NotFoundError("Customer not found")

        validated = self.validator.validate(order_in)
        order = self.repository.create(
            customer=customer,
            products=validated.products,
            total_amount=validated.total_amount,
            delivery_address=validated.delivery_address,
            phone=validated.phone,
            email=validated.email,
            payment=validated.payment,
            comment=validated.comment,
        )
        logger.info(
            "order created",
            extra={"order_number": order.order_number, "customer_id": customer_id, "items": len(validated.products)},
        )
        return order

    def update_order_status(self, order_number: int, new_status: OrderStatus) -> Order:
        order = self.get_order_by_number(order_number)
        if order.status == new_status:
            logger.info("order %s already %s, no-op", order.order_number, new_status.value)
            return order

        old_status = order.status
        updated = self.repository.update_status(order, new_status)
        logger.info(
            "order status updated",
            extra={"order_number": order_number, "from": old_status.value, "to": new_status.value},
        )
        return updated

    def delete_order(self, order_id: int) -> OrderResponse:
        order = self.repository.get(order_id)
        if not order:
            raise NotFoundError(ORDER_NOT_FOUND)

        snapshot = OrderResponse.model_validate(order)
        self.repository.delete(order)
        logger.info("order deleted", extra={"order_id": order_id})
        return snapshot
