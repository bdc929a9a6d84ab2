from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from shop_api.core.database import get_db
from shop_api.core.security import AuthContext, require_admin, require_user
from shop_api.filters.sanitizer import params_from_query
from shop_api.repositories.customer_repositories import CustomerRepository
from shop_api.repositories.order_repositories import OrderRepository
from shop_api.repositories.product_repositories import ProductRepository
from shop_api.schemas.order_schemas import (
    OrderCreate,
    OrderListResponse,
    OrderResponse,
    OrderUpdate,
)
from shop_api.services.order_services import OrderService

router = APIRouter(prefix="/orders", tags=["orders"])
logger = logging.getLogger(__name__)


# ---------- Dependency injection ----------
def get_order_service(db: Session = Depends(get_db)) -> OrderService:
    """Builds an OrderService on the request session."""
    return OrderService(OrderRepository(db), ProductRepository(db), CustomerRepository(db))


# ---------- Current user ----------
@router.get("/me", response_model=OrderListResponse)
def list_my_orders(
    request: Request,
    auth: AuthContext = Depends(require_user),
    svc: OrderService = Depends(get_order_service),
):
    """Orders of the authenticated customer (search, page, limit)."""
    return svc.list_customer_orders(auth.user_id, params_from_query(request.query_params))


@router.get("/me/{order_number}", response_model=OrderResponse)
def get_my_order(
    order_number: int,
    auth: AuthContext = Depends(require_user),
    svc: OrderService = Depends(get_order_service),
):
    """One of the caller's orders. Someone else's order answers 404."""
    return svc.get_customer_order_by_number(order_number, auth.user_id)


@router.post("", response_model=OrderResponse, status_code=status.HTTP_201_CREATED)
def create_order(
    order_in: OrderCreate,
    auth: AuthContext = Depends(require_user),
    svc: OrderService = Depends(get_order_service),
):
    """Checkout: the basket is rebuilt from the catalog and the total re-checked."""
    logger.info("Creating order for customer %s", auth.user_id)
    return svc.create_order(order_in, auth.user_id)


# ---------- Staff ----------
@router.get(
    "",
    response_model=OrderListResponse,
    dependencies=[Depends(require_admin)],
)
def list_orders(request: Request, svc: OrderService = Depends(get_order_service)):
    """
    GET /orders?page=2&limit=5&sortField=totalAmount&sortOrder=desc&orderDateFrom=2024-07-01
    &orderDateTo=2024-08-01&status=pending&totalAmountFrom=100&totalAmountTo=1000&search=%2B1
    """
    return svc.list_orders(params_from_query(request.query_params))


@router.get(
    "/{order_number}",
    response_model=OrderResponse,
    dependencies=[Depends(require_admin)],
)
def get_order(order_number: int, svc: OrderService = Depends(get_order_service)):
    return svc.get_order_by_number(order_number)


@router.patch(
    "/{order_number}",
    response_model=OrderResponse,
    dependencies=[Depends(require_admin)],
)
def update_order_status(
    order_number: int,
    status_update: OrderUpdate,
    svc: OrderService = Depends(get_order_service),
):
    return svc.update_order_status(order_number, status_update.status)


@router.delete(
    "/{order_id}",
    response_model=OrderResponse,
    dependencies=[Depends(require_admin)],
)
def delete_order(order_id: int, svc: OrderService = Depends(get_order_service)):
    """Deletes by internal id and returns the deleted order."""
    logger.info("Deleting order %s", order_id)
    return svc.delete_order(order_id)
