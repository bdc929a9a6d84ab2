from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from shop_api.core.database import get_db
from shop_api.core.security import require_admin
from shop_api.filters.sanitizer import params_from_query
from shop_api.repositories.customer_repositories import CustomerRepository
from shop_api.schemas.customer_schemas import (
    CustomerListResponse,
    CustomerResponse,
    CustomerUpdate,
)
from shop_api.services.customer_services import CustomerService

router = APIRouter(
    prefix="/customers",
    tags=["customers"],
    dependencies=[Depends(require_admin)],
)
logger = logging.getLogger(__name__)


def get_customer_service(db: Session = Depends(get_db)) -> CustomerService:
    return CustomerService(CustomerRepository(db))


@router.get("", response_model=CustomerListResponse)
def list_customers(request: Request, svc: CustomerService = Depends(get_customer_service)):
    """
    GET /customers?page=2&limit=5&sortField=totalAmount&sortOrder=desc&registrationDateFrom=2023-01-01
    &registrationDateTo=2023-12-31&lastOrderDateFrom=2023-01-01&lastOrderDateTo=2023-12-31
    &totalAmountFrom=100&totalAmountTo=1000&orderCountFrom=1&orderCountTo=10&search=...
    """
    return svc.list_customers(params_from_query(request.query_params))


@router.get("/{customer_id}", response_model=CustomerResponse)
def get_customer(customer_id: int, svc: CustomerService = Depends(get_customer_service)):
    return svc.get_customer(customer_id)


@router.patch("/{customer_id}", response_model=CustomerResponse)
def update_customer(
    customer_id: int,
    customer_in: CustomerUpdate,
    svc: CustomerService = Depends(get_customer_service),
):
    return svc.update_customer(customer_id, customer_in)


@router.delete("/{customer_id}", response_model=CustomerResponse)
def delete_customer(customer_id: int, svc: CustomerService = Depends(get_customer_service)):
    logger.info("Deleting customer %s", customer_id)
    return svc.delete_customer(customer_id)
