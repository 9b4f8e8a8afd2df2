"""Customer directory and credit recovery endpoints."""

from fastapi import APIRouter, Depends, HTTPException, Query, status

from voicepos.core.deps import get_payment_methods, get_store, http_error, require_permission
from voicepos.core.exceptions import POSError
from voicepos.models.role import Feature
from voicepos.schemas.auth import CurrentUser
from voicepos.schemas.common import PaymentMethod
from voicepos.schemas.customer import (
    Customer, CustomerCreate, CustomerListResponse, CustomerUpdate, RecoveryRequest,
)
from voicepos.services.customers import customers_with_balance, record_recovery
from voicepos.store.base import CatalogStore

router = APIRouter(prefix="/customers", tags=["customers"])


@router.get("", response_model=CustomerListResponse)
async def list_customers(
    search: str | None = Query(None, max_length=100),
    with_balance: bool = False,
    current_user: CurrentUser = Depends(require_permission(Feature.CUSTOMERS)),
    store: CatalogStore = Depends(get_store),
):
    if with_balance:
        items = await customers_with_balance(store)
    else:
        items = await store.list_customers(search=search)
    return CustomerListResponse(items=items, total=len(items))


@router.get("/{customer_id}", response_model=Customer)
async def get_customer(
    customer_id: str,
    current_user: CurrentUser = Depends(require_permission(Feature.CUSTOMERS)),
    store: CatalogStore = Depends(get_store),
):
    customer = await store.get_customer(customer_id)
    if customer is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Customer not found")
    return customer


@router.post("", response_model=Customer, status_code=status.HTTP_201_CREATED)
async def create_customer(
    body: CustomerCreate,
    current_user: CurrentUser = Depends(require_permission(Feature.CUSTOMERS)),
    store: CatalogStore = Depends(get_store),
):
    try:
        return await store.add_customer(body)
    except POSError as exc:
        raise http_error(exc)


@router.patch("/{customer_id}", response_model=Customer)
async def update_customer(
    customer_id: str,
    body: CustomerUpdate,
    current_user: CurrentUser = Depends(require_permission(Feature.CUSTOMERS)),
    store: CatalogStore = Depends(get_store),
):
    customer = await store.update_customer(customer_id, body.model_dump(exclude_unset=True))
    if customer is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Customer not found")
    return customer


@router.delete("/{customer_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_customer(
    customer_id: str,
    current_user: CurrentUser = Depends(require_permission(Feature.CUSTOMERS)),
    store: CatalogStore = Depends(get_store),
):
    if not await store.delete_customer(customer_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Customer not found")


@router.post("/{customer_id}/recoveries", response_model=Customer)
async def recover_balance(
    customer_id: str,
    body: RecoveryRequest,
    current_user: CurrentUser = Depends(require_permission(Feature.CUSTOMERS)),
    store: CatalogStore = Depends(get_store),
    payment_methods: list[PaymentMethod] = Depends(get_payment_methods),
):
    """Record a payment against the customer's credit balance."""
    try:
        return await record_recovery(
            store,
            customer_id,
            body.amount,
            body.payment_method,
            allowed_methods=[m.id for m in payment_methods],
        )
    except POSError as exc:
        raise http_error(exc)
