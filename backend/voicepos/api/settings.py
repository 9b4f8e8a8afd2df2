"""Store settings: tax rates and payment methods."""

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from voicepos.core.deps import (
    get_current_user, get_payment_methods, get_sessions, get_tax_table, http_error, require_permission,
)
from voicepos.core.exceptions import POSError
from voicepos.models.role import Feature
from voicepos.pos.cart import TaxTable
from voicepos.pos.session import SessionRegistry
from voicepos.schemas.auth import CurrentUser
from voicepos.schemas.common import PaymentMethod
from voicepos.schemas.pos import TaxRateUpdate, TaxSettings

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/settings", tags=["settings"])


def _tax_settings(tax_table: TaxTable) -> TaxSettings:
    return TaxSettings(default_rate=tax_table.default_rate, store_rates=tax_table.overrides())


@router.get("/tax", response_model=TaxSettings)
async def get_tax_settings(
    current_user: CurrentUser = Depends(require_permission(Feature.SETTINGS)),
    tax_table: TaxTable = Depends(get_tax_table),
):
    return _tax_settings(tax_table)


@router.put("/tax", response_model=TaxSettings)
async def update_tax_rate(
    body: TaxRateUpdate,
    current_user: CurrentUser = Depends(require_permission(Feature.SETTINGS)),
    tax_table: TaxTable = Depends(get_tax_table),
    sessions: SessionRegistry = Depends(get_sessions),
):
    """Set the default rate, or a store override when ``store_id`` is given."""
    try:
        tax_table.set_rate(body.rate, body.store_id)
    except POSError as exc:
        raise http_error(exc)
    sessions.refresh_tax_rates()
    return _tax_settings(tax_table)


@router.get("/payment-methods", response_model=list[PaymentMethod])
async def list_payment_methods(
    current_user: CurrentUser = Depends(get_current_user),
    payment_methods: list[PaymentMethod] = Depends(get_payment_methods),
):
    return payment_methods


@router.post("/payment-methods", response_model=list[PaymentMethod], status_code=status.HTTP_201_CREATED)
async def add_payment_method(
    body: PaymentMethod,
    current_user: CurrentUser = Depends(require_permission(Feature.SETTINGS)),
    payment_methods: list[PaymentMethod] = Depends(get_payment_methods),
):
    if any(m.id == body.id for m in payment_methods):
        raise HTTPException(status.HTTP_400_BAD_REQUEST, f"Payment method '{body.id}' already exists")
    # Sessions hold this same list, so the change applies to open checkouts
    payment_methods.append(body)
    logger.info("Payment method %s added", body.id)
    return payment_methods


@router.delete("/payment-methods/{method_id}", response_model=list[PaymentMethod])
async def remove_payment_method(
    method_id: str,
    current_user: CurrentUser = Depends(require_permission(Feature.SETTINGS)),
    payment_methods: list[PaymentMethod] = Depends(get_payment_methods),
):
    for index, method in enumerate(payment_methods):
        if method.id == method_id:
            del payment_methods[index]
            logger.info("Payment method %s removed", method_id)
            return payment_methods
    raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Payment method not found")
