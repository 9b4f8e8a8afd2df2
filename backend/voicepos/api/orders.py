"""Order history, status changes and receipts."""

from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Response, status

from voicepos.core.config import Settings
from voicepos.core.deps import get_config, get_documents, get_store, http_error, require_permission
from voicepos.core.exceptions import POSError
from voicepos.models.order import ORDER_STATUS_TRANSITIONS, OrderStatus
from voicepos.models.role import Feature
from voicepos.schemas.auth import CurrentUser
from voicepos.schemas.order import Order, OrderListResponse
from voicepos.services.documents import DocumentSink
from voicepos.services.receipt import (
    ReceiptData,
    format_receipt_text,
    generate_esc_pos_commands,
    receipt_from_order,
)
from voicepos.store.base import CatalogStore

router = APIRouter(prefix="/orders", tags=["orders"])


async def _get_order_or_404(store: CatalogStore, order_id: str) -> Order:
    order = await store.get_order(order_id)
    if order is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Order not found")
    return order


async def _transition(store: CatalogStore, order_id: str, new_status: OrderStatus) -> Order:
    order = await _get_order_or_404(store, order_id)
    if new_status not in ORDER_STATUS_TRANSITIONS[order.status]:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Cannot change order from {order.status.value} to {new_status.value}",
        )
    updated = await store.update_order(order_id, {"status": new_status})
    if updated is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Order not found")
    return updated


@router.get("", response_model=OrderListResponse)
async def list_orders(
    customer_id: str | None = None,
    status_filter: OrderStatus | None = None,
    on_date: date | None = None,
    current_user: CurrentUser = Depends(require_permission(Feature.ORDERS)),
    store: CatalogStore = Depends(get_store),
):
    items = await store.list_orders(customer_id=customer_id, status=status_filter, on_date=on_date)
    items.sort(key=lambda o: o.date, reverse=True)
    return OrderListResponse(items=items, total=len(items))


@router.get("/{order_id}", response_model=Order)
async def get_order(
    order_id: str,
    current_user: CurrentUser = Depends(require_permission(Feature.ORDERS)),
    store: CatalogStore = Depends(get_store),
):
    return await _get_order_or_404(store, order_id)


@router.post("/{order_id}/complete", response_model=Order)
async def complete_order(
    order_id: str,
    current_user: CurrentUser = Depends(require_permission(Feature.ORDERS)),
    store: CatalogStore = Depends(get_store),
):
    return await _transition(store, order_id, OrderStatus.COMPLETED)


@router.post("/{order_id}/cancel", response_model=Order)
async def cancel_order(
    order_id: str,
    current_user: CurrentUser = Depends(require_permission(Feature.ORDERS)),
    store: CatalogStore = Depends(get_store),
):
    return await _transition(store, order_id, OrderStatus.CANCELLED)


@router.get("/{order_id}/receipt.pdf")
async def get_receipt_pdf(
    order_id: str,
    current_user: CurrentUser = Depends(require_permission(Feature.ORDERS)),
    store: CatalogStore = Depends(get_store),
    documents: DocumentSink = Depends(get_documents),
):
    order = await _get_order_or_404(store, order_id)
    try:
        document = documents.render_receipt(order)
    except POSError as exc:
        raise http_error(exc)
    return Response(
        content=document.content,
        media_type=document.media_type,
        headers={"Content-Disposition": f'attachment; filename="{document.filename}"'},
    )


async def _receipt_data(
    order_id: str,
    current_user: CurrentUser = Depends(require_permission(Feature.ORDERS)),
    store: CatalogStore = Depends(get_store),
    config: Settings = Depends(get_config),
) -> ReceiptData:
    order = await _get_order_or_404(store, order_id)
    return receipt_from_order(
        order, config.STORE_NAME, cashier_name=current_user.name, currency=config.CURRENCY_SYMBOL
    )


@router.get("/{order_id}/receipt.txt")
async def get_receipt_text(receipt: ReceiptData = Depends(_receipt_data)):
    return Response(content=format_receipt_text(receipt), media_type="text/plain")


@router.get("/{order_id}/receipt.escpos")
async def get_receipt_escpos(receipt: ReceiptData = Depends(_receipt_data)):
    """Raw ESC/POS bytes for a thermal receipt printer."""
    return Response(
        content=generate_esc_pos_commands(receipt),
        media_type="application/octet-stream",
        headers={"Content-Disposition": f'attachment; filename="receipt-{receipt.order_id}.bin"'},
    )
