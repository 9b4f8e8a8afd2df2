"""POS session endpoints: cart, checkout and held orders."""

from fastapi import APIRouter, Depends, HTTPException, status

from voicepos.core.config import Settings
from voicepos.core.deps import (
    get_config,
    get_pos_session,
    get_sessions,
    get_voice_contexts,
    http_error,
    require_permission,
)
from voicepos.core.exceptions import POSError
from voicepos.models.role import Feature
from voicepos.pos.cart import round_money
from voicepos.pos.session import PosSession, SessionRegistry
from voicepos.schemas.auth import CurrentUser
from voicepos.schemas.order import Order
from voicepos.schemas.pos import (
    CartItemAdd,
    CartTotals,
    CheckoutResponse,
    ConfirmRequest,
    CustomerSelection,
    HoldRequest,
    PaymentSelection,
    PosSessionCreate,
    PosSessionState,
    QuantityUpdate,
)
from voicepos.services.receipt import format_receipt_text, receipt_from_order
from voicepos.voice.context import VoiceContext

router = APIRouter(prefix="/pos", tags=["pos"])


def session_state(session: PosSession) -> PosSessionState:
    cart = session.cart
    return PosSessionState(
        id=session.id,
        store_id=session.store_id,
        checkout_state=session.checkout.state.value,
        payment_method=session.checkout.payment_method,
        customer=session.checkout.customer,
        items=cart.items,
        totals=CartTotals(
            item_count=cart.item_count,
            subtotal=round_money(cart.subtotal()),
            tax_rate=cart.tax_rate,
            tax=round_money(cart.tax()),
            total=round_money(cart.total()),
        ),
        last_error=session.checkout.last_error,
    )


# ── Sessions ───────────────────────────────────────
@router.post("/sessions", response_model=PosSessionState, status_code=status.HTTP_201_CREATED)
async def open_session(
    body: PosSessionCreate,
    current_user: CurrentUser = Depends(require_permission(Feature.ORDERS)),
    sessions: SessionRegistry = Depends(get_sessions),
):
    return session_state(sessions.create(cashier=current_user, store_id=body.store_id))


@router.get("/sessions/{session_id}", response_model=PosSessionState)
async def get_session(
    current_user: CurrentUser = Depends(require_permission(Feature.ORDERS)),
    session: PosSession = Depends(get_pos_session),
):
    return session_state(session)


@router.delete("/sessions/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
async def close_session(
    session_id: str,
    current_user: CurrentUser = Depends(require_permission(Feature.ORDERS)),
    sessions: SessionRegistry = Depends(get_sessions),
    voice_contexts: dict[str, VoiceContext] = Depends(get_voice_contexts),
):
    if not sessions.close(session_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="POS session not found")
    for context in voice_contexts.values():
        await context.detach_session(session_id)


# ── Cart ───────────────────────────────────────────
@router.post("/sessions/{session_id}/items", response_model=PosSessionState)
async def add_item(
    body: CartItemAdd,
    current_user: CurrentUser = Depends(require_permission(Feature.ORDERS)),
    session: PosSession = Depends(get_pos_session),
):
    """Add one unit; an unknown product leaves the cart unchanged."""
    try:
        if body.product_id:
            await session.add_product(body.product_id)
        else:
            await session.add_product_by_barcode(body.barcode)
    except POSError as exc:
        raise http_error(exc)
    return session_state(session)


@router.patch("/sessions/{session_id}/items/{item_id}", response_model=PosSessionState)
async def update_item_quantity(
    item_id: str,
    body: QuantityUpdate,
    current_user: CurrentUser = Depends(require_permission(Feature.ORDERS)),
    session: PosSession = Depends(get_pos_session),
):
    try:
        session.update_quantity(item_id, body.quantity)
    except POSError as exc:
        raise http_error(exc)
    return session_state(session)


@router.delete("/sessions/{session_id}/items/{item_id}", response_model=PosSessionState)
async def remove_item(
    item_id: str,
    current_user: CurrentUser = Depends(require_permission(Feature.ORDERS)),
    session: PosSession = Depends(get_pos_session),
):
    try:
        session.remove_item(item_id)
    except POSError as exc:
        raise http_error(exc)
    return session_state(session)


@router.delete("/sessions/{session_id}/items", response_model=PosSessionState)
async def clear_cart(
    current_user: CurrentUser = Depends(require_permission(Feature.ORDERS)),
    session: PosSession = Depends(get_pos_session),
):
    try:
        session.clear_cart()
    except POSError as exc:
        raise http_error(exc)
    return session_state(session)


# ── Checkout ───────────────────────────────────────
@router.post("/sessions/{session_id}/checkout/begin", response_model=PosSessionState)
async def begin_checkout(
    current_user: CurrentUser = Depends(require_permission(Feature.ORDERS)),
    session: PosSession = Depends(get_pos_session),
):
    try:
        session.begin_checkout()
    except POSError as exc:
        raise http_error(exc)
    return session_state(session)


@router.put("/sessions/{session_id}/checkout/payment", response_model=PosSessionState)
async def select_payment(
    body: PaymentSelection,
    current_user: CurrentUser = Depends(require_permission(Feature.ORDERS)),
    session: PosSession = Depends(get_pos_session),
):
    try:
        session.select_payment(body.method_id)
    except POSError as exc:
        raise http_error(exc)
    return session_state(session)


@router.put("/sessions/{session_id}/checkout/customer", response_model=PosSessionState)
async def select_customer(
    body: CustomerSelection,
    current_user: CurrentUser = Depends(require_permission(Feature.ORDERS)),
    session: PosSession = Depends(get_pos_session),
):
    try:
        await session.select_customer(body.customer_id)
    except POSError as exc:
        raise http_error(exc)
    return session_state(session)


@router.post("/sessions/{session_id}/checkout/confirm", response_model=CheckoutResponse)
async def confirm_payment(
    body: ConfirmRequest,
    current_user: CurrentUser = Depends(require_permission(Feature.ORDERS)),
    session: PosSession = Depends(get_pos_session),
    config: Settings = Depends(get_config),
):
    try:
        result = await session.confirm_payment(body.method_id)
    except POSError as exc:
        raise http_error(exc)
    receipt = receipt_from_order(
        result.order, config.STORE_NAME, cashier_name=current_user.name, currency=config.CURRENCY_SYMBOL
    )
    return CheckoutResponse(
        order=result.order,
        receipt_text=format_receipt_text(receipt),
        customer_update_error=result.customer_update_error,
        session=session_state(session),
    )


@router.post("/sessions/{session_id}/checkout/cancel", response_model=PosSessionState)
async def cancel_checkout(
    current_user: CurrentUser = Depends(require_permission(Feature.ORDERS)),
    session: PosSession = Depends(get_pos_session),
):
    try:
        session.cancel_checkout()
    except POSError as exc:
        raise http_error(exc)
    return session_state(session)


# ── Held orders ────────────────────────────────────
@router.post("/sessions/{session_id}/hold", response_model=Order, status_code=status.HTTP_201_CREATED)
async def hold_order(
    body: HoldRequest,
    current_user: CurrentUser = Depends(require_permission(Feature.ORDERS)),
    session: PosSession = Depends(get_pos_session),
):
    try:
        return await session.hold_order(notes=body.notes)
    except POSError as exc:
        raise http_error(exc)


@router.get("/sessions/{session_id}/held-orders", response_model=list[Order])
async def list_held_orders(
    current_user: CurrentUser = Depends(require_permission(Feature.ORDERS)),
    session: PosSession = Depends(get_pos_session),
):
    return await session.held_orders()


@router.post("/sessions/{session_id}/held-orders/{order_id}/resume", response_model=PosSessionState)
async def resume_order(
    order_id: str,
    current_user: CurrentUser = Depends(require_permission(Feature.ORDERS)),
    session: PosSession = Depends(get_pos_session),
):
    try:
        await session.resume_order(order_id)
    except POSError as exc:
        raise http_error(exc)
    return session_state(session)
