"""Sales reporting and printable documents."""

from datetime import date, datetime, timezone

from fastapi import APIRouter, Depends, Response

from voicepos.core.deps import get_documents, get_store, http_error, require_permission
from voicepos.core.exceptions import POSError
from voicepos.models.role import Feature
from voicepos.schemas.auth import CurrentUser
from voicepos.schemas.common import Document
from voicepos.schemas.report import SalesReport
from voicepos.services.documents import DocumentSink
from voicepos.services.reports import daily_sales_report
from voicepos.store.base import CatalogStore

router = APIRouter(prefix="/reports", tags=["reports"])


def _today() -> date:
    # Order dates are stored in UTC
    return datetime.now(timezone.utc).date()


def _download(document: Document) -> Response:
    return Response(
        content=document.content,
        media_type=document.media_type,
        headers={"Content-Disposition": f'attachment; filename="{document.filename}"'},
    )


@router.get("/daily-sales", response_model=SalesReport)
async def get_daily_sales(
    on_date: date | None = None,
    current_user: CurrentUser = Depends(require_permission(Feature.REPORTS)),
    store: CatalogStore = Depends(get_store),
):
    """Totals, payment breakdown and top products for one day (default today)."""
    return await daily_sales_report(store, on_date or _today())


@router.get("/daily-sales.pdf")
async def get_daily_sales_pdf(
    on_date: date | None = None,
    current_user: CurrentUser = Depends(require_permission(Feature.REPORTS)),
    store: CatalogStore = Depends(get_store),
    documents: DocumentSink = Depends(get_documents),
):
    report = await daily_sales_report(store, on_date or _today())
    try:
        return _download(documents.render_daily_sales_report(report))
    except POSError as exc:
        raise http_error(exc)


@router.get("/catalog.pdf")
async def get_catalog_pdf(
    category: str | None = None,
    current_user: CurrentUser = Depends(require_permission(Feature.REPORTS)),
    store: CatalogStore = Depends(get_store),
    documents: DocumentSink = Depends(get_documents),
):
    products = await store.list_products(category=category)
    try:
        return _download(documents.render_catalog(products))
    except POSError as exc:
        raise http_error(exc)
