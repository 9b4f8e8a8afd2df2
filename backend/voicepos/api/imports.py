"""Excel import/export of products and customers."""

from fastapi import APIRouter, Depends, File, HTTPException, Response, UploadFile, status

from voicepos.core.config import Settings
from voicepos.core.deps import get_config, get_current_user, get_store, http_error, require_permission
from voicepos.core.exceptions import POSError
from voicepos.models.role import Feature
from voicepos.schemas.auth import CurrentUser
from voicepos.schemas.common import ImportResult
from voicepos.services import spreadsheets
from voicepos.store.base import CatalogStore

router = APIRouter(tags=["imports"])


async def _read_upload(file: UploadFile, config: Settings) -> bytes:
    max_bytes = config.MAX_UPLOAD_SIZE_MB * 1024 * 1024
    if file.size and file.size > max_bytes:
        raise HTTPException(400, f"File too large. Max {config.MAX_UPLOAD_SIZE_MB}MB")

    # Read in chunks to limit memory usage
    chunks = []
    total_size = 0
    while chunk := await file.read(64 * 1024):
        total_size += len(chunk)
        if total_size > max_bytes:
            raise HTTPException(400, f"File too large. Max {config.MAX_UPLOAD_SIZE_MB}MB")
        chunks.append(chunk)
    return b"".join(chunks)


def _xlsx(content: bytes, filename: str) -> Response:
    return Response(
        content=content,
        media_type=spreadsheets.XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.post("/imports/products", response_model=ImportResult)
async def import_products(
    file: UploadFile = File(...),
    current_user: CurrentUser = Depends(require_permission(Feature.PRODUCTS)),
    store: CatalogStore = Depends(get_store),
    config: Settings = Depends(get_config),
):
    content = await _read_upload(file, config)
    try:
        return await spreadsheets.import_products(store, content)
    except POSError as exc:
        raise http_error(exc)


@router.post("/imports/customers", response_model=ImportResult)
async def import_customers(
    file: UploadFile = File(...),
    current_user: CurrentUser = Depends(require_permission(Feature.CUSTOMERS)),
    store: CatalogStore = Depends(get_store),
    config: Settings = Depends(get_config),
):
    content = await _read_upload(file, config)
    try:
        return await spreadsheets.import_customers(store, content)
    except POSError as exc:
        raise http_error(exc)


@router.get("/exports/products.xlsx")
async def export_products(
    current_user: CurrentUser = Depends(require_permission(Feature.PRODUCTS)),
    store: CatalogStore = Depends(get_store),
):
    return _xlsx(await spreadsheets.export_products(store), "products_export.xlsx")


@router.get("/exports/customers.xlsx")
async def export_customers(
    current_user: CurrentUser = Depends(require_permission(Feature.CUSTOMERS)),
    store: CatalogStore = Depends(get_store),
):
    return _xlsx(await spreadsheets.export_customers(store), "customers_export.xlsx")


@router.get("/exports/templates/{entity}.xlsx")
async def download_template(
    entity: str,
    current_user: CurrentUser = Depends(get_current_user),
):
    if entity == "products":
        return _xlsx(spreadsheets.products_template(), "products_template.xlsx")
    if entity == "customers":
        return _xlsx(spreadsheets.customers_template(), "customers_template.xlsx")
    raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"No template for '{entity}'")
