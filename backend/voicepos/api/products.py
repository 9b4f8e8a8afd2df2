"""Product catalog endpoints."""

from fastapi import APIRouter, Depends, HTTPException, Query, status

from voicepos.core.deps import get_store, http_error, require_permission
from voicepos.core.exceptions import POSError
from voicepos.models.role import Feature
from voicepos.schemas.auth import CurrentUser
from voicepos.schemas.product import Product, ProductCreate, ProductListResponse, ProductUpdate
from voicepos.store import CATEGORIES
from voicepos.store.base import CatalogStore

router = APIRouter(prefix="/products", tags=["products"])


@router.get("", response_model=ProductListResponse)
async def list_products(
    category: str | None = None,
    search: str | None = Query(None, max_length=100),
    current_user: CurrentUser = Depends(require_permission(Feature.PRODUCTS)),
    store: CatalogStore = Depends(get_store),
):
    items = await store.list_products(category=category, search=search)
    return ProductListResponse(items=items, total=len(items))


@router.get("/categories")
async def list_categories(
    current_user: CurrentUser = Depends(require_permission(Feature.PRODUCTS)),
):
    return CATEGORIES


@router.get("/barcode/{code}", response_model=Product)
async def get_product_by_barcode(
    code: str,
    current_user: CurrentUser = Depends(require_permission(Feature.PRODUCTS)),
    store: CatalogStore = Depends(get_store),
):
    product = await store.find_product_by_barcode(code)
    if product is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Product not found")
    return product


@router.get("/{product_id}", response_model=Product)
async def get_product(
    product_id: str,
    current_user: CurrentUser = Depends(require_permission(Feature.PRODUCTS)),
    store: CatalogStore = Depends(get_store),
):
    product = await store.get_product(product_id)
    if product is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Product not found")
    return product


@router.post("", response_model=Product, status_code=status.HTTP_201_CREATED)
async def create_product(
    body: ProductCreate,
    current_user: CurrentUser = Depends(require_permission(Feature.PRODUCTS)),
    store: CatalogStore = Depends(get_store),
):
    if body.barcode and await store.find_product_by_barcode(body.barcode):
        raise HTTPException(status.HTTP_400_BAD_REQUEST, f"Barcode '{body.barcode}' already exists")
    try:
        return await store.add_product(body)
    except POSError as exc:
        raise http_error(exc)


@router.patch("/{product_id}", response_model=Product)
async def update_product(
    product_id: str,
    body: ProductUpdate,
    current_user: CurrentUser = Depends(require_permission(Feature.PRODUCTS)),
    store: CatalogStore = Depends(get_store),
):
    product = await store.update_product(product_id, body.model_dump(exclude_unset=True))
    if product is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Product not found")
    return product


@router.delete("/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_product(
    product_id: str,
    current_user: CurrentUser = Depends(require_permission(Feature.PRODUCTS)),
    store: CatalogStore = Depends(get_store),
):
    if not await store.delete_product(product_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Product not found")
