from typing import List, Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from app.api.dependencies import get_pagination, require_admin, require_staff
from app.core.database import get_db
from app.models.user import User
from app.repositories.product_repository import ProductFilters
from app.schemas.common import ApiResponse, PaginatedResponse
from app.schemas.product import (
    BulkStockResult,
    BulkStockUpdate,
    ProductCreate,
    ProductResponse,
    ProductStats,
    ProductUpdate,
    StockUpdate,
)
from app.services.product_service import product_service
from app.utils.pagination import Page, PaginationOptions

router = APIRouter(prefix="/products", tags=["products"])


def _page_response(message: str, page: Page) -> dict:
    return {"message": message, "data": page.items, "pagination": page.pagination()}


# Public
# Static paths are declared before /{product_id} so they are matched first
# -----------------------------

@router.get("", response_model=PaginatedResponse[ProductResponse])
def list_products(
    search: Optional[str] = Query(None, min_length=1),
    category: Optional[str] = Query(None),
    min_price: Optional[float] = Query(None, ge=0, alias="minPrice"),
    max_price: Optional[float] = Query(None, ge=0, alias="maxPrice"),
    in_stock: Optional[bool] = Query(None, alias="inStock"),
    is_active: Optional[bool] = Query(None, alias="isActive"),
    pagination: PaginationOptions = Depends(get_pagination),
    db: Session = Depends(get_db)
):
    filters = ProductFilters(
        search=search,
        category=category,
        min_price=min_price,
        max_price=max_price,
        in_stock=in_stock,
        is_active=is_active,
    )
    page = product_service.get_all(db, pagination, filters)
    return _page_response("Products retrieved successfully", page)


@router.get("/search", response_model=PaginatedResponse[ProductResponse])
def search_products(
    q: str = Query(""),
    pagination: PaginationOptions = Depends(get_pagination),
    db: Session = Depends(get_db)
):
    page = product_service.search_products(db, q, pagination)
    return _page_response("Products found", page)


@router.get("/categories", response_model=ApiResponse[List[str]])
def list_categories(db: Session = Depends(get_db)):
    categories = product_service.get_categories(db)
    return {"message": "Categories retrieved successfully", "data": categories}


@router.get("/in-stock", response_model=PaginatedResponse[ProductResponse])
def list_in_stock(pagination: PaginationOptions = Depends(get_pagination), db: Session = Depends(get_db)):
    page = product_service.get_in_stock(db, pagination)
    return _page_response("In-stock products retrieved successfully", page)


@router.get("/price-range", response_model=PaginatedResponse[ProductResponse])
def list_by_price_range(
    min_price: float = Query(..., alias="minPrice"),
    max_price: float = Query(..., alias="maxPrice"),
    pagination: PaginationOptions = Depends(get_pagination),
    db: Session = Depends(get_db)
):
    page = product_service.get_products_by_price_range(db, min_price, max_price, pagination)
    return _page_response("Products retrieved successfully", page)


@router.get("/low-stock", response_model=PaginatedResponse[ProductResponse])
def list_low_stock(
    threshold: Optional[int] = Query(None),
    pagination: PaginationOptions = Depends(get_pagination),
    db: Session = Depends(get_db)
):
    """In-stock products with stock at or below `threshold` (filtered per page)"""
    page = product_service.get_low_stock_products(db, pagination, threshold)
    return _page_response("Low stock products retrieved successfully", page)


@router.get("/category/{category}", response_model=PaginatedResponse[ProductResponse])
def list_by_category(
    category: str,
    pagination: PaginationOptions = Depends(get_pagination),
    db: Session = Depends(get_db)
):
    page = product_service.get_by_category(db, category, pagination)
    return _page_response("Products retrieved successfully", page)


# Admin
# -----------------------------

@router.get("/stats/overview", response_model=ApiResponse[ProductStats])
def product_stats(_: User = Depends(require_admin), db: Session = Depends(get_db)):
    stats = product_service.get_stats(db)
    return {"message": "Product statistics retrieved successfully", "data": stats}


@router.get("/{product_id}", response_model=ApiResponse[ProductResponse])
def get_product(product_id: int, db: Session = Depends(get_db)):
    product = product_service.get_by_id(db, product_id)
    return {"message": "Product retrieved successfully", "data": product}


# Admin and moderator
# -----------------------------

@router.post("", response_model=ApiResponse[ProductResponse], status_code=status.HTTP_201_CREATED)
def create_product(
    payload: ProductCreate,
    current_user: User = Depends(require_staff),
    db: Session = Depends(get_db)
):
    product = product_service.create(db, payload, current_user.id)
    return {"message": "Product created successfully", "data": product}


@router.post("/bulk-update-stock", response_model=ApiResponse[BulkStockResult])
def bulk_update_stock(
    payload: BulkStockUpdate,
    _: User = Depends(require_staff),
    db: Session = Depends(get_db)
):
    """Apply several stock changes; failures are reported per item instead of aborting the batch"""
    result = product_service.bulk_update_stock(db, payload.updates)
    return {"message": "Bulk stock update completed", "data": result}


@router.put("/{product_id}", response_model=ApiResponse[ProductResponse])
def update_product(
    product_id: int,
    payload: ProductUpdate,
    _: User = Depends(require_staff),
    db: Session = Depends(get_db)
):
    product = product_service.update(db, product_id, payload)
    return {"message": "Product updated successfully", "data": product}


@router.put("/{product_id}/stock", response_model=ApiResponse[ProductResponse])
def update_stock(
    product_id: int,
    payload: StockUpdate,
    _: User = Depends(require_staff),
    db: Session = Depends(get_db)
):
    product = product_service.update_stock(db, product_id, payload.quantity)
    return {"message": "Stock updated successfully", "data": product}


@router.delete("/{product_id}", response_model=ApiResponse[None])
def delete_product(product_id: int, _: User = Depends(require_admin), db: Session = Depends(get_db)):
    product_service.delete(db, product_id)
    return {"message": "Product deleted successfully"}
