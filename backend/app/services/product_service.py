import logging
from typing import Any, Dict, Iterable, List
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from app.core.config import settings
from app.core.errors import AppError, BadRequestError, ConflictError, NotFoundError
from app.models.product import Product
from app.repositories.product_repository import ProductFilters, product_repository
from app.schemas.product import BulkStockItem, ProductCreate, ProductUpdate
from app.utils.pagination import Page, PaginationOptions

logger = logging.getLogger(__name__)

PRODUCT_NOT_FOUND_MESSAGE = "Product not found"
MIN_SEARCH_LENGTH = 2


class ProductService:
    def _ensure_name_available(self, db: Session, name: str) -> None:
        if product_repository.find_active_by_name(db, name):
            raise ConflictError("Product with this name already exists")

    def create(self, db: Session, data: ProductCreate, created_by_id: int) -> Product:
        self._ensure_name_available(db, data.name)
        product = product_repository.create(db, data.model_dump(), created_by_id)
        logger.info(f"Product created: {product.name} by user: {created_by_id}")
        return product

    def get_by_id(self, db: Session, product_id: int) -> Product:
        product = product_repository.find_by_id(db, product_id)
        if product is None:
            raise NotFoundError(PRODUCT_NOT_FOUND_MESSAGE)
        return product

    def get_all(self, db: Session, options: PaginationOptions, filters: ProductFilters = None) -> Page:
        return product_repository.find_all(db, options, filters)

    def update(self, db: Session, product_id: int, data: ProductUpdate) -> Product:
        product = self.get_by_id(db, product_id)
        changes = data.model_dump(exclude_none=True)

        new_name = changes.get("name")
        renamed = new_name is not None and new_name.lower() != product.name.lower()
        reactivated = changes.get("is_active") is True and not product.is_active
        # Only active products compete for a name
        if changes.get("is_active", product.is_active) and (renamed or reactivated):
            existing = product_repository.find_active_by_name(db, changes.get("name", product.name))
            if existing and existing.id != product.id:
                raise ConflictError("Product with this name already exists")

        product = product_repository.update(db, product, changes)
        logger.info(f"Product updated: {product.name}")
        return product

    def delete(self, db: Session, product_id: int) -> None:
        product = self.get_by_id(db, product_id)
        name = product.name
        product_repository.delete(db, product)
        logger.info(f"Product deleted: {name}")

    def update_stock(self, db: Session, product_id: int, quantity: int) -> Product:
        """
        Add quantity to the product's stock.

        Succeeds only if current stock + quantity stays within 0..MAX_STOCK;
        the result is never clamped. Raises BadRequestError when the guard rejects the change.
        """
        product = self.get_by_id(db, product_id)
        if not product_repository.increment_stock(db, product_id, quantity):
            raise BadRequestError("Insufficient stock or invalid quantity")

        db.refresh(product)
        logger.info(f"Stock updated for product: {product.name}, quantity: {quantity}, new stock: {product.stock}")
        return product

    def bulk_update_stock(self, db: Session, updates: Iterable[BulkStockItem]) -> Dict[str, Any]:
        """Apply each update independently; earlier successes are kept when later items fail."""
        results: Dict[str, Any] = {"success": 0, "failed": 0, "errors": []}

        for item in updates:
            try:
                self.update_stock(db, item.id, item.quantity)
                results["success"] += 1
            except AppError as e:
                results["failed"] += 1
                results["errors"].append({"id": item.id, "error": e.message})
            except SQLAlchemyError as e:
                db.rollback()
                logger.error(f"Stock update failed for product {item.id}: {str(e)}")
                results["failed"] += 1
                results["errors"].append({"id": item.id, "error": "Stock update failed"})

        logger.info(f"Bulk stock update completed: {results['success']} successful, {results['failed']} failed")
        return results

    def get_by_category(self, db: Session, category: str, options: PaginationOptions) -> Page:
        return product_repository.find_all(db, options, ProductFilters(category=category, is_active=True))

    def get_in_stock(self, db: Session, options: PaginationOptions) -> Page:
        return product_repository.find_all(db, options, ProductFilters(in_stock=True, is_active=True))

    def search_products(self, db: Session, term: str, options: PaginationOptions) -> Page:
        if not term or len(term.strip()) < MIN_SEARCH_LENGTH:
            raise BadRequestError(f"Search term must be at least {MIN_SEARCH_LENGTH} characters long")
        return product_repository.find_all(db, options, ProductFilters(search=term.strip(), is_active=True))

    def get_categories(self, db: Session) -> List[str]:
        return product_repository.get_categories(db)

    def get_stats(self, db: Session) -> Dict[str, Any]:
        return product_repository.get_stats(db)

    def get_products_by_price_range(self, db: Session, min_price: float, max_price: float, options: PaginationOptions) -> Page:
        if min_price < 0 or max_price < 0:
            raise BadRequestError("Price range cannot be negative")
        if min_price > max_price:
            raise BadRequestError("Minimum price cannot be greater than maximum price")
        return product_repository.find_all(db, options, ProductFilters(min_price=min_price, max_price=max_price))

    def get_low_stock_products(self, db: Session, options: PaginationOptions, threshold: int = None) -> Page:
        """
        In-stock products at or below threshold.

        The threshold is applied after pagination, so a page can hold fewer
        than `limit` items while the pagination numbers describe the
        underlying in-stock listing.
        """
        if threshold is None:
            threshold = settings.LOW_STOCK_THRESHOLD
        if threshold < 0:
            raise BadRequestError("Stock threshold cannot be negative")

        page = product_repository.find_all(db, options, ProductFilters(in_stock=True))
        return page.with_items([product for product in page.items if product.stock <= threshold])


product_service = ProductService()
