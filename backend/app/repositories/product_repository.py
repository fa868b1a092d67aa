from dataclasses import dataclass
from typing import Any, Dict, List, Optional
from sqlalchemy import BigInteger, cast, func, or_, update
from sqlalchemy.orm import Session
from app.models.product import MAX_STOCK, Product
from app.utils.pagination import Page, PaginationOptions, contains_ci, paginate


@dataclass
class ProductFilters:
    search: Optional[str] = None
    category: Optional[str] = None
    min_price: Optional[float] = None
    max_price: Optional[float] = None
    in_stock: Optional[bool] = None
    is_active: Optional[bool] = None


class ProductRepository:
    SORT_COLUMNS = {
        "name": Product.name,
        "price": Product.price,
        "category": Product.category,
        "createdAt": Product.created_at,
        "stock": Product.stock,
    }

    def create(self, db: Session, data: Dict[str, Any], created_by_id: int) -> Product:
        product = Product(**data, created_by_id=created_by_id)
        db.add(product)
        db.commit()
        db.refresh(product)
        return product

    def find_by_id(self, db: Session, product_id: int) -> Optional[Product]:
        return db.query(Product).filter(Product.id == product_id).first()

    def find_active_by_name(self, db: Session, name: str) -> Optional[Product]:
        """Exact, case-insensitive name match among active products"""
        return (
            db.query(Product)
            .filter(func.lower(Product.name) == name.strip().lower(), Product.is_active.is_(True))
            .first()
        )

    def find_all(self, db: Session, options: PaginationOptions, filters: Optional[ProductFilters] = None) -> Page:
        filters = filters or ProductFilters()
        query = db.query(Product)

        if filters.search:
            query = query.filter(or_(
                contains_ci(Product.name, filters.search),
                contains_ci(Product.description, filters.search),
                contains_ci(Product.category, filters.search),
            ))
        if filters.category:
            query = query.filter(Product.category == filters.category)
        if filters.min_price is not None:
            query = query.filter(Product.price >= filters.min_price)
        if filters.max_price is not None:
            query = query.filter(Product.price <= filters.max_price)
        if filters.in_stock is not None:
            query = query.filter(Product.stock > 0 if filters.in_stock else Product.stock <= 0)
        if filters.is_active is not None:
            query = query.filter(Product.is_active.is_(filters.is_active))

        return paginate(query, options, self.SORT_COLUMNS, tiebreaker=Product.id)

    def update(self, db: Session, product: Product, data: Dict[str, Any]) -> Product:
        for key, value in data.items():
            setattr(product, key, value)
        db.commit()
        db.refresh(product)
        return product

    def delete(self, db: Session, product: Product) -> None:
        db.delete(product)
        db.commit()

    def increment_stock(self, db: Session, product_id: int, quantity: int) -> bool:
        """
        Add quantity (may be negative) to a product's stock in one statement.

        The row is only touched when the result stays within
        0..MAX_STOCK, so two concurrent decrements can never drive stock
        below zero. The guard adds in BIGINT so an out-of-range sum is
        rejected instead of overflowing the column type. Returns False when
        the guard rejected the change.
        """
        new_stock = cast(Product.stock, BigInteger) + quantity
        result = db.execute(
            update(Product)
            .where(Product.id == product_id, new_stock >= 0, new_stock <= MAX_STOCK)
            .values(stock=Product.stock + quantity)
            .execution_options(synchronize_session=False)
        )
        db.commit()
        return result.rowcount == 1

    def get_categories(self, db: Session) -> List[str]:
        rows = (
            db.query(Product.category)
            .filter(Product.is_active.is_(True))
            .distinct()
            .order_by(Product.category)
            .all()
        )
        return [category for (category,) in rows]

    def get_stats(self, db: Session) -> Dict[str, Any]:
        total_products = db.query(func.count(Product.id)).scalar() or 0
        active_products = db.query(func.count(Product.id)).filter(Product.is_active.is_(True)).scalar() or 0
        out_of_stock = (
            db.query(func.count(Product.id))
            .filter(Product.is_active.is_(True), Product.stock <= 0)
            .scalar()
        ) or 0
        total_value = (
            db.query(func.sum(Product.price * Product.stock))
            .filter(Product.is_active.is_(True))
            .scalar()
        ) or 0
        return {
            "total_products": total_products,
            "active_products": active_products,
            "out_of_stock": out_of_stock,
            "total_value": float(total_value),
        }


product_repository = ProductRepository()
