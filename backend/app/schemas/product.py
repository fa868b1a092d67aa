from datetime import datetime
from typing import Annotated, List, Optional
from pydantic import AfterValidator, Field, StringConstraints, model_validator
from app.models.product import MAX_STOCK
from app.schemas.common import CamelModel

ProductName = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=100)]
Description = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=1000)]
Category = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=50)]
Price = Annotated[float, Field(ge=0)]
Stock = Annotated[int, Field(ge=0, le=MAX_STOCK)]


def reject_zero(value: int) -> int:
    if value == 0:
        raise ValueError("Quantity cannot be zero")
    return value


Quantity = Annotated[int, Field(ge=-MAX_STOCK, le=MAX_STOCK), AfterValidator(reject_zero)]


class ProductCreate(CamelModel):
    name: ProductName
    description: Description
    price: Price
    category: Category
    stock: Stock = 0


class ProductUpdate(CamelModel):
    name: Optional[ProductName] = None
    description: Optional[Description] = None
    price: Optional[Price] = None
    category: Optional[Category] = None
    stock: Optional[Stock] = None
    is_active: Optional[bool] = None

    @model_validator(mode="after")
    def require_one_field(self):
        if not self.model_dump(exclude_none=True):
            raise ValueError("At least one field must be provided for update")
        return self


class StockUpdate(CamelModel):
    quantity: Quantity


class BulkStockItem(CamelModel):
    id: int
    quantity: Quantity


class BulkStockUpdate(CamelModel):
    updates: Annotated[List[BulkStockItem], Field(min_length=1)]


class BulkStockError(CamelModel):
    id: int
    error: str


class BulkStockResult(CamelModel):
    success: int = 0
    failed: int = 0
    errors: List[BulkStockError] = []


class CreatorSummary(CamelModel):
    id: int
    first_name: str
    last_name: str
    email: str


class ProductResponse(CamelModel):
    id: int
    name: str
    description: str
    price: float
    category: str
    stock: int
    is_active: bool
    created_by: Optional[CreatorSummary] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ProductStats(CamelModel):
    total_products: int
    active_products: int
    out_of_stock: int
    total_value: float
