from app.models.user import User, UserRole
from app.models.product import Product
from app.models.metal import Metal
from app.models.compatibility import CompatibilityEntry, CompatibilityPair, CompatibilityVersion

__all__ = [
    "User",
    "UserRole",
    "Product",
    "Metal",
    "CompatibilityEntry",
    "CompatibilityPair",
    "CompatibilityVersion",
]
