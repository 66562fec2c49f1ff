# models/__init__.py
from .base import Base, engine, async_session_maker, get_async_session, create_all_tables
from .category import Category
from .product import Product, ProductState, InventoryType
from .variant import Variant, ProductVariantLink
from .variant_file import VariantFile, PREVIEW_FILE_TYPE
from .variant_option import VariantOption
from .gallery import Gallery
from .user import User, UserRole

__all__ = [
    "Base", "engine", "async_session_maker", "get_async_session", "create_all_tables",
    "Category",
    "Product", "ProductState", "InventoryType",
    "Variant", "ProductVariantLink",
    "VariantFile", "PREVIEW_FILE_TYPE",
    "VariantOption",
    "Gallery",
    "User", "UserRole",
]
