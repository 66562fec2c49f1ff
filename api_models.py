# api_models.py
import json
from decimal import Decimal
from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import List, Optional, Dict, Any
from datetime import datetime
from models import ProductState

# --- Каталог ---

class CategoryAPI(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    title: str
    image: str = ""
    custom_image: Optional[str] = None
    state: int = 1

class VariantAPI(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    sku: str
    value: str = ""
    color: Optional[str] = None
    stock: int = 0
    retail_price: Optional[Decimal] = None
    currency: Optional[str] = None
    name: Optional[str] = None
    catalog_variant_id: Optional[int] = None

class ProductAPI(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    remote_id: Optional[str] = None
    title: str
    slug: str
    sku: str
    price_eur: Decimal
    price_usd: Decimal
    cover_image: str = ""
    tags: List[str] = []
    stock: int = 0
    state: ProductState
    category: Optional[CategoryAPI] = None
    variants: List[VariantAPI] = []

    @field_validator("tags", mode="before")
    @classmethod
    def _parse_tags(cls, value):
        # В БД теги зберігаються JSON-рядком
        if isinstance(value, str):
            try:
                value = json.loads(value or "[]")
            except ValueError:
                return []
        return value or []

class ProductListResponse(BaseModel):
    products: List[ProductAPI]

class DeleteProductResponse(BaseModel):
    success: bool = True
    message: str
    categoryDeleted: bool = False

class SizeGuideResponse(BaseModel):
    productId: int
    sizeGuide: Dict[str, Any]

# --- Синхронізація ---

class SyncErrorAPI(BaseModel):
    product: Optional[str] = None
    remoteId: Optional[str] = None
    error: str

class CatalogSyncResponse(BaseModel):
    sync: bool = True
    productsProcessed: int
    created: int
    updated: int
    deleted: int
    skipped: int
    discontinued: int
    variantsCreated: int
    variantsUpdated: int
    variantsDeleted: int
    galleriesCreated: int
    galleriesDeleted: int
    errors: List[SyncErrorAPI] = []
    duration: float
    timestamp: str

class PriceChangeAPI(BaseModel):
    productId: int
    productTitle: str
    variantId: int
    variantName: Optional[str] = None
    oldPrice: float
    newPrice: float
    difference: float
    percentageChange: Optional[float] = None
    currency: Optional[str] = None
    changeType: str

class StockSyncStats(BaseModel):
    total: int
    updated: int
    discontinued: int
    priceChanges: int
    changes: List[PriceChangeAPI] = []
    errors: List[SyncErrorAPI] = []

class StockSyncResponse(BaseModel):
    success: bool
    message: str
    stats: StockSyncStats

class DiscontinuedProductAPI(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    title: str
    remote_id: Optional[str] = None
    cover_image: str = ""
    updated_at: Optional[datetime] = None

class DiscontinuedResponse(BaseModel):
    success: bool = True
    count: int
    products: List[DiscontinuedProductAPI]

class PriceChangesResponse(BaseModel):
    success: bool = True
    count: int
    changes: List[PriceChangeAPI]

class UpdateProductResponse(BaseModel):
    success: bool = True
    message: str
    updatedVariants: int
    priceChanges: List[PriceChangeAPI] = []

class StockStats(BaseModel):
    totalSynced: int
    active: int
    discontinued: int
    outOfStock: int
    lastSync: Optional[str] = None

class StockStatsResponse(BaseModel):
    success: bool = True
    stats: StockStats = Field(...)
