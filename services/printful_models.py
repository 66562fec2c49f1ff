# services/printful_models.py
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator

CENT = Decimal("0.01")


def to_price(value: Any) -> Optional[Decimal]:
    """'25.5' / 25.5 / None -> Decimal('25.50') або None."""
    if value is None or value == "":
        return None
    try:
        return Decimal(str(value).strip().replace(',', '.')).quantize(CENT, rounding=ROUND_HALF_UP)
    except (InvalidOperation, ValueError):
        return None


class _PrintfulModel(BaseModel):
    model_config = ConfigDict(extra="ignore")


class RemoteProductSummary(_PrintfulModel):
    """Елемент списку GET /store/products."""
    id: int
    external_id: Optional[str] = None
    name: str
    variants: int = 0
    synced: int = 0
    thumbnail_url: Optional[str] = None
    is_ignored: bool = False

    @property
    def remote_key(self) -> str:
        return str(self.id)


class RemoteFile(_PrintfulModel):
    id: Optional[int] = None
    type: str = "default"
    hash: Optional[str] = None
    url: Optional[str] = None
    filename: Optional[str] = None
    mime_type: Optional[str] = None
    size: Optional[int] = None
    width: Optional[int] = None
    height: Optional[int] = None
    dpi: Optional[int] = None
    status: Optional[str] = None
    thumbnail_url: Optional[str] = None
    preview_url: Optional[str] = None
    visible: bool = True
    is_temporary: bool = False


class RemoteOption(_PrintfulModel):
    id: str
    value: Any = None


class RemoteCatalogVariant(_PrintfulModel):
    """Блок `product` всередині sync-варіанту (дані каталогу Printful)."""
    variant_id: Optional[int] = None
    product_id: Optional[int] = None
    image: Optional[str] = None
    name: Optional[str] = None


class RemoteVariant(_PrintfulModel):
    id: int
    external_id: Optional[str] = None
    sync_product_id: Optional[int] = None
    name: Optional[str] = None
    variant_id: Optional[int] = None
    main_category_id: Optional[int] = None
    retail_price: Optional[Decimal] = None
    currency: Optional[str] = None
    sku: str
    size: Optional[str] = None
    color: Optional[str] = None
    is_ignored: bool = False
    availability_status: Optional[str] = None
    product: RemoteCatalogVariant = Field(default_factory=RemoteCatalogVariant)
    # Файли парсимо поштучно під час створення варіанту, щоб один битий файл не валив весь товар
    files: List[Dict[str, Any]] = Field(default_factory=list)
    options: List[RemoteOption] = Field(default_factory=list)

    @field_validator("retail_price", mode="before")
    @classmethod
    def _parse_price(cls, value):
        return to_price(value)

    @property
    def remote_key(self) -> str:
        return str(self.id)


class RemoteSyncProduct(_PrintfulModel):
    id: int
    external_id: Optional[str] = None
    name: str
    thumbnail_url: Optional[str] = None
    is_ignored: bool = False


class RemoteProductDetail(_PrintfulModel):
    """Результат GET /store/products/{id}."""
    sync_product: RemoteSyncProduct
    sync_variants: List[RemoteVariant] = Field(default_factory=list)

    @property
    def primary_variant(self) -> Optional[RemoteVariant]:
        return self.sync_variants[0] if self.sync_variants else None


class RemoteCategory(_PrintfulModel):
    id: int
    parent_id: Optional[int] = None
    image_url: Optional[str] = None
    title: str
