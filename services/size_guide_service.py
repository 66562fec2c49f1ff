# services/size_guide_service.py
import logging
from typing import Any, Dict, Optional

from sqlalchemy.future import select

from config_reader import config
from models import async_session_maker, ProductVariantLink, Variant
from services.cache import TTLCache
from services.catalog_store import CatalogStore
from services.exceptions import ProductNotFoundError
from services.printful_client import PrintfulClient, printful_client

logger = logging.getLogger(__name__)


class SizeGuideService:
    """Таблиця розмірів товару з Printful, закешована на size_guide_ttl_seconds."""

    def __init__(self, session_maker, client: PrintfulClient,
                 cache: Optional[TTLCache] = None, ttl: Optional[float] = None):
        self.session_maker = session_maker
        self.client = client
        self.cache = cache or TTLCache()
        self.ttl = config.size_guide_ttl_seconds if ttl is None else ttl

    async def _catalog_product_id(self, product_id: int) -> Optional[int]:
        async with self.session_maker() as session:
            product = await CatalogStore(session).get_product(product_id)
            if product is None:
                raise ProductNotFoundError(product_id)
            result = await session.execute(
                select(ProductVariantLink.catalog_product_id)
                .join(Variant, ProductVariantLink.variant_id == Variant.id)
                .where(Variant.product_id == product_id, ProductVariantLink.catalog_product_id.is_not(None))
                .limit(1)
            )
            return result.scalar_one_or_none()

    async def get_size_guide(self, product_id: int) -> Dict[str, Any]:
        cached = self.cache.get(product_id)
        if cached is not None:
            return cached

        catalog_product_id = await self._catalog_product_id(product_id)
        if catalog_product_id is None:
            raise ProductNotFoundError(product_id)

        guide = await self.client.get_size_guide(catalog_product_id)
        self.cache.set(product_id, guide, self.ttl)
        logger.info(f"📏 Таблицю розмірів для товару {product_id} завантажено з Printful")
        return guide


size_guide_service = SizeGuideService(async_session_maker, printful_client)
