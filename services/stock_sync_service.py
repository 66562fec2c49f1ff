# services/stock_sync_service.py
import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple

from config_reader import config
from models import async_session_maker, Product, ProductState, Variant
from services.catalog_store import CatalogStore, unit_of_work
from services.catalog_sync_service import diff_fields
from services.exceptions import ProductNotFoundError
from services.printful_client import PrintfulClient, printful_client
from services.printful_models import RemoteProductDetail, RemoteVariant, to_price

logger = logging.getLogger(__name__)

PRICE_TOLERANCE = Decimal("0.01")

# Поля варіанту, які оновлює швидка синхронізація (ключ звірки - catalog_variant_id)
STOCK_SYNC_FIELDS = ("retail_price", "currency", "sku", "name")


def price_change_event(product: Product, variant: Variant, remote: RemoteVariant) -> Optional[Dict[str, Any]]:
    """Подія зміни ціни або None, якщо різниця в межах копійки."""
    old_price = to_price(variant.retail_price)
    new_price = remote.retail_price
    if old_price is None or new_price is None:
        return None
    difference = new_price - old_price
    if abs(difference) <= PRICE_TOLERANCE:
        return None
    percentage = round(float(difference / old_price * 100), 2) if old_price else None
    return {
        "productId": product.id,
        "productTitle": product.title,
        "variantId": variant.id,
        "variantName": variant.name,
        "oldPrice": float(old_price),
        "newPrice": float(new_price),
        "difference": float(difference),
        "percentageChange": percentage,
        "currency": variant.currency,
        "changeType": "increase" if difference > 0 else "decrease",
    }


@dataclass
class StockSyncReport:
    total: int = 0
    updated: int = 0
    discontinued: int = 0
    changes: List[Dict[str, Any]] = field(default_factory=list)
    errors: List[Dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total": self.total,
            "updated": self.updated,
            "discontinued": self.discontinued,
            "priceChanges": len(self.changes),
            "changes": self.changes,
            "errors": self.errors,
        }


class StockSyncService:
    """
    Швидка синхронізація цін/статусу без повної звірки каталогу.
    На відміну від повної синхронізації, помилка одного товару лише потрапляє в errors[].
    """

    def __init__(self, session_maker, client: PrintfulClient,
                 delay: Optional[float] = None, price_check_delay: Optional[float] = None):
        self.session_maker = session_maker
        self.client = client
        self.delay = config.stock_sync_delay_seconds if delay is None else delay
        self.price_check_delay = config.price_check_delay_seconds if price_check_delay is None else price_check_delay
        self.last_sync: Optional[datetime] = None

    async def _apply_detail(self, store: CatalogStore, product: Product,
                            detail: RemoteProductDetail) -> Tuple[int, List[Dict[str, Any]]]:
        """Оновлює варіанти товару з деталей Printful. Повертає (к-сть змінених, події цін)."""
        remote_by_catalog_id = {rv.variant_id: rv for rv in detail.sync_variants if rv.variant_id is not None}
        changed = 0
        events = []
        for variant in await store.list_variants(product.id):
            remote = remote_by_catalog_id.get(variant.catalog_variant_id)
            if remote is None:
                continue
            event = price_change_event(product, variant, remote)
            if event:
                events.append(event)
                logger.info(f"💰 {product.title} - {variant.name}: {event['oldPrice']} → {event['newPrice']} {variant.currency}")
            desired = {
                "retail_price": remote.retail_price,
                "currency": remote.currency,
                "sku": remote.sku,
                "name": remote.name,
            }
            changes = diff_fields(variant, desired, STOCK_SYNC_FIELDS)
            if changes:
                await store.update_fields(variant, changes)
                changed += 1
        return changed, events

    async def sync_stock(self) -> Dict[str, Any]:
        logger.info("🔄 [STOCK SYNC] Починаю синхронізацію стоку...")
        report = StockSyncReport()

        remote_products = await self.client.list_all()
        report.total = len(remote_products)
        remote_ids = {p.remote_key for p in remote_products}

        async with unit_of_work(self.session_maker) as session:
            store = CatalogStore(session)
            present = []
            for product in await store.list_remote_products():
                if product.remote_id in remote_ids:
                    present.append((product.id, product.title, product.remote_id))
                elif await store.mark_discontinued(product):
                    report.discontinued += 1
                    logger.info(f"⚠️ [DISCONTINUED] {product.title} ({product.remote_id})")

        for index, (product_id, title, remote_id) in enumerate(present):
            if index and self.delay:
                await asyncio.sleep(self.delay)
            try:
                detail = await self.client.get_detail(remote_id)
                async with unit_of_work(self.session_maker) as session:
                    store = CatalogStore(session)
                    product = await store.get_product(product_id)
                    changed, events = await self._apply_detail(store, product, detail)
                if changed:
                    report.updated += 1
                report.changes.extend(events)
            except Exception as e:
                logger.error(f"❌ [STOCK SYNC] Помилка оновлення '{title}': {e}")
                report.errors.append({"product": title, "error": str(e)})

        self.last_sync = datetime.now(timezone.utc)
        logger.info(
            f"✅ [STOCK SYNC] {report.updated} оновлено, {report.discontinued} знято, "
            f"{len(report.changes)} змін цін, {len(report.errors)} помилок"
        )
        return report.to_dict()

    async def list_discontinued(self) -> List[Product]:
        async with self.session_maker() as session:
            return await CatalogStore(session).list_discontinued_products()

    async def detect_price_changes(self, limit: Optional[int] = None) -> List[Dict[str, Any]]:
        """Тільки читання: порівнює ціни активних товарів з Printful, нічого не записує."""
        limit = limit or config.price_check_limit
        async with self.session_maker() as session:
            store = CatalogStore(session)
            products = await store.list_remote_products(state=ProductState.ACTIVE, limit=limit)
            variants = {p.id: await store.list_variants(p.id) for p in products}

        changes = []
        for index, product in enumerate(products):
            if index and self.price_check_delay:
                await asyncio.sleep(self.price_check_delay)
            try:
                detail = await self.client.get_detail(product.remote_id)
            except Exception as e:
                logger.error(f"❌ [PRICE CHANGES] Помилка перевірки '{product.title}': {e}")
                continue
            remote_by_catalog_id = {rv.variant_id: rv for rv in detail.sync_variants if rv.variant_id is not None}
            for variant in variants[product.id]:
                remote = remote_by_catalog_id.get(variant.catalog_variant_id)
                if remote is None:
                    continue
                event = price_change_event(product, variant, remote)
                if event:
                    changes.append(event)
        logger.info(f"💰 [PRICE CHANGES] Знайдено {len(changes)} змін цін")
        return changes

    async def refresh_product(self, product_id: int) -> Dict[str, Any]:
        async with self.session_maker() as session:
            product = await CatalogStore(session).get_product(product_id)
        if product is None or not product.remote_id:
            raise ProductNotFoundError(product_id)

        detail = await self.client.get_detail(product.remote_id)
        async with unit_of_work(self.session_maker) as session:
            store = CatalogStore(session)
            product = await store.get_product(product_id)
            changed, events = await self._apply_detail(store, product, detail)
        logger.info(f"✅ [UPDATE PRODUCT] '{product.title}' оновлено ({changed} варіантів)")
        return {"updatedVariants": changed, "priceChanges": events}

    async def stock_stats(self) -> Dict[str, Any]:
        async with self.session_maker() as session:
            store = CatalogStore(session)
            return {
                "totalSynced": await store.count_remote_products(),
                "active": await store.count_remote_products(state=ProductState.ACTIVE),
                "discontinued": await store.count_remote_products(state=ProductState.DISCONTINUED, ignored=True),
                "outOfStock": await store.count_remote_products(out_of_stock=True),
                "lastSync": self.last_sync.isoformat() if self.last_sync else None,
            }


stock_sync_service = StockSyncService(async_session_maker, printful_client)
