# services/catalog_sync_service.py
import asyncio
import logging
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Callable, Dict, List, Optional, Tuple

import aiohttp
from pydantic import ValidationError

from models import (
    async_session_maker, Category, Product, ProductState, InventoryType,
    ProductVariantLink, Variant, VariantFile, VariantOption,
)
from services.catalog_store import CatalogStore, unit_of_work
from services.exceptions import (
    DataInconsistencyError, ProviderFetchError, SyncAlreadyRunningError,
)
from services.image_service import (
    CATEGORY, PRODUCT, ImageStore, image_store, category_image_name, colors_to_tags,
    extract_sku, generate_image_name, generate_slug,
)
from services.printful_client import PrintfulClient, printful_client
from services.printful_models import RemoteCategory, RemoteFile, RemoteProductDetail, RemoteVariant, to_price

logger = logging.getLogger(__name__)

ZERO = Decimal("0.00")


def same_value(local: Any, remote: Any) -> bool:
    """Порівняння з урахуванням грошей (Decimal з БД vs str/float з API)."""
    if isinstance(local, Decimal) or isinstance(remote, Decimal):
        return to_price(local) == to_price(remote)
    return local == remote


# Поля варіанту, які звіряються з Printful: (поле моделі, значення з API)
VARIANT_DIFF_FIELDS: Tuple[Tuple[str, Callable[[RemoteVariant], Any]], ...] = (
    ("value", lambda rv: rv.size or ""),
    ("color", lambda rv: rv.color),
    ("remote_id", lambda rv: str(rv.id)),
    ("catalog_variant_id", lambda rv: rv.variant_id),
    ("retail_price", lambda rv: rv.retail_price),
    ("currency", lambda rv: rv.currency),
    ("name", lambda rv: rv.name),
)

# Поля товару, які оновлюються з Printful. Все інше (stock, description, summary) - локальне.
PRODUCT_DIFF_FIELDS = (
    "title", "slug", "sku", "price_eur", "price_usd", "tags",
    "printful_ignored", "state", "category_id", "cover_image",
)


def diff_fields(row, desired: Dict[str, Any], fields) -> Dict[str, Any]:
    return {
        name: desired[name]
        for name in fields
        if name in desired and not same_value(getattr(row, name), desired[name])
    }


def variant_changes(variant: Variant, remote: RemoteVariant) -> Dict[str, Any]:
    return diff_fields(variant, {name: get(remote) for name, get in VARIANT_DIFF_FIELDS},
                       [name for name, _ in VARIANT_DIFF_FIELDS])


def remote_options(remote: RemoteVariant) -> List[Tuple[str, str]]:
    return [(o.id, VariantOption.serialize_value(o.value)) for o in remote.options]


@dataclass
class CatalogSyncReport:
    products_processed: int = 0
    created: int = 0
    updated: int = 0
    skipped: int = 0
    discontinued: int = 0
    variants_created: int = 0
    variants_updated: int = 0
    variants_deleted: int = 0
    galleries_created: int = 0
    galleries_deleted: int = 0
    errors: List[Dict[str, Any]] = field(default_factory=list)
    duration: float = 0.0
    timestamp: str = ""

    COUNTERS = (
        "created", "updated", "skipped", "variants_created", "variants_updated",
        "variants_deleted", "galleries_created", "galleries_deleted",
    )

    def absorb(self, other: "CatalogSyncReport") -> None:
        for name in self.COUNTERS:
            setattr(self, name, getattr(self, name) + getattr(other, name))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "sync": True,
            "productsProcessed": self.products_processed,
            "created": self.created,
            "updated": self.updated,
            # М'яке видалення: товари, що зникли з Printful у цьому запуску
            "deleted": self.discontinued,
            "skipped": self.skipped,
            "discontinued": self.discontinued,
            "variantsCreated": self.variants_created,
            "variantsUpdated": self.variants_updated,
            "variantsDeleted": self.variants_deleted,
            "galleriesCreated": self.galleries_created,
            "galleriesDeleted": self.galleries_deleted,
            "errors": self.errors,
            "duration": self.duration,
            "timestamp": self.timestamp,
        }


class CatalogSyncService:
    """
    Повна звірка каталогу Printful з локальною БД.

    Кожен товар обробляється в окремій транзакції: помилка одного товару
    відкочується, записується в errors[] і не зупиняє решту.
    Помилка завантаження списку (після всіх повторів) зупиняє весь запуск.
    """

    def __init__(self, session_maker, client: PrintfulClient, images: ImageStore):
        self.session_maker = session_maker
        self.client = client
        self.images = images
        self._lock = asyncio.Lock()
        self._category_cache: Dict[int, RemoteCategory] = {}

    async def sync_catalog(self) -> Dict[str, Any]:
        if self._lock.locked():
            raise SyncAlreadyRunningError("Синхронізація каталогу вже виконується")
        async with self._lock:
            return await self._run()

    async def _run(self) -> Dict[str, Any]:
        started = time.monotonic()
        report = CatalogSyncReport()
        self._category_cache = {}
        logger.info("🔄 Починаю синхронізацію каталогу Printful...")

        # 1-2. Повний список з Printful (ProviderFetchError летить нагору)
        remote_products = await self.client.list_all()
        remote_ids = {p.remote_key for p in remote_products}

        # 3-4. Товари, яких більше немає в Printful -> знято з продажу
        async with unit_of_work(self.session_maker) as session:
            store = CatalogStore(session)
            for product in await store.list_remote_products():
                if product.remote_id not in remote_ids and await store.mark_discontinued(product):
                    report.discontinued += 1
                    logger.info(f"⚠️ Товар '{product.title}' ({product.remote_id}) зник з Printful, знято з продажу")

        # 5-8. Кожен товар з Printful по черзі
        for summary in remote_products:
            report.products_processed += 1
            try:
                detail = await self.client.get_detail(summary.id)
                # Лічильники товару потрапляють у звіт тільки після успішного commit
                partial = CatalogSyncReport()
                async with unit_of_work(self.session_maker) as session:
                    await self._reconcile_product(CatalogStore(session), detail, partial)
                report.absorb(partial)
            except Exception as e:
                logger.error(f"❌ Помилка синхронізації товару '{summary.name}' ({summary.id}): {e}",
                             exc_info=not isinstance(e, (ProviderFetchError, DataInconsistencyError)))
                report.errors.append({"product": summary.name, "remoteId": summary.remote_key, "error": str(e)})

        report.duration = round(time.monotonic() - started, 2)
        report.timestamp = datetime.now(timezone.utc).isoformat()
        logger.info(
            f"✅ Синхронізацію завершено за {report.duration}с: створено {report.created}, "
            f"оновлено {report.updated}, без змін {report.skipped}, знято {report.discontinued}, "
            f"помилок {len(report.errors)}"
        )
        return report.to_dict()

    # --- Один товар ---

    async def _reconcile_product(self, store: CatalogStore, detail: RemoteProductDetail,
                                 report: CatalogSyncReport) -> None:
        remote = detail.sync_product
        primary = detail.primary_variant
        if primary is None:
            raise DataInconsistencyError(f"Товар {remote.id} не має жодного варіанту в Printful")

        product = await store.find_product_by_remote_id(str(remote.id))
        if product is not None:
            local_variants = await store.list_variants(product.id)
            reasons = self._drift_reasons(product, local_variants, detail)
            if not reasons:
                report.skipped += 1
                logger.debug(f"Товар '{product.title}' без змін")
                return
            logger.info(f"✏️ Товар '{product.title}' змінився ({', '.join(reasons)}), оновлюю")

        category = await self._reconcile_category(store, primary.main_category_id)
        desired = self._desired_product_fields(detail, category)

        if product is None:
            await self._fetch_image(PRODUCT, remote.thumbnail_url, desired["cover_image"])
            product = await store.create_product(
                remote_id=str(remote.id),
                inventory_type=InventoryType.VARIANTS.value,
                stock=0,
                **desired,
            )
            report.created += 1
            logger.info(f"🆕 Створено товар '{product.title}' (Printful {remote.id})")
        else:
            changes = diff_fields(product, desired, PRODUCT_DIFF_FIELDS)
            if "cover_image" in changes:
                await self._fetch_image(PRODUCT, remote.thumbnail_url, changes["cover_image"])
            old_category_id = product.category_id
            await store.update_fields(product, changes)
            if "category_id" in changes and old_category_id is not None:
                await store.collect_orphan_category(old_category_id)
            report.updated += 1

        await self._reconcile_variants(store, product, detail, report)
        await self._reconcile_galleries(store, product, report)

    def _drift_reasons(self, product: Product, local_variants: List[Variant],
                       detail: RemoteProductDetail) -> List[str]:
        """
        Швидка перевірка, чи варто оновлювати товар: назва, статус,
        ціна основного варіанту (ключ - його sku).
        """
        remote = detail.sync_product
        primary = detail.primary_variant
        reasons = []
        if product.title != remote.name:
            reasons.append("title")
        if product.printful_ignored != remote.is_ignored or product.state != ProductState.ACTIVE:
            reasons.append("state")
        if primary is not None:
            skus = {v.sku for v in local_variants}
            if primary.sku not in skus:
                reasons.append("primary variant")
            elif not same_value(product.price_eur, primary.retail_price or ZERO):
                reasons.append("price")
        return reasons

    def _desired_product_fields(self, detail: RemoteProductDetail, category: Optional[Category]) -> Dict[str, Any]:
        remote = detail.sync_product
        primary = detail.primary_variant
        price = primary.retail_price or ZERO
        return {
            "title": remote.name,
            "slug": generate_slug(remote.name),
            "sku": extract_sku(primary.sku),
            "price_eur": price,
            "price_usd": price,
            "tags": colors_to_tags(v.color for v in detail.sync_variants),
            "printful_ignored": remote.is_ignored,
            "state": ProductState.ACTIVE,
            "category_id": category.id if category else None,
            "cover_image": generate_image_name(remote.thumbnail_url),
        }

    # --- Категорія ---

    async def _remote_category(self, category_id: int) -> RemoteCategory:
        if category_id not in self._category_cache:
            self._category_cache[category_id] = await self.client.get_category(category_id)
        return self._category_cache[category_id]

    async def _reconcile_category(self, store: CatalogStore, category_id: Optional[int]) -> Optional[Category]:
        if category_id is None:
            logger.warning("Основний варіант без main_category_id, товар буде без категорії")
            return None
        remote = await self._remote_category(category_id)
        image_name = category_image_name(remote.image_url)
        category, created = await store.get_or_create_category(remote.title, image_name)
        if created:
            logger.info(f"📁 Створено категорію '{category.title}'")
            if remote.image_url and image_name:
                await self._fetch_image(CATEGORY, remote.image_url, image_name, overwrite=True)
        return category

    # --- Варіанти ---

    async def _reconcile_variants(self, store: CatalogStore, product: Product,
                                  detail: RemoteProductDetail, report: CatalogSyncReport) -> None:
        local_by_sku = {v.sku: v for v in await store.list_variants(product.id)}
        seen = set()

        for remote in detail.sync_variants:
            if remote.sku in seen:
                logger.warning(f"Дублікат sku '{remote.sku}' у товарі {product.remote_id}, пропускаю")
                continue
            seen.add(remote.sku)

            variant = local_by_sku.get(remote.sku)
            if variant is None:
                await self._create_variant(store, product, remote)
                report.variants_created += 1
                continue

            changes = variant_changes(variant, remote)
            options_changed = await self._sync_options(store, variant, remote)
            if changes:
                await store.update_fields(variant, changes)
            if changes or options_changed:
                report.variants_updated += 1

        stale = [v.id for sku, v in local_by_sku.items() if sku not in seen]
        if stale:
            await store.delete_variants(stale)
            report.variants_deleted += len(stale)
            logger.info(f"🗑️ Видалено {len(stale)} варіантів товару '{product.title}'")

    async def _sync_options(self, store: CatalogStore, variant: Variant, remote: RemoteVariant) -> bool:
        desired = remote_options(remote)
        current = [(o.option_key, o.value) for o in await store.list_options(variant.id)]
        if current == desired:
            return False
        await store.replace_options(variant.id, desired)
        return True

    def _build_files(self, remote: RemoteVariant) -> List[VariantFile]:
        files = []
        for raw in remote.files:
            try:
                f = RemoteFile.model_validate(raw)
            except ValidationError as e:
                logger.warning(f"Файл варіанту {remote.sku} пропущено: {e}")
                continue
            files.append(VariantFile(
                remote_id=f.id, type=f.type, hash=f.hash, url=f.url, filename=f.filename,
                mime_type=f.mime_type, size=f.size, width=f.width, height=f.height, dpi=f.dpi,
                status=f.status, thumbnail_url=f.thumbnail_url, preview_url=f.preview_url,
                visible=f.visible, is_temporary=f.is_temporary,
            ))
        return files

    async def _create_variant(self, store: CatalogStore, product: Product, remote: RemoteVariant) -> Variant:
        variant = Variant(
            product_id=product.id,
            remote_id=str(remote.id),
            catalog_variant_id=remote.variant_id,
            value=remote.size or "",
            color=remote.color,
            stock=0,
            retail_price=remote.retail_price,
            currency=remote.currency,
            sku=remote.sku,
            name=remote.name,
        )
        link = ProductVariantLink(
            catalog_variant_id=remote.product.variant_id,
            catalog_product_id=remote.product.product_id,
            image=remote.product.image,
            name=remote.product.name,
        )
        options = [VariantOption(option_key=key, value=value) for key, value in remote_options(remote)]
        return await store.add_variant_aggregate(variant, link, self._build_files(remote), options)

    # --- Галерея ---

    async def _reconcile_galleries(self, store: CatalogStore, product: Product, report: CatalogSyncReport) -> None:
        """Галерея = рівно множина прев'ю-файлів поточних варіантів товару."""
        expected: Dict[str, Tuple[str, str]] = {}
        for file, variant in await store.list_preview_files(product.id):
            name = generate_image_name(file.preview_url)
            if name and name not in expected:
                expected[name] = (file.preview_url, variant.color or "")

        kept = set()
        stale = []
        for gallery in await store.list_galleries(product.id):
            if gallery.image in expected and gallery.image not in kept:
                kept.add(gallery.image)
            else:
                stale.append(gallery.id)

        for name, (url, color) in expected.items():
            if name in kept:
                continue
            await self._fetch_image(PRODUCT, url, name)
            await store.add_gallery(product.id, name, color)
            report.galleries_created += 1

        if stale:
            report.galleries_deleted += await store.delete_galleries(stale)

    # --- Зображення ---

    async def _fetch_image(self, kind: str, url: Optional[str], name: str, overwrite: bool = False) -> None:
        """Помилка завантаження картинки не зупиняє синхронізацію (є default.jpg)."""
        if not url or not name:
            return
        try:
            if overwrite:
                await self.images.download_image(url, self.images.path_for(kind, name))
            else:
                await self.images.ensure_image(kind, url, name)
        except (aiohttp.ClientError, asyncio.TimeoutError, OSError) as e:
            logger.warning(f"Не вдалося завантажити зображення {url}: {e}")


catalog_sync_service = CatalogSyncService(async_session_maker, printful_client, image_store)
