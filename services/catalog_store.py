# services/catalog_store.py
import logging
from contextlib import asynccontextmanager
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from sqlalchemy import delete, func, or_
from sqlalchemy.dialects.postgresql import insert as postgresql_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy.orm import selectinload

from services.exceptions import DataInconsistencyError
from models import (
    Category, Gallery, Product, ProductState, ProductVariantLink,
    Variant, VariantFile, VariantOption, PREVIEW_FILE_TYPE,
)

logger = logging.getLogger(__name__)

CONFLICT_INSERTS = {"sqlite": sqlite_insert, "postgresql": postgresql_insert}


@asynccontextmanager
async def unit_of_work(session_maker):
    """Одна транзакція: commit при успіху, rollback при будь-якій помилці."""
    async with session_maker() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


class CatalogStore:
    """
    Доступ до локального каталогу (товари, категорії, варіанти, файли, опції, галереї).
    Нічого не комітить сам - транзакцією керує викликаючий код.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    # --- Загальне ---

    async def update_fields(self, row, changes: Dict[str, Any]) -> bool:
        """Записує тільки передані (змінені) поля. Повертає True, якщо щось змінилось."""
        if not changes:
            return False
        for field, value in changes.items():
            setattr(row, field, value)
        await self.session.flush()
        return True

    # --- Товари ---

    async def get_product(self, product_id: int) -> Optional[Product]:
        return await self.session.get(Product, product_id)

    async def find_product_by_remote_id(self, remote_id: str) -> Optional[Product]:
        result = await self.session.execute(select(Product).where(Product.remote_id == str(remote_id)))
        return result.scalar_one_or_none()

    async def list_remote_products(self, state: Optional[ProductState] = None,
                                   limit: Optional[int] = None) -> List[Product]:
        """Всі товари, що прийшли з Printful (remote_id не NULL)."""
        stmt = select(Product).where(Product.remote_id.is_not(None))
        if state is not None:
            stmt = stmt.where(Product.state == state)
        stmt = stmt.order_by(Product.id)
        if limit:
            stmt = stmt.limit(limit)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_discontinued_products(self) -> List[Product]:
        result = await self.session.execute(
            select(Product)
            .where(Product.remote_id.is_not(None),
                   Product.state == ProductState.DISCONTINUED,
                   Product.printful_ignored.is_(True))
            .order_by(Product.updated_at.desc(), Product.id.desc())
        )
        return list(result.scalars().all())

    async def count_remote_products(self, state: Optional[ProductState] = None,
                                    ignored: Optional[bool] = None, out_of_stock: bool = False) -> int:
        stmt = select(func.count(Product.id)).where(Product.remote_id.is_not(None))
        if state is not None:
            stmt = stmt.where(Product.state == state)
        if ignored is not None:
            stmt = stmt.where(Product.printful_ignored.is_(ignored))
        if out_of_stock:
            stmt = stmt.where(Product.stock == 0)
        result = await self.session.execute(stmt)
        return result.scalar_one()

    async def list_active_products(self, search: Optional[str] = None,
                                   category: Optional[str] = None) -> List[Product]:
        stmt = (
            select(Product)
            .where(Product.state == ProductState.ACTIVE, Product.printful_ignored.is_(False))
            .options(selectinload(Product.category), selectinload(Product.variants))
        )
        if search:
            pattern = f"%{search.strip()}%"
            stmt = stmt.where(or_(Product.title.ilike(pattern), Product.sku.ilike(pattern)))
        if category:
            stmt = stmt.join(Category, Product.category_id == Category.id)
            if category.isdigit():
                stmt = stmt.where(Category.id == int(category))
            else:
                stmt = stmt.where(func.lower(Category.title) == category.strip().lower())
        result = await self.session.execute(stmt.order_by(Product.id.desc()))
        return list(result.scalars().all())

    async def create_product(self, **fields) -> Product:
        product = Product(**fields)
        self.session.add(product)
        await self.session.flush()
        return product

    async def mark_discontinued(self, product: Product) -> bool:
        """М'яке видалення. False, якщо товар вже був знятий з продажу."""
        if product.state == ProductState.DISCONTINUED and product.printful_ignored:
            return False
        await self.update_fields(product, {"state": ProductState.DISCONTINUED, "printful_ignored": True})
        return True

    async def delete_product_cascade(self, product: Product) -> bool:
        """
        Жорстке видалення товару з усім, чим він володіє.
        Порядок: варіанти (файли, опції, лінки) -> галереї -> товар -> осиротіла категорія.
        Повертає True, якщо разом з товаром видалено і категорію.
        """
        variant_ids = [v.id for v in await self.list_variants(product.id)]
        await self.delete_variants(variant_ids)
        await self.session.execute(delete(Gallery).where(Gallery.product_id == product.id))
        category_id = product.category_id
        await self.session.execute(delete(Product).where(Product.id == product.id))
        await self.session.flush()
        logger.info(f"🗑️ Товар {product.id} ('{product.title}') видалено разом з {len(variant_ids)} варіантами")
        if category_id is not None:
            return await self.collect_orphan_category(category_id)
        return False

    # --- Категорії ---

    async def find_category_by_title(self, title: str) -> Optional[Category]:
        result = await self.session.execute(select(Category).where(Category.title == title))
        return result.scalar_one_or_none()

    async def get_or_create_category(self, title: str, image: str = "") -> Tuple[Category, bool]:
        """
        Категорія за назвою. INSERT ... ON CONFLICT DO NOTHING у транзакції сесії:
        якщо паралельний процес встиг створити таку саму, просто перечитуємо.
        """
        existing = await self.find_category_by_title(title)
        if existing:
            return existing, False
        dialect = self.session.bind.dialect.name
        insert = CONFLICT_INSERTS.get(dialect)
        if insert is None:
            raise NotImplementedError(f"get_or_create_category не підтримує діалект '{dialect}'")
        result = await self.session.execute(
            insert(Category)
            .values(title=title, image=image or "", state=1)
            .on_conflict_do_nothing(index_elements=[Category.title])
            .returning(Category.id)
        )
        created = result.scalar_one_or_none() is not None
        if not created:
            logger.warning(f"Категорію '{title}' вже створено іншим процесом, перечитую")
        category = await self.find_category_by_title(title)
        if category is None:
            raise DataInconsistencyError(f"Категорія '{title}' не знайдена після вставки")
        return category, created

    async def count_category_products(self, category_id: int) -> int:
        result = await self.session.execute(
            select(func.count(Product.id)).where(Product.category_id == category_id)
        )
        return result.scalar_one()

    async def collect_orphan_category(self, category_id: int) -> bool:
        """Видаляє категорію, якщо на неї більше не посилається жоден товар."""
        if await self.count_category_products(category_id) > 0:
            return False
        result = await self.session.execute(delete(Category).where(Category.id == category_id))
        if result.rowcount:
            logger.info(f"🗑️ Категорію {category_id} видалено (без товарів)")
        return bool(result.rowcount)

    # --- Варіанти ---

    async def list_variants(self, product_id: int) -> List[Variant]:
        result = await self.session.execute(
            select(Variant).where(Variant.product_id == product_id).order_by(Variant.id)
        )
        return list(result.scalars().all())

    async def add_variant_aggregate(self, variant: Variant, link: Optional[ProductVariantLink],
                                    files: Sequence[VariantFile], options: Sequence[VariantOption]) -> Variant:
        """Новий варіант разом з лінком, файлами та опціями."""
        self.session.add(variant)
        await self.session.flush()
        children = []
        if link is not None:
            link.variant_id = variant.id
            children.append(link)
        for row in list(files) + list(options):
            row.variant_id = variant.id
            children.append(row)
        self.session.add_all(children)
        await self.session.flush()
        return variant

    async def delete_variants(self, variant_ids: Iterable[int]) -> int:
        """Видаляє варіанти та все, чим вони володіють (файли, опції, лінки)."""
        ids = list(variant_ids)
        if not ids:
            return 0
        await self.session.execute(delete(VariantFile).where(VariantFile.variant_id.in_(ids)))
        await self.session.execute(delete(VariantOption).where(VariantOption.variant_id.in_(ids)))
        await self.session.execute(delete(ProductVariantLink).where(ProductVariantLink.variant_id.in_(ids)))
        await self.session.execute(delete(Variant).where(Variant.id.in_(ids)))
        await self.session.flush()
        return len(ids)

    async def list_options(self, variant_id: int) -> List[VariantOption]:
        result = await self.session.execute(
            select(VariantOption).where(VariantOption.variant_id == variant_id).order_by(VariantOption.id)
        )
        return list(result.scalars().all())

    async def replace_options(self, variant_id: int, options: Sequence[Tuple[str, str]]) -> None:
        await self.session.execute(delete(VariantOption).where(VariantOption.variant_id == variant_id))
        self.session.add_all(
            [VariantOption(variant_id=variant_id, option_key=key, value=value) for key, value in options]
        )
        await self.session.flush()

    async def list_preview_files(self, product_id: int) -> List[Tuple[VariantFile, Variant]]:
        """Прев'ю-файли всіх варіантів товару разом з варіантом (для кольору)."""
        result = await self.session.execute(
            select(VariantFile, Variant)
            .join(Variant, VariantFile.variant_id == Variant.id)
            .where(Variant.product_id == product_id, VariantFile.type == PREVIEW_FILE_TYPE)
            .order_by(Variant.id, VariantFile.id)
        )
        return [(f, v) for f, v in result.all()]

    # --- Галереї ---

    async def list_galleries(self, product_id: int) -> List[Gallery]:
        result = await self.session.execute(
            select(Gallery).where(Gallery.product_id == product_id).order_by(Gallery.id)
        )
        return list(result.scalars().all())

    async def add_gallery(self, product_id: int, image: str, color: str = "") -> Gallery:
        gallery = Gallery(product_id=product_id, image=image, color=color or "")
        self.session.add(gallery)
        await self.session.flush()
        return gallery

    async def delete_galleries(self, gallery_ids: Iterable[int]) -> int:
        ids = list(gallery_ids)
        if not ids:
            return 0
        await self.session.execute(delete(Gallery).where(Gallery.id.in_(ids)))
        await self.session.flush()
        return len(ids)
