# tests/conftest.py
import copy
import os

# Тести не повинні чіпати справжню БД чи .env
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret")
os.environ.setdefault("CREATE_TABLES_ON_STARTUP", "false")

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from models import Base
from services.catalog_sync_service import CatalogSyncService
from services.exceptions import ProviderFetchError
from services.image_service import ImageStore
from services.printful_models import RemoteCategory, RemoteProductDetail, RemoteProductSummary
from services.stock_sync_service import StockSyncService
from tests.factories import remote_category


class FakePrintfulClient:
    """Printful у пам'яті: товари додаються сирими dict-ами, як їх віддає API."""

    def __init__(self):
        self.details = {}
        self.categories = {24: remote_category(24, "T-Shirts"), 25: remote_category(25, "Hoodies")}
        self.size_guides = {}
        self.fail_details = set()
        self.list_error = None
        self.detail_calls = []
        self.category_calls = []
        self.size_guide_calls = []

    def add(self, detail: dict):
        self.details[detail["sync_product"]["id"]] = copy.deepcopy(detail)

    def remove(self, product_id: int):
        self.details.pop(product_id, None)

    async def list_all(self):
        if self.list_error:
            raise self.list_error
        return [
            RemoteProductSummary.model_validate({
                "id": pid,
                "name": d["sync_product"]["name"],
                "variants": len(d["sync_variants"]),
                "synced": len(d["sync_variants"]),
                "thumbnail_url": d["sync_product"]["thumbnail_url"],
                "is_ignored": d["sync_product"]["is_ignored"],
            })
            for pid, d in self.details.items()
        ]

    async def get_detail(self, remote_id):
        remote_id = int(remote_id)
        self.detail_calls.append(remote_id)
        if remote_id in self.fail_details:
            raise ProviderFetchError("HTTP 500", stage=f"detail {remote_id}", status=500)
        if remote_id not in self.details:
            raise ProviderFetchError("HTTP 404: Not found", stage=f"detail {remote_id}", status=404)
        return RemoteProductDetail.model_validate(copy.deepcopy(self.details[remote_id]))

    async def get_category(self, category_id):
        self.category_calls.append(category_id)
        return RemoteCategory.model_validate(self.categories[category_id])

    async def get_size_guide(self, catalog_product_id):
        self.size_guide_calls.append(catalog_product_id)
        return self.size_guides.get(catalog_product_id, {"product_id": catalog_product_id, "available_sizes": ["S", "M", "L"]})

    async def close(self):
        pass


class FakeImageStore(ImageStore):
    """Замість мережі пише маленький файл і запам'ятовує URL."""

    def __init__(self, root):
        super().__init__(str(root))
        self.downloads = []

    async def download_image(self, url, path):
        self.downloads.append(url)
        os.makedirs(os.path.dirname(path), exist_ok=True)
        with open(path, "wb") as f:
            f.write(b"fake-image")


@pytest.fixture
async def db_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_maker(db_engine):
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
def fake_client():
    return FakePrintfulClient()


@pytest.fixture
def fake_images(tmp_path):
    return FakeImageStore(tmp_path / "uploads")


@pytest.fixture
def sync_service(session_maker, fake_client, fake_images):
    return CatalogSyncService(session_maker, fake_client, fake_images)


@pytest.fixture
def stock_service(session_maker, fake_client):
    return StockSyncService(session_maker, fake_client, delay=0, price_check_delay=0)
