# handlers/product_handlers.py
import logging
import os
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import FileResponse
from typing import Optional

from models import get_async_session
from sqlalchemy.ext.asyncio import AsyncSession
from services.auth_service import get_current_admin_user
from services.catalog_store import CatalogStore
from services.catalog_sync_service import CatalogSyncService, catalog_sync_service
from services.exceptions import ProductNotFoundError, ProviderFetchError, SyncAlreadyRunningError
from services.image_service import CATEGORY, PRODUCT, ImageStore, image_store
from services.size_guide_service import SizeGuideService, size_guide_service
from api_models import (
    CatalogSyncResponse, DeleteProductResponse, ProductAPI, ProductListResponse, SizeGuideResponse,
)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/products", tags=["Products"])


# --- Залежності (підміняються в тестах через dependency_overrides) ---

def get_catalog_sync_service() -> CatalogSyncService:
    return catalog_sync_service

def get_image_store() -> ImageStore:
    return image_store

def get_size_guide_service() -> SizeGuideService:
    return size_guide_service


# --- Синхронізація з Printful ---

@router.get("/synPrintfulProducts", response_model=CatalogSyncResponse,
            dependencies=[Depends(get_current_admin_user)])
async def sync_printful_products(service: CatalogSyncService = Depends(get_catalog_sync_service)):
    """Повна синхронізація каталогу Printful (тільки адмін)."""
    try:
        return await service.sync_catalog()
    except SyncAlreadyRunningError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except ProviderFetchError as e:
        logger.error(f"Синхронізацію перервано на етапі '{e.stage}': {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Помилка синхронізації з Printful: {e}",
        )


# --- Каталог ---

@router.get("/", response_model=ProductListResponse)
async def list_products(search: Optional[str] = None, categorie: Optional[str] = None,
                        db: AsyncSession = Depends(get_async_session)):
    """Активні товари (не зняті з продажу і не ігноровані в Printful)."""
    products = await CatalogStore(db).list_active_products(search=search, category=categorie)
    return {"products": [ProductAPI.model_validate(p) for p in products]}


@router.delete("/{product_id}", response_model=DeleteProductResponse,
               dependencies=[Depends(get_current_admin_user)])
async def delete_product(product_id: int, db: AsyncSession = Depends(get_async_session)):
    """Жорстке видалення товару разом з варіантами, файлами, галереєю та осиротілою категорією."""
    store = CatalogStore(db)
    product = await store.get_product(product_id)
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    category_deleted = await store.delete_product_cascade(product)
    await db.commit()
    logger.info(f"Адмін видалив товар ID: {product_id}")
    return {"message": "Товар видалено", "categoryDeleted": category_deleted}


# --- Зображення ---

def _image_response(images: ImageStore, kind: str, img: str) -> FileResponse:
    path = images.resolve(kind, img)
    if not os.path.isfile(path):
        raise HTTPException(status_code=404, detail="Image not found")
    return FileResponse(path)

@router.get("/uploads/product/{img}")
async def get_product_image(img: str, images: ImageStore = Depends(get_image_store)):
    return _image_response(images, PRODUCT, img)

@router.get("/uploads/categorie/{img}")
async def get_category_image(img: str, images: ImageStore = Depends(get_image_store)):
    return _image_response(images, CATEGORY, img)


# --- Таблиця розмірів ---

@router.get("/{product_id}/size-guide", response_model=SizeGuideResponse)
async def get_size_guide(product_id: int, service: SizeGuideService = Depends(get_size_guide_service)):
    try:
        guide = await service.get_size_guide(product_id)
    except ProductNotFoundError:
        raise HTTPException(status_code=404, detail="Size guide not available for this product")
    except ProviderFetchError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))
    return {"productId": product_id, "sizeGuide": guide}
