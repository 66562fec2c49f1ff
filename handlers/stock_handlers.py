# handlers/stock_handlers.py
import logging
from fastapi import APIRouter, Depends, HTTPException, Query, status
from typing import Optional

from services.auth_service import get_current_admin_user
from services.exceptions import ProductNotFoundError, ProviderFetchError
from services.stock_sync_service import StockSyncService, stock_sync_service
from api_models import (
    DiscontinuedProductAPI, DiscontinuedResponse, PriceChangesResponse,
    StockStatsResponse, StockSyncResponse, UpdateProductResponse,
)

logger = logging.getLogger(__name__)
router = APIRouter(
    prefix="/api/printful",
    tags=["Printful stock"],
    dependencies=[Depends(get_current_admin_user)]
)


def get_stock_sync_service() -> StockSyncService:
    return stock_sync_service


@router.post("/sync-stock", response_model=StockSyncResponse)
async def sync_stock(service: StockSyncService = Depends(get_stock_sync_service)):
    """Швидка синхронізація цін і статусів (без повної звірки каталогу)."""
    try:
        stats = await service.sync_stock()
    except ProviderFetchError as e:
        logger.error(f"[STOCK SYNC] Не вдалося отримати список товарів: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                            detail=f"Помилка синхронізації стоку: {e}")
    return {"success": True, "message": "Синхронізацію завершено", "stats": stats}


@router.get("/discontinued", response_model=DiscontinuedResponse)
async def get_discontinued(service: StockSyncService = Depends(get_stock_sync_service)):
    products = await service.list_discontinued()
    return {
        "count": len(products),
        "products": [DiscontinuedProductAPI.model_validate(p) for p in products],
    }


@router.get("/price-changes", response_model=PriceChangesResponse)
async def get_price_changes(limit: Optional[int] = Query(None, ge=1, le=200),
                            service: StockSyncService = Depends(get_stock_sync_service)):
    """Порівняння цін з Printful без запису в БД."""
    changes = await service.detect_price_changes(limit)
    return {"count": len(changes), "changes": changes}


@router.post("/update-product/{product_id}", response_model=UpdateProductResponse)
async def update_product(product_id: int, service: StockSyncService = Depends(get_stock_sync_service)):
    try:
        result = await service.refresh_product(product_id)
    except ProductNotFoundError:
        raise HTTPException(status_code=404, detail="Товар не знайдено або не синхронізовано з Printful")
    except ProviderFetchError as e:
        if e.status == 404:
            raise HTTPException(status_code=404, detail="Товар не знайдено в Printful (можливо, знято з продажу)")
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))
    return {"message": "Товар оновлено", **result}


@router.get("/stock-stats", response_model=StockStatsResponse)
async def get_stock_stats(service: StockSyncService = Depends(get_stock_sync_service)):
    return {"stats": await service.stock_stats()}
