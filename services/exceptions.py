# services/exceptions.py
from typing import Optional


class CatalogSyncError(Exception):
    """Базова помилка синхронізації каталогу."""


class ProviderFetchError(CatalogSyncError):
    """
    Мережева/HTTP помилка при зверненні до Printful (після всіх повторів).
    `stage` - на якому етапі впало (напр. 'list page 3', 'detail 123').
    """

    def __init__(self, message: str, stage: Optional[str] = None, status: Optional[int] = None):
        super().__init__(message)
        self.stage = stage
        self.status = status

    def __str__(self):
        base = super().__str__()
        return f"[{self.stage}] {base}" if self.stage else base


class RetryableProviderError(ProviderFetchError):
    """Тимчасова помилка (мережа, 429, 5xx), яку варто повторити."""


class SyncAlreadyRunningError(CatalogSyncError):
    """Синхронізація вже виконується в цьому процесі."""


class ProductNotFoundError(CatalogSyncError):
    def __init__(self, product_id):
        super().__init__(f"Product {product_id} not found")
        self.product_id = product_id


class DataInconsistencyError(CatalogSyncError):
    """Локальні дані суперечать очікуванням (напр. варіант без файлів)."""
