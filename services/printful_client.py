# services/printful_client.py
import asyncio
import logging
from typing import Any, Dict, List, Optional

import aiohttp
from pydantic import ValidationError
from tenacity import AsyncRetrying, stop_after_attempt, wait_exponential, retry_if_exception_type

from config_reader import config
from services.exceptions import ProviderFetchError, RetryableProviderError
from services.printful_models import RemoteCategory, RemoteProductDetail, RemoteProductSummary

logger = logging.getLogger(__name__)


class PrintfulClient:
    """
    Тонкий клієнт до Printful API.
    Кожен запит повторюється з експоненційною затримкою (мережа, 429, 5xx).
    Інші 4xx - одразу ProviderFetchError.
    """

    def __init__(self, base_url: Optional[str] = None, token: Optional[str] = None,
                 store_id: Optional[str] = None, page_size: Optional[int] = None,
                 max_pages: Optional[int] = None, max_retries: Optional[int] = None,
                 backoff_seconds: Optional[float] = None, page_delay: Optional[float] = None,
                 timeout: Optional[int] = None):
        self.base_url = (base_url or config.printful_api_url).rstrip('/')
        self.token = token if token is not None else config.printful_api_token.get_secret_value()
        self.store_id = store_id if store_id is not None else config.printful_store_id
        self.page_size = page_size or config.printful_page_size
        self.max_pages = max_pages or config.printful_max_pages
        self.max_retries = max_retries or config.printful_max_retries
        self.backoff_seconds = config.printful_backoff_seconds if backoff_seconds is None else backoff_seconds
        self.page_delay = config.printful_page_delay_seconds if page_delay is None else page_delay
        self.timeout = aiohttp.ClientTimeout(total=timeout or config.printful_request_timeout)
        self._session: Optional[aiohttp.ClientSession] = None

    def _headers(self) -> Dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        if self.store_id:
            headers["X-PF-Store-Id"] = str(self.store_id)
        return headers

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self.timeout, headers=self._headers())
        return self._session

    async def close(self):
        if self._session and not self._session.closed:
            await self._session.close()
        self._session = None

    async def _send(self, path: str, params: Optional[Dict[str, Any]], stage: str) -> Dict[str, Any]:
        """Одна спроба GET-запиту. Повертає розпарсений JSON."""
        session = await self._get_session()
        url = f"{self.base_url}{path}"
        try:
            async with session.get(url, params=params) as response:
                if response.status == 429 or response.status >= 500:
                    raise RetryableProviderError(f"HTTP {response.status} для {path}", stage=stage, status=response.status)
                if response.status >= 400:
                    text = await response.text()
                    raise ProviderFetchError(f"HTTP {response.status}: {text[:200]}", stage=stage, status=response.status)
                try:
                    payload = await response.json(content_type=None)
                except ValueError as e:
                    raise ProviderFetchError(f"Некоректний JSON для {path}: {e}", stage=stage,
                                             status=response.status) from e
                if not isinstance(payload, dict):
                    raise ProviderFetchError(f"Неочікувана відповідь для {path}: {type(payload).__name__}",
                                             stage=stage, status=response.status)
                return payload
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise RetryableProviderError(f"Мережева помилка для {path}: {e}", stage=stage) from e

    async def _get(self, path: str, params: Optional[Dict[str, Any]] = None, stage: str = "request") -> Dict[str, Any]:
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.max_retries),
            wait=wait_exponential(multiplier=self.backoff_seconds, min=0, max=30),
            retry=retry_if_exception_type(RetryableProviderError),
            before_sleep=lambda state: logger.warning(
                f"⚠️ Printful [{stage}] спроба {state.attempt_number} невдала, повторюю..."),
            reraise=True,
        )
        try:
            async for attempt in retrying:
                with attempt:
                    return await self._send(path, params, stage)
        except RetryableProviderError as e:
            logger.error(f"❌ Printful [{stage}]: вичерпано {self.max_retries} спроб: {e}")
            raise ProviderFetchError(str(e), stage=stage, status=e.status) from e

    async def list_all(self) -> List[RemoteProductSummary]:
        """
        Всі товари магазину, сторінками по page_size.
        Зупинка: offset >= paging.total, коротка сторінка або ліміт сторінок.
        Дублікати за id відкидаються (перше входження виграє).
        """
        products: List[RemoteProductSummary] = []
        seen = set()
        offset = 0
        page = 0

        while page < self.max_pages:
            stage = f"list page {page + 1}"
            payload = await self._get("/store/products", {"offset": offset, "limit": self.page_size}, stage=stage)
            result = payload.get("result") or []
            total = (payload.get("paging") or {}).get("total")

            for raw in result:
                try:
                    item = RemoteProductSummary.model_validate(raw)
                except ValidationError as e:
                    raise ProviderFetchError(f"Некоректний товар у списку: {e}", stage=stage) from e
                if item.id in seen:
                    logger.warning(f"Дублікат товару {item.id} на сторінці {page + 1}, пропускаю")
                    continue
                seen.add(item.id)
                products.append(item)

            page += 1
            offset += self.page_size
            if len(result) < self.page_size:
                break
            if total is not None and offset >= total:
                break
            if self.page_delay:
                await asyncio.sleep(self.page_delay)
        else:
            logger.warning(f"Досягнуто ліміт сторінок ({self.max_pages}), пагінацію зупинено")

        logger.info(f"📦 Printful: отримано {len(products)} товарів за {page} сторінок")
        return products

    async def get_detail(self, remote_id) -> RemoteProductDetail:
        stage = f"detail {remote_id}"
        payload = await self._get(f"/store/products/{remote_id}", stage=stage)
        try:
            return RemoteProductDetail.model_validate(payload.get("result") or {})
        except ValidationError as e:
            raise ProviderFetchError(f"Некоректна відповідь: {e}", stage=stage) from e

    async def get_category(self, category_id) -> RemoteCategory:
        stage = f"category {category_id}"
        payload = await self._get(f"/categories/{category_id}", stage=stage)
        result = payload.get("result") or {}
        # /categories/{id} повертає {"category": {...}}
        raw = result.get("category", result)
        try:
            return RemoteCategory.model_validate(raw)
        except ValidationError as e:
            raise ProviderFetchError(f"Некоректна категорія: {e}", stage=stage) from e

    async def get_size_guide(self, catalog_product_id) -> Dict[str, Any]:
        payload = await self._get(f"/products/{catalog_product_id}/sizes", stage=f"sizes {catalog_product_id}")
        return payload.get("result") or {}


printful_client = PrintfulClient()
