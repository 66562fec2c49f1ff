# services/image_service.py
import json
import logging
import os
import re
from typing import Iterable, List, Optional
from urllib.parse import urlsplit

import aiohttp

from config_reader import config

logger = logging.getLogger(__name__)

PRODUCT = "product"
CATEGORY = "categorie"
DEFAULT_IMAGE = "default.jpg"


# --- Допоміжні функції для імен файлів ---

def remove_image_version(name: str) -> str:
    """'shirt.png?v=1700000' -> 'shirt.png'"""
    return name.split("?v=")[0]


def generate_image_name(url: Optional[str]) -> str:
    """
    Локальне ім'я файлу для зображення з URL.
    Якщо останній сегмент шляху має розширення - беремо його як є,
    інакше склеюємо три останні сегменти через '_' і додаємо '.jpeg'.
    """
    if not url:
        return ""
    path = urlsplit(url).path
    segments = [s for s in path.split('/') if s]
    if not segments:
        return ""
    last = segments[-1]
    if '.' in last:
        return last
    return "_".join(segments[-3:]) + ".jpeg"


def category_image_name(url: Optional[str]) -> str:
    if not url:
        return ""
    return remove_image_version(url.split('/')[-1]) + ".png"


def generate_slug(title: str) -> str:
    slug = title.lower().replace(' ', '-')
    return re.sub(r'[^\w-]+', '', slug)


def extract_sku(sku: str) -> str:
    """'6798_S' -> '6798'"""
    return sku.split('_')[0]


def unique_colors(colors: Iterable[Optional[str]]) -> List[str]:
    """Унікальні непорожні кольори зі збереженням порядку."""
    return list(dict.fromkeys(c for c in colors if c))


def colors_to_tags(colors: Iterable[Optional[str]]) -> str:
    return json.dumps(unique_colors(colors), ensure_ascii=False)


class ImageStore:
    """Локальне сховище зображень: uploads/product та uploads/categorie."""

    def __init__(self, root: Optional[str] = None, timeout: int = 30):
        self.root = root or config.uploads_dir
        self.timeout = aiohttp.ClientTimeout(total=timeout)

    def directory(self, kind: str) -> str:
        return os.path.join(self.root, kind)

    @property
    def product_dir(self) -> str:
        return self.directory(PRODUCT)

    @property
    def category_dir(self) -> str:
        return self.directory(CATEGORY)

    def path_for(self, kind: str, name: str) -> str:
        # basename відсікає спроби вийти за межі каталогу ('../')
        return os.path.join(self.directory(kind), os.path.basename(name))

    def exists(self, kind: str, name: str) -> bool:
        return bool(name) and os.path.isfile(self.path_for(kind, name))

    async def download_image(self, url: str, path: str) -> None:
        """Завантажує файл і перезаписує його, якщо він вже існує."""
        os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
        async with aiohttp.ClientSession(timeout=self.timeout) as session:
            async with session.get(url) as response:
                response.raise_for_status()
                data = await response.read()
        with open(path, "wb") as f:
            f.write(data)
        logger.debug(f"Зображення збережено: {path}")

    async def ensure_image(self, kind: str, url: Optional[str], name: str) -> bool:
        """
        Завантажує зображення, тільки якщо файлу ще немає.
        Повертає True, якщо було завантаження.
        """
        if not url or not name or self.exists(kind, name):
            return False
        await self.download_image(url, self.path_for(kind, name))
        return True

    def resolve(self, kind: str, name: str) -> str:
        """Шлях до файлу або до uploads/default.jpg, якщо його немає."""
        if self.exists(kind, name):
            return self.path_for(kind, name)
        return os.path.join(self.root, DEFAULT_IMAGE)


image_store = ImageStore()
