# config_reader.py
import logging
from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional

# Налаштовуємо логування для виводу інформації
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """
    Клас для читання та валідації всіх змінних середовища.
    Автоматично перетворює рядки на потрібні типи (int, float, bool, etc.).
    """
    # --- База даних ---
    database_url: str = "sqlite+aiosqlite:///./shop.db"
    create_tables_on_startup: bool = True

    # --- API Printful ---
    printful_api_url: str = "https://api.printful.com"
    printful_api_token: SecretStr = SecretStr("")
    printful_store_id: Optional[str] = None
    printful_page_size: int = 20
    printful_max_pages: int = 100 # Запобіжник від нескінченної пагінації
    printful_max_retries: int = 3
    printful_backoff_seconds: float = 1.0
    printful_page_delay_seconds: float = 0.3
    printful_request_timeout: int = 30

    # --- Синхронізація стоку ---
    stock_sync_delay_seconds: float = 0.2
    price_check_delay_seconds: float = 0.3
    price_check_limit: int = 20

    # --- Файли ---
    uploads_dir: str = "uploads"
    size_guide_ttl_seconds: int = 3600

    # --- Авторизація адміна (JWT) ---
    jwt_secret_key: SecretStr = SecretStr("change-me")
    jwt_algorithm: str = "HS256"

    # --- Планувальник (0 = вимкнено) ---
    stock_sync_interval_minutes: int = 0
    catalog_sync_interval_hours: int = 0
    scheduler_timezone: str = "Europe/Madrid"

    # Конфігурація для Pydantic: вказуємо, що треба читати файл .env
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


# Створюємо єдиний екземпляр конфігурації, який будемо імпортувати
try:
    config = Settings()
    logger.info("✅ Конфігурацію успішно завантажено.")
except Exception as e:
    logger.error(f"❌ Помилка завантаження конфігурації: {e}")
    raise SystemExit(1)
