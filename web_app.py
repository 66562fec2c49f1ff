# web_app.py
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

# --- Наші модулі ---
from config_reader import config
from models import create_all_tables
from handlers import product_handlers, stock_handlers
from services import scheduler_service
from services.printful_client import printful_client

# --- Налаштування логування ---
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(levelname)s - %(name)s - %(message)s'
)
logger = logging.getLogger("printful_shop")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Старт: таблиці (якщо без Alembic) та планувальник синхронізацій.
    Зупинка: планувальник і HTTP-сесія Printful.
    """
    if config.create_tables_on_startup:
        await create_all_tables()
        logger.info("Таблиці БД перевірено/створено.")
    scheduler_service.start_scheduler()
    logger.info("Сервіс готовий до роботи.")
    yield
    scheduler_service.shutdown_scheduler()
    await printful_client.close()
    logger.info("Сервіс зупинено.")


app = FastAPI(title="Printful Shop API", lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# !!! ПІДКЛЮЧАЄМО РОУТЕРИ ТУТ (ОДИН РАЗ ПРИ СТАРТІ) !!!
app.include_router(product_handlers.router)
app.include_router(stock_handlers.router)


@app.get("/health")
async def health_check():
    return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("web_app:app", host="0.0.0.0", port=8000)
