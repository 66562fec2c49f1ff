# models/base.py
import logging
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.orm import declarative_base
from config_reader import config

logger = logging.getLogger(__name__)

engine = None
async_session_maker = None

if config.database_url:
    try:
        engine = create_async_engine(config.database_url, echo=False)
        async_session_maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
        logger.info("SQLAlchemy engine та session maker створено успішно.")
    except Exception as e:
        logger.error(f"Помилка створення SQLAlchemy engine: {e}")
else:
    logger.error("DATABASE_URL не знайдено в конфігурації.")


Base = declarative_base()


async def create_all_tables():
    """Створює таблиці, якщо їх ще немає (для локального запуску без Alembic)."""
    if engine is None:
        logger.error("Engine не ініціалізовано, таблиці не створено.")
        return
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def get_async_session():
    if not async_session_maker:
        raise RuntimeError("Session maker не ініціалізовано!")
    async with async_session_maker() as session:
        yield session
