# services/scheduler_service.py
import logging
from apscheduler.schedulers.asyncio import AsyncIOScheduler

from config_reader import config
from services.catalog_sync_service import catalog_sync_service
from services.exceptions import CatalogSyncError, SyncAlreadyRunningError
from services.stock_sync_service import stock_sync_service

logger = logging.getLogger(__name__)
_scheduler = AsyncIOScheduler(timezone=config.scheduler_timezone)


async def stock_sync_job():
    """Періодична швидка синхронізація цін та статусів."""
    logger.info("Планувальник: запускаю синхронізацію стоку.")
    try:
        stats = await stock_sync_service.sync_stock()
        logger.info(f"Планувальник: стоки оновлено ({stats['updated']} товарів, {stats['priceChanges']} змін цін).")
    except CatalogSyncError as e:
        logger.error(f"Планувальник: синхронізація стоку не вдалася: {e}")


async def catalog_sync_job():
    """Періодична повна звірка каталогу."""
    logger.info("Планувальник: запускаю повну синхронізацію каталогу.")
    try:
        report = await catalog_sync_service.sync_catalog()
        logger.info(f"Планувальник: каталог синхронізовано ({report['created']} нових, {report['updated']} оновлено).")
    except SyncAlreadyRunningError:
        logger.info("Планувальник: синхронізація вже йде (ручний запуск), пропускаю.")
    except CatalogSyncError as e:
        logger.error(f"Планувальник: синхронізація каталогу не вдалася: {e}")


def configure_jobs(scheduler: AsyncIOScheduler = _scheduler) -> int:
    """Додає завдання, для яких у конфігурації задано інтервал. Повертає кількість завдань."""
    jobs = 0
    if config.stock_sync_interval_minutes > 0:
        scheduler.add_job(stock_sync_job, 'interval', minutes=config.stock_sync_interval_minutes,
                          id="stock_sync", replace_existing=True, max_instances=1, coalesce=True)
        jobs += 1
    if config.catalog_sync_interval_hours > 0:
        scheduler.add_job(catalog_sync_job, 'interval', hours=config.catalog_sync_interval_hours,
                          id="catalog_sync", replace_existing=True, max_instances=1, coalesce=True)
        jobs += 1
    return jobs


def start_scheduler():
    if configure_jobs() == 0:
        logger.info("Планувальник вимкнено (інтервали синхронізації = 0).")
        return
    _scheduler.start()
    logger.info("✅ Планувальник синхронізації Printful запущено.")


def shutdown_scheduler():
    if _scheduler.running:
        _scheduler.shutdown(wait=False)
        logger.info("Планувальник зупинено.")
