from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI

from schedule_sync import __version__
from schedule_sync.config import setup_logging
from schedule_sync.database import close_db, init_db

from schedule_sync.routers import main_router


setup_logging()
logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup and shutdown events"""
    logger.info("Starting Schedule Sync Service...")

    try:
        await init_db()
    except Exception as e:
        logger.error(f"Failed to start Schedule Sync Service: {e}", exc_info=True)
        raise

    logger.info("Schedule Sync Service started successfully")

    yield

    logger.info("Shutting down Schedule Sync Service...")
    await close_db()
    logger.info("Schedule Sync Service stopped")


app = FastAPI(
    title="Schedule Sync Service",
    version=__version__,
    lifespan=lifespan
)

app.include_router(main_router)
