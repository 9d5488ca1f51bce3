from contextlib import asynccontextmanager

from fastapi import FastAPI
from loguru import logger

from app.api.calendar import router as calendar_router
from app.config.settings import settings
from app.core.logger import setup_logger
from app.db.session import init_db

setup_logger(settings)


@asynccontextmanager
async def lifespan(_app: FastAPI):
    """Create missing tables on startup."""
    logger.info(f"Starting Life Hub backend (env={settings.app_env})")
    init_db()
    yield
    logger.info("Life Hub backend stopped")


app = FastAPI(title="Life Hub API", lifespan=lifespan)
app.include_router(calendar_router)


@app.get("/health")
def health():
    return {"status": "ok"}
