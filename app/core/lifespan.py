from contextlib import asynccontextmanager
import logging

from app.core.resume_store import get_resume_store

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app):
    store = get_resume_store()
    stored = len(store.list("resume:"))
    logger.info("resume_store_ready records=%s", stored)
    yield
    store.close()
