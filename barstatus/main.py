import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from barstatus.db import Base, engine
from barstatus.routes import app_router
from barstatus.scheduler import build_scheduler

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    Base.metadata.create_all(bind=engine)
    scheduler = build_scheduler()
    scheduler.start()
    app.state.scheduler = scheduler
    logger.info("Bar status reconciliation scheduler started")
    yield
    scheduler.shutdown(wait=False)


app = FastAPI(title="Bar Status", lifespan=lifespan)
app.include_router(app_router)
