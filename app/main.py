import os
from fastapi import FastAPI
from sqlalchemy.exc import OperationalError
from app.db import Base, engine, SessionLocal
import app.models  # noqa: F401 ensure models are imported so tables are known
from app.api.routes import router as api_router
from app.scheduler import start_scheduler, stop_scheduler
from app.seed import seed_inventory
from app.utils import logger, retry

# create FastAPI instance
app = FastAPI(title="RideFleet dealership API")
app.include_router(api_router)


@retry(OperationalError, tries=3, delay=2, backoff=2)
def init_db():
    Base.metadata.create_all(bind=engine)


@app.on_event("startup")
def on_startup():
    init_db()
    if os.getenv("SEED_INVENTORY", "1") == "1":
        db = SessionLocal()
        try:
            seed_inventory(db)
        finally:
            db.close()
    start_scheduler()
    logger.info("Dealership server running")


@app.on_event("shutdown")
def on_shutdown():
    stop_scheduler()
