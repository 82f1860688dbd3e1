import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from sqlmodel import Session

import fitledger.models as _models  # noqa: F401 registers tables with SQLModel metadata
from fitledger.config import get_settings
from fitledger.database import create_db_and_tables, engine, exclusive_access
from fitledger.routers import data, exercises, progress, sets, workouts
from fitledger.services.catalog import load_catalog_file, sync_catalog

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    logging.basicConfig(level=settings.log_level)
    create_db_and_tables()
    if settings.seed_catalog:
        with exclusive_access(), Session(engine) as session:
            sync_catalog(load_catalog_file(settings.catalog_path), session)
    yield


app = FastAPI(title=settings.app_name, lifespan=lifespan)

app.include_router(exercises.router, prefix="/api/exercises", tags=["exercises"])
app.include_router(workouts.router, prefix="/api/workouts", tags=["workouts"])
app.include_router(sets.router, prefix="/api", tags=["sets"])
app.include_router(progress.router, prefix="/api/progress", tags=["progress"])
app.include_router(data.router, prefix="/api/data", tags=["data"])
