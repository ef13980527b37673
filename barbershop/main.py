# barbershop/main.py

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from .config import settings
from .db import create_db_and_tables
from .routers import (
    appointments_routes,
    auth_routes,
    barbers_routes,
    services_routes,
    users_routes,
)

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    create_db_and_tables()
    logger.info("Barbershop API started (business timezone %s)", settings.business_timezone)
    yield


app = FastAPI(title="Barbershop Booking API", lifespan=lifespan)


@app.get("/health")
def health_check():
    return {"status": "ok"}


app.include_router(auth_routes.router)
app.include_router(users_routes.router)
app.include_router(services_routes.router)
app.include_router(barbers_routes.router)
app.include_router(appointments_routes.router)
