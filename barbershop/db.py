# barbershop/db.py

import logging

from sqlmodel import SQLModel, create_engine, Session

from .config import settings

logger = logging.getLogger(__name__)

# SQLite needs check_same_thread off when FastAPI hands the session to a worker thread
connect_args = {"check_same_thread": False} if settings.database_url.startswith("sqlite") else {}

engine = create_engine(
    settings.database_url,
    echo=False,
    connect_args=connect_args,
)


def create_db_and_tables():
    # models must be imported so their tables are registered on the metadata
    from . import models  # noqa: F401

    SQLModel.metadata.create_all(engine)
    logger.info("Database tables ensured on %s", engine.url.render_as_string(hide_password=True))


# Dependency: one session per request
def get_session():
    with Session(engine) as session:
        yield session
