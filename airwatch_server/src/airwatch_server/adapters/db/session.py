import logging
from typing import Optional

from airwatch_core.config.environments import get_settings
from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

log = logging.getLogger(__name__)

Base = declarative_base()


def create_session_factory(database_url: Optional[str] = None) -> sessionmaker:
    """Create the session factory, with current settings unless a URL is given."""
    settings = get_settings()
    url = database_url or settings.DATABASE_URL

    log.info("Initializing database connection for %s environment", settings.ENVIRONMENT.value)
    log.info("Database URL: %s", url)

    if url in ("sqlite://", "sqlite:///:memory:"):
        # one shared connection, otherwise every session sees an empty database
        engine = create_engine(
            url,
            future=True,
            echo=False,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    else:
        engine = create_engine(url, future=True, echo=False)

    from airwatch_server.adapters.db import sqlalchemy_models  # noqa: F401  registers tables

    Base.metadata.create_all(bind=engine)
    return sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)
