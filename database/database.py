"""
Engine and session factory for the QCS database.

The engine is built on first use from `database.url` (or DATABASE_URL), so
importing this module never needs a reachable server.
"""
import logging
from functools import lru_cache

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import Session, sessionmaker

from core.config_loader import load_config

logger = logging.getLogger(__name__)

SessionLocal = sessionmaker(autoflush=False)


@lru_cache()
def get_engine() -> Engine:
    url = load_config().database.url
    logger.info(f"Connecting to database {make_url(url).render_as_string(hide_password=True)}")
    return create_engine(url, pool_pre_ping=True)


def new_session() -> Session:
    return SessionLocal(bind=get_engine())
