from typing import Generator, Optional
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import sessionmaker, Session
import logging

from acl_filter.permissions.walker import acl_output_walker
from acl_filter.settings import settings

logger = logging.getLogger(__name__)

_engine: Optional[Engine] = None
_SessionLocal: Optional[sessionmaker] = None


def get_engine() -> Engine:
    global _engine, _SessionLocal

    if _engine is None:
        url = settings.ACL_DATABASE_URL
        options = {"pool_pre_ping": True}
        if not url.startswith("sqlite"):
            options.update({
                "pool_size": 10,
                "max_overflow": 5,
                "pool_timeout": 30,
                "pool_recycle": 300
            })
        _engine = create_engine(url, **options)
        _SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=_engine)
        acl_output_walker.install(_SessionLocal)
    return _engine


def get_db() -> Generator[Session, None, None]:

    get_engine()
    db = _SessionLocal()

    try:
        yield db
    except OperationalError:
        logger.error("Database connection failed")
        db.rollback()
        raise
    finally:
        db.close()
