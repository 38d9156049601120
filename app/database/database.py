from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.pool import StaticPool
from app.core.config import settings
import logging

logger = logging.getLogger(__name__)


def _engine_options() -> dict:
    options = {"echo": settings.DEBUG}
    if settings.is_sqlite:
        # In-memory SQLite must share one connection across threads
        options.update(
            connect_args={"check_same_thread": False},
            poolclass=StaticPool
        )
    else:
        options.update(pool_pre_ping=True, pool_size=10, max_overflow=20)
    return options


sync_engine = create_engine(settings.database_url, **_engine_options())

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=sync_engine)

Base = declarative_base()


def get_db():
    """Yield a database session scoped to a single request."""
    db = SessionLocal()
    try:
        yield db
    except Exception as e:
        logger.error(f"Database error: {e}")
        db.rollback()
        raise
    finally:
        db.close()
