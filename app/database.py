from sqlalchemy import create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import QueuePool
from app.config import settings
from app.utils.logger import get_logger

logger = get_logger(__name__)

# Database connection pooling configuration
POOL_SIZE = 5          # Base connections per worker
MAX_OVERFLOW = 10      # Additional connections when needed
POOL_TIMEOUT = 30      # Seconds to wait for connection
POOL_RECYCLE = 1800    # Recycle connections every 30 minutes
POOL_PRE_PING = True   # Validate connections before use

# Global variables for lazy initialization
_engine = None
_session_local = None

def _connect_args(database_url: str) -> dict:
    # SQLite connections are handed between the event loop and the threadpool
    if database_url.startswith("sqlite"):
        return {"check_same_thread": False}
    return {}

def get_engine():
    """Get database engine with lazy initialization for Gunicorn worker compatibility."""
    global _engine
    if _engine is None:
        _engine = create_engine(
            settings.DATABASE_URL,
            poolclass=QueuePool,
            pool_size=POOL_SIZE,
            max_overflow=MAX_OVERFLOW,
            pool_timeout=POOL_TIMEOUT,
            pool_recycle=POOL_RECYCLE,
            pool_pre_ping=POOL_PRE_PING,
            connect_args=_connect_args(settings.DATABASE_URL),
            echo=settings.DEBUG,  # Log SQL queries in debug mode
        )
        logger.info(f"Database pool configured: size={POOL_SIZE}, max_overflow={MAX_OVERFLOW}, timeout={POOL_TIMEOUT}s")
    return _engine

def get_session_local():
    """Get SessionLocal with lazy initialization for Gunicorn worker compatibility."""
    global _session_local
    if _session_local is None:
        _session_local = sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=get_engine())
    return _session_local

Base = declarative_base()

def get_db():
    """
    Database dependency for FastAPI.

    Yields one session per request. Ledger operations commit their own unit of
    work; anything left uncommitted when a handler fails is rolled back here.
    """
    SessionLocal = get_session_local()
    db = SessionLocal()
    try:
        yield db
    except SQLAlchemyError as e:
        logger.error(f"Database session error: {e}")
        db.rollback()
        raise
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()

def get_pool_status():
    """Current connection pool counters, reported by the health endpoint."""
    pool = get_engine().pool
    status = {"pool_type": type(pool).__name__}
    if isinstance(pool, QueuePool):
        status.update({
            "pool_size": pool.size(),
            "checked_in": pool.checkedin(),
            "checked_out": pool.checkedout(),
            "overflow": pool.overflow(),
        })
    return status
