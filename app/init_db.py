from app.database import Base, get_engine
from app import models  # noqa: F401  registers tables on Base.metadata
from app.logging_config import configure_logging
from app.utils.logger import get_logger

logger = get_logger(__name__)

def init_db():
    """Create any missing tables. Schema changes on existing databases go through Alembic."""
    engine = get_engine()
    Base.metadata.create_all(bind=engine)
    logger.info(f"Database tables ensured: {', '.join(sorted(Base.metadata.tables))}")

if __name__ == "__main__":
    configure_logging()
    init_db()
