"""Document store selection."""

from hostel_portal.config.logging import get_logger
from hostel_portal.config.settings import Settings
from hostel_portal.db.session import build_engine, build_session_factory
from hostel_portal.repositories.base import DocumentStore, InMemoryDocumentStore, SqlAlchemyDocumentStore

logger = get_logger(__name__)


def build_store(app_settings: Settings) -> DocumentStore:
    """Create the document store named by ``STORE_BACKEND``."""
    if app_settings.STORE_BACKEND == "sql":
        logger.info("Using SQL document store")
        engine = build_engine(app_settings.DATABASE_URL, app_settings.DATABASE_ECHO)
        return SqlAlchemyDocumentStore(build_session_factory(engine))
    logger.info("Using in-memory document store")
    return InMemoryDocumentStore()
