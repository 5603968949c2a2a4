import logging

from tenacity import retry, retry_if_not_exception_type, stop_after_attempt, wait_fixed

from core.exceptions import SchemaMismatchError
from database.database import engine
from database.models import Base
from database.schema import verify_schema

logger = logging.getLogger(__name__)


@retry(
    stop=stop_after_attempt(5),
    wait=wait_fixed(2),
    retry=retry_if_not_exception_type(SchemaMismatchError),
    reraise=True
)
def init_db():
    logger.info("Initializing database...")
    try:
        Base.metadata.create_all(bind=engine)
        logger.info("Tables created or verified.")
        verify_schema(engine)
    except Exception as e:
        logger.error(f"Error initializing DB: {e}")
        raise


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    init_db()
