# storefront/main.py
from fastapi import FastAPI
from storefront.api import include_routers
from storefront.data.database import Base, init_db
from storefront.utils.logging import get_logger
import uvicorn

logger = get_logger(__name__)


def create_app(create_tables: bool = True) -> FastAPI:
    if create_tables:
        logger.info("Initializing database")
        try:
            init_db()
            logger.info(f"Tables ready: {sorted(Base.metadata.tables.keys())}")
        except Exception:
            logger.exception("Failed to create tables")
            raise

    app = FastAPI(
        title="Storefront Service",
        version="1.0.0",
    )

    # Include routers
    return include_routers(app)


app = create_app()


if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8000)
