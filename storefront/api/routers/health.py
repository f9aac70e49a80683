# storefront/api/routers/health.py
import redis
from fastapi import APIRouter, Depends
from redis.exceptions import RedisError
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from storefront.data.database import get_db
from storefront.utils.logging import get_logger
from storefront.utils.retry import redis_retry
from storefront.utils.settings import CELERY_BROKER_URL

logger = get_logger(__name__)

router = APIRouter(tags=["health"])


@redis_retry()
def _ping_broker(url: str) -> bool:
    client = redis.Redis.from_url(url, socket_connect_timeout=1, socket_timeout=1)
    return bool(client.ping())


def broker_status(url: str = CELERY_BROKER_URL) -> str:
    if not url.startswith("redis"):
        return "skipped"
    try:
        return "ok" if _ping_broker(url) else "down"
    except RedisError as e:
        logger.warning(f"Broker ping failed: {e}")
        return "down"


@router.get("/health")
def health(db: Session = Depends(get_db)):
    try:
        db.execute(text("SELECT 1"))
        database = "ok"
    except SQLAlchemyError as e:
        logger.warning(f"Database check failed: {e}")
        database = "down"

    # the broker only carries notifications, orders work without it
    return {
        "status": "ok" if database == "ok" else "degraded",
        "database": database,
        "broker": broker_status(),
    }
