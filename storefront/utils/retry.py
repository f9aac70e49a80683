# storefront/utils/retry.py
from tenacity import (
    retry,
    retry_if_exception,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)
from aiosmtplib import SMTPException
from redis.exceptions import RedisError
from sqlalchemy.exc import OperationalError

from storefront.utils.settings import DB_RETRY_ATTEMPTS

# postgres: serialization_failure, deadlock_detected
_PG_RETRY_CODES = {"40001", "40P01"}
_RETRY_MESSAGES = ("deadlock detected", "could not serialize access", "database is locked")


def is_transient_db_error(exc: BaseException) -> bool:
    if not isinstance(exc, OperationalError):
        return False
    code = getattr(exc.orig, "pgcode", None) or getattr(exc.orig, "sqlstate", None)
    if code in _PG_RETRY_CODES:
        return True
    msg = str(exc).lower()
    return any(m in msg for m in _RETRY_MESSAGES)


def db_retry():
    # only for units of work that roll back completely on failure
    return retry(
        reraise=True,
        stop=stop_after_attempt(DB_RETRY_ATTEMPTS),
        wait=wait_exponential(multiplier=0.05, min=0.05, max=1),
        retry=retry_if_exception(is_transient_db_error),
    )


def redis_retry():
    return retry(
        reraise=True,
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.2, min=0.2, max=2),
        retry=retry_if_exception_type(RedisError),
    )


def smtp_retry():
    return retry(
        reraise=True,
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.5, min=0.5, max=5),
        retry=retry_if_exception_type((SMTPException, OSError)),
    )
