# storefront/api/errors.py
from fastapi import HTTPException

from storefront.domain.errors import (
    CheckoutConflict,
    ConcurrentModification,
    EmptyCart,
    InsufficientStock,
    InvalidTransition,
    NotFound,
    ProductInUse,
    StorefrontError,
)

_STATUS_CODES = {
    NotFound: 404,
    EmptyCart: 400,
    InsufficientStock: 409,
    InvalidTransition: 409,
    CheckoutConflict: 409,
    ConcurrentModification: 409,
    ProductInUse: 409,
}


def to_http(exc: StorefrontError) -> HTTPException:
    for error_type, status_code in _STATUS_CODES.items():
        if isinstance(exc, error_type):
            return HTTPException(status_code=status_code, detail=str(exc))
    return HTTPException(status_code=400, detail=str(exc))
