"""Error taxonomy shared by the cart and favorites services.

Each error carries the :class:`ErrorType` and HTTP status it maps to so that a
single FastAPI exception handler can render all of them.  The classes also
inherit from the closest builtin (``LookupError``, ``ValueError`` ...) which
keeps ``except LookupError`` style call sites working.
"""

from __future__ import annotations

from petshop.schemas.error import ErrorType


class ShopError(Exception):
    """Base class for every expected failure raised by the services."""

    error_type: ErrorType = ErrorType.INTERNAL_ERROR
    status_code: int = 500
    message: str = "Request failed"

    def __init__(self, detail: str | None = None) -> None:
        super().__init__(detail or self.message)
        self.detail = detail or self.message


class InvalidArgumentError(ShopError, ValueError):
    error_type = ErrorType.VALIDATION_ERROR
    status_code = 400
    message = "Invalid argument"


class UnauthorizedError(ShopError):
    error_type = ErrorType.AUTHENTICATION_ERROR
    status_code = 401
    message = "Unauthorized"


class UserNotFoundError(ShopError, LookupError):
    error_type = ErrorType.NOT_FOUND
    status_code = 404
    message = "User not found"

    def __init__(self, user_id: int) -> None:
        super().__init__(f"User {user_id} does not exist")
        self.user_id = user_id


class UserExistsError(ShopError):
    error_type = ErrorType.CONFLICT
    status_code = 409
    message = "User already exists"


class FavoriteConflictError(ShopError, ValueError):
    error_type = ErrorType.CONFLICT
    status_code = 409
    message = "Product already in favorites"

    def __init__(self, user_id: int, product_id: int) -> None:
        super().__init__(
            f"Product {product_id} is already in the favorites of user {user_id}"
        )
        self.user_id = user_id
        self.product_id = product_id


class FavoriteNotPresentError(ShopError, LookupError):
    error_type = ErrorType.NOT_PRESENT
    status_code = 400
    message = "Product not in favorites"

    def __init__(self, user_id: int, product_id: int) -> None:
        super().__init__(
            f"Product {product_id} is not in the favorites of user {user_id}"
        )
        self.user_id = user_id
        self.product_id = product_id


class StorageFailureError(ShopError):
    error_type = ErrorType.STORAGE_ERROR
    status_code = 500
    message = "Storage failure"


class PayloadDecodeError(StorageFailureError):
    """A persisted cart or favorites payload matches no accepted encoding."""

    message = "Stored payload could not be decoded"


def require_positive_ids(**ids: object) -> None:
    """Raise :class:`InvalidArgumentError` unless every value is an int > 0."""

    for name, value in ids.items():
        if not isinstance(value, int) or isinstance(value, bool) or value <= 0:
            raise InvalidArgumentError(f"{name} must be a positive integer, got {value!r}")


__all__ = [
    "FavoriteConflictError",
    "FavoriteNotPresentError",
    "InvalidArgumentError",
    "PayloadDecodeError",
    "ShopError",
    "StorageFailureError",
    "UnauthorizedError",
    "UserExistsError",
    "UserNotFoundError",
    "require_positive_ids",
]
