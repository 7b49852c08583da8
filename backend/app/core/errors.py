"""
Domain-specific exception hierarchy.

All application exceptions inherit from SimlakError so callers can catch
broadly or narrowly as needed.  Each exception carries the HTTP status the
API layer should answer with plus structured context for logging.
"""

from __future__ import annotations


class SimlakError(Exception):
    """Base exception for all application errors."""

    status_code: int = 500

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        details: dict | None = None,
    ) -> None:
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.details = details or {}
        super().__init__(message)


# ── 4xx ───────────────────────────────────────


class NotFoundError(SimlakError):
    """A requested entity does not exist."""

    status_code = 404


class OrderNotFoundError(NotFoundError):
    def __init__(self, order_id: object) -> None:
        super().__init__("Order not found", details={"order_id": str(order_id)})


class PackageNotFoundError(NotFoundError):
    def __init__(self, package_code: str) -> None:
        super().__init__(
            f"Package not found: {package_code}",
            details={"package_code": package_code},
        )


class CartNotFoundError(NotFoundError):
    def __init__(self) -> None:
        super().__init__("Cart not found")


class CountryNotFoundError(NotFoundError):
    def __init__(self, code: str) -> None:
        super().__init__(f"Country not found: {code}", details={"code": code})


class UserNotFoundError(NotFoundError):
    def __init__(self, ref: object = None) -> None:
        super().__init__("User not found", details={"user": str(ref)} if ref else None)


class EsimNotFoundError(NotFoundError):
    def __init__(self, iccid: str) -> None:
        super().__init__("eSIM not found", details={"iccid": iccid})


class ConflictError(SimlakError):
    """The request collides with existing state."""

    status_code = 409


class InvalidOrderStateError(SimlakError):
    """The order is not in a state that allows the requested transition."""

    status_code = 409

    def __init__(self, order_id: object, status: str) -> None:
        self.order_status = status
        super().__init__(
            f"Order cannot be fulfilled. Current status: {status}",
            details={"order_id": str(order_id), "status": status},
        )


class BadRequestError(SimlakError):
    status_code = 400


class EmptyCartError(BadRequestError):
    def __init__(self) -> None:
        super().__init__("Cart is empty")


class PermissionDeniedError(SimlakError):
    status_code = 403

    def __init__(self, message: str = "Unauthorized") -> None:
        super().__init__(message)


# ── Partner API ───────────────────────────────


class MissingCredentialsError(SimlakError):
    """Partner API credentials are not configured."""

    status_code = 500

    def __init__(self) -> None:
        super().__init__("Missing ESIM_ACCESS_CODE or ESIM_SECRET_KEY")


class EsimAccessError(SimlakError):
    """A call to the eSIM Access partner API failed."""

    status_code = 502

    def __init__(
        self,
        message: str,
        *,
        http_status: int | None = None,
        error_code: str | None = None,
        response_body: str | None = None,
        **kwargs,
    ) -> None:
        self.http_status = http_status
        self.error_code = error_code
        self.response_body = response_body
        super().__init__(message, **kwargs)
