"""Shared constants and enums used across the application."""

from enum import StrEnum


class UserRole(StrEnum):
    """Storefront roles."""

    USER = "user"
    ADMIN = "admin"


class OrderStatus(StrEnum):
    """Lifecycle of a customer order."""

    PENDING = "pending"
    PAID = "paid"
    PROCESSING = "processing"
    FULFILLED = "fulfilled"
    FAILED = "failed"
    REFUNDED = "refunded"


class EsimStatus(StrEnum):
    """eSIM profile status as reported by the partner API."""

    CREATE = "CREATE"
    PAID = "PAID"
    GOT_RESOURCE = "GOT_RESOURCE"
    IN_USE = "IN_USE"
    USED_UP = "USED_UP"
    UNUSED_EXPIRED = "UNUSED_EXPIRED"
    USED_EXPIRED = "USED_EXPIRED"
    CANCEL = "CANCEL"
    SUSPENDED = "SUSPENDED"
    REVOKED = "REVOKED"


ACTIVE_ESIM_STATUSES = frozenset({EsimStatus.IN_USE, EsimStatus.GOT_RESOURCE})


class CartAction(StrEnum):
    """Outcome of adding a package to a cart."""

    CREATED = "created"
    UPDATED = "updated"
    ADDED = "added"


# Countries whose region is BUNDLE_REGION are multi-country bundles
BUNDLE_REGION = "Bundle"
DEFAULT_REGION = "Other"
BUNDLE_FLAG = "🌐"
UNKNOWN_FLAG = "🌍"
DEFAULT_CURRENCY = "USD"

# Partner API amounts are expressed in 1/10,000 of the currency unit
API_PRICE_SCALE = 10_000

# Partner error code meaning "profiles are still being provisioned"
ESIM_PROVISIONING_ERROR_CODE = "200010"

TRANSACTION_ID_PREFIX = "SIM"

MAX_SEARCH_RESULTS = 20
MAX_FEATURED_COUNTRIES = 12
RECENT_WINDOW_DAYS = 7
