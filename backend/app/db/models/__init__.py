"""
Models package — re-exports Base and all models.

Import models here so Alembic's `target_metadata = Base.metadata`
picks up every table automatically.

When adding a new model:
    1. Create `app/db/models/<table_name>.py`
    2. Import it here
"""

from app.db.models.base import Base
from app.db.models.cart import Cart, CartItem
from app.db.models.country import Country
from app.db.models.esim import Esim
from app.db.models.order import Order, OrderItem
from app.db.models.package import Package
from app.db.models.user import User
from app.db.models.waitlist import WaitlistEntry

__all__ = [
    "Base",
    "Cart",
    "CartItem",
    "Country",
    "Esim",
    "Order",
    "OrderItem",
    "Package",
    "User",
    "WaitlistEntry",
]
