"""
Cart repository — session-keyed carts and their lines.

Repository rules:
- Pure data-access logic only
- Every function receives AsyncSession explicitly
- Functions flush, but never commit
"""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models.base import utcnow
from app.db.models.cart import Cart, CartItem


async def get_by_session(db: AsyncSession, session_id: str) -> Cart | None:
    result = await db.execute(select(Cart).where(Cart.session_id == session_id))
    return result.scalar_one_or_none()


async def create_cart(db: AsyncSession, *, session_id: str, user_id: int | None = None) -> Cart:
    cart = Cart(session_id=session_id, user_id=user_id, items=[])
    db.add(cart)
    await db.flush()
    return cart


def find_item(cart: Cart, package_code: str) -> CartItem | None:
    return next((item for item in cart.items if item.package_code == package_code), None)


async def add_item(db: AsyncSession, cart: Cart, *, package_code: str, quantity: int) -> CartItem:
    item = CartItem(package_code=package_code, quantity=quantity)
    cart.items.append(item)
    cart.updated_at = utcnow()
    await db.flush()
    return item


async def set_quantity(db: AsyncSession, cart: Cart, item: CartItem, quantity: int) -> None:
    item.quantity = quantity
    cart.updated_at = utcnow()
    await db.flush()


async def remove_item(db: AsyncSession, cart: Cart, package_code: str) -> bool:
    item = find_item(cart, package_code)
    if item is None:
        return False
    cart.items.remove(item)
    cart.updated_at = utcnow()
    await db.flush()
    return True


async def clear_items(db: AsyncSession, cart: Cart) -> None:
    cart.items.clear()
    cart.updated_at = utcnow()
    await db.flush()


async def set_user(db: AsyncSession, cart: Cart, user_id: int) -> None:
    cart.user_id = user_id
    cart.updated_at = utcnow()
    await db.flush()
