"""Cart operations keyed by an opaque client session id."""

from __future__ import annotations

from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.constants import CartAction
from app.core.errors import CartNotFoundError, PackageNotFoundError
from app.repositories import carts as cart_repository
from app.repositories import packages as package_repository


async def get_cart(db: AsyncSession, session_id: str) -> dict[str, Any]:
    """Cart lines joined with current package details; vanished packages are dropped."""
    cart = await cart_repository.get_by_session(db, session_id)
    if cart is None or not cart.items:
        return {"items": [], "total": 0, "item_count": 0}

    packages = await package_repository.get_by_codes(db, (i.package_code for i in cart.items))
    items = []
    for line in cart.items:
        pkg = packages.get(line.package_code)
        if pkg is None:
            continue
        items.append({
            "package_code": line.package_code,
            "quantity": line.quantity,
            "package": pkg,
            "subtotal": pkg.retail_price * line.quantity,
        })

    return {
        "items": items,
        "total": sum(i["subtotal"] for i in items),
        "item_count": sum(i["quantity"] for i in items),
    }


async def add_to_cart(
    db: AsyncSession,
    session_id: str,
    package_code: str,
    quantity: int = 1,
) -> CartAction:
    if await package_repository.get_by_code(db, package_code) is None:
        raise PackageNotFoundError(package_code)

    cart = await cart_repository.get_by_session(db, session_id)
    if cart is None:
        cart = await cart_repository.create_cart(db, session_id=session_id)
        await cart_repository.add_item(db, cart, package_code=package_code, quantity=quantity)
        return CartAction.CREATED

    line = cart_repository.find_item(cart, package_code)
    if line is not None:
        await cart_repository.set_quantity(db, cart, line, line.quantity + quantity)
        return CartAction.UPDATED

    await cart_repository.add_item(db, cart, package_code=package_code, quantity=quantity)
    return CartAction.ADDED


async def update_cart_item(db: AsyncSession, session_id: str, package_code: str, quantity: int) -> None:
    """Set a line's quantity; zero or less removes the line."""
    cart = await cart_repository.get_by_session(db, session_id)
    if cart is None:
        raise CartNotFoundError()

    if quantity <= 0:
        await cart_repository.remove_item(db, cart, package_code)
        return

    line = cart_repository.find_item(cart, package_code)
    if line is not None:
        await cart_repository.set_quantity(db, cart, line, quantity)


async def remove_from_cart(db: AsyncSession, session_id: str, package_code: str) -> None:
    cart = await cart_repository.get_by_session(db, session_id)
    if cart is not None:
        await cart_repository.remove_item(db, cart, package_code)


async def clear_cart(db: AsyncSession, session_id: str) -> None:
    cart = await cart_repository.get_by_session(db, session_id)
    if cart is not None:
        await cart_repository.clear_items(db, cart)


async def link_cart_to_user(db: AsyncSession, session_id: str, user_id: int) -> None:
    cart = await cart_repository.get_by_session(db, session_id)
    if cart is not None:
        await cart_repository.set_user(db, cart, user_id)
