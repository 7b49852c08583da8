"""
Promote an existing user to admin.
Run: python -m scripts.make_admin someone@example.com  (from backend/)
"""

import asyncio
import sys

from app.core.constants import UserRole
from app.db.session import async_session
from app.repositories import users as user_repository


async def promote(email: str) -> int:
    async with async_session() as session:
        user = await user_repository.get_user_by_email(session, email)
        if user is None:
            print(f"No user with email {email}; sign in once so the account syncs.")
            return 1
        await user_repository.set_role(session, user.id, UserRole.ADMIN.value)
        await session.commit()
    print(f"  {email} is now an admin.")
    return 0


if __name__ == "__main__":
    if len(sys.argv) != 2:
        print("usage: python -m scripts.make_admin <email>")
        sys.exit(2)
    sys.exit(asyncio.run(promote(sys.argv[1])))
