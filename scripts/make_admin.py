import asyncio
import sys
import os

# Add project root to sys.path
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sqlalchemy import select
from subdeck.core.security import create_access_token
from subdeck.db.session import async_session_maker
from subdeck.models.user import User


async def promote_user(identifier: str):
    """
    Flag a user as admin and print a bearer token for the /r2 and /admin routes.
    identifier can be email or user id.
    """
    async with async_session_maker() as session:
        if "@" in identifier:
            stmt = select(User).where(User.email == identifier)
        else:
            stmt = select(User).where(User.id == identifier)

        result = await session.execute(stmt)
        user = result.scalar_one_or_none()

        if not user:
            print(f"Error: User '{identifier}' not found.")
            return

        user.is_admin = True
        await session.commit()
        print(f"Success: User '{user.display_name or user.id}' ({user.email}) is now an admin.")
        print(f"Token: {create_access_token(user.id, role='admin')}")

if __name__ == "__main__":
    if len(sys.argv) < 2:
        print("Usage: python scripts/make_admin.py <email_or_user_id>")
        sys.exit(1)

    asyncio.run(promote_user(sys.argv[1]))
