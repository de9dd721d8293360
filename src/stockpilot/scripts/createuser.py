"""Interactive command for creating staff and admin users."""

import asyncio
import sys
from getpass import getpass

from sqlalchemy import select

from stockpilot.core.db import AsyncSessionLocal
from stockpilot.core.logging import get_logger
from stockpilot.core.security import hash_password
from stockpilot.models.user import User, UserRole

logger = get_logger(__name__)


def prompt_for_username() -> str:
    """Prompt for username with validation."""
    while True:
        username = input("Username: ").strip().lower()

        if not username:
            print("❌ Username cannot be empty")
            continue

        if len(username) > 100 or " " in username:
            print("❌ Username must be a single word of at most 100 characters")
            continue

        return username


def prompt_for_password() -> str:
    """Prompt for password with validation."""
    while True:
        password = getpass("Password: ")

        if len(password) < 8:
            print("❌ Password must be at least 8 characters")
            continue

        password_confirm = getpass("Password (confirm): ")

        if password != password_confirm:
            print("❌ Passwords don't match")
            continue

        return password


def prompt_for_role() -> str:
    answer = input("Admin? [y/N]: ").strip().lower()
    return UserRole.ADMIN.value if answer in ("y", "yes") else UserRole.STAFF.value


async def create_user() -> None:
    """Interactive user creation."""
    print("\n" + "=" * 50)
    print("StockPilot - Create user")
    print("=" * 50 + "\n")

    async with AsyncSessionLocal() as db:
        username = prompt_for_username()

        result = await db.execute(select(User).where(User.username == username))
        if result.scalar_one_or_none():
            print(f"❌ User '{username}' already exists\n")
            return

        display_name = input("Display name: ").strip() or username
        password = prompt_for_password()
        role = prompt_for_role()

        user = User(
            username=username,
            display_name=display_name,
            hashed_password=hash_password(password),
            role=role,
            is_active=True,
        )

        db.add(user)
        await db.commit()

        logger.info("user.created", username=username, role=role, user_id=str(user.id))
        print("\n✅ user created successfully!")
        print(f"   Username: {username}")
        print(f"   Role: {role}")
        print(f"   ID: {user.id}\n")


def main() -> None:
    try:
        asyncio.run(create_user())
    except KeyboardInterrupt:
        print("\n\n❌ Cancelled\n")
        sys.exit(1)
    except Exception as e:
        logger.error("createuser_error", error=str(e))
        print(f"\n❌ Error: {e}\n")
        sys.exit(1)


if __name__ == "__main__":
    main()
