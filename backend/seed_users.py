"""
Database seeding script for the initial admin user.

ADMIN accounts cannot self-register, so the first one is created here.
Run this script after database is set up but before first use.
"""

import asyncio
import os
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from backend.app.db.session import AsyncSessionLocal, engine, Base
from backend.app.models.user import User
from backend.app.models.enums import UserRole
from backend.app.core.security import hash_password
from sqlalchemy import select

ADMIN_EMAIL = os.getenv("SEED_ADMIN_EMAIL", "admin@tours.local")
ADMIN_PASSWORD = os.getenv("SEED_ADMIN_PASSWORD", "admin123")


async def seed_users():
    """Create the ADMIN user unless one with the same email exists."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with AsyncSessionLocal() as db:
        print("Starting user seeding...")

        result = await db.execute(select(User).where(User.email == ADMIN_EMAIL))
        if result.scalar_one_or_none():
            print(f"ADMIN user {ADMIN_EMAIL} already exists, skipping seeding")
            return

        db.add(User(
            email=ADMIN_EMAIL,
            username="admin",
            hashed_password=hash_password(ADMIN_PASSWORD),
            role=UserRole.ADMIN,
            is_active=True,
        ))
        await db.commit()

        print(f"Created ADMIN user ({ADMIN_EMAIL})")
        print("Note: staff users register via POST /v1/auth/register")

    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(seed_users())
