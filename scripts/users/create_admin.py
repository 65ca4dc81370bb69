import asyncio
import os
import sys
from pathlib import Path

# Add project root to path to import libs
sys.path.append(str(Path(__file__).resolve().parents[2]))

from dotenv import load_dotenv

# Load env file selected for the run (defaults to .env when ENV_FILE not set)
# MUST be done before importing libs that use get_settings()
project_root = Path(__file__).resolve().parents[2]
env_file = os.environ.get("ENV_FILE", ".env")
load_dotenv(project_root / env_file, override=True)

from sqlalchemy import or_, select

from libs.auth.security import hash_password
from libs.common.config import get_settings
from libs.db.config import build_engine, build_session_factory
from services.store_service.models import User, UserRole

settings = get_settings()


async def create_superadmin():
    print("🚀 Starting Superadmin Creation Script")

    email = settings.SUPERADMIN_EMAIL.lower()
    engine = build_engine(settings, echo=False)
    session_factory = build_session_factory(engine)

    try:
        async with session_factory() as db:
            result = await db.execute(
                select(User).where(
                    or_(User.email == email, User.role == UserRole.SUPERADMIN)
                )
            )
            existing = result.scalars().all()
            if existing:
                print("ℹ️  Superadmin already exists:")
                for user in existing:
                    print(f"   ID: {user.id}")
                    print(f"   Name: {user.name}")
                    print(f"   Email: {user.email}")
                    print(f"   Role: {user.role.value}")
                return

            user = User(
                name=settings.SUPERADMIN_NAME,
                email=email,
                password=hash_password(settings.SUPERADMIN_PASSWORD),
                role=UserRole.SUPERADMIN,
                is_active=True,
            )
            db.add(user)
            await db.commit()
            await db.refresh(user)

            print("✅ Superadmin created successfully!")
            print("━" * 40)
            print(f"   Email: {user.email}")
            print(f"   Role: {user.role.value}")
            print(f"   ID: {user.id}")
            print("━" * 40)
            print("Change the password after your first login.")
    finally:
        await engine.dispose()


if __name__ == "__main__":
    asyncio.run(create_superadmin())
