#!/usr/bin/env python3
"""
Database management script.
Creates, drops and resets the schema and seeds the default staff accounts.
"""

import asyncio
import sys
import argparse
import logging
from typing import List, Tuple

from sqlalchemy import select

from app.config import settings
from app.database import AsyncSessionLocal, create_tables, drop_tables, close_db_connection
from app.models.user import User, UserRole

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


# (email, password, name, role)
DEFAULT_USERS: List[Tuple[str, str, str, UserRole]] = [
    ("admin@3mconnect.com", "admin123", "Administrator", UserRole.ADMIN),
    ("agent@3mconnect.com", "agent123", "Agent", UserRole.AGENT),
]


class MigrationManager:
    """Runs schema and seed operations against the configured database."""

    async def create(self) -> None:
        logger.info(f"Creating tables on {settings.environment} database")
        await create_tables()

    async def drop(self) -> None:
        logger.warning("Dropping all tables - all data will be lost!")
        await drop_tables()

    async def seed_database(self) -> int:
        """
        Create the default staff accounts that don't exist yet.

        Returns:
            Number of users created
        """
        logger.info("Seeding database with default users")
        created = 0

        async with AsyncSessionLocal() as session:
            try:
                for email, password, name, role in DEFAULT_USERS:
                    result = await session.execute(select(User).where(User.email == email))
                    if result.scalar_one_or_none():
                        logger.info(f"User {email} already exists, skipping")
                        continue

                    user = User(email=email, name=name, role=role, is_active=True)
                    user.set_password(password)
                    session.add(user)
                    created += 1
                    logger.info(f"Created {role.value} user: {email}")

                await session.commit()

            except Exception as e:
                await session.rollback()
                logger.error(f"Failed to seed database: {e}")
                raise

        if created:
            logger.warning("Default passwords are in use; change them outside development!")
        return created

    async def reset_database(self) -> None:
        """Drop and recreate every table, then seed."""
        if not (settings.is_development or settings.is_testing):
            raise RuntimeError("Database reset is only allowed in development or test mode")

        await self.drop()
        await self.create()
        await self.seed_database()
        logger.info("Database reset completed")


async def run(command: str) -> None:
    manager = MigrationManager()
    try:
        if command == "create":
            await manager.create()
        elif command == "drop":
            await manager.drop()
        elif command == "seed":
            await manager.seed_database()
        elif command == "reset":
            await manager.reset_database()
    finally:
        await close_db_connection()


def main():
    """Main CLI interface for database management."""
    parser = argparse.ArgumentParser(description="Database management for the Real Estate CRM API")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("create", help="Create all tables")
    subparsers.add_parser("drop", help="Drop all tables")
    subparsers.add_parser("seed", help="Create the default admin and agent accounts")

    reset_parser = subparsers.add_parser("reset", help="Drop, recreate and seed (development only)")
    reset_parser.add_argument("--confirm", action="store_true", help="Confirm database reset")

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        return

    if args.command == "reset" and not args.confirm:
        print("Database reset requires --confirm flag")
        return

    try:
        asyncio.run(run(args.command))
    except Exception as e:
        logger.error(f"Command failed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
