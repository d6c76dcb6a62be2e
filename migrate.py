#!/usr/bin/env python3
"""
Database schema management script.
Creates, drops and resets the schema and seeds the demo user.
"""

import asyncio
import sys
import argparse
import logging

from qrinstruct.config import settings
from qrinstruct.database import (
    AsyncSessionLocal,
    create_tables,
    drop_tables,
    test_database_connection,
    close_db_connection,
)
from qrinstruct.services.demo_user import ensure_demo_user

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


class MigrationManager:
    """Manages the database schema for the configured DATABASE_URL."""

    async def check_connection(self) -> bool:
        """Report whether the database answers."""
        connected = await test_database_connection()
        if connected:
            logger.info(f"Database reachable ({settings.environment})")
        else:
            logger.error("Database is not reachable")
        return connected

    async def create_schema(self) -> None:
        logger.info("Creating tables")
        await create_tables()

    async def drop_schema(self) -> None:
        logger.warning("Dropping all tables")
        await drop_tables()

    async def seed_database(self) -> None:
        """Insert the demo user if it is missing."""
        logger.info("Seeding database with the demo user")

        async with AsyncSessionLocal() as session:
            created = await ensure_demo_user(session)

        if created:
            logger.info(f"Demo user created: {settings.demo_user_email} ({settings.demo_user_id})")
        else:
            logger.info("Demo user already exists, skipping seed")

    async def reset_database(self) -> None:
        """Drop and recreate all tables, then seed."""
        logger.warning("Resetting database - all data will be lost!")

        if not (settings.is_development or settings.is_testing):
            raise RuntimeError("Database reset is only allowed in development or test mode")

        await self.drop_schema()
        await self.create_schema()
        await self.seed_database()

        logger.info("Database reset completed")


async def run(command: str) -> bool:
    manager = MigrationManager()
    try:
        if command == "check":
            return await manager.check_connection()
        if command == "create":
            await manager.create_schema()
        elif command == "drop":
            await manager.drop_schema()
        elif command == "seed":
            await manager.seed_database()
        elif command == "reset":
            await manager.reset_database()
        return True
    finally:
        await close_db_connection()


def main():
    """Main CLI interface for schema management."""
    parser = argparse.ArgumentParser(description="Database schema management")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("check", help="Check database connectivity")
    subparsers.add_parser("create", help="Create all tables")
    subparsers.add_parser("seed", help="Seed the demo user")

    drop_parser = subparsers.add_parser("drop", help="Drop all tables")
    drop_parser.add_argument("--confirm", action="store_true", help="Confirm dropping tables")

    reset_parser = subparsers.add_parser("reset", help="Reset database (development only)")
    reset_parser.add_argument("--confirm", action="store_true", help="Confirm database reset")

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        return

    if args.command in ("drop", "reset") and not args.confirm:
        print(f"Database {args.command} requires --confirm flag")
        return

    try:
        ok = asyncio.run(run(args.command))
    except Exception as e:
        logger.error(f"Command failed: {e}")
        sys.exit(1)

    if not ok:
        sys.exit(1)


if __name__ == "__main__":
    main()
