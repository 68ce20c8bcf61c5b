#!/usr/bin/env python3
"""
Standalone database initialization script
Can be run from host machine (outside Docker) or inside container
"""

import logging
import sys
from pathlib import Path

# Add parent directory to path to import app modules
sys.path.insert(0, str(Path(__file__).parent.parent))

from sqlalchemy import inspect

from domain.models import engine, init_database

logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger("init_db")


def init_tables() -> bool:
    """Create every table known to the ORM and report what exists"""
    logger.info("=" * 60)
    logger.info("Initializing database...")
    logger.info("=" * 60)

    try:
        init_database()
        tables = inspect(engine).get_table_names()
        logger.info(f"✓ {len(tables)} tables ready: {', '.join(sorted(tables))}")
        return True
    except Exception as e:
        logger.exception(f"✗ Failed to initialize database: {e}")
        return False


def main() -> int:
    return 0 if init_tables() else 1


if __name__ == "__main__":
    print("\n" + "=" * 60)
    print("Diet Planner Database Initialization")
    print("=" * 60 + "\n")

    exit_code = main()

    print("\n" + "=" * 60)
    if exit_code == 0:
        print("SUCCESS! Your database is ready to use.")
        print("Run `python scripts/seed.py` to add the demo account.")
    else:
        print("FAILED! Check the errors above.")
    print("=" * 60 + "\n")

    sys.exit(exit_code)
