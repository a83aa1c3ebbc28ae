"""
Apply schema.sql to the database named by DATABASE_URL.

Usage:
    python -m evntify.database.init_db
"""

import logging
import sys
from pathlib import Path

from evntify.config import Config
from evntify.database.db_connection import get_db

SCHEMA_PATH = Path(__file__).with_name("schema.sql")


def init_db(database_url: str) -> None:
    """Create the users, events and event_attendees tables if missing."""
    schema = SCHEMA_PATH.read_text(encoding="utf-8")

    conn = get_db(database_url)
    try:
        with conn:
            with conn.cursor() as cur:
                cur.execute(schema)
    finally:
        conn.close()

    logging.info("Database schema applied.")


def main() -> int:
    logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(asctime)s - %(message)s")

    if not Config.DATABASE_URL:
        logging.error("DATABASE_URL is not set. Please set the environment variable.")
        return 1

    init_db(Config.DATABASE_URL)
    return 0


if __name__ == "__main__":
    sys.exit(main())
