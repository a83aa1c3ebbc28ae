"""
PostgreSQL connection helpers and store selection.

Provides get_db() for one-off scripts, create_pool() for the app, and
create_store()/get_store() to build and reach the configured store.
"""

import logging
from typing import Any, Mapping, Optional

import psycopg2
from flask import current_app
from psycopg2 import pool
from psycopg2.extras import DictCursor

from evntify.database.memory_store import MemoryStore
from evntify.database.postgres_store import PostgresStore
from evntify.database.store import Store

STORE_EXTENSION_KEY = "evntify.store"


def get_db(database_url: str):
    """
    Returns a new psycopg2 connection with dictionary-based row access.

    Usage:
        with get_db(url) as conn:
            with conn.cursor() as cur:
                cur.execute(...)

    Raises:
        psycopg2.Error: If connection fails.
    """
    try:
        conn = psycopg2.connect(database_url)
        conn.cursor_factory = DictCursor
        return conn
    except psycopg2.Error as e:
        logging.error(f"Error connecting to database: {e}")
        raise


def create_pool(database_url: str, minconn: int = 1, maxconn: int = 10) -> pool.ThreadedConnectionPool:
    """Thread-safe pool; every connection hands out DictCursor rows."""
    conn_pool = pool.ThreadedConnectionPool(
        minconn=minconn,
        maxconn=maxconn,
        dsn=database_url,
        cursor_factory=DictCursor,
    )
    logging.info(f"PostgreSQL connection pool initialized ({minconn}-{maxconn} connections)")
    return conn_pool


def create_store(config: Mapping[str, Any]) -> Store:
    """
    Build the store named by STORE_BACKEND.

    - "postgres": pooled PostgresStore on DATABASE_URL (required).
    - "memory": empty in-process MemoryStore.
    """
    backend = config.get("STORE_BACKEND", "memory")

    if backend == "postgres":
        database_url: Optional[str] = config.get("DATABASE_URL")
        if not database_url:
            raise RuntimeError("DATABASE_URL is not set. Please set the environment variable.")
        maxconn = config.get("DB_POOL_MAX", 10)
        conn_pool = create_pool(database_url, minconn=config.get("DB_POOL_MIN", 1), maxconn=maxconn)
        return PostgresStore(conn_pool, max_connections=maxconn)

    if backend == "memory":
        logging.warning("Using in-memory store; data is lost on restart.")
        return MemoryStore()

    raise RuntimeError(f"Unknown STORE_BACKEND '{backend}'. Use 'postgres' or 'memory'.")


def get_store() -> Store:
    """Return the store owned by the current Flask app."""
    return current_app.extensions[STORE_EXTENSION_KEY]
