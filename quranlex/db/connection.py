"""
Database connection module using PostgreSQL.
Loads credentials from environment variables.
"""

import json
import os
from contextlib import asynccontextmanager

import asyncpg
from dotenv import load_dotenv

load_dotenv()


class DatastoreError(Exception):
    """Raised when an underlying database query fails."""


def get_db_config() -> dict:
    """Get database configuration from environment variables."""
    return {
        "host": os.getenv("DB_HOST", "localhost"),
        "port": int(os.getenv("DB_PORT", "5432")),
        "database": os.getenv("DB_NAME", "quranlex"),
        "user": os.getenv("DB_USER", "quranlex"),
        "password": os.getenv("DB_PASSWORD", ""),
        "min_size": int(os.getenv("DB_POOL_MIN", "2")),
        "max_size": int(os.getenv("DB_POOL_MAX", "10")),
    }


async def _init_connection(conn) -> None:
    # roots.meanings is JSONB; decode it to Python lists
    await conn.set_type_codec(
        "jsonb", encoder=json.dumps, decoder=json.loads, schema="pg_catalog"
    )


async def create_db_pool():
    """Create a database connection pool."""
    config = get_db_config()
    return await asyncpg.create_pool(
        host=config["host"],
        port=config["port"],
        database=config["database"],
        user=config["user"],
        password=config["password"],
        min_size=config["min_size"],
        max_size=config["max_size"],
        init=_init_connection,
    )


@asynccontextmanager
async def acquire(pool):
    """Acquire a connection, converting driver failures into DatastoreError."""
    try:
        async with pool.acquire() as connection:
            yield connection
    except (asyncpg.PostgresError, asyncpg.InterfaceError, OSError) as e:
        raise DatastoreError(str(e)) from e
