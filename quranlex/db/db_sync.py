"""
Synchronous database connection for maintenance scripts.
Uses psycopg2 for sync operations.
"""

from contextlib import contextmanager

import psycopg2
import psycopg2.errors

from quranlex.db.connection import get_db_config


@contextmanager
def get_db_connection_sync():
    """Get a synchronous database connection."""
    config = get_db_config()
    conn = psycopg2.connect(
        host=config["host"],
        port=config["port"],
        database=config["database"],
        user=config["user"],
        password=config["password"],
    )
    try:
        yield conn
    finally:
        conn.close()


def create_database():
    """Create PostgreSQL database schema."""
    from quranlex.db.schema_pg import POSTGRES_SCHEMA

    config = get_db_config()

    with get_db_connection_sync() as conn:
        cursor = conn.cursor()
        # Execute schema statements one by one
        for statement in POSTGRES_SCHEMA.split(";"):
            statement = statement.strip()
            if statement:
                try:
                    cursor.execute(statement)
                except psycopg2.errors.DuplicateTable:
                    conn.rollback()
                except psycopg2.errors.DuplicateObject:
                    conn.rollback()
                else:
                    conn.commit()

    print(
        f"Created/verified database schema at {config['host']}:{config['port']}/{config['database']}"
    )


def check_database_exists() -> bool:
    """Check if the corpus tables exist and hold word occurrences."""
    try:
        with get_db_connection_sync() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                SELECT EXISTS (
                    SELECT FROM information_schema.tables
                    WHERE table_name = 'word_occurrences'
                )
            """
            )
            if not cursor.fetchone()[0]:
                return False

            cursor.execute("SELECT COUNT(*) FROM word_occurrences")
            return cursor.fetchone()[0] > 0
    except psycopg2.Error as e:
        print(f"Could not inspect database: {e}")
        return False
