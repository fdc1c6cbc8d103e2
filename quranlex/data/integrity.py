"""
Checks for verifying the corpus schema and its contents.
"""

from typing import Dict

import psycopg2
from dotenv import load_dotenv

from quranlex.db.db_sync import get_db_connection_sync
from quranlex.db.schema_pg import REQUIRED_TABLES

load_dotenv()


def check_database_schema() -> Dict[str, bool]:
    """Check that all corpus tables and the trigram extension exist."""
    results = {"schema_valid": False, "tables_exist": False, "trigram_enabled": False}

    try:
        with get_db_connection_sync() as conn:
            cursor = conn.cursor()

            cursor.execute(
                """
                SELECT table_name FROM information_schema.tables
                WHERE table_schema = 'public' AND table_name = ANY(%s)
            """,
                (list(REQUIRED_TABLES),),
            )
            tables = {row[0] for row in cursor.fetchall()}
            results["tables_exist"] = tables == set(REQUIRED_TABLES)

            cursor.execute("SELECT 1 FROM pg_extension WHERE extname = 'pg_trgm'")
            results["trigram_enabled"] = cursor.fetchone() is not None

            results["schema_valid"] = (
                results["tables_exist"] and results["trigram_enabled"]
            )

    except psycopg2.Error as e:
        print(f"Error checking schema: {e}")

    return results


def check_database_content() -> Dict[str, object]:
    """Check that the corpus has occurrences linked to roots and verses."""
    results = {
        "has_data": False,
        "occurrence_count": 0,
        "root_count": 0,
        "verse_count": 0,
        "unlinked_occurrences": 0,
    }

    try:
        with get_db_connection_sync() as conn:
            cursor = conn.cursor()

            cursor.execute(
                """
                SELECT
                    (SELECT COUNT(*) FROM word_occurrences),
                    (SELECT COUNT(*) FROM roots),
                    (SELECT COUNT(*) FROM verses),
                    (SELECT COUNT(*) FROM word_occurrences WHERE root_id IS NULL)
            """
            )
            occurrences, roots, verses, unlinked = cursor.fetchone()
            results["occurrence_count"] = occurrences
            results["root_count"] = roots
            results["verse_count"] = verses
            results["unlinked_occurrences"] = unlinked
            results["has_data"] = occurrences > 0

    except psycopg2.Error as e:
        print(f"Error checking content: {e}")

    return results


def run_all_checks() -> int:
    """Run all database checks, print a report, and return an exit code."""
    print("Running database checks...")
    print("=" * 50)

    schema_results = check_database_schema()
    content_results = check_database_content()

    print("\nSchema:")
    print(f"  ✓ Tables exist: {schema_results['tables_exist']}")
    print(f"  ✓ Trigram enabled: {schema_results['trigram_enabled']}")

    print("\nContent:")
    print(f"  ✓ Occurrences: {content_results['occurrence_count']:,}")
    print(f"  ✓ Roots: {content_results['root_count']:,}")
    print(f"  ✓ Verses: {content_results['verse_count']:,}")
    print(f"  ✓ Occurrences without root: {content_results['unlinked_occurrences']:,}")

    print("\n" + "=" * 50)
    if schema_results["schema_valid"] and content_results["has_data"]:
        print("✓ All checks PASSED")
        return 0
    print("✗ Some checks FAILED")
    return 1


if __name__ == "__main__":
    raise SystemExit(run_all_checks())
