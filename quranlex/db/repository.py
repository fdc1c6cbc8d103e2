"""
Query primitives over the Quranic corpus and the submission queue.

Every method returns plain dicts (or lists of dicts) keyed by column name.
Driver failures surface as DatastoreError.
"""

from typing import Dict, List, Optional, Sequence, Tuple

import asyncpg

from quranlex.db.connection import DatastoreError, acquire, create_db_pool

# Whitelisted occurrence columns used for term matching
MATCH_COLUMNS = {
    "word": "o.word",
    "transliteration": "o.transliteration",
}

OCCURRENCE_COLUMNS = """
    o.id, o.word, o.transliteration, o.root_id, o.verse_id, o.meaning_used,
    o.morphology, o.syntax_role, o.verb_form, o.has_qualifier, o.qualifier,
    o.usage_category
"""

SUBMISSION_COLUMNS = """
    id, word, transliteration, submitter_email, reason, status, priority,
    request_count, created_at, updated_at
"""


class QuranRepository:
    """PostgreSQL-backed datastore for word lookup and submissions."""

    def __init__(self, pool=None):
        self._pool = pool

    async def _get_pool(self):
        """Get or create database connection pool."""
        if self._pool is None:
            try:
                self._pool = await create_db_pool()
            except (asyncpg.PostgresError, OSError) as e:
                raise DatastoreError(str(e)) from e
        return self._pool

    async def close(self) -> None:
        if self._pool is not None:
            await self._pool.close()
            self._pool = None

    # -- Word lookup -------------------------------------------------------

    async def find_occurrence_exact(self, column: str, term: str) -> Optional[Dict]:
        """First occurrence in storage order whose column equals term.

        Unlinked occurrences are returned too; the caller decides what an
        exact hit without a root means.
        """
        sql_column = MATCH_COLUMNS[column]
        pool = await self._get_pool()
        async with acquire(pool) as conn:
            row = await conn.fetchrow(
                f"""
                SELECT {OCCURRENCE_COLUMNS}
                FROM word_occurrences o
                WHERE {sql_column} = $1
                ORDER BY o.id
                LIMIT 1
                """,
                term,
            )
            return dict(row) if row else None

    async def find_occurrence_similar(
        self, column: str, term: str, threshold: float
    ) -> Optional[Dict]:
        """Most similar root-linked occurrence by trigram similarity.

        term must already be folded with normalize_term.
        """
        folded = f"fold_term({MATCH_COLUMNS[column]})"
        pool = await self._get_pool()
        async with acquire(pool) as conn:
            await _set_similarity_threshold(conn, threshold)
            row = await conn.fetchrow(
                f"""
                SELECT {OCCURRENCE_COLUMNS}
                FROM word_occurrences o
                WHERE o.root_id IS NOT NULL
                  AND {folded} % $1
                ORDER BY similarity({folded}, $1) DESC, o.id
                LIMIT 1
                """,
                term,
            )
            return dict(row) if row else None

    async def search_words(
        self, term: str, folded_term: str, limit: int, threshold: float
    ) -> List[Dict]:
        """Ranked candidates for the search box, deduplicated by word."""
        pool = await self._get_pool()
        async with acquire(pool) as conn:
            await _set_similarity_threshold(conn, threshold)
            rows = await conn.fetch(
                """
                SELECT word, root, meanings FROM (
                    SELECT DISTINCT ON (o.word)
                        o.word, r.root, r.meanings, o.id,
                        CASE
                            WHEN o.word = $1 OR r.root = $1 OR o.transliteration = $1 THEN 1
                            WHEN o.word ILIKE $2 OR r.root ILIKE $2 OR o.transliteration ILIKE $2 THEN 2
                            ELSE 3
                        END AS rank
                    FROM word_occurrences o
                    LEFT JOIN roots r ON r.id = o.root_id
                    WHERE o.word = $1 OR r.root = $1 OR o.transliteration = $1
                       OR o.word ILIKE $2 OR r.root ILIKE $2 OR o.transliteration ILIKE $2
                       OR fold_term(o.word) % $3
                       OR fold_term(o.transliteration) % $3
                    ORDER BY o.word, rank, o.id
                ) candidates
                ORDER BY rank, id
                LIMIT $4
                """,
                term,
                like_pattern(term),
                folded_term,
                limit,
            )
            return [dict(row) for row in rows]

    async def find_existing_word(
        self, word: str, transliteration: Optional[str]
    ) -> Optional[Dict]:
        """Any occurrence whose word or transliteration matches either term."""
        terms = [word] + ([transliteration] if transliteration else [])
        pool = await self._get_pool()
        async with acquire(pool) as conn:
            row = await conn.fetchrow(
                """
                SELECT id, word, transliteration, root_id
                FROM word_occurrences
                WHERE word = ANY($1::text[]) OR transliteration = ANY($1::text[])
                ORDER BY id
                LIMIT 1
                """,
                terms,
            )
            return dict(row) if row else None

    # -- Word family -------------------------------------------------------

    async def get_root(self, root_id: int) -> Optional[Dict]:
        pool = await self._get_pool()
        async with acquire(pool) as conn:
            row = await conn.fetchrow(
                """
                SELECT id, root, meanings, classical_definition, modern_usage
                FROM roots WHERE id = $1
                """,
                root_id,
            )
            return dict(row) if row else None

    async def list_roots(self) -> List[Dict]:
        pool = await self._get_pool()
        async with acquire(pool) as conn:
            rows = await conn.fetch(
                """
                SELECT id, root, meanings, classical_definition, modern_usage
                FROM roots ORDER BY root
                """
            )
            return [dict(row) for row in rows]

    async def get_occurrences_by_root(self, root_id: int) -> List[Dict]:
        pool = await self._get_pool()
        async with acquire(pool) as conn:
            rows = await conn.fetch(
                f"""
                SELECT {OCCURRENCE_COLUMNS}
                FROM word_occurrences o
                WHERE o.root_id = $1
                ORDER BY o.id
                """,
                root_id,
            )
            return [dict(row) for row in rows]

    async def get_verses(self, verse_ids: Sequence[int]) -> List[Dict]:
        if not verse_ids:
            return []
        pool = await self._get_pool()
        async with acquire(pool) as conn:
            rows = await conn.fetch(
                """
                SELECT id, surah, ayah, arabic_text, simple_text, transliteration
                FROM verses
                WHERE id = ANY($1::int[])
                ORDER BY surah, ayah
                """,
                list(verse_ids),
            )
            return [dict(row) for row in rows]

    async def get_verse(self, surah: int, ayah: int) -> Optional[Dict]:
        pool = await self._get_pool()
        async with acquire(pool) as conn:
            row = await conn.fetchrow(
                """
                SELECT id, surah, ayah, arabic_text, simple_text, transliteration
                FROM verses WHERE surah = $1 AND ayah = $2
                """,
                surah,
                ayah,
            )
            return dict(row) if row else None

    async def get_translations(self, verse_ids: Sequence[int]) -> List[Dict]:
        if not verse_ids:
            return []
        pool = await self._get_pool()
        async with acquire(pool) as conn:
            rows = await conn.fetch(
                """
                SELECT id, verse_id, translator, text
                FROM translations
                WHERE verse_id = ANY($1::int[])
                ORDER BY id
                """,
                list(verse_ids),
            )
            return [dict(row) for row in rows]

    async def get_tafsir(self, verse_ids: Sequence[int]) -> List[Dict]:
        if not verse_ids:
            return []
        pool = await self._get_pool()
        async with acquire(pool) as conn:
            rows = await conn.fetch(
                """
                SELECT id, verse_id, word_focus, scholar, century, layer, text, translation
                FROM tafsir
                WHERE verse_id = ANY($1::int[])
                ORDER BY id
                """,
                list(verse_ids),
            )
            return [dict(row) for row in rows]

    # -- Submissions -------------------------------------------------------

    async def increment_submission(self, word: str) -> Optional[Dict]:
        """Bump request_count of the submission for word, if one exists."""
        pool = await self._get_pool()
        async with acquire(pool) as conn:
            row = await conn.fetchrow(
                f"""
                UPDATE word_submissions
                SET request_count = request_count + 1, updated_at = now()
                WHERE word = $1
                RETURNING {SUBMISSION_COLUMNS}
                """,
                word,
            )
            return dict(row) if row else None

    async def insert_submission(
        self,
        word: str,
        transliteration: Optional[str],
        submitter_email: Optional[str],
        reason: Optional[str],
    ) -> Tuple[Dict, bool]:
        """
        Insert a pending submission.

        A concurrent insert of the same word turns into an increment.
        Returns the row and whether it was newly inserted.
        """
        pool = await self._get_pool()
        async with acquire(pool) as conn:
            row = await conn.fetchrow(
                f"""
                INSERT INTO word_submissions (word, transliteration, submitter_email, reason)
                VALUES ($1, $2, $3, $4)
                ON CONFLICT (word) DO UPDATE SET
                    request_count = word_submissions.request_count + 1,
                    updated_at = now()
                RETURNING {SUBMISSION_COLUMNS}, (xmax = 0) AS inserted
                """,
                word,
                transliteration,
                submitter_email,
                reason,
            )
            data = dict(row)
            inserted = data.pop("inserted")
            return data, inserted

    async def list_submissions(self, status: Optional[str] = None) -> List[Dict]:
        pool = await self._get_pool()
        async with acquire(pool) as conn:
            rows = await conn.fetch(
                f"""
                SELECT {SUBMISSION_COLUMNS}
                FROM word_submissions
                WHERE $1::text IS NULL OR status = $1
                ORDER BY priority DESC, request_count DESC, id
                """,
                status,
            )
            return [dict(row) for row in rows]

    async def update_submission(
        self,
        submission_id: int,
        status: Optional[str] = None,
        priority: Optional[int] = None,
    ) -> Optional[Dict]:
        pool = await self._get_pool()
        async with acquire(pool) as conn:
            row = await conn.fetchrow(
                f"""
                UPDATE word_submissions
                SET status = COALESCE($2, status),
                    priority = COALESCE($3, priority),
                    updated_at = now()
                WHERE id = $1
                RETURNING {SUBMISSION_COLUMNS}
                """,
                submission_id,
                status,
                priority,
            )
            return dict(row) if row else None

async def _set_similarity_threshold(conn, threshold: float) -> None:
    # The % operator compares against this session setting
    await conn.execute(
        "SELECT set_config('pg_trgm.similarity_threshold', $1, false)", str(threshold)
    )

def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")

def like_pattern(term: str) -> str:
    """ILIKE pattern matching term anywhere, with wildcards in term escaped."""
    return f"%{_escape_like(term)}%"
