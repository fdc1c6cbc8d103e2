import logging
from typing import Dict, List, Optional

from quranlex.config import get_app_config
from quranlex.services.text import normalize_term

logger = logging.getLogger(__name__)

MAX_SEARCH_LIMIT = 50


class SearchValidationError(ValueError):
    """Raised when a search request is missing its query."""

    def __init__(self, message: str, field: str = "q"):
        super().__init__(message)
        self.field = field


class WordResolver:
    """Resolve a user-supplied term to a root family."""

    def __init__(self, repository, similarity_threshold: float = None):
        self.repository = repository
        if similarity_threshold is None:
            similarity_threshold = get_app_config()["similarity_threshold"]
        self.similarity_threshold = similarity_threshold

    async def _match(self, query: str) -> Optional[Dict]:
        """
        Find the seed occurrence for a query.

        Tiers are tried in order and the first hit wins:
        exact word, exact transliteration, fuzzy word, fuzzy transliteration.
        An exact hit on an occurrence with no root ends the search with
        no match rather than falling through to a neighbouring family.
        """
        for column in ("word", "transliteration"):
            occurrence = await self.repository.find_occurrence_exact(column, query)
            if occurrence:
                if occurrence["root_id"] is None:
                    logger.debug("Exact %s match for %r has no root", column, query)
                    return None
                logger.debug("Exact %s match for %r", column, query)
                return occurrence

        folded = normalize_term(query)
        if not folded:
            return None

        for column in ("word", "transliteration"):
            occurrence = await self.repository.find_occurrence_similar(
                column, folded, self.similarity_threshold
            )
            if occurrence:
                logger.debug("Fuzzy %s match for %r", column, query)
                return occurrence

        return None

    async def resolve(self, query: str) -> Optional[Dict]:
        """
        Resolve a query to its root and the canonical stored word form.

        Returns None when nothing matches.
        """
        query = (query or "").strip()
        if not query:
            return None

        occurrence = await self._match(query)
        if occurrence is None:
            return None

        root_id = occurrence["root_id"]
        root = await self.repository.get_root(root_id)

        # Echo the stored form of the matched occurrence, never the raw input
        return {
            "root_id": root_id,
            "root": root,
            "canonical_word": occurrence["word"],
            "canonical_transliteration": occurrence.get("transliteration"),
        }

    async def search(self, query: str, limit: int = None) -> List[Dict]:
        """Lightweight 'did you mean' search over words, roots and transliterations."""
        query = (query or "").strip()
        if not query:
            raise SearchValidationError("Query parameter 'q' is required")

        if limit is None:
            limit = get_app_config()["search_limit"]
        limit = max(1, min(limit, MAX_SEARCH_LIMIT))

        rows = await self.repository.search_words(
            query, normalize_term(query), limit, self.similarity_threshold
        )

        results = []
        seen = set()
        for row in rows:
            if row["word"] in seen:
                continue
            seen.add(row["word"])
            results.append(
                {
                    "word": row["word"],
                    "root": row.get("root"),
                    "meanings": row.get("meanings") or [],
                }
            )
        return results[:limit]
