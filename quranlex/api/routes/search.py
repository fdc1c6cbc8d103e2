from typing import Optional

from fastapi import APIRouter, Query

from quranlex.api.dependencies import word_resolver

router = APIRouter()


@router.get("")
async def search_words(
    q: Optional[str] = None, limit: Optional[int] = Query(None, ge=1, le=50)
):
    """Search words, roots and transliterations (exact, partial, then fuzzy)."""
    return await word_resolver.search(q, limit)
