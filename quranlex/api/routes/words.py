from fastapi import APIRouter
from fastapi.responses import JSONResponse

from quranlex.api.dependencies import analysis_service

router = APIRouter()


@router.get("/{word}")
async def get_word(word: str):
    """Get the full analysis of a word's root family."""
    analysis = await analysis_service.analyze(word)
    if analysis is None:
        return JSONResponse(status_code=404, content={"error": "Word not found"})
    return analysis
