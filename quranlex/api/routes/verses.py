from fastapi import APIRouter, Path
from fastapi.responses import JSONResponse

from quranlex.api.dependencies import repository

router = APIRouter()

# surah and ayah are PostgreSQL INTEGER
MAX_INTEGER = 2 ** 31 - 1


@router.get("/verse/{surah}/{ayah}")
async def get_verse(
    surah: int = Path(..., ge=1, le=MAX_INTEGER),
    ayah: int = Path(..., ge=1, le=MAX_INTEGER),
):
    """Get a verse with its translations."""
    verse = await repository.get_verse(surah, ayah)
    if verse is None:
        return JSONResponse(status_code=404, content={"error": "Verse not found"})

    translations = await repository.get_translations([verse["id"]])
    return {
        "id": verse["id"],
        "surah": verse["surah"],
        "ayah": verse["ayah"],
        "arabicText": verse["arabic_text"],
        "simpleText": verse.get("simple_text"),
        "transliteration": verse.get("transliteration"),
        "translations": [
            {"translator": t["translator"], "text": t["text"]} for t in translations
        ],
    }


@router.get("/roots")
async def get_roots():
    """List all roots with their meanings."""
    roots = await repository.list_roots()
    return [
        {
            "id": r["id"],
            "root": r["root"],
            "meanings": r.get("meanings") or [],
            "classicalDefinition": r.get("classical_definition"),
            "modernUsage": r.get("modern_usage"),
        }
        for r in roots
    ]
