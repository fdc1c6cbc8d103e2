from typing import Optional

from fastapi import APIRouter, Path
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from quranlex.api.dependencies import submission_service
from quranlex.services.submissions import BUMPED, EXISTS, serialize_submission

router = APIRouter()

# Serial ids are PostgreSQL INTEGER
MAX_INTEGER = 2 ** 31 - 1


class SubmissionRequest(BaseModel):
    word: str
    transliteration: Optional[str] = None
    submitterEmail: Optional[str] = None
    reason: Optional[str] = None


class SubmissionUpdate(BaseModel):
    status: Optional[str] = None
    priority: Optional[int] = None


@router.post("")
async def submit_word(request: SubmissionRequest):
    """Request analysis of a word not yet in the corpus."""
    result = await submission_service.submit(
        request.word,
        transliteration=request.transliteration,
        submitter_email=request.submitterEmail,
        reason=request.reason,
    )

    if result.outcome == EXISTS:
        return JSONResponse(
            status_code=400,
            content={
                "error": "Word already exists in database",
                "word": result.existing["word"],
                "transliteration": result.existing["transliteration"],
            },
        )

    if result.outcome == BUMPED:
        return {
            "message": "Word request already exists - increased priority",
            "submission": serialize_submission(result.submission),
        }

    return JSONResponse(
        status_code=201, content=serialize_submission(result.submission)
    )


@router.get("")
async def list_submissions(status: Optional[str] = None):
    """Moderation queue ordered by priority, then request count."""
    rows = await submission_service.list_submissions(status)
    return [serialize_submission(row) for row in rows]


@router.patch("/{submission_id}")
async def update_submission(
    update: SubmissionUpdate, submission_id: int = Path(..., ge=1, le=MAX_INTEGER)
):
    """Change a submission's status and/or priority."""
    updated = await submission_service.update_submission(
        submission_id, status=update.status, priority=update.priority
    )
    if updated is None:
        return JSONResponse(status_code=404, content={"error": "Submission not found"})
    return serialize_submission(updated)
