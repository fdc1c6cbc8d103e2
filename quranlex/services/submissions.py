"""
Visitor requests for words that have not been analyzed yet.

Duplicate requests bump the existing row's request count instead of adding
a new one, and words already in the corpus are turned away with their
stored form so the caller can redirect.
"""

import logging
import re
from dataclasses import dataclass
from typing import Dict, List, Optional

logger = logging.getLogger(__name__)

STATUSES = ("pending", "reviewing", "approved", "rejected", "published")

MAX_WORD_LENGTH = 50
MAX_TRANSLITERATION_LENGTH = 100
MAX_REASON_LENGTH = 1000

# priority is stored as PostgreSQL INTEGER
MIN_PRIORITY = -(2 ** 31)
MAX_PRIORITY = 2 ** 31 - 1

EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

CREATED = "created"
BUMPED = "bumped"
EXISTS = "exists"


class SubmissionValidationError(ValueError):
    """Raised when a submission or moderation update has an invalid field."""

    def __init__(self, field: str, message: str):
        super().__init__(message)
        self.field = field
        self.message = message


@dataclass
class SubmissionResult:
    outcome: str
    submission: Optional[Dict] = None
    existing: Optional[Dict] = None


def _clean(value) -> Optional[str]:
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def _check_length(field: str, value: Optional[str], limit: int) -> None:
    if value is not None and len(value) > limit:
        raise SubmissionValidationError(
            field, f"{field} must be at most {limit} characters"
        )


def validate_status(status: Optional[str]) -> Optional[str]:
    if status is None:
        return None
    if status not in STATUSES:
        raise SubmissionValidationError(
            "status", f"status must be one of: {', '.join(STATUSES)}"
        )
    return status


def serialize_submission(row: Dict) -> Dict:
    """Render a submission row with the API's camelCase keys."""
    return {
        "id": row["id"],
        "word": row["word"],
        "transliteration": row.get("transliteration"),
        "submitterEmail": row.get("submitter_email"),
        "reason": row.get("reason"),
        "status": row["status"],
        "priority": row["priority"],
        "requestCount": row["request_count"],
        "createdAt": row["created_at"].isoformat() if row.get("created_at") else None,
        "updatedAt": row["updated_at"].isoformat() if row.get("updated_at") else None,
    }


class SubmissionService:
    """Handle word requests and the moderation queue."""

    def __init__(self, repository):
        self.repository = repository

    async def submit(
        self,
        word: str,
        transliteration: str = None,
        submitter_email: str = None,
        reason: str = None,
    ) -> SubmissionResult:
        word = _clean(word)
        transliteration = _clean(transliteration)
        submitter_email = _clean(submitter_email)
        reason = _clean(reason)

        if not word:
            raise SubmissionValidationError("word", "word is required")
        _check_length("word", word, MAX_WORD_LENGTH)
        _check_length("transliteration", transliteration, MAX_TRANSLITERATION_LENGTH)
        _check_length("reason", reason, MAX_REASON_LENGTH)
        if submitter_email is not None and not EMAIL_RE.match(submitter_email):
            raise SubmissionValidationError(
                "submitterEmail", "submitterEmail must be a valid email address"
            )

        existing = await self.repository.find_existing_word(word, transliteration)
        if existing:
            return SubmissionResult(
                EXISTS,
                existing={
                    "word": existing["word"],
                    "transliteration": existing.get("transliteration"),
                },
            )

        bumped = await self.repository.increment_submission(word)
        if bumped:
            logger.info(
                "Bumped request for %r to %d", word, bumped["request_count"]
            )
            return SubmissionResult(BUMPED, submission=bumped)

        row, inserted = await self.repository.insert_submission(
            word, transliteration, submitter_email, reason
        )
        if not inserted:
            # Lost a race with an identical first submission
            logger.info("Concurrent request for %r merged into existing row", word)
            return SubmissionResult(BUMPED, submission=row)

        logger.info("Created word request %d for %r", row["id"], word)
        return SubmissionResult(CREATED, submission=row)

    async def list_submissions(self, status: str = None) -> List[Dict]:
        """Moderation queue: highest priority, then most requested, first."""
        status = validate_status(_clean(status))
        return await self.repository.list_submissions(status)

    async def update_submission(
        self, submission_id: int, status: str = None, priority=None
    ) -> Optional[Dict]:
        """Change status and/or priority. None when the id does not exist."""
        status = validate_status(_clean(status))
        if priority is not None and (
            isinstance(priority, bool) or not isinstance(priority, int)
        ):
            raise SubmissionValidationError("priority", "priority must be an integer")
        if priority is not None and not MIN_PRIORITY <= priority <= MAX_PRIORITY:
            raise SubmissionValidationError(
                "priority", f"priority must be between {MIN_PRIORITY} and {MAX_PRIORITY}"
            )

        updated = await self.repository.update_submission(
            submission_id, status=status, priority=priority
        )
        if updated:
            logger.info(
                "Submission %d updated (status=%s, priority=%s)",
                submission_id,
                updated["status"],
                updated["priority"],
            )
        return updated
