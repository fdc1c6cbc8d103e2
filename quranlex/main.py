import asyncio
import logging
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from quranlex.api.dependencies import repository
from quranlex.api.routes import health as health_router
from quranlex.api.routes import search, submissions, verses, words
from quranlex.config import configure_logging, get_app_config
from quranlex.db.connection import DatastoreError
from quranlex.services.resolver import SearchValidationError
from quranlex.services.submissions import SubmissionValidationError

configure_logging()
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Quranic Word Explorer",
    description="Explore Quranic words by root: occurrences, translations and tafsir",
    version="1.0.0",
)

# CORS middleware for frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=get_app_config()["cors_origins"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(search.router, prefix="/api/search", tags=["search"])
app.include_router(words.router, prefix="/api/word", tags=["words"])
app.include_router(verses.router, prefix="/api", tags=["verses"])
app.include_router(submissions.router, prefix="/api/submissions", tags=["submissions"])
app.include_router(health_router.router, prefix="/api/health", tags=["health"])


@app.exception_handler(SubmissionValidationError)
async def submission_validation_handler(request: Request, exc: SubmissionValidationError):
    return JSONResponse(status_code=400, content={"error": exc.message, "field": exc.field})


@app.exception_handler(SearchValidationError)
async def search_validation_handler(request: Request, exc: SearchValidationError):
    return JSONResponse(status_code=400, content={"error": str(exc), "field": exc.field})


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    first = errors[0] if errors else {}
    location = [str(part) for part in first.get("loc", ()) if part not in ("body", "query", "path")]
    field = ".".join(location) or None
    message = first.get("msg", "Invalid request")
    if field:
        message = f"{field}: {message}"
    return JSONResponse(status_code=400, content={"error": message, "field": field})


@app.exception_handler(DatastoreError)
async def datastore_error_handler(request: Request, exc: DatastoreError):
    logger.error(
        "Datastore failure on %s %s", request.method, request.url.path, exc_info=exc
    )
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


def ensure_database():
    """Ensure the schema exists and load the seed file into an empty database."""
    from quranlex.db.db_sync import check_database_exists, create_database

    if check_database_exists():
        print("Word corpus found and populated.")
        return

    print("Word corpus not found or empty.")
    try:
        create_database()
    except Exception as e:
        print(f"ERROR: Failed to create database schema: {e}")
        print("The application will start but word lookup will not work.")
        return

    seed_file = get_app_config()["seed_file"]
    if not seed_file:
        print(
            "WARNING: No SEED_FILE environment variable set. "
            "Word lookup will return nothing until data is loaded."
        )
        return

    from quranlex.data.load_seed import load_seed

    try:
        load_seed(Path(seed_file))
    except Exception as e:
        print(f"ERROR: Failed to load seed file {seed_file}: {e}")
        print("The application will start but word lookup may be incomplete.")


@app.on_event("startup")
async def startup_event():
    """Run startup tasks."""
    await asyncio.get_running_loop().run_in_executor(None, ensure_database)


@app.on_event("shutdown")
async def shutdown_event():
    await repository.close()


@app.get("/")
def root():
    return {
        "message": "Quranic Word Explorer API",
        "version": "1.0.0",
        "endpoints": {
            "search": "/api/search?q={term}",
            "word": "/api/word/{word}",
            "submissions": "/api/submissions",
        },
    }


@app.get("/health")
def health():
    """Basic health endpoint."""
    return {"status": "healthy"}


@app.get("/ready")
def ready():
    """Readiness check - verifies the corpus is loaded."""
    from quranlex.data.integrity import check_database_content

    content_checks = check_database_content()
    is_ready = content_checks["has_data"]

    return {
        "status": "ready" if is_ready else "not_ready",
        "database": {
            "occurrence_count": content_checks["occurrence_count"],
            "has_data": content_checks["has_data"],
        },
    }
