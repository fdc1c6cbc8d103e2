"""
Health check endpoints that verify database integrity.
"""

from fastapi import APIRouter

from quranlex.data.integrity import check_database_content, check_database_schema

router = APIRouter()


@router.get("/")
def health_check():
    """Basic health check."""
    return {"status": "healthy"}


@router.get("/database")
def database_health():
    """Detailed database health check."""
    schema_checks = check_database_schema()
    content_checks = check_database_content()

    is_healthy = schema_checks["schema_valid"] and content_checks["has_data"]

    return {
        "status": "healthy" if is_healthy else "unhealthy",
        "database": {
            "schema": schema_checks,
            "content": content_checks,
        },
    }
