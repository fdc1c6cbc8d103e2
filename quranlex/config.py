"""
Application configuration loaded from environment variables.
"""

import logging
import os
from typing import Dict, List

from dotenv import load_dotenv

load_dotenv()

DEFAULT_CORS_ORIGINS = "http://localhost:3000,http://localhost:5173"


def _split_origins(value: str) -> List[str]:
    return [origin.strip() for origin in value.split(",") if origin.strip()]


def get_app_config() -> Dict:
    """Get application settings from environment variables."""
    return {
        "similarity_threshold": float(os.getenv("SIMILARITY_THRESHOLD", "0.3")),
        "search_limit": int(os.getenv("SEARCH_LIMIT", "10")),
        "cors_origins": _split_origins(
            os.getenv("CORS_ORIGINS", DEFAULT_CORS_ORIGINS)
        ),
        "log_level": os.getenv("LOG_LEVEL", "INFO").upper(),
        "seed_file": os.getenv("SEED_FILE") or None,
    }


def configure_logging(level: str = None) -> None:
    """Set up root logging for the API process."""
    level = level or get_app_config()["log_level"]
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
