"""
Service instances shared by the API routers.

All routers share one repository, and with it one connection pool.
"""

from quranlex.db.repository import QuranRepository
from quranlex.services.analysis import WordAnalysisService
from quranlex.services.resolver import WordResolver
from quranlex.services.submissions import SubmissionService

repository = QuranRepository()
word_resolver = WordResolver(repository)
analysis_service = WordAnalysisService(repository, word_resolver)
submission_service = SubmissionService(repository)
