"""Shared fixtures: an in-memory stand-in for QuranRepository and a seeded corpus."""

import itertools
from datetime import datetime, timedelta
from difflib import SequenceMatcher
from typing import Dict, List, Optional

import pytest
from fastapi.testclient import TestClient

from quranlex.db.connection import DatastoreError
from quranlex.services.analysis import WordAnalysisService
from quranlex.services.resolver import WordResolver
from quranlex.services.submissions import SubmissionService
from quranlex.services.text import normalize_term

OCCURRENCE_FIELDS = (
    "transliteration",
    "meaning_used",
    "morphology",
    "syntax_role",
    "verb_form",
    "has_qualifier",
    "qualifier",
    "usage_category",
)


class InMemoryRepository:
    """Implements the repository query primitives over plain lists.

    Approximate matching uses difflib's ratio on case/diacritic-folded text.
    """

    def __init__(self) -> None:
        self.roots: Dict[int, Dict] = {}
        self.verses: Dict[int, Dict] = {}
        self.translations: List[Dict] = []
        self.tafsir: List[Dict] = []
        self.occurrences: List[Dict] = []
        self.submissions: Dict[int, Dict] = {}
        self.calls: List[str] = []
        self._ids = itertools.count(1)
        self._clock = datetime(2026, 1, 1, 12, 0, 0)

    def _tick(self) -> datetime:
        self._clock += timedelta(seconds=1)
        return self._clock

    # -- Fixture builders --------------------------------------------------

    def add_root(self, root: str, meanings: Optional[List[Dict]] = None, **fields) -> int:
        root_id = next(self._ids)
        self.roots[root_id] = {
            "id": root_id,
            "root": root,
            "meanings": meanings,
            "classical_definition": fields.get("classical_definition"),
            "modern_usage": fields.get("modern_usage"),
        }
        return root_id

    def add_verse(self, surah: int, ayah: int, arabic_text: str, **fields) -> int:
        verse_id = next(self._ids)
        self.verses[verse_id] = {
            "id": verse_id,
            "surah": surah,
            "ayah": ayah,
            "arabic_text": arabic_text,
            "simple_text": fields.get("simple_text"),
            "transliteration": fields.get("transliteration"),
        }
        return verse_id

    def add_translation(self, verse_id: int, translator: str, text: str) -> None:
        self.translations.append(
            {"id": next(self._ids), "verse_id": verse_id, "translator": translator, "text": text}
        )

    def add_tafsir(self, verse_id: int, scholar: str, text: str, **fields) -> None:
        self.tafsir.append(
            {
                "id": next(self._ids),
                "verse_id": verse_id,
                "scholar": scholar,
                "text": text,
                "word_focus": fields.get("word_focus"),
                "century": fields.get("century"),
                "layer": fields.get("layer"),
                "translation": fields.get("translation"),
            }
        )

    def add_occurrence(self, word: str, verse_id: int, root_id: Optional[int] = None, **fields) -> Dict:
        occurrence = {"id": next(self._ids), "word": word, "root_id": root_id, "verse_id": verse_id}
        for field in OCCURRENCE_FIELDS:
            occurrence[field] = fields.get(field)
        self.occurrences.append(occurrence)
        return occurrence

    # -- Word lookup -------------------------------------------------------

    def _linked(self) -> List[Dict]:
        return [o for o in self.occurrences if o["root_id"] is not None]

    async def find_occurrence_exact(self, column: str, term: str) -> Optional[Dict]:
        self.calls.append(f"exact:{column}")
        for occ in self.occurrences:
            if occ[column] == term:
                return dict(occ)
        return None

    async def find_occurrence_similar(self, column: str, term: str, threshold: float) -> Optional[Dict]:
        self.calls.append(f"similar:{column}")
        best = None
        best_score = threshold
        for occ in self._linked():
            value = occ[column]
            if not value:
                continue
            score = SequenceMatcher(None, normalize_term(value), term).ratio()
            if score > best_score or (best is None and score >= best_score):
                best, best_score = occ, score
        return dict(best) if best else None

    async def search_words(self, term: str, folded_term: str, limit: int, threshold: float) -> List[Dict]:
        lowered = term.lower()
        ranked = []
        for occ in self.occurrences:
            root = self.roots.get(occ["root_id"], {})
            exact_values = (occ["word"], root.get("root"), occ["transliteration"])
            if term in exact_values:
                rank = 1
            elif any(v and lowered in v.lower() for v in exact_values):
                rank = 2
            elif any(
                v and SequenceMatcher(None, normalize_term(v), folded_term).ratio() >= threshold
                for v in (occ["word"], occ["transliteration"])
            ):
                rank = 3
            else:
                continue
            ranked.append((rank, occ["id"], occ, root))

        ranked.sort(key=lambda item: (item[0], item[1]))
        results = []
        seen = set()
        for _, _, occ, root in ranked:
            if occ["word"] in seen:
                continue
            seen.add(occ["word"])
            results.append({"word": occ["word"], "root": root.get("root"), "meanings": root.get("meanings")})
        return results[:limit]

    async def find_existing_word(self, word: str, transliteration: Optional[str]) -> Optional[Dict]:
        terms = {word} | ({transliteration} if transliteration else set())
        for occ in self.occurrences:
            if occ["word"] in terms or occ["transliteration"] in terms:
                return {
                    "id": occ["id"],
                    "word": occ["word"],
                    "transliteration": occ["transliteration"],
                    "root_id": occ["root_id"],
                }
        return None

    # -- Word family -------------------------------------------------------

    async def get_root(self, root_id: int) -> Optional[Dict]:
        root = self.roots.get(root_id)
        return dict(root) if root else None

    async def list_roots(self) -> List[Dict]:
        return sorted((dict(r) for r in self.roots.values()), key=lambda r: r["root"])

    async def get_occurrences_by_root(self, root_id: int) -> List[Dict]:
        return [dict(o) for o in self.occurrences if o["root_id"] == root_id]

    async def get_verses(self, verse_ids) -> List[Dict]:
        rows = [dict(self.verses[v]) for v in set(verse_ids) if v in self.verses]
        return sorted(rows, key=lambda v: (v["surah"], v["ayah"]))

    async def get_verse(self, surah: int, ayah: int) -> Optional[Dict]:
        for verse in self.verses.values():
            if verse["surah"] == surah and verse["ayah"] == ayah:
                return dict(verse)
        return None

    async def get_translations(self, verse_ids) -> List[Dict]:
        return [dict(t) for t in self.translations if t["verse_id"] in set(verse_ids)]

    async def get_tafsir(self, verse_ids) -> List[Dict]:
        return [dict(t) for t in self.tafsir if t["verse_id"] in set(verse_ids)]

    # -- Submissions -------------------------------------------------------

    def _find_submission(self, word: str) -> Optional[Dict]:
        for submission in self.submissions.values():
            if submission["word"] == word:
                return submission
        return None

    async def increment_submission(self, word: str) -> Optional[Dict]:
        submission = self._find_submission(word)
        if submission is None:
            return None
        submission["request_count"] += 1
        submission["updated_at"] = self._tick()
        return dict(submission)

    async def insert_submission(self, word, transliteration, submitter_email, reason):
        existing = self._find_submission(word)
        if existing is not None:
            existing["request_count"] += 1
            existing["updated_at"] = self._tick()
            return dict(existing), False

        submission_id = next(self._ids)
        now = self._tick()
        self.submissions[submission_id] = {
            "id": submission_id,
            "word": word,
            "transliteration": transliteration,
            "submitter_email": submitter_email,
            "reason": reason,
            "status": "pending",
            "priority": 0,
            "request_count": 1,
            "created_at": now,
            "updated_at": now,
        }
        return dict(self.submissions[submission_id]), True

    async def list_submissions(self, status: Optional[str] = None) -> List[Dict]:
        rows = [
            dict(s) for s in self.submissions.values() if status is None or s["status"] == status
        ]
        return sorted(rows, key=lambda s: (-s["priority"], -s["request_count"], s["id"]))

    async def update_submission(self, submission_id: int, status=None, priority=None) -> Optional[Dict]:
        submission = self.submissions.get(submission_id)
        if submission is None:
            return None
        if status is not None:
            submission["status"] = status
        if priority is not None:
            submission["priority"] = priority
        submission["updated_at"] = self._tick()
        return dict(submission)


class FailingRepository:
    """Every query primitive fails as a broken database would."""

    def __getattr__(self, name):
        async def fail(*args, **kwargs):
            raise DatastoreError("connection refused")

        return fail


@pytest.fixture
def repo() -> InMemoryRepository:
    return InMemoryRepository()


@pytest.fixture
def corpus(repo: InMemoryRepository) -> InMemoryRepository:
    """A small corpus around the root ض ر ب plus one unrelated root."""
    darb = repo.add_root(
        "ض ر ب",
        meanings=[
            {"arabic": "ضَرَبَ مَثَلًا", "english": "to set forth an example", "context": "Parables"},
            {"arabic": "ضَرَبَ فِي الْأَرْضِ", "english": "to travel", "context": "Journeys"},
        ],
        classical_definition="Putting one thing into contact with another",
        modern_usage="Striking, setting an example, travelling",
    )
    ktb = repo.add_root("ك ت ب", meanings=[{"arabic": "كَتَبَ", "english": "to write", "context": "Writing"}])

    # Inserted out of (surah, ayah) order on purpose
    v14_24 = repo.add_verse(14, 24, "أَلَمْ تَرَ كَيْفَ ضَرَبَ اللَّهُ مَثَلًا")
    v4_34 = repo.add_verse(4, 34, "وَاهْجُرُوهُنَّ فِي الْمَضَاجِعِ وَاضْرِبُوهُنَّ")
    v4_101 = repo.add_verse(4, 101, "وَإِذَا ضَرَبْتُمْ فِي الْأَرْضِ")
    v2_282 = repo.add_verse(2, 282, "وَلْيَكْتُب بَّيْنَكُمْ كَاتِبٌ بِالْعَدْلِ")
    v2_2 = repo.add_verse(2, 2, "ذَٰلِكَ الْكِتَابُ لَا رَيْبَ فِيهِ")

    repo.add_occurrence(
        "ضَرَبَ", v14_24, darb,
        transliteration="daraba", meaning_used="Set forth an example",
        syntax_role="fa_il", verb_form="Form I", has_qualifier="yes",
        qualifier="an example", usage_category="set_forth_example",
    )
    repo.add_occurrence(
        "وَاضْرِبُوهُنَّ", v4_34, darb,
        transliteration="wadribuhunna", meaning_used="Strike/Separate from them",
        syntax_role="fa_il", verb_form="Form I", has_qualifier="no",
        qualifier="NO qualifier - ambiguous", usage_category="controversial",
    )
    repo.add_occurrence(
        "ضَرَبْتُمْ", v4_101, darb,
        transliteration="darabtum", meaning_used="Travel through the land",
        syntax_role="hal", verb_form="Form I", has_qualifier="yes",
        qualifier="in the land", usage_category="travel_journey",
    )
    repo.add_occurrence(
        "يَضْرِبُ", v4_101, darb,
        transliteration="yadribu", verb_form="Form I",
    )
    repo.add_occurrence(
        "كَتَبَ", v2_282, ktb,
        transliteration="kataba", syntax_role="fa_il", verb_form="Form I",
        usage_category="physical_with_object", meaning_used="Write",
    )
    repo.add_occurrence("ذَٰلِكَ", v2_2, None, transliteration="dhalika")

    repo.add_translation(v4_34, "Sahih International", "and strike them")
    repo.add_translation(v4_34, "Pickthall", "and scourge them")
    repo.add_translation(v14_24, "Sahih International", "how Allah presents an example")

    repo.add_tafsir(v14_24, "ar-tafsir-al-qurtubi", "ضرب المثل: بيّنه", century=7, layer="linguistic")
    repo.add_tafsir(v4_34, "ar-tafsir-al-tabari", "ضربًا غير مبرح", century=3, layer="exegetical")
    repo.add_tafsir(v4_34, "ar-tafsir-muyassar", "ضربًا لا ضرر فيه", century=21, layer="modern")

    repo.darb_id = darb
    repo.ktb_id = ktb
    return repo


@pytest.fixture
def resolver(corpus: InMemoryRepository) -> WordResolver:
    return WordResolver(corpus, similarity_threshold=0.5)


@pytest.fixture
def analysis_service(corpus: InMemoryRepository, resolver: WordResolver) -> WordAnalysisService:
    return WordAnalysisService(corpus, resolver)


@pytest.fixture
def submission_service(corpus: InMemoryRepository) -> SubmissionService:
    return SubmissionService(corpus)


def _wire_routes(monkeypatch, repository) -> None:
    from quranlex.api.routes import search, submissions, verses, words

    resolver = WordResolver(repository, similarity_threshold=0.5)
    monkeypatch.setattr(search, "word_resolver", resolver)
    monkeypatch.setattr(words, "analysis_service", WordAnalysisService(repository, resolver))
    monkeypatch.setattr(verses, "repository", repository)
    monkeypatch.setattr(submissions, "submission_service", SubmissionService(repository))


@pytest.fixture
def client(monkeypatch, corpus: InMemoryRepository) -> TestClient:
    from quranlex.main import app

    _wire_routes(monkeypatch, corpus)
    return TestClient(app)


@pytest.fixture
def failing_client(monkeypatch) -> TestClient:
    from quranlex.main import app

    _wire_routes(monkeypatch, FailingRepository())
    return TestClient(app, raise_server_exceptions=False)
