"""
Word-family aggregation: occurrences, verses, translations, tafsir and
the derived statistics shown on the word page.
"""

import logging
from typing import Dict, Iterable, List, Optional

from quranlex.services.lookups import (
    DEFAULT_CATEGORY,
    get_category_color,
    get_syntax_role_description,
    humanize_tag,
    is_controversial,
)
from quranlex.services.resolver import WordResolver

logger = logging.getLogger(__name__)

MAX_PATTERN_EXAMPLES = 3


def group_by_verse(rows: Iterable[Dict], shape) -> Dict[int, List[Dict]]:
    """Group rows by verse_id, preserving row order within each verse."""
    grouped: Dict[int, List[Dict]] = {}
    for row in rows:
        grouped.setdefault(row["verse_id"], []).append(shape(row))
    return grouped


def _translation_entry(row: Dict) -> Dict:
    return {"translator": row["translator"], "text": row["text"]}


def _tafsir_entry(row: Dict) -> Dict:
    return {
        "scholar": row["scholar"],
        "century": row.get("century"),
        "layer": row.get("layer"),
        "wordFocus": row.get("word_focus"),
        "text": row["text"],
        "translation": row.get("translation"),
    }


def build_usage_statistics(occurrences: List[Dict]) -> List[Dict]:
    """Histogram of usage categories as counts, percentages and colors."""
    total = len(occurrences)
    counts: Dict[str, int] = {}
    for occ in occurrences:
        category = occ.get("usage_category") or DEFAULT_CATEGORY
        counts[category] = counts.get(category, 0) + 1

    return [
        {
            "category": category,
            "meaning": humanize_tag(category),
            "count": count,
            "percentage": (count / total) * 100,
            "color": get_category_color(category),
        }
        for category, count in counts.items()
    ]


def build_grammar_patterns(occurrences: List[Dict]) -> List[Dict]:
    """Frequency of verb forms with up to three example surface forms each."""
    patterns: Dict[str, Dict] = {}
    for occ in occurrences:
        verb_form = occ.get("verb_form")
        if not verb_form:
            continue
        pattern = patterns.setdefault(verb_form, {"frequency": 0, "examples": []})
        pattern["frequency"] += 1
        if len(pattern["examples"]) < MAX_PATTERN_EXAMPLES:
            pattern["examples"].append(occ["word"])

    return [
        {"form": form, "frequency": data["frequency"], "examples": data["examples"]}
        for form, data in patterns.items()
    ]


def build_syntax_roles(occurrences: List[Dict]) -> List[Dict]:
    """Frequency of syntax roles with readable descriptions."""
    counts: Dict[str, int] = {}
    for occ in occurrences:
        role = occ.get("syntax_role")
        if role:
            counts[role] = counts.get(role, 0) + 1

    return [
        {
            "key": role,
            "role": humanize_tag(role),
            "description": get_syntax_role_description(role),
            "frequency": count,
        }
        for role, count in counts.items()
    ]


def has_deep_analysis(occurrences: Iterable[Dict]) -> bool:
    """True when any occurrence carries both a usage category and a meaning."""
    return any(
        occ.get("usage_category") and occ.get("meaning_used") for occ in occurrences
    )


def has_controversial_occurrence(occurrences: Iterable[Dict]) -> bool:
    return any(is_controversial(occ.get("usage_category")) for occ in occurrences)


def build_occurrence_rows(
    verses: List[Dict],
    occurrences: List[Dict],
    translations_by_verse: Dict[int, List[Dict]],
    tafsir_by_verse: Dict[int, List[Dict]],
) -> List[Dict]:
    """One row per verse, joined to its first occurrence, translations and tafsir."""
    first_by_verse: Dict[int, Dict] = {}
    for occ in occurrences:
        first_by_verse.setdefault(occ["verse_id"], occ)

    rows = []
    for verse in verses:
        occ = first_by_verse.get(verse["id"], {})
        rows.append(
            {
                "surah": verse["surah"],
                "ayah": verse["ayah"],
                "arabicText": verse["arabic_text"],
                "transliteration": verse.get("transliteration"),
                "word": occ.get("word"),
                "meaningUsed": occ.get("meaning_used"),
                "morphology": occ.get("morphology"),
                "syntaxRole": occ.get("syntax_role"),
                "verbForm": occ.get("verb_form"),
                "hasQualifier": occ.get("has_qualifier"),
                "qualifier": occ.get("qualifier"),
                "usageCategory": occ.get("usage_category"),
                "ambiguous": occ.get("has_qualifier") == "no",
                "translations": translations_by_verse.get(verse["id"], []),
                "tafsir": tafsir_by_verse.get(verse["id"], []),
            }
        )
    return rows


class WordAnalysisService:
    """Service building the full analysis of a word family."""

    def __init__(self, repository, resolver: WordResolver = None):
        self.repository = repository
        self.resolver = resolver or WordResolver(repository)

    async def aggregate(self, root_id: int) -> Dict:
        """Gather everything known about the family of root_id."""
        root = await self.repository.get_root(root_id) or {}
        occurrences = await self.repository.get_occurrences_by_root(root_id)

        verse_ids = list(dict.fromkeys(occ["verse_id"] for occ in occurrences))
        verses = await self.repository.get_verses(verse_ids)
        translations = await self.repository.get_translations(verse_ids)
        tafsir = await self.repository.get_tafsir(verse_ids)

        translations_by_verse = group_by_verse(translations, _translation_entry)
        tafsir_by_verse = group_by_verse(tafsir, _tafsir_entry)

        all_tafsir: List[Dict] = []
        for verse in verses:
            all_tafsir.extend(tafsir_by_verse.get(verse["id"], []))

        first = occurrences[0] if occurrences else {}

        return {
            "word": first.get("word"),
            "transliteration": first.get("transliteration"),
            "root": root.get("root") or "",
            "meanings": root.get("meanings") or [],
            "classicalDefinition": root.get("classical_definition"),
            "modernUsage": root.get("modern_usage"),
            "occurrenceCount": len(occurrences),
            "hasDeepAnalysis": has_deep_analysis(occurrences),
            "hasControversialOccurrence": has_controversial_occurrence(occurrences),
            "usageStatistics": build_usage_statistics(occurrences),
            "grammarPatterns": build_grammar_patterns(occurrences),
            "syntaxRoles": build_syntax_roles(occurrences),
            "tafsir": all_tafsir,
            "occurrences": build_occurrence_rows(
                verses, occurrences, translations_by_verse, tafsir_by_verse
            ),
        }

    async def analyze(self, word: str) -> Optional[Dict]:
        """Resolve a word and aggregate its family. None when not found."""
        resolved = await self.resolver.resolve(word)
        if resolved is None:
            logger.info("No analysis for %r", word)
            return None

        analysis = await self.aggregate(resolved["root_id"])
        analysis["word"] = resolved["canonical_word"]
        analysis["transliteration"] = resolved["canonical_transliteration"]
        return analysis
