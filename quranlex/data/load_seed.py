"""
Load a local JSON seed document into the corpus tables.

The document has two top-level lists:

    {
      "roots": [{"root", "meanings", "classicalDefinition", "modernUsage"}],
      "verses": [{
        "surah", "ayah", "arabicText", "simpleText", "transliteration",
        "translations": [{"translator", "text"}],
        "tafsir": [{"scholar", "century", "layer", "wordFocus", "text", "translation"}],
        "occurrences": [{"word", "transliteration", "root", "meaningUsed",
                         "morphology", "syntaxRole", "verbForm",
                         "hasQualifier", "qualifier", "usageCategory"}]
      }]
    }

Reloading a verse replaces its translations, tafsir and occurrences.
"""

import argparse
import json
from pathlib import Path
from typing import Dict, List

from dotenv import load_dotenv
from psycopg2.extras import Json, execute_batch
from tqdm import tqdm

from quranlex.db.db_sync import create_database, get_db_connection_sync
from quranlex.services.text import strip_diacritics

load_dotenv()

QUALIFIER_VALUES = {"yes", "no", "n/a"}
TAFSIR_LAYERS = {"linguistic", "rhetorical", "exegetical", "modern"}


def validate_seed(document: Dict) -> List[str]:
    """Return a list of problems found in a seed document (empty when valid)."""
    errors = []
    roots = document.get("roots") or []
    verses = document.get("verses") or []

    known_roots = set()
    for i, root in enumerate(roots):
        if not root.get("root"):
            errors.append(f"roots[{i}]: missing root")
        else:
            known_roots.add(root["root"])

    seen_verses = set()
    for i, verse in enumerate(verses):
        where = f"verses[{i}]"
        key = (verse.get("surah"), verse.get("ayah"))
        if not isinstance(key[0], int) or not isinstance(key[1], int):
            errors.append(f"{where}: surah and ayah must be integers")
        elif key in seen_verses:
            errors.append(f"{where}: duplicate verse {key[0]}:{key[1]}")
        seen_verses.add(key)

        if not verse.get("arabicText"):
            errors.append(f"{where}: missing arabicText")

        for j, translation in enumerate(verse.get("translations") or []):
            if not translation.get("translator") or not translation.get("text"):
                errors.append(f"{where}.translations[{j}]: translator and text required")

        for j, entry in enumerate(verse.get("tafsir") or []):
            if not entry.get("scholar") or not entry.get("text"):
                errors.append(f"{where}.tafsir[{j}]: scholar and text required")
            layer = entry.get("layer")
            if layer is not None and layer not in TAFSIR_LAYERS:
                errors.append(f"{where}.tafsir[{j}]: unknown layer {layer!r}")

        for j, occ in enumerate(verse.get("occurrences") or []):
            if not occ.get("word"):
                errors.append(f"{where}.occurrences[{j}]: missing word")
            root = occ.get("root")
            if root is not None and root not in known_roots:
                errors.append(f"{where}.occurrences[{j}]: unknown root {root!r}")
            qualifier = occ.get("hasQualifier")
            if qualifier is not None and qualifier not in QUALIFIER_VALUES:
                errors.append(
                    f"{where}.occurrences[{j}]: hasQualifier must be yes, no or n/a"
                )

    return errors


def _upsert_roots(cursor, roots: List[Dict]) -> Dict[str, int]:
    root_ids = {}
    for root in roots:
        cursor.execute(
            """INSERT INTO roots (root, meanings, classical_definition, modern_usage)
               VALUES (%s, %s, %s, %s)
               ON CONFLICT (root) DO UPDATE SET
                   meanings = EXCLUDED.meanings,
                   classical_definition = COALESCE(EXCLUDED.classical_definition, roots.classical_definition),
                   modern_usage = COALESCE(EXCLUDED.modern_usage, roots.modern_usage)
               RETURNING id""",
            (
                root["root"],
                Json(root.get("meanings") or []),
                root.get("classicalDefinition"),
                root.get("modernUsage"),
            ),
        )
        root_ids[root["root"]] = cursor.fetchone()[0]
    return root_ids


def _upsert_verse(cursor, verse: Dict) -> int:
    simple_text = verse.get("simpleText") or strip_diacritics(verse["arabicText"])
    cursor.execute(
        """INSERT INTO verses (surah, ayah, arabic_text, simple_text, transliteration)
           VALUES (%s, %s, %s, %s, %s)
           ON CONFLICT (surah, ayah) DO UPDATE SET
               arabic_text = EXCLUDED.arabic_text,
               simple_text = EXCLUDED.simple_text,
               transliteration = COALESCE(EXCLUDED.transliteration, verses.transliteration)
           RETURNING id""",
        (
            verse["surah"],
            verse["ayah"],
            verse["arabicText"],
            simple_text,
            verse.get("transliteration"),
        ),
    )
    return cursor.fetchone()[0]


def load_seed(seed_file: Path, batch_size: int = 500) -> Dict[str, int]:
    """Load a seed document into the database and return row counts."""
    with open(seed_file, encoding="utf-8") as f:
        document = json.load(f)

    errors = validate_seed(document)
    if errors:
        raise ValueError(f"Invalid seed file {seed_file}: " + "; ".join(errors[:10]))

    translations = []
    tafsir = []
    occurrences = []

    with get_db_connection_sync() as conn:
        cursor = conn.cursor()
        root_ids = _upsert_roots(cursor, document.get("roots") or [])

        verse_ids = []
        for verse in tqdm(document.get("verses") or [], desc="Loading verses"):
            verse_id = _upsert_verse(cursor, verse)
            verse_ids.append(verse_id)

            for t in verse.get("translations") or []:
                translations.append((verse_id, t["translator"], t["text"]))

            for entry in verse.get("tafsir") or []:
                tafsir.append(
                    (
                        verse_id,
                        entry.get("wordFocus"),
                        entry["scholar"],
                        entry.get("century"),
                        entry.get("layer"),
                        entry["text"],
                        entry.get("translation"),
                    )
                )

            for occ in verse.get("occurrences") or []:
                occurrences.append(
                    (
                        occ["word"],
                        occ.get("transliteration"),
                        root_ids.get(occ.get("root")),
                        verse_id,
                        occ.get("meaningUsed"),
                        occ.get("morphology"),
                        occ.get("syntaxRole"),
                        occ.get("verbForm"),
                        occ.get("hasQualifier"),
                        occ.get("qualifier"),
                        occ.get("usageCategory"),
                    )
                )

        # Replace per-verse layers so reloading is idempotent
        for table in ("translations", "tafsir", "word_occurrences"):
            cursor.execute(
                f"DELETE FROM {table} WHERE verse_id = ANY(%s)", (verse_ids,)
            )

        execute_batch(
            cursor,
            """INSERT INTO translations (verse_id, translator, text)
               VALUES (%s, %s, %s)""",
            translations,
            page_size=batch_size,
        )
        execute_batch(
            cursor,
            """INSERT INTO tafsir (verse_id, word_focus, scholar, century, layer, text, translation)
               VALUES (%s, %s, %s, %s, %s, %s, %s)""",
            tafsir,
            page_size=batch_size,
        )
        execute_batch(
            cursor,
            """INSERT INTO word_occurrences (
                   word, transliteration, root_id, verse_id, meaning_used, morphology,
                   syntax_role, verb_form, has_qualifier, qualifier, usage_category)
               VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s)""",
            occurrences,
            page_size=batch_size,
        )
        conn.commit()

    counts = {
        "roots": len(root_ids),
        "verses": len(verse_ids),
        "translations": len(translations),
        "tafsir": len(tafsir),
        "occurrences": len(occurrences),
    }
    print(
        f"Loaded {counts['roots']} roots, {counts['verses']} verses, "
        f"{counts['occurrences']} occurrences, {counts['translations']} translations, "
        f"{counts['tafsir']} tafsir entries"
    )
    return counts


def main():
    parser = argparse.ArgumentParser(description="Load a JSON seed file into the corpus")
    parser.add_argument("seed_file", type=str, help="Path to the seed JSON file")
    parser.add_argument(
        "--batch-size",
        type=int,
        default=500,
        help="Batch size for inserts",
    )
    parser.add_argument(
        "--skip-schema",
        action="store_true",
        help="Do not create/verify the schema before loading",
    )

    args = parser.parse_args()

    seed_file = Path(args.seed_file)
    if not seed_file.exists():
        print(f"Seed file {seed_file} does not exist.")
        return

    if not args.skip_schema:
        create_database()

    load_seed(seed_file, batch_size=args.batch_size)


if __name__ == "__main__":
    main()
