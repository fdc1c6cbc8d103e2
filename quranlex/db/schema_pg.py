"""
PostgreSQL schema for the Quranic word corpus and word submissions.
"""

from quranlex.services.text import ARABIC_DIACRITICS

POSTGRES_SCHEMA = f"""
-- Trigram similarity for fuzzy word lookup
CREATE EXTENSION IF NOT EXISTS pg_trgm;

-- Case- and diacritic-insensitive form of a term, matching normalize_term
CREATE OR REPLACE FUNCTION fold_term(value TEXT) RETURNS TEXT
    LANGUAGE sql IMMUTABLE PARALLEL SAFE
    AS $$ SELECT lower(translate(value, '{ARABIC_DIACRITICS}', '')) $$;

-- Quranic verses, one row per (surah, ayah)
CREATE TABLE IF NOT EXISTS verses (
    id SERIAL PRIMARY KEY,
    surah INTEGER NOT NULL,
    ayah INTEGER NOT NULL,
    arabic_text TEXT NOT NULL,
    simple_text TEXT,
    transliteration TEXT,

    CONSTRAINT verses_surah_ayah_unique UNIQUE (surah, ayah)
);

-- Verse translations, keyed by translator name
CREATE TABLE IF NOT EXISTS translations (
    id SERIAL PRIMARY KEY,
    verse_id INTEGER NOT NULL,
    translator VARCHAR(100) NOT NULL,
    text TEXT NOT NULL,

    CONSTRAINT translations_verse_fk FOREIGN KEY (verse_id)
        REFERENCES verses(id) ON DELETE CASCADE
);

-- Roots and their meanings
CREATE TABLE IF NOT EXISTS roots (
    id SERIAL PRIMARY KEY,
    root VARCHAR(10) NOT NULL,
    meanings JSONB,
    classical_definition TEXT,
    modern_usage TEXT,

    CONSTRAINT roots_root_unique UNIQUE (root)
);

-- Concrete appearances of a word form inside a verse
CREATE TABLE IF NOT EXISTS word_occurrences (
    id SERIAL PRIMARY KEY,
    word VARCHAR(50) NOT NULL,
    transliteration VARCHAR(100),
    root_id INTEGER,
    verse_id INTEGER NOT NULL,
    meaning_used TEXT,
    morphology TEXT,
    syntax_role VARCHAR(100),
    verb_form VARCHAR(100),
    has_qualifier VARCHAR(20),
    qualifier TEXT,
    usage_category VARCHAR(50),

    CONSTRAINT word_occurrences_root_fk FOREIGN KEY (root_id)
        REFERENCES roots(id) ON DELETE SET NULL,
    CONSTRAINT word_occurrences_verse_fk FOREIGN KEY (verse_id)
        REFERENCES verses(id) ON DELETE CASCADE
);

-- Scholarly commentary per verse (optionally focused on one word)
CREATE TABLE IF NOT EXISTS tafsir (
    id SERIAL PRIMARY KEY,
    verse_id INTEGER NOT NULL,
    word_focus VARCHAR(50),
    scholar VARCHAR(100) NOT NULL,
    century INTEGER,
    layer VARCHAR(20),
    text TEXT NOT NULL,
    translation TEXT,

    CONSTRAINT tafsir_verse_fk FOREIGN KEY (verse_id)
        REFERENCES verses(id) ON DELETE CASCADE
);

-- Visitor requests for words not yet analyzed
CREATE TABLE IF NOT EXISTS word_submissions (
    id SERIAL PRIMARY KEY,
    word VARCHAR(50) NOT NULL,
    transliteration VARCHAR(100),
    submitter_email VARCHAR(255),
    reason TEXT,
    status VARCHAR(20) NOT NULL DEFAULT 'pending',
    priority INTEGER NOT NULL DEFAULT 0,
    request_count INTEGER NOT NULL DEFAULT 1,
    created_at TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP,
    updated_at TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP,

    CONSTRAINT word_submissions_word_unique UNIQUE (word)
);

-- Indexes for performance
CREATE INDEX IF NOT EXISTS idx_translations_verse ON translations(verse_id, translator);
CREATE INDEX IF NOT EXISTS idx_tafsir_verse ON tafsir(verse_id);
CREATE INDEX IF NOT EXISTS idx_word_occurrences_word ON word_occurrences(word);
CREATE INDEX IF NOT EXISTS idx_word_occurrences_transliteration ON word_occurrences(transliteration);
CREATE INDEX IF NOT EXISTS idx_word_occurrences_root ON word_occurrences(root_id);
CREATE INDEX IF NOT EXISTS idx_word_occurrences_verse ON word_occurrences(verse_id);
CREATE INDEX IF NOT EXISTS idx_word_occurrences_category ON word_occurrences(usage_category);
CREATE INDEX IF NOT EXISTS idx_word_submissions_queue ON word_submissions(priority DESC, request_count DESC);

-- Trigram indexes over the folded forms used for similarity matching
DROP INDEX IF EXISTS idx_word_occurrences_word_trgm;
DROP INDEX IF EXISTS idx_word_occurrences_transliteration_trgm;
CREATE INDEX IF NOT EXISTS idx_word_occurrences_word_fold_trgm ON word_occurrences
    USING gin(fold_term(word) gin_trgm_ops);
CREATE INDEX IF NOT EXISTS idx_word_occurrences_transliteration_fold_trgm ON word_occurrences
    USING gin(fold_term(transliteration) gin_trgm_ops)
"""

REQUIRED_TABLES = (
    "verses",
    "translations",
    "roots",
    "word_occurrences",
    "tafsir",
    "word_submissions",
)
