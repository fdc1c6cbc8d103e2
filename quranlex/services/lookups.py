"""
Fixed display tables for usage categories and syntax roles.

Categories and roles are open-ended tags added by data seeding, so every
lookup here has a default and never fails on an unknown key.
"""

import re
from types import MappingProxyType

DEFAULT_CATEGORY = "uncategorized"
DEFAULT_CATEGORY_COLOR = "#6B7280"
DEFAULT_ROLE_DESCRIPTION = "Grammatical role in sentence structure"

CATEGORY_COLORS = MappingProxyType(
    {
        "set_forth_example": "#2C5282",
        "travel_journey": "#2C5F2D",
        "physical_with_object": "#8B0000",
        "controversial_separation": "#D4AF37",
        "controversial": "#D4AF37",
        "metaphorical_coverage": "#0F5F4E",
        "metaphorical_stamped": "#4A5568",
        "metaphorical": "#0F5F4E",
        DEFAULT_CATEGORY: DEFAULT_CATEGORY_COLOR,
    }
)

SYNTAX_ROLE_DESCRIPTIONS = MappingProxyType(
    {
        "fa_il": "Subject/Agent - The doer of the action",
        "maf_ul": "Object - The receiver of the action",
        "jarr": "Prepositional phrase - Indicates location, time, or manner",
        "mubtada": "Subject of nominal sentence",
        "khabar": "Predicate of nominal sentence",
        "sifah": "Adjective/Attribute",
        "mudaf": "Possessor (first part of construct)",
        "mudaf_ilayh": "Possessed (second part of construct)",
    }
)

CONTROVERSIAL_CATEGORIES = frozenset({"controversial", "controversial_separation"})


def get_category_color(category) -> str:
    """Get the display color for a usage category."""
    return CATEGORY_COLORS.get(category, DEFAULT_CATEGORY_COLOR)


def get_syntax_role_description(role) -> str:
    """Get a human-readable description of a syntax role."""
    return SYNTAX_ROLE_DESCRIPTIONS.get(role, DEFAULT_ROLE_DESCRIPTION)


def humanize_tag(tag: str) -> str:
    """Turn 'physical_with_object' into 'Physical With Object'."""
    return re.sub(r"\b\w", lambda m: m.group().upper(), tag.replace("_", " "))


def is_controversial(category) -> bool:
    return category in CONTROVERSIAL_CATEGORIES
