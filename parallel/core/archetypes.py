"""
Constant tables keyed by dimension.

The mythological mapping of a canonical persona is never taken from the
generation service; it always comes from MYTH_MAPPINGS.
"""

from types import MappingProxyType
from typing import Mapping, NamedTuple

from parallel.models.persona import Dimension, MythologicalMapping


HIDDEN_MYTH_PLACEHOLDER = MythologicalMapping(deity="???", domain="Unknown", symbol="🌀")


class Theme(NamedTuple):
    hsl: str
    emoji: str


MYTH_MAPPINGS: Mapping[Dimension, MythologicalMapping] = MappingProxyType({
    Dimension.ANALYST: MythologicalMapping(deity="Athena", domain="Wisdom & Strategy", symbol="🦉"),
    Dimension.REBEL: MythologicalMapping(deity="Loki", domain="Chaos & Transformation", symbol="🔥"),
    Dimension.GUARDIAN: MythologicalMapping(deity="Hestia", domain="Stability & Protection", symbol="🛡️"),
    Dimension.VISIONARY: MythologicalMapping(deity="Prometheus", domain="Foresight & Innovation", symbol="🔮"),
    Dimension.REALIST: MythologicalMapping(deity="Hermes", domain="Balance & Pragmatism", symbol="⚖️"),
})

ARCHETYPE_NAMES: Mapping[Dimension, str] = MappingProxyType({
    Dimension.ANALYST: "The Analyst",
    Dimension.REBEL: "The Rebel",
    Dimension.GUARDIAN: "The Guardian",
    Dimension.VISIONARY: "The Visionary",
    Dimension.REALIST: "The Realist",
})

# One-line character sketch per dimension, shared by the generation prompt
ARCHETYPE_SKETCHES: Mapping[Dimension, str] = MappingProxyType({
    Dimension.ANALYST: "logic-driven, methodical",
    Dimension.REBEL: "creative, chaotic, bold",
    Dimension.GUARDIAN: "protective, risk-aware, grounding",
    Dimension.VISIONARY: "optimistic, future-oriented, creative",
    Dimension.REALIST: "balanced, pragmatic, clear-eyed",
})

DIMENSION_THEMES: Mapping[Dimension, Theme] = MappingProxyType({
    Dimension.ANALYST: Theme(hsl="200, 80%, 55%", emoji="🧠"),
    Dimension.REBEL: Theme(hsl="350, 85%, 58%", emoji="⚡"),
    Dimension.GUARDIAN: Theme(hsl="35, 85%, 55%", emoji="🏛️"),
    Dimension.VISIONARY: Theme(hsl="155, 75%, 50%", emoji="✨"),
    Dimension.REALIST: Theme(hsl="220, 15%, 60%", emoji="🎯"),
})


def myth_for(dimension: Dimension) -> MythologicalMapping:
    return MYTH_MAPPINGS[Dimension(dimension)]


def theme_for(dimension: Dimension) -> Theme:
    return DIMENSION_THEMES[Dimension(dimension)]


def archetype_table() -> list:
    """The archetype table as plain dicts, in canonical order."""
    return [
        {
            "dimension": dimension.value,
            "archetype_name": ARCHETYPE_NAMES[dimension],
            "mythological_mapping": MYTH_MAPPINGS[dimension].model_dump(),
            "hsl": DIMENSION_THEMES[dimension].hsl,
            "emoji": DIMENSION_THEMES[dimension].emoji,
        }
        for dimension in Dimension
    ]
