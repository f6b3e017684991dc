"""
Read-only views over personas for renderers: roadmap stages, decision
sections and the comparative narration shown when two selves are compared.
"""

import re
from enum import Enum
from typing import List, NamedTuple

from parallel.models.persona import Persona


ROADMAP_STAGE_LABELS = ("First Weeks", "First Months", "Six Months", "One Year")

_PARAGRAPH_BREAK = re.compile(r"\n\s*\n+")


class RoadmapStage(NamedTuple):
    label: str
    text: str


class DecisionSection(str, Enum):
    WHY = "why"
    COSTS = "costs"
    RESISTANCE = "resistance"


def split_roadmap(roadmap: str) -> List[str]:
    """Split a roadmap on blank lines, dropping empty paragraphs."""
    if not roadmap:
        return []
    paragraphs = (p.strip() for p in _PARAGRAPH_BREAK.split(roadmap))
    return [p for p in paragraphs if p]


def roadmap_stages(persona: Persona) -> List[RoadmapStage]:
    """
    Pair the roadmap paragraphs with their stage labels.

    At most four stages are returned. A roadmap with fewer paragraphs yields
    fewer stages; extra paragraphs beyond the fourth are folded into the
    final stage so no text is lost.
    """
    paragraphs = split_roadmap(persona.future_roadmap)
    if len(paragraphs) > len(ROADMAP_STAGE_LABELS):
        last = len(ROADMAP_STAGE_LABELS) - 1
        paragraphs = paragraphs[:last] + ["\n\n".join(paragraphs[last:])]
    return [RoadmapStage(label, text) for label, text in zip(ROADMAP_STAGE_LABELS, paragraphs)]


def decision_section(persona: Persona, section: DecisionSection) -> str:
    di = persona.decision_intelligence
    section = DecisionSection(section)
    if section is DecisionSection.WHY:
        return di.why_this_self
    if section is DecisionSection.COSTS:
        return di.hidden_costs
    return di.internal_resistance


def _short_name(persona: Persona) -> str:
    name = persona.archetype_name
    return name[4:] if name.startswith("The ") else name


def _leading_traits(persona: Persona) -> str:
    traits = [t.lower() for t in persona.personality_traits[:2] if t]
    if not traits:
        return "its own instincts"
    return " and ".join(traits)


def contrast_insight(left: Persona, right: Persona) -> str:
    """Narrate the tension between two different selves."""
    if left.id == right.id:
        raise ValueError("cannot contrast a persona with itself")
    return (
        f"{left.archetype_name} and {right.archetype_name} represent fundamentally "
        f"different responses to your situation. Where {_short_name(left)} prioritizes "
        f"{_leading_traits(left)}, {_short_name(right)} draws strength from "
        f"{_leading_traits(right)}. The tension between them mirrors an internal "
        f"negotiation: neither is wrong, but each suppresses what the other values most."
    )


def input_preview(text: str, limit: int = 60) -> str:
    """Truncate the user's input for the explore header."""
    if len(text) <= limit:
        return text
    return text[:limit] + "..."
