"""
LLM Prompts for Parallel.

The system prompt and the forced tool schema used by llm_selves.py.
"""

from parallel.core.archetypes import ARCHETYPE_SKETCHES, MYTH_MAPPINGS
from parallel.models.persona import CONFIDENCE_MAX, CONFIDENCE_MIN, Dimension
from parallel.llm.providers.base import ToolSpec


GENERATE_SELVES_TOOL_NAME = "generate_parallel_selves"


def _archetype_lines() -> str:
    lines = []
    for i, dimension in enumerate(Dimension, start=1):
        myth = MYTH_MAPPINGS[dimension]
        lines.append(
            f'{i}. {dimension.value.title()} (dimension: "{dimension.value}") - '
            f"{ARCHETYPE_SKETCHES[dimension]}. Mythological mapping: {myth.deity}, "
            f"{myth.domain}, symbol {myth.symbol}"
        )
    return "\n".join(lines)


GENERATE_SELVES_SYSTEM_PROMPT = f"""You are the engine of PARALLEL, an Alternate Self Simulator and Decision Intelligence system.

Given the user's situation, conflict, or decision dilemma, you MUST generate exactly 5 parallel selves plus an identity_mirror reflection and a hidden_self using the tool provided.

IDENTITY MIRROR:
Write a 1-2 sentence poetic, psychologically insightful observation about the user's current internal state based on their input. It should feel like a mirror reflecting their emotional tension. Example tone: "You appear to be standing between stability and expansion. Not divided, but negotiating between safety and growth."

The 5 archetypes are ALWAYS:
{_archetype_lines()}

HIDDEN SELF (SURPRISE ARCHETYPE):
Generate a 6th archetype called the hidden_self. It must be a UNIQUE archetype that does not fit the 5 standard ones and emerges from the specific patterns in the user's input. Give it a creative name (e.g. "The Alchemist", "The Wanderer", "The Architect") and its own mythological mapping. It should feel like a surprise discovery.

DECISION INTELLIGENCE FIELDS:
- why_this_self: 3-4 sentences explaining why this particular self resonates with the user RIGHT NOW.
- hidden_costs: 3-4 sentences describing the realistic consequences of fully committing to this path.
- internal_resistance: 3-4 sentences exploring why the user might HESITATE to choose this self.
- future_roadmap: A 4-paragraph narrative, paragraphs separated by a blank line, describing how choosing this self shapes the user's life over time. Stages: first weeks, first months, six months, one year.

Timeline predictions should be vivid, specific, and emotionally resonant.
Confidence scores should vary realistically ({CONFIDENCE_MIN}-{CONFIDENCE_MAX})."""


_SHARED_FIELDS = {
    "archetype_name": {"type": "string"},
    "personality_traits": {"type": "array", "items": {"type": "string"}},
    "reasoning_analysis": {"type": "string"},
    "suggested_action": {"type": "string"},
    "emotional_prediction": {"type": "string"},
    "confidence_score": {"type": "number"},
    "timeline_week": {"type": "string"},
    "timeline_month": {"type": "string"},
    "timeline_year": {"type": "string"},
    "why_this_self": {"type": "string"},
    "hidden_costs": {"type": "string"},
    "internal_resistance": {"type": "string"},
    "future_roadmap": {"type": "string"},
}

SELF_PROPERTIES = {
    "archetype_name": _SHARED_FIELDS["archetype_name"],
    "dimension": {"type": "string", "enum": [d.value for d in Dimension]},
    **{k: v for k, v in _SHARED_FIELDS.items() if k != "archetype_name"},
}

HIDDEN_SELF_PROPERTIES = {
    **_SHARED_FIELDS,
    "myth_deity": {"type": "string"},
    "myth_domain": {"type": "string"},
    "myth_symbol": {"type": "string"},
}

GENERATE_SELVES_PARAMETERS = {
    "type": "object",
    "properties": {
        "identity_mirror": {
            "type": "string",
            "description": "1-2 sentence poetic psychological observation of the user's current internal state",
        },
        "selves": {
            "type": "array",
            "minItems": len(Dimension),
            "maxItems": len(Dimension),
            "items": {
                "type": "object",
                "properties": SELF_PROPERTIES,
                "required": list(SELF_PROPERTIES.keys()),
                "additionalProperties": False,
            },
        },
        "hidden_self": {
            "type": "object",
            "properties": HIDDEN_SELF_PROPERTIES,
            "required": list(HIDDEN_SELF_PROPERTIES.keys()),
            "additionalProperties": False,
        },
    },
    "required": ["identity_mirror", "selves", "hidden_self"],
    "additionalProperties": False,
}

GENERATE_SELVES_TOOL = ToolSpec(
    name=GENERATE_SELVES_TOOL_NAME,
    description="Generate 5 parallel selves with decision intelligence",
    parameters=GENERATE_SELVES_PARAMETERS,
)
