"""
Persona schema for Parallel.

A persona ("parallel self") is one interpretive reading of the user's dilemma.
Every generation yields exactly five canonical personas, one per dimension,
plus at most one hidden persona that is revealed later in the session.
"""

from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Tuple

from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from parallel.errors import PersonaValidationError


CONFIDENCE_MIN = 0.65
CONFIDENCE_MAX = 0.95
HIDDEN_ID = "hidden"


class Dimension(str, Enum):
    """The five canonical dimensions, in display order."""

    ANALYST = "analyst"
    REBEL = "rebel"
    GUARDIAN = "guardian"
    VISIONARY = "visionary"
    REALIST = "realist"


CANONICAL_DIMENSIONS: List[Dimension] = list(Dimension)
HIDDEN_DIMENSION = Dimension.VISIONARY


class MythologicalMapping(BaseModel):
    deity: str
    domain: str
    symbol: str


class Timeline(BaseModel):
    week: str
    month: str
    year: str


class DecisionIntelligence(BaseModel):
    """Why this self resonates, what it costs, and why the user hesitates."""

    why_this_self: str = ""
    hidden_costs: str = ""
    internal_resistance: str = ""

    @field_validator("why_this_self", "hidden_costs", "internal_resistance", mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any) -> Any:
        return "" if value is None else value


class Persona(BaseModel):
    id: str = Field(..., description="Dimension tag, or 'hidden' for the surprise archetype")
    archetype_name: str
    dimension: Dimension
    mythological_mapping: MythologicalMapping
    personality_traits: Tuple[str, ...]
    reasoning_analysis: str
    suggested_action: str
    emotional_prediction: str
    confidence_score: float
    color: str = Field(default="", description="Theming key, always the dimension value")
    timeline: Timeline
    decision_intelligence: DecisionIntelligence = Field(default_factory=DecisionIntelligence)
    future_roadmap: str = ""

    model_config = {"frozen": True}

    @field_validator("confidence_score", mode="before")
    @classmethod
    def _clamp_confidence(cls, value: Any) -> float:
        # bool is an int subclass; reject it explicitly
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValueError(f"confidence_score must be a number, got {value!r}")
        return min(CONFIDENCE_MAX, max(CONFIDENCE_MIN, float(value)))

    @field_validator("future_roadmap", mode="before")
    @classmethod
    def _roadmap_none_to_empty(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("decision_intelligence", mode="before")
    @classmethod
    def _decision_none_to_default(cls, value: Any) -> Any:
        return {} if value is None else value

    @model_validator(mode="before")
    @classmethod
    def _color_follows_dimension(cls, data: Any) -> Any:
        if isinstance(data, dict) and "dimension" in data:
            dimension = data["dimension"]
            data = {**data, "color": getattr(dimension, "value", dimension)}
        return data

    @property
    def is_hidden(self) -> bool:
        return self.id == HIDDEN_ID


def _describe(error: ValidationError) -> str:
    parts = []
    for item in error.errors():
        location = ".".join(str(p) for p in item["loc"]) or "<root>"
        parts.append(f"{location}: {item['msg']}")
    return "; ".join(parts)


def _parse(raw: Any, index: Optional[int] = None) -> Persona:
    label = "persona" if index is None else f"persona[{index}]"
    if isinstance(raw, Persona):
        return raw
    if not isinstance(raw, dict):
        raise PersonaValidationError(f"{label} is not an object")
    try:
        return Persona.model_validate(raw)
    except ValidationError as e:
        raise PersonaValidationError(f"{label} invalid: {_describe(e)}") from e


def validate_personas(raw: Iterable[Any]) -> List[Persona]:
    """
    Validate a candidate canonical persona set.

    Confidence scores outside [0.65, 0.95] are clamped, never rejected.
    The set must contain exactly one persona per canonical dimension, each with
    id equal to its dimension. Returns the personas in canonical order.

    Raises:
        PersonaValidationError: on a missing field, unknown dimension,
            duplicate or missing dimension, or a non-numeric confidence.
    """
    if raw is None or isinstance(raw, (str, bytes, dict)):
        raise PersonaValidationError("persona set must be a list")

    personas = [_parse(item, i) for i, item in enumerate(raw)]

    by_dimension: Dict[Dimension, Persona] = {}
    for persona in personas:
        if persona.is_hidden:
            raise PersonaValidationError("hidden persona is not allowed in the canonical set")
        if persona.id != persona.dimension.value:
            raise PersonaValidationError(
                f"persona id '{persona.id}' does not match dimension '{persona.dimension.value}'"
            )
        if persona.dimension in by_dimension:
            raise PersonaValidationError(f"duplicate dimension '{persona.dimension.value}'")
        by_dimension[persona.dimension] = persona

    missing = [d.value for d in CANONICAL_DIMENSIONS if d not in by_dimension]
    if missing:
        raise PersonaValidationError(f"missing dimensions: {', '.join(missing)}")

    return [by_dimension[d] for d in CANONICAL_DIMENSIONS]


def validate_hidden_persona(raw: Any) -> Persona:
    """Validate the optional hidden persona. Its id and dimension are fixed."""
    if isinstance(raw, Persona):
        raw = raw.model_dump()
    if not isinstance(raw, dict):
        raise PersonaValidationError("hidden persona is not an object")
    data = dict(raw)
    data["id"] = HIDDEN_ID
    data["dimension"] = HIDDEN_DIMENSION.value
    return _parse(data)
