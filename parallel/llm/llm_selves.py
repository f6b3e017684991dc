"""
LLM functions for parallel-self generation.

generate_parallel_selves forces the configured provider to call the
generate_parallel_selves tool, then normalizes the tool arguments into the
persona schema. Failures are raised as Parallel errors; deciding whether to
fall back is the caller's job.
"""

from typing import Any, Dict, Optional

from parallel.core.archetypes import HIDDEN_MYTH_PLACEHOLDER, myth_for
from parallel.errors import PersonaValidationError, UpstreamMalformedError
from parallel.llm.client_factory import get_chat_client
from parallel.llm.prompts import GENERATE_SELVES_SYSTEM_PROMPT, GENERATE_SELVES_TOOL
from parallel.llm.providers.base import BaseLLMClient, ChatMessage
from parallel.models.persona import Dimension, HIDDEN_ID, HIDDEN_DIMENSION, validate_hidden_persona
from parallel.models.schema import GenerateSelvesResponse
from server.config import config
from server.logging_config import get_logger

logger = get_logger(__name__)


def _text(raw: Dict[str, Any], key: str) -> str:
    value = raw.get(key)
    return value if isinstance(value, str) else ""


def _common_fields(raw: Dict[str, Any]) -> Dict[str, Any]:
    """Fields shared by canonical and hidden selves, reshaped from the flat tool output."""
    return {
        "archetype_name": raw.get("archetype_name"),
        "personality_traits": raw.get("personality_traits"),
        "reasoning_analysis": raw.get("reasoning_analysis"),
        "suggested_action": raw.get("suggested_action"),
        "emotional_prediction": raw.get("emotional_prediction"),
        "confidence_score": raw.get("confidence_score"),
        "timeline": {
            "week": raw.get("timeline_week"),
            "month": raw.get("timeline_month"),
            "year": raw.get("timeline_year"),
        },
        "decision_intelligence": {
            "why_this_self": _text(raw, "why_this_self"),
            "hidden_costs": _text(raw, "hidden_costs"),
            "internal_resistance": _text(raw, "internal_resistance"),
        },
        "future_roadmap": _text(raw, "future_roadmap"),
    }


def normalize_self(raw: Dict[str, Any]) -> Dict[str, Any]:
    """
    Reshape one canonical self. The mythological mapping always comes from the
    static table; anything the service sent for it is ignored.
    """
    if not isinstance(raw, dict):
        raise PersonaValidationError("self is not an object")
    dimension = raw.get("dimension")
    try:
        dimension = Dimension(dimension)
    except ValueError:
        raise PersonaValidationError(f"unknown dimension: {dimension!r}")

    return {
        "id": dimension.value,
        "dimension": dimension.value,
        "mythological_mapping": myth_for(dimension).model_dump(),
        **_common_fields(raw),
    }


def normalize_hidden_self(raw: Dict[str, Any]) -> Dict[str, Any]:
    """Reshape the hidden self; its mythology comes from the service, with placeholders."""
    if not isinstance(raw, dict):
        raise PersonaValidationError("hidden_self is not an object")
    return {
        "id": HIDDEN_ID,
        "dimension": HIDDEN_DIMENSION.value,
        "mythological_mapping": {
            "deity": _text(raw, "myth_deity") or HIDDEN_MYTH_PLACEHOLDER.deity,
            "domain": _text(raw, "myth_domain") or HIDDEN_MYTH_PLACEHOLDER.domain,
            "symbol": _text(raw, "myth_symbol") or HIDDEN_MYTH_PLACEHOLDER.symbol,
        },
        **_common_fields(raw),
    }


def normalize_tool_arguments(arguments: Dict[str, Any]) -> GenerateSelvesResponse:
    """
    Turn raw tool arguments into a validated persona set.

    Raises:
        UpstreamMalformedError: the selves list is missing or empty
        PersonaValidationError: the canonical selves violate the persona schema
    """
    selves = arguments.get("selves")
    if not isinstance(selves, list) or not selves:
        raise UpstreamMalformedError("AI response has no selves")

    hidden = None
    raw_hidden = arguments.get("hidden_self")
    if raw_hidden:
        try:
            hidden = validate_hidden_persona(normalize_hidden_self(raw_hidden))
        except PersonaValidationError as e:
            # The hidden self is optional; a bad one never costs the canonical set
            logger.warning(f"Dropping invalid hidden self: {e}")

    mirror = arguments.get("identity_mirror")
    return GenerateSelvesResponse(
        selves=[normalize_self(s) for s in selves],
        identity_mirror=mirror.strip() if isinstance(mirror, str) else "",
        hidden_self=hidden,
    )


def build_messages(user_input: str) -> list[ChatMessage]:
    return [
        ChatMessage(role="system", content=GENERATE_SELVES_SYSTEM_PROMPT),
        ChatMessage(role="user", content=user_input),
    ]


async def generate_parallel_selves(
    user_input: str, client: Optional[BaseLLMClient] = None
) -> GenerateSelvesResponse:
    """Generate five parallel selves, an identity mirror and a hidden self via the LLM."""
    client = client or get_chat_client()
    response = await client.call_tool(
        messages=build_messages(user_input),
        tool=GENERATE_SELVES_TOOL,
        temperature=config.GENERATION.TEMPERATURE,
    )
    logger.debug(f"Tool call answered by {response.model}, usage={response.usage}")
    return normalize_tool_arguments(response.arguments)
