"""
Schema and Pydantic Models for the Parallel API.

This file contains models used by the API layer. For the persona record
itself, see parallel.models.persona instead.
"""

from pydantic import BaseModel, Field, field_validator
from typing import List, Optional, Dict, Any

from parallel.models.persona import Persona, validate_personas, validate_hidden_persona


# =============================================================================
# API Request/Response Models
# =============================================================================


class GenerateSelvesRequest(BaseModel):
    user_input: str = Field(..., alias="userInput", description="The user's decision dilemma")

    model_config = {"populate_by_name": True}


class GenerateSelvesResponse(BaseModel):
    """
    A generated persona set, as served by POST /generate-selves.

    The persona validators raise PersonaValidationError, which is not a
    ValueError, so it escapes pydantic unwrapped instead of surfacing as a
    ValidationError.
    """

    selves: List[Persona]
    identity_mirror: str = ""
    hidden_self: Optional[Persona] = None

    @field_validator("selves", mode="before")
    @classmethod
    def _validate_selves(cls, value: Any) -> Any:
        return validate_personas(value)

    @field_validator("hidden_self", mode="before")
    @classmethod
    def _validate_hidden(cls, value: Any) -> Any:
        return None if value is None else validate_hidden_persona(value)

    @field_validator("identity_mirror", mode="before")
    @classmethod
    def _mirror_none_to_empty(cls, value: Any) -> Any:
        if value is None:
            return ""
        return value.strip() if isinstance(value, str) else value


class ErrorResponse(BaseModel):
    error: str


class ArchetypeInfo(BaseModel):
    dimension: str
    archetype_name: str
    mythological_mapping: Dict[str, str]
    hsl: str
    emoji: str
