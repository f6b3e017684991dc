"""
HTTP client for a remote generate-selves endpoint.

Lets a session generate through a deployed Parallel API instead of calling
the LLM provider directly. Status codes map onto the same error types the
provider clients raise, so the fallback path treats both alike.
"""

from typing import Optional

import httpx
from pydantic import ValidationError

from parallel.errors import PersonaValidationError, UpstreamError, UpstreamMalformedError, error_from_status
from parallel.models.persona import validate_hidden_persona, validate_personas
from parallel.models.schema import GenerateSelvesResponse
from server.logging_config import get_logger

logger = get_logger(__name__)

GENERATE_SELVES_PATH = "/api/v1/generate-selves"


class RemoteSelvesClient:
    """Calls POST /api/v1/generate-selves on a Parallel server."""

    def __init__(
        self,
        base_url: str,
        timeout_seconds: float = 60.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self._transport = transport

    async def generate_selves(self, user_input: str) -> GenerateSelvesResponse:
        url = f"{self.base_url}{GENERATE_SELVES_PATH}"
        try:
            async with httpx.AsyncClient(timeout=self.timeout_seconds, transport=self._transport) as client:
                response = await client.post(url, json={"userInput": user_input})
        except httpx.HTTPError as e:
            logger.error(f"Remote generation request failed: {e}")
            raise UpstreamError(f"Remote generation request failed: {type(e).__name__}") from e

        if response.is_error:
            message = _error_message(response)
            logger.warning(f"Remote generation answered {response.status_code}: {message}")
            raise error_from_status(response.status_code, message)

        try:
            payload = response.json()
        except ValueError as e:
            raise UpstreamMalformedError("Remote generation returned invalid JSON") from e

        if not isinstance(payload, dict) or not payload.get("selves"):
            raise UpstreamMalformedError("Remote generation returned no selves")

        # Persona checks raise PersonaValidationError, which pydantic does not wrap;
        # run them here so an invalid hidden self can be dropped on its own
        selves = validate_personas(payload["selves"])
        hidden = None
        if payload.get("hidden_self"):
            try:
                hidden = validate_hidden_persona(payload["hidden_self"])
            except PersonaValidationError as e:
                logger.warning(f"Dropping invalid hidden self from remote payload: {e}")

        try:
            return GenerateSelvesResponse.model_validate(
                {**payload, "selves": selves, "hidden_self": hidden}
            )
        except ValidationError as e:
            raise UpstreamMalformedError(f"Remote generation payload invalid: {e.error_count()} errors") from e

    # The session accepts any async callable taking the input text
    __call__ = generate_selves


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text[:200]
    if isinstance(body, dict) and isinstance(body.get("error"), str):
        return body["error"]
    return ""
