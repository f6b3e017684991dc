"""
Selves Service: obtain a persona set for one submission, or fall back.

Callers never see an upstream error. Every failure (rate limit, quota,
malformed output, timeout, transport) resolves to the deterministic fallback
set, and the user is told through the notifier side channel.
"""

import asyncio
from typing import Awaitable, Callable, List, Literal, Optional

from pydantic import BaseModel

from parallel.client.http_client import RemoteSelvesClient
from parallel.core import fallback
from parallel.errors import (
    GenerationTimeoutError,
    InvalidInputError,
    UpstreamError,
    UpstreamMalformedError,
)
from parallel.llm.llm_selves import generate_parallel_selves
from parallel.models.persona import Persona
from parallel.models.schema import GenerateSelvesResponse
from server.config import config
from server.logging_config import get_logger

logger = get_logger(__name__)

SelvesGenerator = Callable[[str], Awaitable[GenerateSelvesResponse]]
Notifier = Callable[[str], None]


def default_generator() -> SelvesGenerator:
    """The remote endpoint when GENERATION_REMOTE_URL is set, else the direct LLM call."""
    if config.GENERATION.REMOTE_URL:
        return RemoteSelvesClient(config.GENERATION.REMOTE_URL, timeout_seconds=config.GENERATION.TIMEOUT_SECONDS)
    return generate_parallel_selves


class GenerationOutcome(BaseModel):
    personas: List[Persona]
    mirror_text: str = ""
    hidden_persona: Optional[Persona] = None
    source: Literal["remote", "fallback"]
    notice: Optional[str] = None


class SelvesService:
    def __init__(
        self,
        generator: Optional[SelvesGenerator] = None,
        timeout_seconds: Optional[float] = None,
        notifier: Optional[Notifier] = None,
        fallback_mirror: Optional[bool] = None,
    ):
        self.generator = generator or default_generator()
        self.timeout_seconds = (
            timeout_seconds if timeout_seconds is not None else config.GENERATION.TIMEOUT_SECONDS
        )
        self.notifier = notifier
        self.fallback_mirror = (
            fallback_mirror if fallback_mirror is not None else config.GENERATION.FALLBACK_MIRROR
        )

    async def request_selves(self, input_text: str) -> GenerationOutcome:
        """
        Generate selves for ``input_text``.

        Raises:
            InvalidInputError: the text is missing or blank. This is the only
                error that reaches the caller.
        """
        if not isinstance(input_text, str) or not input_text.strip():
            raise InvalidInputError()

        try:
            result = await self._generate(input_text)
        except UpstreamError as e:
            return self._fall_back(input_text, e)
        except Exception as e:
            # Misconfiguration or an unexpected bug upstream; still never a dead end
            logger.exception(f"Unexpected generation failure: {e}")
            return self._fall_back(input_text, UpstreamError(str(e)))

        logger.info(
            f"Generated {len(result.selves)} selves"
            f"{' + hidden self' if result.hidden_self else ''}"
        )
        return GenerationOutcome(
            personas=result.selves,
            mirror_text=result.identity_mirror,
            hidden_persona=result.hidden_self,
            source="remote",
        )

    async def _generate(self, input_text: str) -> GenerateSelvesResponse:
        try:
            result = await asyncio.wait_for(self.generator(input_text), timeout=self.timeout_seconds)
        except asyncio.TimeoutError as e:
            raise GenerationTimeoutError(self.timeout_seconds) from e

        if result is None or not result.selves:
            raise UpstreamMalformedError("Generation returned no selves")
        return result

    def _fall_back(self, input_text: str, error: UpstreamError) -> GenerationOutcome:
        logger.warning(f"Falling back to simulated selves: {type(error).__name__}: {error}")
        self._notify(error.notice)

        simulated = fallback.generate(input_text)
        return GenerationOutcome(
            personas=simulated.personas,
            mirror_text=simulated.mirror_text if self.fallback_mirror else "",
            hidden_persona=None,
            source="fallback",
            notice=error.notice,
        )

    def _notify(self, message: str) -> None:
        if self.notifier is None:
            return
        try:
            self.notifier(message)
        except Exception as e:
            logger.error(f"Notifier failed: {e}")
