"""
OpenAI LLM client implementation.

Also serves OpenAI-compatible gateways through ``base_url``.
"""

import json
import logging
import openai
from typing import List, Dict, Any, Optional
from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)
from .base import BaseLLMClient, ChatMessage, ToolSpec, ToolCallResponse
from parallel.errors import (
    QuotaExhaustedError,
    RateLimitedError,
    UpstreamError,
    UpstreamMalformedError,
)
from server.logging_config import get_logger

logger = get_logger(__name__)

# Only transient transport/5xx failures are retried; 429 and 402 go straight to the caller
RETRYABLE_ERRORS = (openai.APIConnectionError, openai.InternalServerError)


def translate_openai_error(e: Exception) -> UpstreamError:
    """Map an OpenAI SDK exception to the Parallel error taxonomy"""
    if isinstance(e, openai.RateLimitError):
        return RateLimitedError()
    if isinstance(e, openai.APIStatusError):
        if e.status_code == 429:
            return RateLimitedError()
        if e.status_code == 402:
            return QuotaExhaustedError()
        return UpstreamError(f"AI gateway error: {e.status_code}")
    if isinstance(e, openai.APITimeoutError):
        return UpstreamError("AI gateway timed out")
    return UpstreamError(f"AI gateway error: {type(e).__name__}")


class OpenAIClient(BaseLLMClient):
    """OpenAI LLM client"""

    def __init__(
        self,
        api_key: str,
        chat_model: str = "gpt-4o-mini",
        base_url: Optional[str] = None,
        provider_name: str = "openai",
        max_attempts: int = 2,
        **kwargs
    ):
        super().__init__(model_name=chat_model, **kwargs)
        self.api_key = api_key
        self.chat_model = chat_model
        self.base_url = base_url
        self.provider_name = provider_name
        self.max_attempts = max_attempts

        if base_url:
            self.async_client = openai.AsyncOpenAI(api_key=api_key, base_url=base_url)
        else:
            self.async_client = openai.AsyncOpenAI(api_key=api_key)

    async def call_tool(
        self,
        messages: List[ChatMessage],
        tool: ToolSpec,
        temperature: float = 0.7,
        max_tokens: Optional[int] = None,
        **kwargs
    ) -> ToolCallResponse:
        """Force a function call through the chat completions API"""
        request_params = {
            "model": self.chat_model,
            "messages": [{"role": msg.role, "content": msg.content} for msg in messages],
            "temperature": temperature,
            "tools": [{
                "type": "function",
                "function": {
                    "name": tool.name,
                    "description": tool.description,
                    "parameters": tool.parameters,
                },
            }],
            "tool_choice": {"type": "function", "function": {"name": tool.name}},
        }

        if max_tokens:
            request_params["max_tokens"] = max_tokens

        request_params.update(kwargs)

        try:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(self.max_attempts),
                wait=wait_exponential(multiplier=1, min=1, max=8),
                retry=retry_if_exception_type(RETRYABLE_ERRORS),
                before_sleep=before_sleep_log(logger, logging.INFO),
                reraise=True
            ):
                with attempt:
                    response = await self.async_client.chat.completions.create(**request_params)
        except openai.OpenAIError as e:
            logger.error(f"{self.provider_name} tool call error: {e}")
            raise translate_openai_error(e) from e

        return ToolCallResponse(
            name=tool.name,
            arguments=self._parse_tool_arguments(response, tool.name),
            model=response.model or self.chat_model,
            usage=response.usage.model_dump() if response.usage else None
        )

    def _parse_tool_arguments(self, response: Any, tool_name: str) -> Dict[str, Any]:
        choices = getattr(response, "choices", None) or []
        message = choices[0].message if choices else None
        tool_calls = getattr(message, "tool_calls", None) or []
        if not tool_calls:
            raise UpstreamMalformedError("No tool call in AI response")

        call = tool_calls[0]
        if call.function.name != tool_name:
            raise UpstreamMalformedError(f"Unexpected tool call: {call.function.name}")

        try:
            arguments = json.loads(call.function.arguments or "")
        except json.JSONDecodeError as e:
            raise UpstreamMalformedError(f"Tool arguments are not valid JSON: {e}") from e

        if not isinstance(arguments, dict):
            raise UpstreamMalformedError("Tool arguments are not a JSON object")
        return arguments

    def get_provider_name(self) -> str:
        return self.provider_name

    async def close(self) -> None:
        try:
            await self.async_client.close()
        except Exception as e:
            logger.debug(f"OpenAI async client close failed: {e}")
