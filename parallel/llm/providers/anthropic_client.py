"""
Anthropic LLM client implementation.
"""

import anthropic
from typing import List, Dict, Any, Optional
from .base import BaseLLMClient, ChatMessage, ToolSpec, ToolCallResponse
from parallel.errors import (
    QuotaExhaustedError,
    RateLimitedError,
    UpstreamError,
    UpstreamMalformedError,
)
from server.logging_config import get_logger

logger = get_logger(__name__)


def translate_anthropic_error(e: Exception) -> UpstreamError:
    """Map an Anthropic SDK exception to the Parallel error taxonomy"""
    if isinstance(e, anthropic.RateLimitError):
        return RateLimitedError()
    if isinstance(e, anthropic.APIStatusError):
        if e.status_code == 429:
            return RateLimitedError()
        if e.status_code == 402:
            return QuotaExhaustedError()
        return UpstreamError(f"Anthropic error: {e.status_code}")
    return UpstreamError(f"Anthropic error: {type(e).__name__}")


class AnthropicClient(BaseLLMClient):
    """Anthropic LLM client"""

    def __init__(self, api_key: str, chat_model: str = "claude-3-5-sonnet-20241022", **kwargs):
        super().__init__(model_name=chat_model, **kwargs)
        self.api_key = api_key
        self.chat_model = chat_model

        self.client = anthropic.AsyncAnthropic(api_key=api_key)

    async def call_tool(
        self,
        messages: List[ChatMessage],
        tool: ToolSpec,
        temperature: float = 0.7,
        max_tokens: Optional[int] = None,
        **kwargs
    ) -> ToolCallResponse:
        """Force a tool_use block through the messages API"""
        # Anthropic requires system message to be separate
        system_message = None
        anthropic_messages = []

        for msg in messages:
            if msg.role == "system":
                system_message = msg.content
            else:
                anthropic_messages.append({"role": msg.role, "content": msg.content})

        request_params = {
            "model": self.chat_model,
            "messages": anthropic_messages,
            "temperature": temperature,
            "max_tokens": max_tokens or 8000,
            "tools": [{
                "name": tool.name,
                "description": tool.description,
                "input_schema": tool.parameters,
            }],
            "tool_choice": {"type": "tool", "name": tool.name},
        }

        if system_message:
            request_params["system"] = system_message

        request_params.update(kwargs)

        try:
            response = await self.client.messages.create(**request_params)
        except anthropic.AnthropicError as e:
            logger.error(f"Anthropic tool call error: {e}")
            raise translate_anthropic_error(e) from e

        return ToolCallResponse(
            name=tool.name,
            arguments=self._parse_tool_input(response, tool.name),
            model=response.model or self.chat_model,
            usage=response.usage.model_dump() if response.usage else None
        )

    def _parse_tool_input(self, response: Any, tool_name: str) -> Dict[str, Any]:
        for block in getattr(response, "content", None) or []:
            if getattr(block, "type", None) == "tool_use" and block.name == tool_name:
                if not isinstance(block.input, dict):
                    raise UpstreamMalformedError("Tool input is not a JSON object")
                return block.input
        raise UpstreamMalformedError("No tool call in AI response")

    def get_provider_name(self) -> str:
        return "anthropic"

    async def close(self) -> None:
        try:
            await self.client.close()
        except Exception as e:
            logger.debug(f"Anthropic client close failed: {e}")
