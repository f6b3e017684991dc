"""
Base interface for LLM service providers.
All LLM clients must implement this interface for consistency.
"""

from abc import ABC, abstractmethod
from typing import List, Dict, Any, Optional
from pydantic import BaseModel


class ChatMessage(BaseModel):
    """Standard chat message format"""
    role: str  # "system", "user", "assistant"
    content: str


class ToolSpec(BaseModel):
    """A function the model is forced to call, with its JSON schema"""
    name: str
    description: str
    parameters: Dict[str, Any]


class ToolCallResponse(BaseModel):
    """Standard structured response: the arguments of the forced tool call"""
    name: str
    arguments: Dict[str, Any]
    model: str
    usage: Optional[Dict[str, Any]] = None


class BaseLLMClient(ABC):
    """Base interface for all LLM service clients"""

    def __init__(self, **kwargs):
        self.model_name = kwargs.get('model_name', 'default')

    @abstractmethod
    async def call_tool(
        self,
        messages: List[ChatMessage],
        tool: ToolSpec,
        temperature: float = 0.7,
        max_tokens: Optional[int] = None,
        **kwargs
    ) -> ToolCallResponse:
        """
        Generate a structured response by forcing a single tool call.

        Args:
            messages: List of chat messages
            tool: The tool the model must call
            temperature: Sampling temperature (0.0 to 1.0)
            max_tokens: Maximum tokens in response
            **kwargs: Additional provider-specific parameters

        Returns:
            ToolCallResponse with the parsed tool arguments

        Raises:
            RateLimitedError: provider answered 429
            QuotaExhaustedError: provider answered 402
            UpstreamMalformedError: no tool call, or arguments are not a JSON object
            UpstreamError: any other provider failure
        """
        pass

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return the name of the provider (e.g., 'openai', 'gateway', 'anthropic')"""
        pass

    async def close(self) -> None:
        """Release network resources held by the client"""
        return None
