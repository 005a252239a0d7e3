"""
Base AI Provider - the one capability interface every chat vendor implements.

Design Pattern: Strategy Pattern
================================
The chat pipeline holds an ordered list of ChatProvider instances and walks
it with a plain loop. Providers never raise: a failed call comes back as an
AIResponse with success=False and a ProviderError describing the vendor
status and message. The pipeline reads that and advances to the next one.

Example:
    provider = GroqProvider()
    response = await provider.chat([
        ChatMessage("system", "You are a business assistant."),
        ChatMessage("user", "What needs attention today?"),
    ])
    if response.success:
        print(response.content)
    else:
        print(response.error)
"""

import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from aistudio.core.errors import ProviderError

logger = logging.getLogger("aistudio.ai")


class ProviderType(str, Enum):
    """Identifiers reported in the `service` field of API responses."""
    GROQ = "groq"
    OLLAMA = "ollama"
    HUGGINGFACE = "huggingface"
    OPENAI = "openai"
    RULE_BASED = "rule-based"
    GOOGLE_AI_STUDIO = "google-ai-studio"
    NANOBANANA = "nanobanana"


@dataclass
class TokenUsage:
    """
    Token usage statistics for an AI request.

    Recorded in AIUsage rows and returned to the caller as `usage`.
    """
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0

    def __post_init__(self):
        """Calculate total if not provided."""
        if self.total_tokens == 0:
            self.total_tokens = self.prompt_tokens + self.completion_tokens

    def to_dict(self) -> Dict[str, int]:
        return {
            "promptTokens": self.prompt_tokens,
            "completionTokens": self.completion_tokens,
            "totalTokens": self.total_tokens,
        }


@dataclass
class ChatMessage:
    role: str  # system | user | assistant
    content: str

    def to_dict(self) -> Dict[str, str]:
        return {"role": self.role, "content": self.content}


@dataclass
class ChatPrompt:
    """
    A fully built chat prompt.

    `system` and `user` are what networked providers see. `question` and
    `context` are kept separately so the rule-based responder can match on
    the raw question and read the context block without re-parsing the
    prompt templates.
    """
    system: str
    user: str
    question: str
    context: str = ""

    def messages(self) -> List[ChatMessage]:
        return [ChatMessage("system", self.system), ChatMessage("user", self.user)]


@dataclass
class AIResponse:
    """
    Standardized result from any chat provider.

    Attributes:
        content: The generated text ("" on failure)
        provider: Which provider produced it
        model: The specific model used
        usage: Token usage, when the vendor reported it
        latency_ms: How long the request took
        success: Whether the request succeeded
        error: ProviderError describing the failure
        created_at: Timestamp of the response
    """
    content: str
    provider: ProviderType
    model: str
    usage: Optional[TokenUsage] = None
    latency_ms: float = 0.0
    success: bool = True
    error: Optional[ProviderError] = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for logging."""
        return {
            "content": self.content[:100] + "..." if len(self.content) > 100 else self.content,
            "provider": self.provider.value,
            "model": self.model,
            "tokens": self.usage.total_tokens if self.usage else 0,
            "latency_ms": self.latency_ms,
            "success": self.success,
            "error": str(self.error) if self.error else None,
            "created_at": self.created_at.isoformat(),
        }


class ChatProvider(ABC):
    """
    Abstract base class for chat providers.

    Implementations make exactly one vendor request per call (no internal
    retries) and must NOT raise: errors are captured in AIResponse.error.
    """

    provider_type: ProviderType
    model: str = ""

    @property
    def is_configured(self) -> bool:
        """True when the provider has the credentials it needs."""
        return True

    @abstractmethod
    async def chat(
        self,
        messages: List[ChatMessage],
        temperature: float = 0.7,
        max_tokens: int = 1024,
    ) -> AIResponse:
        """
        Run one chat completion.

        Args:
            messages: Ordered conversation (system first)
            temperature: Creativity level
            max_tokens: Maximum tokens in the response

        Returns:
            AIResponse; success=False with `error` set when the call failed
        """

    async def answer(self, prompt: ChatPrompt) -> AIResponse:
        """Answer a built prompt. Networked providers just send its messages."""
        return await self.chat(prompt.messages())

    def _measure_latency(self, start_time: float) -> float:
        """Calculate latency in milliseconds."""
        return (time.time() - start_time) * 1000

    def _create_error_response(
        self,
        message: str,
        vendor_status: Optional[int] = None,
        latency_ms: float = 0.0,
    ) -> AIResponse:
        """Build a failed AIResponse carrying a ProviderError."""
        error = ProviderError(self.provider_type.value, message, vendor_status=vendor_status)
        logger.error(f"AI Provider Error [{self.provider_type.value}]: {error}")
        return AIResponse(
            content="",
            provider=self.provider_type,
            model=self.model,
            latency_ms=latency_ms,
            success=False,
            error=error,
        )
