"""
AI Providers - adapters for each external AI vendor.

Chat (fallback order): Groq, Ollama, Hugging Face, OpenAI; the
rule-based responder in aistudio.ai.rule_based closes the chain.
Images: Gemini (google-genai) and Hugging Face.
Speech/vision: the AI gateway.
"""

from aistudio.ai.providers.base import (
    AIResponse,
    ChatMessage,
    ChatPrompt,
    ChatProvider,
    ProviderType,
    TokenUsage,
)
from aistudio.ai.providers.openai_compatible import (
    GroqProvider,
    HuggingFaceProvider,
    OpenAICompatibleProvider,
    OpenAIProvider,
)
from aistudio.ai.providers.ollama import OllamaProvider

__all__ = [
    "AIResponse",
    "ChatMessage",
    "ChatPrompt",
    "ChatProvider",
    "ProviderType",
    "TokenUsage",
    "OpenAICompatibleProvider",
    "GroqProvider",
    "HuggingFaceProvider",
    "OpenAIProvider",
    "OllamaProvider",
]
