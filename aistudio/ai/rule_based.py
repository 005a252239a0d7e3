"""
Rule-based responders - the deterministic last stage of every fallback chain.

No network call, no exceptions: whatever the input, these return a
non-empty answer. The chat responder reads the rendered context block
directly, so it answers from the same data a model would have seen.
"""

import re
import time
from typing import List, Optional

from aistudio.ai.providers.base import (
    AIResponse,
    ChatMessage,
    ChatPrompt,
    ChatProvider,
    ProviderType,
)
from aistudio.ai.topic_filter import contains_any

# ---------------------------------------------------------------------------
# CONTEXT BLOCK SECTIONS
# ---------------------------------------------------------------------------
DEALS_SECTION = re.compile(r"ACTIVE DEALS \(([^)]+)\):([\s\S]*?)(?=PENDING INVOICES|=== END)")
TASKS_SECTION = re.compile(r"PENDING TASKS \(([^)]+)\):([\s\S]*?)(?=ACTIVE DEALS|PENDING INVOICES|=== END)")
INVOICES_SECTION = re.compile(r"OVERDUE INVOICES \(([^)]+)\):([\s\S]*?)(?=PENDING TASKS|ACTIVE DEALS|=== END)")
REVENUE_LINE = re.compile(r"Revenue \(Last 30 Days\): ₹([\d,]+(?:\.\d+)?)")
NUMBERED_LINE = re.compile(r"^\d+\.")
SENTINEL_PREFIX = "None - "

MAX_LINES = 5

NOT_CONNECTED_MESSAGE = """I'm having trouble connecting to the AI service right now.

To enable full AI capabilities, please ensure your API keys are configured in the .env file:
- GROQ_API_KEY (recommended - fastest)
- OLLAMA_API_KEY (or local Ollama running)
- OPENAI_API_KEY (optional fallback)

Once configured, I'll be able to provide specific answers based on your actual business data."""


def _section(pattern: re.Pattern, context: str) -> str:
    match = pattern.search(context)
    return match.group(2) if match else ""


def _numbered_lines(section: str) -> List[str]:
    """Numbered item lines of a section; empty when it holds a "None - ..." sentinel."""
    lines = [line.strip() for line in section.split("\n")]
    if any(line.startswith(SENTINEL_PREFIX) for line in lines):
        return []
    return [line for line in lines if line and NUMBERED_LINE.match(line)][:MAX_LINES]


def answer_from_context(question: str, context: str) -> str:
    """
    Answer a question by pattern-matching the context block.

    Topics are checked in a fixed order: deals, tasks, invoices, revenue.
    """
    if contains_any(question, ("deal",)):
        lines = _numbered_lines(_section(DEALS_SECTION, context))
        if lines:
            return (
                "Here are your top deals:\n\n" + "\n".join(lines)
                + "\n\nThese are the highest value deals in your pipeline."
            )
        return "I couldn't find active deals in your data."

    if contains_any(question, ("task", "todo", "attention")):
        lines = _numbered_lines(_section(TASKS_SECTION, context))
        if lines:
            return (
                "Here are the tasks that need your attention:\n\n" + "\n".join(lines)
                + "\n\nThese are prioritized by importance and due date."
            )
        return "You currently have no pending tasks. Great job staying on top of things!"

    if contains_any(question, ("invoice", "overdue")):
        lines = _numbered_lines(_section(INVOICES_SECTION, context))
        if lines:
            return (
                "Here are your overdue invoices:\n\n" + "\n".join(lines)
                + "\n\nPlease follow up with these customers to ensure timely payment."
            )
        return "You have no overdue invoices. Excellent!"

    if contains_any(question, ("revenue", "income", "sales")):
        match = REVENUE_LINE.search(context)
        if match:
            return f"Your revenue for the last 30 days is ₹{match.group(1)}."
        return "Revenue data is not available at the moment."

    return NOT_CONNECTED_MESSAGE


class RuleBasedResponder(ChatProvider):
    """ChatProvider that never fails and never touches the network."""

    provider_type = ProviderType.RULE_BASED
    model = "rule-based"

    async def answer(self, prompt: ChatPrompt) -> AIResponse:
        start_time = time.time()
        content = answer_from_context(prompt.question, prompt.context)
        return AIResponse(
            content=content,
            provider=self.provider_type,
            model=self.model,
            latency_ms=self._measure_latency(start_time),
        )

    async def chat(
        self,
        messages: List[ChatMessage],
        temperature: float = 0.7,
        max_tokens: int = 1024,
    ) -> AIResponse:
        # Without a separate context, the last user message is both question and context
        question = next((m.content for m in reversed(messages) if m.role == "user"), "")
        return await self.answer(ChatPrompt(system="", user=question, question=question, context=question))


# ---------------------------------------------------------------------------
# SOCIAL POSTS
# ---------------------------------------------------------------------------
PLATFORM_EMOJIS = {
    "facebook": "📘",
    "instagram": "📷",
    "linkedin": "💼",
    "twitter": "🐦",
    "youtube": "📺",
}
DEFAULT_EMOJI = "✨"

TONE_LINES = {
    "enthusiastic": "We're excited to share this with you! 🚀",
    "friendly": "We hope you find this helpful! 😊",
}


def rule_based_post(
    topic: str,
    platform: Optional[str] = None,
    tone: Optional[str] = None,
    length: Optional[str] = None,
) -> str:
    """Template a simple post when no model is reachable."""
    emoji = PLATFORM_EMOJIS.get((platform or "").lower(), DEFAULT_EMOJI)
    parts = [f"{emoji} {topic}"]
    if tone in TONE_LINES:
        parts.append(TONE_LINES[tone])
    if length == "long":
        parts.append("Stay tuned for more updates and insights. We value your support and engagement!")
    parts.append("#Business #Growth #Success")
    return "\n\n".join(parts).strip()
