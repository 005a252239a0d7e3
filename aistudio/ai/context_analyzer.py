"""
Context Analyzer - decides whether the business context is rich enough
to answer a question, or whether the assistant should ask first.

Seven signals are counted from the assembled BusinessContext:

    business data | matched contact | matched deal | products |
    pending tasks | overdue invoices | active deals

The count is mapped onto Confidence by a threshold table read from
settings (CHAT_CONFIDENCE_HIGH_SIGNALS / CHAT_CONFIDENCE_MEDIUM_SIGNALS).
At LOW confidence the pipeline returns a clarifying question and never
calls a provider.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from aistudio.ai.context import BusinessContext
from aistudio.ai.topic_filter import DocumentKind, detect_document_kinds
from aistudio.core.config import settings


class Confidence(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


@dataclass(frozen=True)
class ConfidencePolicy:
    """Minimum signal counts for each confidence level."""
    high_signals: int = 4
    medium_signals: int = 2

    @classmethod
    def from_settings(cls) -> "ConfidencePolicy":
        return cls(
            high_signals=settings.CHAT_CONFIDENCE_HIGH_SIGNALS,
            medium_signals=settings.CHAT_CONFIDENCE_MEDIUM_SIGNALS,
        )

    def classify(self, signal_count: int) -> Confidence:
        if signal_count >= self.high_signals:
            return Confidence.HIGH
        if signal_count >= self.medium_signals:
            return Confidence.MEDIUM
        return Confidence.LOW


@dataclass
class ContextAnalysis:
    confidence: Confidence
    signal_count: int
    missing_context: List[str] = field(default_factory=list)
    suggested_questions: List[str] = field(default_factory=list)

    @property
    def has_enough_context(self) -> bool:
        return self.confidence != Confidence.LOW

    @property
    def needs_clarification(self) -> bool:
        return self.confidence == Confidence.LOW


# ---------------------------------------------------------------------------
# CLARIFYING QUESTIONS
# ---------------------------------------------------------------------------
# Keyed by the kind of document the user asked for. The first kind detected
# in the message wins; DEFAULT_QUESTIONS covers plain questions.

CLARIFYING_QUESTIONS = {
    DocumentKind.PROPOSAL: [
        "Which client or company is this proposal for?",
        "Which products or services should the proposal include?",
        "What budget or deal value are you working with?",
    ],
    DocumentKind.SOCIAL_POST: [
        "What is the main message or theme of this post?",
        "Which platform is the post for (LinkedIn, Facebook, Instagram or Twitter)?",
        "Is this about a product, company update, industry insight, or something else?",
    ],
    DocumentKind.PITCH_DECK: [
        "Who is the audience for this pitch (investors, partners or customers)?",
        "What problem does your business solve?",
        "How much funding or what outcome are you asking for?",
    ],
    DocumentKind.BUSINESS_PLAN: [
        "What stage is your business at (idea, launch or growth)?",
        "Who is your target market?",
        "What time horizon should the plan cover?",
    ],
    DocumentKind.BLUEPRINT: [
        "What goal should this strategy achieve?",
        "What time frame are you planning for?",
        "Which part of the business should it focus on (sales, marketing or operations)?",
    ],
}

DEFAULT_QUESTIONS = [
    "Which client, deal or product is your question about?",
    "Are you asking about sales, invoices, tasks or something else?",
    "What time period should I look at?",
]


def analyze_context(
    message: str,
    context: BusinessContext,
    policy: Optional[ConfidencePolicy] = None,
) -> ContextAnalysis:
    """
    Count the context signals and classify confidence.

    Args:
        message: The user's question
        context: The assembled business context
        policy: Threshold table (defaults to the configured one)
    """
    policy = policy or ConfidencePolicy.from_settings()

    signals = {
        "business data": context.available,
        "client or company details": context.has_contact,
        "deal details": context.has_deal,
        "product catalog": context.has_products,
        "pending tasks": context.pending_task_count > 0,
        "overdue invoices": context.overdue_invoice_count > 0,
        "active deals": context.active_deal_count > 0,
    }
    signal_count = sum(1 for present in signals.values() if present)
    missing = [name for name, present in signals.items() if not present]

    kinds = detect_document_kinds(message)
    questions = CLARIFYING_QUESTIONS.get(kinds[0], DEFAULT_QUESTIONS) if kinds else DEFAULT_QUESTIONS

    return ContextAnalysis(
        confidence=policy.classify(signal_count),
        signal_count=signal_count,
        missing_context=missing,
        suggested_questions=list(questions),
    )


def format_clarifying_message(analysis: ContextAnalysis) -> str:
    """Render the single clarifying question shown to the user."""
    question = analysis.suggested_questions[0] if analysis.suggested_questions else DEFAULT_QUESTIONS[0]
    return (
        "To give you an accurate answer based on your business data, "
        f"I need a bit more information.\n\n{question}"
    )
