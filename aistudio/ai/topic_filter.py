"""
Topic Filter - keyword tables for free-text classification.

All keyword-driven decisions in the chat pipeline live here as explicit
tables keyed by a finite enum, matched by one helper:

- personal / non-business topics (rejected before any provider call)
- document requests (proposal, social post, pitch deck, business plan,
  blueprint) that add extra instructions to the user prompt
- the social platform a post is meant for

Matching is a case-insensitive substring test. These are best-effort
heuristics: "life" also matches "lifetime".
"""

from enum import Enum
from typing import Dict, Iterable, List, Optional, Tuple


def contains_any(text: str, keywords: Iterable[str]) -> bool:
    """Case-insensitive substring match against any keyword."""
    lowered = text.lower()
    return any(keyword in lowered for keyword in keywords)


# ---------------------------------------------------------------------------
# PERSONAL TOPICS
# ---------------------------------------------------------------------------
PERSONAL_KEYWORDS: Tuple[str, ...] = (
    "girlfriend", "boyfriend", "wife", "husband", "dating", "love", "relationship",
    "family", "personal", "life", "marriage", "divorce", "breakup", "romance",
    "sex", "intimate", "private", "personal problem", "personal issue",
)

FILTERED_MESSAGE = (
    "I'm a business assistant and can only help with business-related questions. "
    "How can I assist you with your business today? I can help with:\n\n"
    "• Business proposals and quotes\n"
    "• Social media posts (LinkedIn, Facebook, etc.)\n"
    "• Pitch decks and business plans\n"
    "• Marketing content\n"
    "• Sales strategies\n"
    "• Financial analysis\n"
    "• And other business operations"
)


def is_personal(message: str) -> bool:
    return contains_any(message, PERSONAL_KEYWORDS)


# ---------------------------------------------------------------------------
# DOCUMENT REQUESTS
# ---------------------------------------------------------------------------
class DocumentKind(str, Enum):
    PROPOSAL = "proposal"
    SOCIAL_POST = "social_post"
    PITCH_DECK = "pitch_deck"
    BUSINESS_PLAN = "business_plan"
    BLUEPRINT = "blueprint"


# Order matters: it is the order the extra instruction blocks are appended.
DOCUMENT_KEYWORDS: Dict[DocumentKind, Tuple[str, ...]] = {
    DocumentKind.PROPOSAL: ("proposal", "quote"),
    DocumentKind.SOCIAL_POST: ("post", "linkedin", "facebook", "instagram", "twitter"),
    DocumentKind.PITCH_DECK: ("pitch deck", "pitchdeck", "pitch"),
    DocumentKind.BUSINESS_PLAN: ("business plan", "businessplan"),
    DocumentKind.BLUEPRINT: ("blueprint", "strategy", "plan"),
}


def detect_document_kinds(message: str) -> List[DocumentKind]:
    """Every document kind the message asks for, in table order."""
    return [kind for kind, keywords in DOCUMENT_KEYWORDS.items() if contains_any(message, keywords)]


# ---------------------------------------------------------------------------
# SOCIAL PLATFORMS
# ---------------------------------------------------------------------------
class Platform(str, Enum):
    LINKEDIN = "LinkedIn"
    FACEBOOK = "Facebook"
    INSTAGRAM = "Instagram"
    TWITTER = "Twitter/X"


PLATFORM_KEYWORDS: Dict[Platform, Tuple[str, ...]] = {
    Platform.LINKEDIN: ("linkedin",),
    Platform.FACEBOOK: ("facebook",),
    Platform.INSTAGRAM: ("instagram",),
    Platform.TWITTER: ("twitter",),
}

PLATFORM_PRACTICES: Dict[Platform, str] = {
    Platform.LINKEDIN: "Professional tone, industry insights, B2B focus, 3-5 relevant hashtags",
    Platform.FACEBOOK: "Engaging, community-focused, conversational, include call-to-action",
    Platform.INSTAGRAM: "Visual storytelling, hashtags (5-10), emoji usage, engaging captions",
    Platform.TWITTER: "Concise (under 280 chars), timely, engaging, relevant hashtags",
}


def detect_platform(message: str) -> Optional[Platform]:
    """First platform named in the message, or None for generic social media."""
    for platform, keywords in PLATFORM_KEYWORDS.items():
        if contains_any(message, keywords):
            return platform
    return None
