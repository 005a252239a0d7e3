"""
Prompts Module - Centralized prompt templates for AI interactions.

Keeping prompts centralized makes them:
- Easy to update and iterate
- Consistent across providers
- Testable without a network call
"""

from aistudio.ai.prompts.chat_prompts import build_system_prompt, build_user_message
from aistudio.ai.prompts.insights_prompts import INSIGHTS_SYSTEM_PROMPT, build_insights_prompt
from aistudio.ai.prompts.post_prompts import build_post_prompts

__all__ = [
    "build_system_prompt",
    "build_user_message",
    "INSIGHTS_SYSTEM_PROMPT",
    "build_insights_prompt",
    "build_post_prompts",
]
