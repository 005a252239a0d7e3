"""
AI Module - the business assistant behind AI Studio.

Architecture Overview:
=====================

    message
       │
       ▼
┌──────────────┐   personal topic   ┌─────────────────────┐
│ Topic filter │ ─────────────────▶ │ canned redirect     │
└──────┬───────┘                    └─────────────────────┘
       ▼
┌──────────────┐   exact hit        ┌─────────────────────┐
│ Response     │ ─────────────────▶ │ cached answer       │
│ cache        │                    └─────────────────────┘
└──────┬───────┘
       ▼
┌──────────────┐   LOW confidence   ┌─────────────────────┐
│ Context +    │ ─────────────────▶ │ clarifying question │
│ analyzer     │                    └─────────────────────┘
└──────┬───────┘
       ▼
 Groq → Ollama → Hugging Face → OpenAI → rule-based

Module Structure:
================
- providers/: one adapter per vendor (chat, image, gateway)
- prompts/: prompt templates for chat, insights and posts
- monitoring/: structured logging of provider attempts
- context.py: tenant-scoped business context block
- context_analyzer.py: confidence rubric and clarifying questions
- topic_filter.py: keyword tables
- rule_based.py: deterministic fallbacks
"""

__version__ = "0.4.0"

from aistudio.ai.context import BusinessContext, BusinessContextAssembler
from aistudio.ai.context_analyzer import Confidence, ContextAnalysis, analyze_context
from aistudio.ai.rule_based import RuleBasedResponder

__all__ = [
    "BusinessContext",
    "BusinessContextAssembler",
    "Confidence",
    "ContextAnalysis",
    "analyze_context",
    "RuleBasedResponder",
]
