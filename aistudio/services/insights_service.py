"""
Insights Service - business metrics plus a model-written review.

Providers are tried Ollama -> Groq. If both fail the rule-based insights
are returned, so the endpoint always has something to show.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence
from uuid import UUID

from fastapi import Depends
from sqlalchemy.orm import Session

from aistudio.ai.insights import InsightMetrics, parse_insights, rule_based_insights
from aistudio.ai.monitoring import ai_logger
from aistudio.ai.prompts.insights_prompts import INSIGHTS_SYSTEM_PROMPT, build_insights_prompt
from aistudio.ai.providers import ChatMessage, ChatProvider, GroqProvider, OllamaProvider, ProviderType
from aistudio.models.commerce import Invoice, Order
from aistudio.models.crm import Contact, Deal, Task
from aistudio.services.job_queue import LOG_INSIGHTS_GENERATION, JobDispatcher, get_job_dispatcher
from aistudio.services.usage_service import record_usage

logger = logging.getLogger("aistudio.services.insights")

CONTACT_LIMIT = 100
DEAL_LIMIT = 100
ORDER_LIMIT = 50
INVOICE_LIMIT = 50
TASK_LIMIT = 50
PIPELINE_PREVIEW = 10


@dataclass
class InsightsReport:
    insights: Dict[str, Any]
    metrics: InsightMetrics
    service: str
    generated_at: datetime

    def to_dict(self) -> Dict[str, Any]:
        return {
            "insights": self.insights,
            "metrics": self.metrics.to_dict(),
            "generatedAt": self.generated_at.isoformat(),
        }


def compute_metrics(db: Session, tenant_id: UUID) -> tuple[InsightMetrics, List[Deal]]:
    """Load the tenant's recent records and compute the headline metrics."""
    contacts = (
        db.query(Contact).filter(Contact.tenant_id == tenant_id)
        .order_by(Contact.created_at.desc()).limit(CONTACT_LIMIT).all()
    )
    deals = (
        db.query(Deal).filter(Deal.tenant_id == tenant_id)
        .order_by(Deal.created_at.desc()).limit(DEAL_LIMIT).all()
    )
    orders = (
        db.query(Order).filter(Order.tenant_id == tenant_id)
        .order_by(Order.created_at.desc()).limit(ORDER_LIMIT).all()
    )
    invoices = (
        db.query(Invoice).filter(Invoice.tenant_id == tenant_id)
        .order_by(Invoice.created_at.desc()).limit(INVOICE_LIMIT).all()
    )
    tasks = (
        db.query(Task).filter(Task.tenant_id == tenant_id, Task.status != "completed")
        .order_by(Task.due_date.asc()).limit(TASK_LIMIT).all()
    )

    pending_invoices = [i for i in invoices if i.status == "sent" and i.paid_at is None]
    active_deals = [d for d in deals if d.stage not in ("won", "lost")]

    metrics = InsightMetrics(
        total_revenue=sum(o.total or 0 for o in orders if o.status == "delivered"),
        pending_invoices=len(pending_invoices),
        total_pending_amount=sum(i.total or 0 for i in pending_invoices),
        forecasted_revenue=sum((d.value or 0) * (d.probability or 0) / 100 for d in active_deals),
        active_deals=len(active_deals),
        at_risk_contacts=sum(1 for c in contacts if c.churn_risk),
        high_value_leads=sum(1 for c in contacts if c.likely_to_buy),
        pending_tasks=len(tasks),
    )
    return metrics, deals[:PIPELINE_PREVIEW]


class InsightsService:
    """
    Args:
        providers: Chat providers in order (Ollama, Groq by default)
        dispatcher: Receives the best-effort log-insights-generation job
    """

    def __init__(self, providers: Sequence[ChatProvider], dispatcher: JobDispatcher):
        self.providers = list(providers)
        self.dispatcher = dispatcher

    async def generate(self, db: Session, tenant_id: UUID, user_id: Optional[UUID] = None) -> InsightsReport:
        metrics, pipeline = compute_metrics(db, tenant_id)
        messages = [
            ChatMessage("system", INSIGHTS_SYSTEM_PROMPT),
            ChatMessage("user", build_insights_prompt(metrics, pipeline)),
        ]

        insights: Optional[Dict[str, Any]] = None
        service = ProviderType.RULE_BASED.value
        for provider in self.providers:
            response = await provider.chat(messages)
            if response.success and response.content:
                insights = parse_insights(response.content)
                service = response.provider.value
                record_usage(
                    db,
                    tenant_id,
                    service=service,
                    feature="insights",
                    tokens=response.usage.total_tokens if response.usage else 0,
                    user_id=user_id,
                )
                break
            logger.warning(f"Insights provider {provider.provider_type.value} failed: {response.error}")

        if insights is None:
            insights = rule_based_insights(metrics)

        ai_logger.log_event("insights", "ai_insights_generated", {
            "tenant_id": str(tenant_id),
            "service": service,
        })
        self.dispatcher.dispatch(LOG_INSIGHTS_GENERATION, {
            "tenant_id": str(tenant_id),
            "user_id": str(user_id) if user_id else None,
            "insights": insights,
        })

        return InsightsReport(
            insights=insights,
            metrics=metrics,
            service=service,
            generated_at=datetime.now(timezone.utc),
        )


_insights_providers: Optional[List[ChatProvider]] = None


def get_insights_service(dispatcher: JobDispatcher = Depends(get_job_dispatcher)) -> InsightsService:
    """FastAPI dependency; the providers are built once per process."""
    global _insights_providers
    if _insights_providers is None:
        _insights_providers = [OllamaProvider(), GroqProvider()]
    return InsightsService(_insights_providers, dispatcher)
