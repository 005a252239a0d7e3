"""
Insights Prompt Templates - ask a model for a JSON business review.
"""

from typing import Iterable

from aistudio.core.formatting import rupees

INSIGHTS_SYSTEM_PROMPT = """You are a business analyst AI. Analyze the provided business data and return insights in JSON format.
Be specific, actionable, and data-driven."""

INSIGHTS_PROMPT = """Analyze this business data and provide 5 key insights and recommendations:

Business Metrics:
- Total Revenue: {total_revenue}
- Pending Invoices: {pending_invoices} ({total_pending_amount})
- Forecasted Revenue: {forecasted_revenue}
- Active Deals: {active_deals}
- At-Risk Contacts: {at_risk_contacts}
- High-Value Leads: {high_value_leads}
- Pending Tasks: {pending_tasks}

Deal Pipeline:
{pipeline}

Provide:
1. Top 3 urgent actions
2. Revenue opportunities
3. Risk warnings
4. Growth recommendations
5. Operational improvements

Format as JSON with keys: urgentActions, opportunities, risks, recommendations, improvements
"""


def build_insights_prompt(metrics, deals: Iterable) -> str:
    """
    Args:
        metrics: InsightMetrics for the tenant
        deals: Up to 10 recent deals for the pipeline section
    """
    pipeline = "\n".join(
        f"- {deal.name}: {rupees(deal.value)} ({deal.stage}, {deal.probability}% probability)"
        for deal in deals
    )
    return INSIGHTS_PROMPT.format(
        total_revenue=rupees(metrics.total_revenue),
        pending_invoices=metrics.pending_invoices,
        total_pending_amount=rupees(metrics.total_pending_amount),
        forecasted_revenue=rupees(metrics.forecasted_revenue),
        active_deals=metrics.active_deals,
        at_risk_contacts=metrics.at_risk_contacts,
        high_value_leads=metrics.high_value_leads,
        pending_tasks=metrics.pending_tasks,
        pipeline=pipeline or "- No deals yet",
    )
