"""
Business insights - metrics, model-output parsing and rule-based fallback.
"""

import json
from dataclasses import dataclass
from typing import Any, Dict, List

from aistudio.core.formatting import rupees

INSIGHT_KEYS = ("urgentActions", "opportunities", "risks", "recommendations", "improvements")

DEFAULT_INSIGHTS = {
    "urgentActions": "No urgent actions at this time",
    "opportunities": "Continue building your pipeline",
    "risks": "No major risks identified",
    "recommendations": "Keep up the good work!",
    "improvements": "System is running smoothly",
}


@dataclass
class InsightMetrics:
    total_revenue: float = 0.0
    pending_invoices: int = 0
    total_pending_amount: float = 0.0
    forecasted_revenue: float = 0.0
    active_deals: int = 0
    at_risk_contacts: int = 0
    high_value_leads: int = 0
    pending_tasks: int = 0

    def to_dict(self) -> Dict[str, Any]:
        """camelCase metrics as returned by the insights endpoint."""
        return {
            "totalRevenue": self.total_revenue,
            "pendingInvoices": self.pending_invoices,
            "totalPendingAmount": self.total_pending_amount,
            "forecastedRevenue": self.forecasted_revenue,
            "activeDeals": self.active_deals,
            "atRiskContacts": self.at_risk_contacts,
            "highValueLeads": self.high_value_leads,
            "pendingTasks": self.pending_tasks,
        }


def parse_insights(text: str) -> Dict[str, Any]:
    """Parse model output as JSON, or wrap free text under `raw`."""
    try:
        parsed = json.loads(text)
    except (json.JSONDecodeError, TypeError):
        parsed = None
    if isinstance(parsed, dict):
        return parsed
    result: Dict[str, Any] = {key: [] for key in INSIGHT_KEYS}
    result["raw"] = text
    return result


def rule_based_insights(metrics: InsightMetrics) -> Dict[str, List[str]]:
    """Deterministic insights from threshold rules."""
    urgent: List[str] = []
    opportunities: List[str] = []
    risks: List[str] = []
    recommendations: List[str] = []
    improvements: List[str] = []

    if metrics.pending_invoices > 0:
        urgent.append(
            f"Follow up on {metrics.pending_invoices} pending invoice(s) worth "
            f"{rupees(metrics.total_pending_amount)}"
        )
    if metrics.pending_tasks > 5:
        urgent.append(f"Complete {metrics.pending_tasks} pending tasks to improve productivity")
    if metrics.at_risk_contacts > 0:
        urgent.append(f"Re-engage {metrics.at_risk_contacts} at-risk contact(s) to prevent churn")

    if metrics.forecasted_revenue > 0:
        opportunities.append(
            f"Focus on closing active deals to realize {rupees(metrics.forecasted_revenue)} "
            "in forecasted revenue"
        )
    if metrics.high_value_leads > 0:
        opportunities.append(f"Nurture {metrics.high_value_leads} high-value lead(s) to convert them to customers")
    if metrics.active_deals > 0:
        opportunities.append(f"Accelerate {metrics.active_deals} active deal(s) through the pipeline")

    if metrics.total_pending_amount > 10000:
        risks.append(
            f"High pending invoice amount ({rupees(metrics.total_pending_amount)}) may impact cash flow"
        )
    if metrics.at_risk_contacts > 0:
        risks.append(f"{metrics.at_risk_contacts} contact(s) are at risk of churning - immediate action needed")

    if metrics.total_revenue < 100000:
        recommendations.append("Focus on increasing revenue through new customer acquisition and upselling")
    if metrics.active_deals < 5:
        recommendations.append("Build a stronger pipeline by generating more leads and opportunities")

    if metrics.pending_tasks > 10:
        improvements.append("Implement task prioritization and automation to reduce backlog")
    if metrics.pending_invoices > 0:
        improvements.append("Set up automated invoice reminders to improve collection rates")

    found = {
        "urgentActions": urgent,
        "opportunities": opportunities,
        "risks": risks,
        "recommendations": recommendations,
        "improvements": improvements,
    }
    return {key: items or [DEFAULT_INSIGHTS[key]] for key, items in found.items()}
