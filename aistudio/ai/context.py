"""
Business Context Assembler - renders a tenant's business records into the
text block that grounds every chat answer.

Every query here filters by tenant_id. A tenant never sees another tenant's
contacts, deals, invoices or tasks, even when a name in the question would
match one.

Usage:
======
```python
from aistudio.ai.context import BusinessContextAssembler

context = BusinessContextAssembler(db).build(tenant_id, "Prepare a proposal for Acme")
print(context.text)          # "=== BUSINESS DATA === ..."
context.has_contact          # True when "Acme" matched a CRM contact
```

If any query fails the assembler returns BusinessContext.unavailable():
the request carries on with a placeholder instead of failing.
"""

import logging
import re
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import List, Optional
from uuid import UUID

from sqlalchemy import case, func, or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from aistudio.core.formatting import format_day, rupees
from aistudio.models.commerce import Invoice, Order, Product
from aistudio.models.crm import Contact, Deal, Interaction, Task
from aistudio.models.tenant import Tenant

logger = logging.getLogger("aistudio.ai.context")

CONTEXT_UNAVAILABLE = "Business context unavailable. Please try again."

# Section sentinels. The rule-based responder and tests read these literally.
NO_OVERDUE_INVOICES = "None - You have no overdue invoices."
NO_PENDING_TASKS = "None - You have no pending tasks."
NO_ACTIVE_DEALS = "None - You have no active deals."
NO_PENDING_INVOICES = "None - You have no pending invoices."

LIST_LIMIT = 10
INTERACTION_LIMIT = 5
REVENUE_WINDOW_DAYS = 30

REVENUE_ORDER_STATUSES = ("confirmed", "shipped", "delivered")
PENDING_TASK_STATUSES = ("pending", "in_progress")
PENDING_INVOICE_STATUSES = ("sent", "draft")
CLOSED_DEAL_STAGES = ("won", "lost", "closed_won", "closed_lost")

# ---------------------------------------------------------------------------
# NAME EXTRACTION
# ---------------------------------------------------------------------------
# Best-effort: find a capitalized company/person name near words like
# "for", "proposal" or "quote". Only the connector words are case-insensitive;
# the captured name must start with a capital letter.
NAME_PATTERNS = (
    re.compile(r"\b(?i:for|with|to|about)\s+([A-Z][a-zA-Z&]+)"),
    re.compile(r"(?i:proposal|quote|deal|contract)\s+(?i:for|with|to)\s+([A-Z][a-zA-Z&]+)"),
    re.compile(r"([A-Z][a-zA-Z&]{2,})\s+(?i:proposal|quote|deal)"),
)
SHORT_MESSAGE_LENGTH = 50


def extract_candidate_names(message: str) -> List[str]:
    """
    Guess which contact or company a message is about.

    Examples:
        "Prepare a proposal for Acme"  -> ["Acme"]
        "Globex deal status"           -> ["Globex", "Globex"]
        "what needs attention"         -> []
    """
    names: List[str] = []
    for pattern in NAME_PATTERNS:
        match = pattern.search(message)
        if match:
            names.append(match.group(1).strip())

    # Short messages that start with a capital: try the first word as a name
    stripped = message.strip()
    if len(message) < SHORT_MESSAGE_LENGTH and stripped[:1].isupper():
        names.append(stripped.split()[0])

    return names


@dataclass
class BusinessContext:
    """
    The rendered context block plus the facts the sufficiency check needs.

    The flags are computed from the query results, never by searching
    the rendered text.
    """
    text: str
    available: bool = True
    has_contact: bool = False
    has_deal: bool = False
    has_products: bool = False
    overdue_invoice_count: int = 0
    pending_task_count: int = 0
    active_deal_count: int = 0
    pending_invoice_count: int = 0
    matched_names: List[str] = field(default_factory=list)

    @classmethod
    def unavailable(cls) -> "BusinessContext":
        return cls(text=CONTEXT_UNAVAILABLE, available=False)


class BusinessContextAssembler:
    """Builds a BusinessContext for one tenant and one question."""

    def __init__(self, db: Session):
        self.db = db

    def build(self, tenant_id: UUID, message: str) -> BusinessContext:
        try:
            return self._build(tenant_id, message)
        except SQLAlchemyError as e:
            logger.error(f"Error getting business context for tenant {tenant_id}: {e}")
            self.db.rollback()
            return BusinessContext.unavailable()

    # ---------------------------------------------------------------------------
    # QUERIES
    # ---------------------------------------------------------------------------

    def _build(self, tenant_id: UUID, message: str) -> BusinessContext:
        db = self.db
        tenant = db.query(Tenant).filter(Tenant.id == tenant_id).first()

        names = extract_candidate_names(message)
        contact = self._match_contact(tenant_id, names)
        deal = None
        interactions: List[Interaction] = []
        if contact is not None:
            deal = (
                db.query(Deal)
                .filter(Deal.tenant_id == tenant_id, Deal.contact_id == contact.id)
                .order_by(Deal.created_at.desc())
                .first()
            )
            interactions = (
                db.query(Interaction)
                .filter(Interaction.tenant_id == tenant_id, Interaction.contact_id == contact.id)
                .order_by(Interaction.created_at.desc())
                .limit(INTERACTION_LIMIT)
                .all()
            )

        products = (
            db.query(Product)
            .filter(Product.tenant_id == tenant_id)
            .order_by(Product.total_sold.desc())
            .limit(LIST_LIMIT)
            .all()
        )

        counts = {
            "Contacts": self._count(Contact, tenant_id),
            "Deals": self._count(Deal, tenant_id),
            "Orders": self._count(Order, tenant_id),
            "Invoices": self._count(Invoice, tenant_id),
            "Tasks": self._count(Task, tenant_id),
        }

        overdue_invoices = (
            db.query(Invoice)
            .options(joinedload(Invoice.customer))
            .filter(Invoice.tenant_id == tenant_id, Invoice.status == "overdue")
            .order_by(Invoice.due_date.asc())
            .limit(LIST_LIMIT)
            .all()
        )

        priority_rank = case(
            (Task.priority == "high", 3),
            (Task.priority == "medium", 2),
            (Task.priority == "low", 1),
            else_=0,
        )
        pending_tasks = (
            db.query(Task)
            .options(joinedload(Task.contact))
            .filter(Task.tenant_id == tenant_id, Task.status.in_(PENDING_TASK_STATUSES))
            .order_by(priority_rank.desc(), Task.due_date.asc().nulls_last())
            .limit(LIST_LIMIT)
            .all()
        )

        active_deals = (
            db.query(Deal)
            .options(joinedload(Deal.contact))
            .filter(Deal.tenant_id == tenant_id, Deal.stage.notin_(CLOSED_DEAL_STAGES))
            .order_by(Deal.value.desc(), Deal.created_at.desc())
            .limit(LIST_LIMIT)
            .all()
        )

        since = datetime.now(timezone.utc) - timedelta(days=REVENUE_WINDOW_DAYS)
        revenue = (
            db.query(func.coalesce(func.sum(Order.total), 0.0))
            .filter(
                Order.tenant_id == tenant_id,
                Order.created_at >= since,
                Order.status.in_(REVENUE_ORDER_STATUSES),
            )
            .scalar()
        )

        pending_invoices = (
            db.query(Invoice)
            .options(joinedload(Invoice.customer))
            .filter(
                Invoice.tenant_id == tenant_id,
                Invoice.status.in_(PENDING_INVOICE_STATUSES),
                Invoice.paid_at.is_(None),
            )
            .order_by(Invoice.due_date.asc())
            .limit(LIST_LIMIT)
            .all()
        )

        text = render_context(
            tenant=tenant,
            counts=counts,
            revenue=revenue or 0.0,
            contact=contact,
            deal=deal,
            interactions=interactions,
            products=products,
            overdue_invoices=overdue_invoices,
            pending_tasks=pending_tasks,
            active_deals=active_deals,
            pending_invoices=pending_invoices,
        )

        return BusinessContext(
            text=text,
            has_contact=contact is not None,
            has_deal=deal is not None,
            has_products=bool(products),
            overdue_invoice_count=len(overdue_invoices),
            pending_task_count=len(pending_tasks),
            active_deal_count=len(active_deals),
            pending_invoice_count=len(pending_invoices),
            matched_names=names,
        )

    def _match_contact(self, tenant_id: UUID, names: List[str]) -> Optional[Contact]:
        if not names:
            return None
        conditions = []
        for name in names:
            pattern = f"%{name}%"
            conditions.append(Contact.name.ilike(pattern))
            conditions.append(Contact.company.ilike(pattern))
        return (
            self.db.query(Contact)
            .filter(Contact.tenant_id == tenant_id, or_(*conditions))
            .order_by(Contact.created_at.asc())
            .first()
        )

    def _count(self, model, tenant_id: UUID) -> int:
        return self.db.query(func.count(model.id)).filter(model.tenant_id == tenant_id).scalar() or 0


# ---------------------------------------------------------------------------
# RENDERING
# ---------------------------------------------------------------------------

def _customer_name(invoice: Invoice) -> str:
    return invoice.customer.name if invoice.customer else "N/A"


def _invoice_line(index: int, invoice: Invoice) -> str:
    return (
        f"{index}. Invoice {invoice.invoice_number}: {rupees(invoice.total)} "
        f"from {_customer_name(invoice)} (Due: {format_day(invoice.due_date)})"
    )


def render_context(
    tenant: Optional[Tenant],
    counts: dict,
    revenue: float,
    contact: Optional[Contact],
    deal: Optional[Deal],
    interactions: List[Interaction],
    products: List[Product],
    overdue_invoices: List[Invoice],
    pending_tasks: List[Task],
    active_deals: List[Deal],
    pending_invoices: List[Invoice],
) -> str:
    """Render query results into the labeled context block."""
    lines: List[str] = [
        "=== BUSINESS DATA ===",
        "IMPORTANT: Use ONLY this data to answer questions. Do NOT give generic responses.",
        "",
        f"YOUR BUSINESS ({tenant.name if tenant else 'Business'}):",
    ]
    if tenant:
        lines += [
            f"- Business Name: {tenant.name}",
            f"- Address: {tenant.address or 'N/A'}, {tenant.city or 'N/A'}, "
            f"{tenant.state or 'N/A'} {tenant.postal_code or ''}".rstrip(),
            f"- Contact: {tenant.phone or 'N/A'} | {tenant.email or 'N/A'}",
            f"- Website: {tenant.website or 'N/A'}",
            f"- GSTIN: {tenant.gstin or 'N/A'}",
        ]
    else:
        lines.append("- Business information not available")

    lines += ["", "SUMMARY:"]
    lines += [f"- Total {label}: {count}" for label, count in counts.items()]
    lines.append(f"- Revenue (Last {REVENUE_WINDOW_DAYS} Days): {rupees(revenue, 2)}")

    if contact is not None:
        company = f" ({contact.company})" if contact.company else ""
        lines += [
            "",
            "=== RELEVANT CLIENT/COMPANY INFORMATION ===",
            f"CLIENT: {contact.name}{company}",
            f"- Type: {contact.type}",
            f"- Status: {contact.status}",
            f"- Email: {contact.email or 'N/A'}",
            f"- Phone: {contact.phone or 'N/A'}",
            f"- Address: {contact.address or 'N/A'}, {contact.city or 'N/A'}, {contact.state or 'N/A'}",
        ]
        if contact.notes:
            lines.append(f"- Notes: {contact.notes}")
        if contact.tags:
            lines.append(f"- Tags: {', '.join(contact.tags)}")

        if deal is not None:
            lines += [
                "",
                "RELATED DEAL:",
                f"- Deal Name: {deal.name}",
                f"- Value: {rupees(deal.value)}",
                f"- Stage: {deal.stage}",
                f"- Probability: {deal.probability}%",
                f"- Expected Close: {format_day(deal.expected_close_date)}",
            ]

        if interactions:
            lines += ["", f"PAST INTERACTIONS ({len(interactions)}):"]
            for i, interaction in enumerate(interactions, 1):
                notes = interaction.notes[:100] if interaction.notes else "No notes"
                lines.append(
                    f"{i}. {interaction.type.upper()}: {interaction.subject or 'No subject'} - "
                    f"{notes} ({format_day(interaction.created_at)})"
                )

    if products:
        lines += ["", "=== AVAILABLE PRODUCTS/SERVICES ==="]
        for i, product in enumerate(products, 1):
            description = f" - {product.description[:80]}" if product.description else ""
            categories = f" [{', '.join(product.categories)}]" if product.categories else ""
            lines.append(f"{i}. {product.name}{description} - {rupees(product.sale_price)}{categories}")

    lines += ["", f"OVERDUE INVOICES ({len(overdue_invoices)}):"]
    if overdue_invoices:
        lines += [_invoice_line(i, inv) for i, inv in enumerate(overdue_invoices, 1)]
    else:
        lines.append(NO_OVERDUE_INVOICES)

    lines += ["", f"PENDING TASKS ({len(pending_tasks)}):"]
    if pending_tasks:
        for i, task in enumerate(pending_tasks, 1):
            lines.append(
                f"{i}. {task.title} - Priority: {task.priority}, "
                f"Due: {format_day(task.due_date, 'No due date')}, "
                f"Contact: {task.contact.name if task.contact else 'Unassigned'}"
            )
    else:
        lines.append(NO_PENDING_TASKS)

    lines += ["", f"ACTIVE DEALS ({len(active_deals)}):"]
    if active_deals:
        for i, d in enumerate(active_deals, 1):
            lines.append(
                f"{i}. {d.name}: {rupees(d.value)} (Stage: {d.stage}, "
                f"Probability: {d.probability}%, Contact: {d.contact.name if d.contact else 'N/A'})"
            )
    else:
        lines.append(NO_ACTIVE_DEALS)

    pending_total = sum(inv.total or 0 for inv in pending_invoices)
    lines += ["", f"PENDING INVOICES ({len(pending_invoices)}, Total: {rupees(pending_total, 2)}):"]
    if pending_invoices:
        lines += [_invoice_line(i, inv) for i, inv in enumerate(pending_invoices, 1)]
    else:
        lines.append(NO_PENDING_INVOICES)

    lines += ["", "=== END OF BUSINESS DATA ==="]
    return "\n".join(lines) + "\n"
