"""
Payment Reminder Engine

Responsibilities:
  • is_reminder_due        : decide per bill whether a reminder should fire now
  • collect_due_reminders  : read-only preview of reminders with WhatsApp links
  • run_reminder_pass      : mark reminders sent (count + timestamp) and hand back links

Per-bill state: pending → reminder-sent → overdue → overdue-reminder-sent, or paid.

Pre-due: a reminder fires once per threshold stage (default 3 and 1 days
before the due date). Overdue: one reminder as soon as the bill is overdue,
then every `overdue_reminder_interval_days`. Nothing fires once
reminder_count reaches max_reminders.

Delivery is a wa.me deep-link (no API key required). Opening the link is a
manual step, so a pass only renders messages and records that they went out.
A reminder whose bookkeeping commit fails is not considered sent and is
picked up again by the next pass.
"""
from __future__ import annotations

import logging
import urllib.parse
import uuid
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from enum import Enum
from typing import Dict, List, Optional, Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.config import ReminderConfig
from app.models.bill import Bill, BillStatus
from app.models.tenant import Tenant
from app.services.billing_service import business_date, refresh_overdue_bills

logger = logging.getLogger(__name__)

REMINDABLE_STATUSES = (BillStatus.PENDING, BillStatus.OVERDUE, BillStatus.PARTIAL)


class ReminderState(str, Enum):
    PENDING = "pending"
    REMINDER_SENT = "reminder_sent"
    OVERDUE = "overdue"
    OVERDUE_REMINDER_SENT = "overdue_reminder_sent"
    PAID = "paid"


# ── Message templates ─────────────────────────────────────────────────────────
DEFAULT_TEMPLATES = {
    "pre_due": (
        "🏠 *{residency} - Payment Reminder*\n\n"
        "Dear {name},\n\n"
        "Your rent payment of *₹{amount}* for Room {room} is due in *{days} day{plural}*.\n\n"
        "📅 Due Date: {date}\n"
        "💰 Amount Due: ₹{amount}\n\n"
        "Please ensure timely payment to avoid any late fees.\n\n"
        "For any queries, please contact us.\n\n"
        "Thank you,\n{residency} Team"
    ),
    "overdue": (
        "🏠 *{residency} - Payment Reminder*\n\n"
        "Dear {name},\n\n"
        "Your rent payment of *₹{amount}* for Room {room} is *OVERDUE* by *{days} day{plural}*.\n\n"
        "📅 Due Date: {date}\n"
        "💰 Amount Due: ₹{amount}\n"
        "⚠️ Late Fee: ₹{late_fee} ({late_fee_percent}%)\n\n"
        "Please make the payment immediately to avoid further penalties.\n\n"
        "For any queries, please contact us.\n\n"
        "Thank you,\n{residency} Team"
    ),
}


@dataclass
class ReminderNotice:
    bill_id: uuid.UUID
    tenant_id: uuid.UUID
    tenant_name: str
    room_number: Optional[str]
    mobile: str
    billing_month: str
    amount_due: float
    due_date: date
    days_overdue: int
    reminder_count: int
    state: ReminderState
    message: str
    whatsapp_url: Optional[str]


@dataclass
class ReminderPassResult:
    sent: List[ReminderNotice] = field(default_factory=list)
    failed: List[ReminderNotice] = field(default_factory=list)
    skipped: int = 0
    overdue_updated: int = 0


# ── Pure rules ────────────────────────────────────────────────────────────────

def days_until_due(bill: Bill, today: date) -> int:
    return (bill.due_date - today).days


def _last_reminder_date(bill: Bill) -> Optional[date]:
    sent = bill.last_reminder_sent
    if sent is None:
        return None
    # SQLite hands timestamps back without tzinfo
    if sent.tzinfo is None:
        return sent.date()
    return business_date(sent)


def _threshold_stage(days: int, thresholds: Sequence[int]) -> Optional[int]:
    """Tightest threshold the bill has reached, or None if outside every window."""
    reached = [t for t in thresholds if days <= t]
    return min(reached) if reached else None


def reminder_state(bill: Bill, today: date) -> ReminderState:
    if bill.status == BillStatus.PAID or bill.balance_due <= 0:
        return ReminderState.PAID
    last = _last_reminder_date(bill)
    if bill.status == BillStatus.OVERDUE or days_until_due(bill, today) < 0:
        if last is not None and last > bill.due_date:
            return ReminderState.OVERDUE_REMINDER_SENT
        return ReminderState.OVERDUE
    return ReminderState.REMINDER_SENT if last is not None else ReminderState.PENDING


def is_reminder_due(bill: Bill, today: date, config: ReminderConfig) -> bool:
    if bill.status not in REMINDABLE_STATUSES or bill.balance_due <= 0:
        return False
    if (bill.reminder_count or 0) >= config.max_reminders:
        return False

    days = days_until_due(bill, today)
    last = _last_reminder_date(bill)

    if days >= 0:
        stage_now = _threshold_stage(days, config.reminder_days)
        if stage_now is None:
            return False
        if last is None:
            return True
        stage_then = _threshold_stage((bill.due_date - last).days, config.reminder_days)
        return stage_then is None or stage_now < stage_then

    # Overdue
    if last is None or last <= bill.due_date:
        return True
    return (today - last).days >= config.overdue_reminder_interval_days


def late_fee(amount: float, percent: float) -> int:
    return int(round(amount * percent / 100.0))


def format_inr(amount: float) -> str:
    """Indian digit grouping without decimals: 123456 -> 1,23,456"""
    value = int(round(amount))
    sign = "-" if value < 0 else ""
    digits = str(abs(value))
    if len(digits) <= 3:
        return sign + digits
    head, tail = digits[:-3], digits[-3:]
    groups = []
    while len(head) > 2:
        groups.insert(0, head[-2:])
        head = head[:-2]
    if head:
        groups.insert(0, head)
    return sign + ",".join(groups + [tail])


def _build_message(template: str, context: dict) -> str:
    """Substitute {placeholders} in template, ignore missing keys."""
    try:
        return template.format(**context)
    except KeyError:
        msg = template
        for k, v in context.items():
            msg = msg.replace(f"{{{k}}}", str(v))
        return msg


def render_reminder_message(
    tenant_name: str,
    room_number: Optional[str],
    amount_due: float,
    due_date: date,
    today: date,
    config: ReminderConfig,
    templates: Optional[Dict[str, str]] = None,
) -> str:
    templates = templates or DEFAULT_TEMPLATES
    days = (due_date - today).days
    overdue = days < 0
    day_count = abs(days)
    context = {
        "residency": config.residency_name,
        "name": tenant_name,
        "room": room_number or "-",
        "amount": format_inr(amount_due),
        "date": due_date.strftime("%d/%m/%Y"),
        "days": day_count,
        "plural": "" if day_count == 1 else "s",
        "late_fee": format_inr(late_fee(amount_due, config.late_fee_percent)),
        "late_fee_percent": f"{config.late_fee_percent:g}",
    }
    key = "overdue" if overdue else "pre_due"
    return _build_message(templates.get(key, DEFAULT_TEMPLATES[key]), context)


def whatsapp_link(mobile: str, message: str, country_code: str = "91") -> Optional[str]:
    """Generate wa.me deep-link URL (no API required)."""
    phone_clean = "".join(c for c in str(mobile or "") if c.isdigit())
    if not phone_clean:
        return None
    if len(phone_clean) == 10 or not phone_clean.startswith(country_code):
        phone_clean = f"{country_code}{phone_clean[-10:]}"
    return f"https://wa.me/{phone_clean}?text={urllib.parse.quote(message)}"


def build_notice(bill: Bill, tenant: Optional[Tenant], today: date, config: ReminderConfig) -> ReminderNotice:
    mobile = tenant.mobile if tenant and tenant.mobile else ""
    amount_due = bill.balance_due if bill.balance_due else bill.total_amount
    message = render_reminder_message(
        bill.tenant_name, bill.room_number, amount_due, bill.due_date, today, config
    )
    days = days_until_due(bill, today)
    return ReminderNotice(
        bill_id=bill.id,
        tenant_id=bill.tenant_id,
        tenant_name=bill.tenant_name,
        room_number=bill.room_number,
        mobile=str(mobile),
        billing_month=bill.billing_month,
        amount_due=amount_due,
        due_date=bill.due_date,
        days_overdue=abs(days) if days < 0 else 0,
        reminder_count=bill.reminder_count or 0,
        state=reminder_state(bill, today),
        message=message,
        whatsapp_url=whatsapp_link(mobile, message, config.country_code) if mobile else None,
    )


# ── Database operations ───────────────────────────────────────────────────────

def _due_bills(db: Session, today: date, config: ReminderConfig) -> List[Bill]:
    bills = (
        db.query(Bill)
        .filter(Bill.status.in_(REMINDABLE_STATUSES), Bill.balance_due > 0)
        .order_by(Bill.due_date)
        .all()
    )
    return [bill for bill in bills if is_reminder_due(bill, today, config)]


def _tenants_by_id(db: Session, bills: List[Bill]) -> Dict[uuid.UUID, Tenant]:
    tenant_ids = {bill.tenant_id for bill in bills}
    if not tenant_ids:
        return {}
    tenants = db.query(Tenant).filter(Tenant.id.in_(tenant_ids)).all()
    return {t.id: t for t in tenants}


def collect_due_reminders(db: Session, config: ReminderConfig, today: Optional[date] = None) -> List[ReminderNotice]:
    """Preview reminders that would fire now. No state is changed."""
    today = today or business_date()
    bills = _due_bills(db, today, config)
    tenants = _tenants_by_id(db, bills)
    notices = [build_notice(bill, tenants.get(bill.tenant_id), today, config) for bill in bills]
    logger.info(f"[REMINDERS] Found {len(notices)} reminders to send")
    return notices


def run_reminder_pass(db: Session, config: ReminderConfig, now: Optional[datetime] = None) -> ReminderPassResult:
    """
    One scheduling pass: promote overdue bills, then record a reminder for
    every due bill with a mobile number and return the WhatsApp links.
    """
    now = now or datetime.now(timezone.utc)
    today = business_date(now)
    result = ReminderPassResult()

    if not config.enabled:
        logger.info("[REMINDERS] Reminders disabled - skipping pass")
        return result

    if config.auto_update_status:
        result.overdue_updated = refresh_overdue_bills(db, today)

    bills = _due_bills(db, today, config)
    tenants = _tenants_by_id(db, bills)

    for bill in bills:
        notice = build_notice(bill, tenants.get(bill.tenant_id), today, config)
        if not notice.whatsapp_url:
            result.skipped += 1
            logger.info(f"[REMINDERS] No mobile for {notice.tenant_name} - skipped")
            continue
        try:
            bill.reminder_count = (bill.reminder_count or 0) + 1
            bill.last_reminder_sent = now
            db.commit()
        except SQLAlchemyError as exc:
            db.rollback()
            result.failed.append(notice)
            logger.error(f"[REMINDERS] Failed to record reminder for {notice.tenant_name}: {exc}")
            continue

        notice.reminder_count = bill.reminder_count
        notice.state = reminder_state(bill, today)
        result.sent.append(notice)
        logger.info(f"[REMINDERS] WhatsApp link for {notice.tenant_name} ({notice.room_number}): {notice.whatsapp_url}")

    logger.info(
        f"[REMINDERS] Pass complete: sent={len(result.sent)} failed={len(result.failed)} "
        f"skipped={result.skipped} overdue_updated={result.overdue_updated}"
    )
    return result
