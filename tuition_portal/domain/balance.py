"""Balance calculation - tuition, amount paid and what is still owed on a deal"""

from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional
from tuition_portal.domain.models import Balance, Deal, PaymentRecord

DEPOSIT_TARGET = Decimal("2500")

# CRM property holding each itemized payment, "<amount>, <transaction id>, <date>"
PAYMENT_FIELDS = ["payment_1", "payment_2", "payment_3", "payment_4", "payment_5"]


def parse_amount(value: Any) -> Optional[Decimal]:
    """
    Parse a CRM numeric field into a Decimal.

    Returns None for anything that is not a finite number (missing, blank,
    "abc", "NaN", "Infinity"). None means "unknown" and is never coerced to 0.
    """
    if value is None:
        return None
    text = str(value).strip()
    if not text:
        return None
    try:
        amount = Decimal(text)
    except InvalidOperation:
        return None
    if not amount.is_finite():
        return None
    return amount


def parse_payment_record(raw: Optional[str]) -> Optional[PaymentRecord]:
    """
    Parse one itemized payment slot.

    A missing slot or a slot whose leading amount does not parse is dropped
    (returns None). Transaction id and date default to "" when absent;
    fields past the third are ignored.
    """
    if not raw:
        return None

    parts = [part.strip() for part in raw.split(",")]
    amount = parse_amount(parts[0])
    if amount is None:
        return None

    return PaymentRecord(
        amount=amount,
        transaction_id=parts[1] if len(parts) > 1 else "",
        date=parts[2] if len(parts) > 2 else "",
    )


def deal_from_properties(deal_id: str, properties: Dict[str, Any]) -> Deal:
    """Build a Deal from raw HubSpot deal properties"""
    payments: List[PaymentRecord] = []
    for key in PAYMENT_FIELDS:
        record = parse_payment_record(properties.get(key))
        if record is not None:
            payments.append(record)

    return Deal(
        deal_id=str(deal_id),
        deal_name=properties.get("dealname") or None,
        tuition_amount=parse_amount(properties.get("amount")),
        total_amount_paid=parse_amount(properties.get("total_amount_paid")),
        payments=payments,
    )


def calculate_balance(deal: Deal) -> Balance:
    """
    Derive tuition, total paid, remaining balance and deposit shortfall.

    Rules:
    - total_amount_paid is authoritative when present; only when it is
      missing (or unparsable) are the itemized payments summed instead
    - remaining balance is unknown (None) when tuition is unknown
    - deposit shortfall is clamped at zero
    - no rounding; amounts stay exact until the surcharge step
    """
    if deal.total_amount_paid is not None:
        total_paid = deal.total_amount_paid
    else:
        total_paid = sum((p.amount for p in deal.payments), Decimal("0"))

    remaining = None
    if deal.tuition_amount is not None:
        remaining = deal.tuition_amount - total_paid

    deposit_shortfall = max(Decimal("0"), DEPOSIT_TARGET - total_paid)

    return Balance(
        tuition_amount=deal.tuition_amount,
        total_paid=total_paid,
        remaining_balance=remaining,
        deposit_shortfall=deposit_shortfall,
    )
