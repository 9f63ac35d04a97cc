"""Charge resolution - payment type rules and card surcharge"""

from decimal import Decimal, ROUND_HALF_UP
from typing import List, Optional
from tuition_portal.domain.balance import calculate_balance, parse_amount
from tuition_portal.domain.exceptions import (
    AmountBelowMinimumError,
    AmountExceedsBalanceError,
    InvalidAmountError,
    NoBalanceDueError,
)
from tuition_portal.domain.models import (
    Balance,
    Charge,
    Deal,
    PaymentType,
    ResolvedPayment,
    Surcharge,
)
from tuition_portal.utils.money import format_currency

APPLICATION_FEE = Decimal("250")
MIN_CUSTOM_PAYMENT = Decimal("250")
SURCHARGE_RATE = Decimal("0.035")
# Deposit button disappears once this much has been paid (below DEPOSIT_TARGET)
DEPOSIT_BUTTON_THRESHOLD = Decimal("2250")

CENT = Decimal("0.01")

LABELS = {
    PaymentType.APPLICATION_FEE: "Application Fee",
    PaymentType.DEPOSIT: "Program Deposit",
    PaymentType.REMAINING_BALANCE: "Remaining Program Balance",
    PaymentType.CUSTOM: "Custom Payment",
}


def resolve_payment_type(
    payment_type: PaymentType,
    balance: Balance,
    custom_amount: Optional[str] = None,
) -> ResolvedPayment:
    """
    Map a payment type to its base amount and label.

    Decision table:
    - appfee:    fixed 250, unless the program is already paid in full
    - deposit:   deposit shortfall (may be 0)
    - remaining: remaining balance
    - custom:    requested amount, 250 <= amount <= remaining balance

    After resolution the base amount must be a positive number, otherwise
    NoBalanceDueError is raised for every type.

    Raises:
        InvalidAmountError: custom amount missing or not a number
        AmountBelowMinimumError: custom amount under the minimum payment
        AmountExceedsBalanceError: custom amount over the remaining balance
        NoBalanceDueError: nothing payable for the requested type
    """
    if payment_type == PaymentType.APPLICATION_FEE:
        # A fully paid program owes nothing, not even the application fee
        if balance.remaining_balance is not None and balance.remaining_balance <= 0:
            raise NoBalanceDueError("No outstanding balance to pay.")
        base = APPLICATION_FEE
    elif payment_type == PaymentType.DEPOSIT:
        base = balance.deposit_shortfall
    elif payment_type == PaymentType.CUSTOM:
        base = _validate_custom_amount(custom_amount, balance)
    else:
        base = balance.remaining_balance

    if base is None or not base.is_finite() or base <= 0:
        raise NoBalanceDueError("No outstanding balance to pay.")

    return ResolvedPayment(base_amount=base, label=LABELS[payment_type])


def _validate_custom_amount(custom_amount: Optional[str], balance: Balance) -> Decimal:
    amount = parse_amount(custom_amount)
    if amount is None:
        raise InvalidAmountError("Please enter a valid payment amount.")
    if amount < MIN_CUSTOM_PAYMENT:
        raise AmountBelowMinimumError(
            f"The minimum payment is {format_currency(MIN_CUSTOM_PAYMENT)}."
        )

    remaining = balance.remaining_balance
    if remaining is None or remaining <= 0:
        raise NoBalanceDueError("No outstanding balance to pay.")
    # Compare unrounded values so a payment of exactly the balance is accepted
    if amount > remaining:
        raise AmountExceedsBalanceError(
            f"The amount cannot exceed your remaining balance of {format_currency(remaining)}."
        )
    return amount


def apply_surcharge(base_amount: Decimal) -> Surcharge:
    """
    Add the 3.5% card fee.

    Fee and total are rounded half-up to cents independently, so
    total == round(base * 1.035, 2).
    """
    fee = base_amount * SURCHARGE_RATE
    return Surcharge(
        base_amount=base_amount,
        fee_amount=fee.quantize(CENT, rounding=ROUND_HALF_UP),
        total_amount=(base_amount + fee).quantize(CENT, rounding=ROUND_HALF_UP),
    )


def build_charge(
    deal: Deal,
    payment_type: PaymentType,
    custom_amount: Optional[str] = None,
) -> Charge:
    """
    Main entry point: compute the chargeable amount for a checkout request.

    Returns a Charge with base, fee and total; raises a ChargeRejected
    subclass when the payment is not allowed.
    """
    balance = calculate_balance(deal)
    resolved = resolve_payment_type(payment_type, balance, custom_amount)
    surcharge = apply_surcharge(resolved.base_amount)

    return Charge(
        deal_id=deal.deal_id,
        product_name=deal.deal_name or "Program payment",
        payment_type=payment_type,
        label=resolved.label,
        base_amount=surcharge.base_amount,
        fee_amount=surcharge.fee_amount,
        total_amount=surcharge.total_amount,
    )


def available_payment_types(balance: Balance) -> List[PaymentType]:
    """
    Payment buttons to offer on the summary page.

    - application fee: nothing paid yet and the program is not free
    - deposit: something paid, but less than the deposit button threshold
    - remaining: a positive balance remains
    - custom: remaining balance is at least the minimum payment
    """
    options = []
    paid = balance.total_paid
    remaining = balance.remaining_balance

    if paid == 0 and (remaining is None or remaining > 0):
        options.append(PaymentType.APPLICATION_FEE)
    if 0 < paid < DEPOSIT_BUTTON_THRESHOLD and balance.deposit_shortfall > 0:
        options.append(PaymentType.DEPOSIT)
    if remaining is not None and remaining > 0:
        options.append(PaymentType.REMAINING_BALANCE)
    if remaining is not None and remaining >= MIN_CUSTOM_PAYMENT:
        options.append(PaymentType.CUSTOM)

    return options
