"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import List, Optional
from tuition_portal.utils.money import to_minor_units


class PaymentType(str, Enum):
    """Kinds of payment a customer can start from the portal"""

    APPLICATION_FEE = "appfee"
    DEPOSIT = "deposit"
    REMAINING_BALANCE = "remaining"
    CUSTOM = "custom"

    @classmethod
    def from_param(cls, value: Optional[str]) -> "PaymentType":
        """Map the `type` query parameter; absent or unknown means remaining balance"""
        try:
            return cls((value or "").strip().lower())
        except ValueError:
            return cls.REMAINING_BALANCE


@dataclass(frozen=True)
class PaymentRecord:
    """One itemized payment stored on a deal"""

    amount: Decimal
    transaction_id: str = ""
    date: str = ""


@dataclass
class Deal:
    """Program enrollment read from the CRM"""

    deal_id: str
    deal_name: Optional[str] = None
    tuition_amount: Optional[Decimal] = None  # None = unknown
    total_amount_paid: Optional[Decimal] = None
    payments: List[PaymentRecord] = field(default_factory=list)


@dataclass
class Contact:
    """CRM contact matched by email"""

    contact_id: str
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None


@dataclass
class Balance:
    """Derived financial position of a deal"""

    tuition_amount: Optional[Decimal]
    total_paid: Decimal
    remaining_balance: Optional[Decimal]
    deposit_shortfall: Decimal


@dataclass
class ResolvedPayment:
    """Base amount and label for a requested payment type"""

    base_amount: Decimal
    label: str


@dataclass
class Surcharge:
    """Card processing fee breakdown, rounded to cents"""

    base_amount: Decimal
    fee_amount: Decimal
    total_amount: Decimal


@dataclass
class Charge:
    """Validated charge ready to submit to the checkout provider"""

    deal_id: str
    product_name: str
    payment_type: PaymentType
    label: str
    base_amount: Decimal
    fee_amount: Decimal
    total_amount: Decimal

    @property
    def unit_amount(self) -> int:
        """Total in minor currency units (cents)"""
        return to_minor_units(self.total_amount)
