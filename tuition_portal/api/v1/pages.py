"""HTML pages for the payment portal, rendered with Jinja2"""

from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional
from fastapi import Request
from fastapi.templating import Jinja2Templates
from starlette.datastructures import URL
from starlette.responses import Response

from tuition_portal.domain.balance import calculate_balance
from tuition_portal.domain.charges import (
    MIN_CUSTOM_PAYMENT,
    apply_surcharge,
    available_payment_types,
    resolve_payment_type,
)
from tuition_portal.domain.models import Deal, PaymentType, Surcharge
from tuition_portal.utils.money import format_currency

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"

templates = Jinja2Templates(directory=str(TEMPLATES_DIR))
templates.env.filters["currency"] = format_currency


@dataclass
class PaymentAction:
    """A payment button on the summary page"""

    payment_type: PaymentType
    title: str
    url: str
    surcharge: Surcharge


def portal_url(url: URL, **params: Optional[str]) -> str:
    """Link back into the portal endpoint with the given query, blanks dropped"""
    query = {key: value for key, value in params.items() if value}
    return str(url.replace_query_params(**query))


def _action_title(payment_type: PaymentType, surcharge: Surcharge) -> str:
    if payment_type == PaymentType.APPLICATION_FEE:
        return "Pay Application Fee"
    if payment_type == PaymentType.DEPOSIT:
        return f"Pay Deposit ({format_currency(surcharge.base_amount)})"
    return "Pay Remaining Balance"


def render_summary(request: Request, deal: Deal, email: Optional[str]) -> Response:
    """Balance summary with payment buttons and payment history for one deal"""
    balance = calculate_balance(deal)
    offered = available_payment_types(balance)

    actions: List[PaymentAction] = []
    for payment_type in offered:
        if payment_type == PaymentType.CUSTOM:
            continue
        surcharge = apply_surcharge(resolve_payment_type(payment_type, balance).base_amount)
        actions.append(
            PaymentAction(
                payment_type=payment_type,
                title=_action_title(payment_type, surcharge),
                url=portal_url(
                    request.url,
                    checkout="1",
                    type=payment_type.value,
                    dealId=deal.deal_id,
                    email=email,
                ),
                surcharge=surcharge,
            )
        )

    return templates.TemplateResponse(
        request,
        "summary.html",
        {
            "title": "Payment Summary",
            "program_name": deal.deal_name or "Your Program",
            "deal": deal,
            "balance": balance,
            "actions": actions,
            "show_custom": PaymentType.CUSTOM in offered,
            "custom_min": MIN_CUSTOM_PAYMENT,
            "custom_max": balance.remaining_balance,
            "form_action": str(request.url.replace(query="")),
            "email": email,
        },
    )


def render_selection(request: Request, deals: List[Deal], email: Optional[str]) -> Response:
    """Program picker shown when a contact has several deals"""
    cards = [
        {
            "name": deal.deal_name or "Program",
            "tuition_amount": deal.tuition_amount,
            "url": portal_url(request.url, dealId=deal.deal_id, email=email),
        }
        for deal in deals
    ]
    return templates.TemplateResponse(
        request,
        "selection.html",
        {"title": "Select a Program", "cards": cards},
    )


def render_message(
    request: Request,
    title: str,
    message: str,
    status_code: int,
    highlight: Optional[str] = None,
) -> Response:
    """Plain informational page (missing email, no account, no programs)"""
    return templates.TemplateResponse(
        request,
        "message.html",
        {"title": title, "message": message, "highlight": highlight},
        status_code=status_code,
    )
