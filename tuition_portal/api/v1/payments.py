"""GET /v1/payments - tuition balance portal and Stripe checkout entry point"""

import time
import logging
from typing import Optional
from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import PlainTextResponse, RedirectResponse
from starlette.responses import Response

from tuition_portal.api.dependencies import (
    get_checkout_client,
    get_hubspot_client,
    get_request_id,
)
from tuition_portal.api.v1.pages import portal_url, render_message, render_selection, render_summary
from tuition_portal.domain.charges import build_charge
from tuition_portal.domain.exceptions import (
    ChargeRejected,
    CheckoutError,
    ConfigurationError,
    CRMAPIError,
)
from tuition_portal.domain.models import PaymentType
from tuition_portal.infrastructure.clients.checkout import CheckoutClient
from tuition_portal.infrastructure.clients.hubspot import HubSpotClient
from tuition_portal.infrastructure.observability.logging import log_checkout, log_rejection
from tuition_portal.infrastructure.observability.metrics import (
    crm_failure_counter,
    record_checkout,
    record_rejection,
)

router = APIRouter()


@router.get("/payments")
async def payments(
    request: Request,
    email: Optional[str] = Query(None, description="Customer email for contact lookup"),
    deal_id: Optional[str] = Query(None, alias="dealId", description="HubSpot deal id"),
    checkout: Optional[str] = Query(None, description='"1" starts a Stripe checkout'),
    payment_type: Optional[str] = Query(None, alias="type", description="appfee | deposit | remaining | custom"),
    amount: Optional[str] = Query(None, description="Custom payment amount"),
    crm: HubSpotClient = Depends(get_hubspot_client),
    checkout_client: CheckoutClient = Depends(get_checkout_client),
):
    """
    Look up a customer's program balance and take card payments.

    Flow:
    - checkout=1: read deal → compute balance → resolve payment type →
      add surcharge → create Stripe session → 303 redirect
    - otherwise: read deal by id, or contact by email then its deals →
      render summary (one deal) or selection (several deals)
    """
    request_id = get_request_id(request)
    email = email or None

    if not crm.is_configured():
        logging.error("HubSpot token missing", extra={"request_id": request_id})
        return PlainTextResponse(
            "HubSpot token not configured. Please set HUBSPOT_PRIVATE_APP_TOKEN.",
            status_code=500,
        )

    try:
        if checkout == "1":
            return await _checkout(
                request, request_id, crm, checkout_client, deal_id, email, payment_type, amount
            )
        return await _portal(request, crm, deal_id, email)

    except ConfigurationError as e:
        logging.error(f"Configuration error: {e}", extra={"request_id": request_id})
        return PlainTextResponse(str(e), status_code=500)

    except CRMAPIError as e:
        crm_failure_counter.inc()
        logging.error(f"HubSpot API error: {e}", extra={"request_id": request_id})
        return PlainTextResponse("Unexpected error", status_code=500)

    except CheckoutError as e:
        logging.error(f"Stripe error: {e}", extra={"request_id": request_id})
        return PlainTextResponse("Unexpected error", status_code=500)

    except Exception as e:
        logging.exception(f"Unexpected error: {e}", extra={"request_id": request_id})
        return PlainTextResponse("Unexpected error", status_code=500)


async def _checkout(
    request: Request,
    request_id: str,
    crm: HubSpotClient,
    checkout_client: CheckoutClient,
    deal_id: Optional[str],
    email: Optional[str],
    payment_type_param: Optional[str],
    amount: Optional[str],
) -> Response:
    start_time = time.time()
    payment_type = PaymentType.from_param(payment_type_param)

    if not checkout_client.is_configured():
        return PlainTextResponse(
            "Stripe is not configured. Please set STRIPE_SECRET_KEY.", status_code=500
        )

    if not deal_id:
        return PlainTextResponse("Missing dealId for checkout.", status_code=400)

    deal = await crm.get_deal(deal_id)
    if deal is None:
        return PlainTextResponse("Deal not found.", status_code=404)

    try:
        charge = build_charge(deal, payment_type, amount)
    except ChargeRejected as e:
        record_rejection(payment_type.value, e.reason)
        log_rejection(request_id, deal_id, payment_type.value, e.reason)
        return PlainTextResponse(str(e), status_code=400)

    # Abandoned or failed payments land back on the same balance view
    cancel_url = portal_url(request.url, dealId=deal_id, email=email)
    session_url = await checkout_client.create_session(charge, cancel_url, customer_email=email)

    duration_ms = (time.time() - start_time) * 1000
    record_checkout(payment_type.value, charge.total_amount)
    log_checkout(request_id, deal_id, payment_type.value, charge.total_amount, duration_ms)

    return RedirectResponse(session_url, status_code=303)


async def _portal(
    request: Request,
    crm: HubSpotClient,
    deal_id: Optional[str],
    email: Optional[str],
) -> Response:
    if deal_id:
        deal = await crm.get_deal(deal_id)
        if deal is None:
            return render_message(
                request, "Program not found", "Could not find that program / deal.", status_code=404
            )
        return render_summary(request, deal, email)

    if not email:
        return render_message(
            request,
            "Missing email",
            "Please access this page via the portal form so we know which account to look up.",
            status_code=400,
        )

    contact = await crm.find_contact_by_email(email)
    if contact is None:
        return render_message(request, "No account found", "No records for", 404, highlight=email)

    deals = await crm.get_deals_for_contact(contact.contact_id)
    if not deals:
        return render_message(
            request,
            "No programs found",
            "We found your contact but no payment records yet.",
            status_code=404,
        )

    if len(deals) == 1:
        return render_summary(request, deals[0], email)

    return render_selection(request, deals, email)
