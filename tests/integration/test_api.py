"""Integration tests for API endpoints"""

import pytest
from decimal import Decimal
from unittest.mock import AsyncMock, patch
from urllib.parse import parse_qs, urlparse
from fastapi import FastAPI
from fastapi.testclient import TestClient
from tuition_portal.api.dependencies import get_settings
from tuition_portal.config import Settings
from tuition_portal.domain.exceptions import CheckoutError, CRMAPIError
from tuition_portal.domain.models import Contact, Deal, PaymentRecord

HUBSPOT = "tuition_portal.infrastructure.clients.hubspot.HubSpotClient"
CREATE_SESSION = "tuition_portal.infrastructure.clients.checkout.CheckoutClient.create_session"
SESSION_URL = "https://checkout.stripe.com/c/pay/cs_test_abc"


def test_health_endpoint(client: TestClient):
    """Test health check endpoint"""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_request_id_header(client: TestClient):
    response = client.get("/health", headers={"X-Request-ID": "req-123"})
    assert response.headers["X-Request-ID"] == "req-123"


@patch(f"{HUBSPOT}.get_deal")
@patch(CREATE_SESSION)
def test_metrics_endpoint(mock_session: AsyncMock, mock_get_deal: AsyncMock, client: TestClient, new_deal: Deal):
    """Test Prometheus metrics endpoint"""
    mock_get_deal.return_value = new_deal
    mock_session.return_value = SESSION_URL
    client.get("/v1/payments?checkout=1&type=appfee&dealId=9001", follow_redirects=False)

    response = client.get("/metrics")
    assert response.status_code == 200
    assert "tuition_checkout_total" in response.text


def test_missing_hubspot_token(app: FastAPI, client: TestClient, test_settings: Settings):
    app.dependency_overrides[get_settings] = lambda: test_settings.model_copy(
        update={"hubspot_private_app_token": ""}
    )
    response = client.get("/v1/payments?email=sam@example.com")

    assert response.status_code == 500
    assert response.headers["content-type"].startswith("text/plain")
    assert "HUBSPOT_PRIVATE_APP_TOKEN" in response.text


@patch(f"{HUBSPOT}.find_contact_by_email")
def test_blank_hubspot_token_is_configuration_error(
    mock_find: AsyncMock, app: FastAPI, client: TestClient, test_settings: Settings
):
    app.dependency_overrides[get_settings] = lambda: test_settings.model_copy(
        update={"hubspot_private_app_token": "   "}
    )
    response = client.get("/v1/payments?email=sam@example.com")

    assert response.status_code == 500
    assert "HUBSPOT_PRIVATE_APP_TOKEN" in response.text
    mock_find.assert_not_called()


# ---------- checkout ----------


@patch(f"{HUBSPOT}.get_deal")
@patch(CREATE_SESSION)
def test_checkout_application_fee_redirects(
    mock_session: AsyncMock, mock_get_deal: AsyncMock, client: TestClient, new_deal: Deal
):
    mock_get_deal.return_value = new_deal
    mock_session.return_value = SESSION_URL

    response = client.get(
        "/v1/payments",
        params={"checkout": "1", "type": "appfee", "dealId": "9001", "email": "sam@example.com"},
        follow_redirects=False,
    )

    assert response.status_code == 303
    assert response.headers["location"] == SESSION_URL
    assert response.content == b""

    charge, cancel_url = mock_session.call_args.args
    assert charge.total_amount == Decimal("258.75")
    assert charge.unit_amount == 25875
    assert charge.payment_type.value == "appfee"
    assert mock_session.call_args.kwargs["customer_email"] == "sam@example.com"

    cancel = urlparse(cancel_url)
    assert cancel.path == "/v1/payments"
    assert parse_qs(cancel.query) == {"dealId": ["9001"], "email": ["sam@example.com"]}


@patch(f"{HUBSPOT}.get_deal")
@patch(CREATE_SESSION)
def test_checkout_defaults_to_remaining_balance(
    mock_session: AsyncMock, mock_get_deal: AsyncMock, client: TestClient, deposit_paid_deal: Deal
):
    mock_get_deal.return_value = deposit_paid_deal
    mock_session.return_value = SESSION_URL

    response = client.get("/v1/payments?checkout=1&dealId=9001", follow_redirects=False)

    assert response.status_code == 303
    charge, cancel_url = mock_session.call_args.args
    assert charge.label == "Remaining Program Balance"
    assert charge.total_amount == Decimal("7762.50")
    assert mock_session.call_args.kwargs["customer_email"] is None
    assert parse_qs(urlparse(cancel_url).query) == {"dealId": ["9001"]}


@patch(f"{HUBSPOT}.get_deal")
@patch(CREATE_SESSION)
def test_checkout_custom_amount(
    mock_session: AsyncMock, mock_get_deal: AsyncMock, client: TestClient, deposit_paid_deal: Deal
):
    mock_get_deal.return_value = deposit_paid_deal
    mock_session.return_value = SESSION_URL

    response = client.get(
        "/v1/payments?checkout=1&type=custom&amount=1000&dealId=9001", follow_redirects=False
    )

    assert response.status_code == 303
    charge = mock_session.call_args.args[0]
    assert charge.base_amount == Decimal("1000")
    assert charge.total_amount == Decimal("1035.00")


def test_checkout_missing_deal_id(client: TestClient):
    response = client.get("/v1/payments?checkout=1&type=appfee")
    assert response.status_code == 400
    assert response.text == "Missing dealId for checkout."


def test_checkout_missing_stripe_key(app: FastAPI, client: TestClient, test_settings: Settings):
    app.dependency_overrides[get_settings] = lambda: test_settings.model_copy(update={"stripe_secret_key": ""})
    response = client.get("/v1/payments?checkout=1&dealId=9001")

    assert response.status_code == 500
    assert "STRIPE_SECRET_KEY" in response.text


@patch(CREATE_SESSION)
def test_checkout_path_like_deal_id_not_found(mock_session: AsyncMock, client: TestClient):
    response = client.get(
        "/v1/payments",
        params={"checkout": "1", "dealId": "../../contacts/101"},
        follow_redirects=False,
    )

    assert response.status_code == 404
    assert response.text == "Deal not found."
    mock_session.assert_not_called()


@patch(f"{HUBSPOT}.get_deal")
@patch(CREATE_SESSION)
def test_checkout_deal_not_found(mock_session: AsyncMock, mock_get_deal: AsyncMock, client: TestClient):
    mock_get_deal.return_value = None

    response = client.get("/v1/payments?checkout=1&dealId=404404", follow_redirects=False)

    assert response.status_code == 404
    assert response.text == "Deal not found."
    mock_session.assert_not_called()


@pytest.mark.parametrize(
    "query, message",
    [
        ("type=custom&amount=100", "minimum payment"),
        ("type=custom&amount=8000", "cannot exceed"),
        ("type=custom&amount=lots", "valid payment amount"),
        ("type=custom", "valid payment amount"),
        ("type=deposit", "No outstanding balance"),
    ],
)
@patch(f"{HUBSPOT}.get_deal")
@patch(CREATE_SESSION)
def test_checkout_rejections(
    mock_session: AsyncMock,
    mock_get_deal: AsyncMock,
    client: TestClient,
    deposit_paid_deal: Deal,
    query: str,
    message: str,
):
    mock_get_deal.return_value = deposit_paid_deal

    response = client.get(f"/v1/payments?checkout=1&dealId=9001&{query}", follow_redirects=False)

    assert response.status_code == 400
    assert message in response.text
    mock_session.assert_not_called()


@pytest.mark.parametrize("payment_type", ["appfee", "deposit", "remaining"])
@patch(f"{HUBSPOT}.get_deal")
@patch(CREATE_SESSION)
def test_checkout_paid_in_full_rejected(
    mock_session: AsyncMock,
    mock_get_deal: AsyncMock,
    client: TestClient,
    paid_in_full_deal: Deal,
    payment_type: str,
):
    mock_get_deal.return_value = paid_in_full_deal

    response = client.get(f"/v1/payments?checkout=1&dealId=9001&type={payment_type}", follow_redirects=False)

    assert response.status_code == 400
    assert response.text == "No outstanding balance to pay."
    mock_session.assert_not_called()


@patch(f"{HUBSPOT}.get_deal")
@patch(CREATE_SESSION)
def test_checkout_stripe_failure(
    mock_session: AsyncMock, mock_get_deal: AsyncMock, client: TestClient, new_deal: Deal
):
    mock_get_deal.return_value = new_deal
    mock_session.side_effect = CheckoutError("Stripe error: card_declined")

    response = client.get("/v1/payments?checkout=1&dealId=9001&type=appfee", follow_redirects=False)

    assert response.status_code == 500
    assert response.text == "Unexpected error"


@patch(f"{HUBSPOT}.get_deal")
def test_checkout_crm_failure(mock_get_deal: AsyncMock, client: TestClient):
    mock_get_deal.side_effect = CRMAPIError("HubSpot API error: 502")

    response = client.get("/v1/payments?checkout=1&dealId=9001", follow_redirects=False)

    assert response.status_code == 500
    assert response.text == "Unexpected error"


# ---------- portal pages ----------


@patch(f"{HUBSPOT}.get_deal")
def test_summary_page_nothing_paid(mock_get_deal: AsyncMock, client: TestClient, new_deal: Deal):
    mock_get_deal.return_value = new_deal

    response = client.get("/v1/payments?dealId=9001&email=sam@example.com")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/html")
    html = response.text
    assert "Costa Rica Semester" in html
    assert "$10,000.00" in html
    assert "Pay Application Fee" in html
    assert "$258.75" in html
    assert "Pay Deposit" not in html
    assert "Pay Remaining Balance" in html
    assert "$10,350.00" in html
    assert "type=appfee" in html
    assert "email=sam%40example.com" in html
    assert 'name="amount"' in html
    assert "No payments yet." in html


@patch(f"{HUBSPOT}.get_deal")
def test_summary_page_partial_payment_offers_deposit(
    mock_get_deal: AsyncMock, client: TestClient, deal_factory
):
    mock_get_deal.return_value = deal_factory(
        paid=None, payments=[PaymentRecord(Decimal("1000"), "pi_dep_1", "2026-02-01")]
    )

    html = client.get("/v1/payments?dealId=9001").text

    assert "Pay Application Fee" not in html
    assert "Pay Deposit ($1,500.00)" in html
    assert "$1,552.50" in html
    assert "pi_dep_1" in html
    assert "2026-02-01" in html


@patch(f"{HUBSPOT}.get_deal")
def test_summary_page_deposit_paid(mock_get_deal: AsyncMock, client: TestClient, deposit_paid_deal: Deal):
    mock_get_deal.return_value = deposit_paid_deal

    html = client.get("/v1/payments?dealId=9001").text

    assert "Pay Deposit" not in html
    assert "Pay Remaining Balance" in html
    assert "$7,500.00" in html
    assert "$262.50" in html
    assert "$7,762.50" in html
    assert "pi_app_0001" in html


@patch(f"{HUBSPOT}.get_deal")
def test_summary_page_paid_in_full(mock_get_deal: AsyncMock, client: TestClient, paid_in_full_deal: Deal):
    mock_get_deal.return_value = paid_in_full_deal

    html = client.get("/v1/payments?dealId=9001").text

    assert "checkout=1" not in html
    assert 'name="amount"' not in html
    assert "$0.00" in html


@patch(f"{HUBSPOT}.get_deal")
def test_summary_page_escapes_deal_name(mock_get_deal: AsyncMock, client: TestClient, deal_factory):
    mock_get_deal.return_value = deal_factory(name="<script>alert(1)</script>")

    html = client.get("/v1/payments?dealId=9001").text

    assert "<script>alert(1)</script>" not in html
    assert "&lt;script&gt;" in html


@patch(f"{HUBSPOT}.get_deal")
def test_summary_deal_not_found(mock_get_deal: AsyncMock, client: TestClient):
    mock_get_deal.return_value = None

    response = client.get("/v1/payments?dealId=404404")

    assert response.status_code == 404
    assert "Could not find that program" in response.text


def test_missing_email(client: TestClient):
    response = client.get("/v1/payments")

    assert response.status_code == 400
    assert "Missing email" in response.text


@patch(f"{HUBSPOT}.find_contact_by_email")
def test_no_account_found(mock_find: AsyncMock, client: TestClient):
    mock_find.return_value = None

    response = client.get("/v1/payments?email=nobody@example.com")

    assert response.status_code == 404
    assert "No account found" in response.text
    assert "<strong>nobody@example.com</strong>" in response.text


@patch(f"{HUBSPOT}.find_contact_by_email")
@patch(f"{HUBSPOT}.get_deals_for_contact")
def test_no_programs_found(mock_deals: AsyncMock, mock_find: AsyncMock, client: TestClient):
    mock_find.return_value = Contact(contact_id="104", email="robin@example.com")
    mock_deals.return_value = []

    response = client.get("/v1/payments?email=robin@example.com")

    assert response.status_code == 404
    assert "No programs found" in response.text
    mock_deals.assert_awaited_once_with("104")


@patch(f"{HUBSPOT}.find_contact_by_email")
@patch(f"{HUBSPOT}.get_deals_for_contact")
def test_single_deal_renders_summary(
    mock_deals: AsyncMock, mock_find: AsyncMock, client: TestClient, new_deal: Deal
):
    mock_find.return_value = Contact(contact_id="101")
    mock_deals.return_value = [new_deal]

    response = client.get("/v1/payments?email=sam@example.com")

    assert response.status_code == 200
    assert "Payment History" in response.text
    assert "email=sam%40example.com" in response.text


@patch(f"{HUBSPOT}.find_contact_by_email")
@patch(f"{HUBSPOT}.get_deals_for_contact")
def test_multiple_deals_render_selection(
    mock_deals: AsyncMock, mock_find: AsyncMock, client: TestClient, deal_factory
):
    mock_find.return_value = Contact(contact_id="103")
    mock_deals.return_value = [
        deal_factory(deal_id="9003", name="Ecuador Summer", tuition="6000"),
        deal_factory(deal_id="9004", name=None, tuition=None),
    ]

    response = client.get("/v1/payments?email=jordan@example.com")

    assert response.status_code == 200
    html = response.text
    assert "Select your program" in html
    assert "Ecuador Summer" in html
    assert "Program fee: $6,000.00" in html
    assert "dealId=9003&amp;email=jordan%40example.com" in html
    assert "dealId=9004&amp;email=jordan%40example.com" in html
    assert html.count("Program fee:") == 1


@patch(f"{HUBSPOT}.find_contact_by_email")
def test_portal_crm_failure(mock_find: AsyncMock, client: TestClient):
    mock_find.side_effect = CRMAPIError("HubSpot API error: 500")

    response = client.get("/v1/payments?email=sam@example.com")

    assert response.status_code == 500
    assert response.text == "Unexpected error"
