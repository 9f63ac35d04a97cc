"""Pytest fixtures for testing"""

import pytest
from decimal import Decimal
from fastapi import FastAPI
from fastapi.testclient import TestClient
from tuition_portal.api.dependencies import get_settings
from tuition_portal.api.main import create_app
from tuition_portal.config import Settings
from tuition_portal.domain.models import Deal, PaymentRecord


@pytest.fixture
def test_settings() -> Settings:
    """Settings with both collaborators configured, ignoring any local .env"""
    return Settings(
        _env_file=None,
        hubspot_private_app_token="pat-test-token",
        hubspot_api_base="http://hubspot.test",
        stripe_secret_key="sk_test_123",
        checkout_success_url="https://example.org/success?session_id={CHECKOUT_SESSION_ID}",
    )


@pytest.fixture
def app(test_settings: Settings) -> FastAPI:
    app = create_app()
    app.dependency_overrides[get_settings] = lambda: test_settings
    return app


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    """Create FastAPI test client with test settings"""
    return TestClient(app)


def make_deal(
    tuition: str | None = "10000",
    paid: str | None = "0",
    payments: list[PaymentRecord] | None = None,
    deal_id: str = "9001",
    name: str | None = "Costa Rica Semester",
) -> Deal:
    return Deal(
        deal_id=deal_id,
        deal_name=name,
        tuition_amount=Decimal(tuition) if tuition is not None else None,
        total_amount_paid=Decimal(paid) if paid is not None else None,
        payments=payments or [],
    )


@pytest.fixture
def new_deal() -> Deal:
    """Nothing paid yet"""
    return make_deal(paid="0")


@pytest.fixture
def deposit_paid_deal() -> Deal:
    """Deposit target reached"""
    return make_deal(
        paid="2500",
        payments=[
            PaymentRecord(Decimal("250"), "pi_app_0001", "2026-01-15"),
            PaymentRecord(Decimal("2250"), "pi_dep_0002", "2026-02-01"),
        ],
    )


@pytest.fixture
def paid_in_full_deal() -> Deal:
    return make_deal(paid="10000")


@pytest.fixture
def deal_factory():
    """Build a Deal from string amounts"""
    return make_deal
