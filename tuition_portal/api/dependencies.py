"""Dependency injection for FastAPI endpoints"""

from fastapi import Depends, Request
from tuition_portal.config import Settings, settings
from tuition_portal.infrastructure.clients.checkout import CheckoutClient
from tuition_portal.infrastructure.clients.hubspot import HubSpotClient


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_settings() -> Settings:
    return settings


def get_hubspot_client(config: Settings = Depends(get_settings)) -> HubSpotClient:
    """Provide HubSpot CRM client instance"""
    return HubSpotClient(
        token=config.hubspot_private_app_token,
        base_url=config.hubspot_api_base,
        timeout=config.http_timeout_seconds,
    )


def get_checkout_client(config: Settings = Depends(get_settings)) -> CheckoutClient:
    """Provide Stripe Checkout client instance"""
    return CheckoutClient(
        api_key=config.stripe_secret_key,
        success_url=config.checkout_success_url,
        currency=config.checkout_currency,
    )
