"""Stripe Checkout client for hosted card payments"""

import stripe
from starlette.concurrency import run_in_threadpool
from tuition_portal.config import settings
from tuition_portal.domain.exceptions import CheckoutError, ConfigurationError
from tuition_portal.domain.models import Charge
from tuition_portal.infrastructure.observability.metrics import checkout_failure_counter


class CheckoutClient:
    """Creates one-time Stripe Checkout sessions for a computed charge"""

    def __init__(
        self,
        api_key: str | None = None,
        success_url: str | None = None,
        currency: str | None = None,
    ):
        self.api_key = api_key if api_key is not None else settings.stripe_secret_key
        self.success_url = success_url or settings.checkout_success_url
        self.currency = currency or settings.checkout_currency

    def is_configured(self) -> bool:
        """Return True if the Stripe secret key is set and non-empty."""
        return bool((self.api_key or "").strip())

    async def create_session(
        self,
        charge: Charge,
        cancel_url: str,
        customer_email: str | None = None,
    ) -> str:
        """
        Create a Checkout session and return its hosted payment URL.

        The Stripe SDK is blocking, so the call runs in the threadpool.

        Raises:
            ConfigurationError: Stripe secret key not set
            CheckoutError: Stripe rejected the request or returned no URL
        """
        if not self.is_configured():
            raise ConfigurationError("Stripe is not configured: STRIPE_SECRET_KEY is missing or empty.")

        create_kwargs = dict(
            api_key=self.api_key,
            mode="payment",
            payment_method_types=["card"],
            line_items=[
                {
                    "price_data": {
                        "currency": self.currency,
                        "product_data": {
                            "name": charge.product_name,
                            "description": f"{charge.label} (includes 3.5% transaction fee)",
                        },
                        "unit_amount": charge.unit_amount,
                    },
                    "quantity": 1,
                }
            ],
            success_url=self.success_url,
            cancel_url=cancel_url,
            metadata={
                "dealId": charge.deal_id,
                "paymentType": charge.payment_type.value,
            },
        )
        if customer_email:
            create_kwargs["customer_email"] = customer_email

        try:
            session = await run_in_threadpool(stripe.checkout.Session.create, **create_kwargs)
        except stripe.StripeError as e:
            checkout_failure_counter.inc()
            raise CheckoutError(f"Stripe error: {e}") from e

        url = getattr(session, "url", None)
        if not url:
            checkout_failure_counter.inc()
            raise CheckoutError("Stripe returned a checkout session without a URL")
        return url
