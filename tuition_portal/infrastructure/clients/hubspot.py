"""HubSpot CRM HTTP client for contact and deal lookups"""

import logging
import httpx
from typing import Any, Dict, List, Optional
from urllib.parse import quote
from tuition_portal.config import settings
from tuition_portal.domain.balance import PAYMENT_FIELDS, deal_from_properties
from tuition_portal.domain.exceptions import CRMAPIError
from tuition_portal.domain.models import Contact, Deal

DEAL_PROPERTIES = ["dealname", "amount", "total_amount_paid", *PAYMENT_FIELDS]

logger = logging.getLogger(__name__)


class HubSpotClient:
    """Client for the HubSpot CRM v3/v4 object APIs"""

    def __init__(
        self,
        token: str | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.token = token if token is not None else settings.hubspot_private_app_token
        self.base_url = (base_url or settings.hubspot_api_base).rstrip("/")
        self.timeout = timeout or settings.http_timeout_seconds
        self.transport = transport

    def is_configured(self) -> bool:
        return bool(self.token.strip())

    async def _request(
        self,
        method: str,
        path: str,
        allow_not_found: bool = False,
        **kwargs: Any,
    ) -> Optional[Dict[str, Any]]:
        """
        Send an authenticated request and return the decoded JSON body.

        Raises:
            CRMAPIError: On timeout, network failure or non-success status
        """
        headers = {"Authorization": f"Bearer {self.token}"}
        async with httpx.AsyncClient(
            base_url=self.base_url, timeout=self.timeout, transport=self.transport
        ) as client:
            try:
                response = await client.request(method, path, headers=headers, **kwargs)
                if allow_not_found and response.status_code == 404:
                    return None
                response.raise_for_status()
                return response.json()

            except httpx.TimeoutException as e:
                raise CRMAPIError(f"HubSpot API timeout after {self.timeout}s") from e
            except httpx.HTTPStatusError as e:
                logger.error(
                    "HubSpot error",
                    extra={"status": e.response.status_code, "body": e.response.text[:500]},
                )
                raise CRMAPIError(f"HubSpot API error: {e.response.status_code}") from e
            except httpx.RequestError as e:
                raise CRMAPIError(f"HubSpot API unreachable: {e}") from e
            except ValueError as e:
                raise CRMAPIError(f"Invalid JSON from HubSpot: {e}") from e

    async def find_contact_by_email(self, email: str) -> Optional[Contact]:
        """Exact-match contact search by email; None when no contact exists"""
        data = await self._request(
            "POST",
            "/crm/v3/objects/contacts/search",
            json={
                "filterGroups": [
                    {"filters": [{"propertyName": "email", "operator": "EQ", "value": email}]}
                ],
                "properties": ["email", "firstname", "lastname"],
                "limit": 1,
            },
        )
        results = data.get("results") or []
        if not results:
            return None

        try:
            props = results[0].get("properties") or {}
            return Contact(
                contact_id=str(results[0]["id"]),
                email=props.get("email"),
                first_name=props.get("firstname"),
                last_name=props.get("lastname"),
            )
        except (KeyError, TypeError, AttributeError) as e:
            raise CRMAPIError(f"Invalid contact data from HubSpot: {e}") from e

    async def get_deal_ids_for_contact(self, contact_id: str) -> List[str]:
        """List ids of deals associated with a contact"""
        data = await self._request(
            "GET", f"/crm/v4/objects/contacts/{quote(str(contact_id), safe='')}/associations/deals"
        )
        try:
            return [
                str(assoc["toObjectId"])
                for assoc in data.get("results") or []
                if assoc.get("toObjectId")
            ]
        except (TypeError, AttributeError) as e:
            raise CRMAPIError(f"Invalid association data from HubSpot: {e}") from e

    async def batch_read_deals(self, deal_ids: List[str]) -> List[Deal]:
        """Read several deals in one call, with the financial properties"""
        if not deal_ids:
            return []

        data = await self._request(
            "POST",
            "/crm/v3/objects/deals/batch/read",
            json={
                "properties": DEAL_PROPERTIES,
                "inputs": [{"id": deal_id} for deal_id in deal_ids],
            },
        )
        try:
            return [
                deal_from_properties(item["id"], item.get("properties") or {})
                for item in data.get("results") or []
            ]
        except (KeyError, TypeError, AttributeError) as e:
            raise CRMAPIError(f"Invalid deal data from HubSpot: {e}") from e

    async def get_deal(self, deal_id: str) -> Optional[Deal]:
        """Read a single deal; None when HubSpot has no deal with that id"""
        # HubSpot object ids are numeric; anything else could rewrite the request path
        if not (deal_id.isascii() and deal_id.isdigit()):
            return None

        data = await self._request(
            "GET",
            f"/crm/v3/objects/deals/{deal_id}",
            params={"properties": ",".join(DEAL_PROPERTIES)},
            allow_not_found=True,
        )
        if not data or not data.get("id"):
            return None
        return deal_from_properties(data["id"], data.get("properties") or {})

    async def get_deals_for_contact(self, contact_id: str) -> List[Deal]:
        """Resolve a contact's deal associations and batch-read them"""
        deal_ids = await self.get_deal_ids_for_contact(contact_id)
        return await self.batch_read_deals(deal_ids)
