"""
HOT Pay client.

Two concerns: building the hosted-checkout redirect URL (pure string work,
no network) and looking up a processed payment by memo, which is what the
verify endpoint polls when a webhook has not arrived yet.
"""
import time
from decimal import Decimal
from urllib.parse import urlencode

import httpx
import structlog
from pydantic import ValidationError as PydanticValidationError

from shared.config import settings
from shared.errors import UpstreamUnavailable
from shared.observability import (
    storefront_gateway_lookup_duration_seconds,
    storefront_gateway_lookups_total,
)
from .schemas import GatewayPayment

logger = structlog.get_logger(__name__)

WEBHOOK_PATH = "/api/hotpay/webhook"
STATUS_PAGE_PATH = "/payment/status"


class HotPayClient:
    def __init__(
        self,
        base_url: str,
        api_url: str,
        app_url: str,
        api_token: str = "",
        default_item_id: str = "",
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.api_url = api_url.rstrip("/")
        self.app_url = app_url.rstrip("/")
        self.api_token = api_token
        self.default_item_id = default_item_id
        self.timeout = timeout
        self._transport = transport

    @property
    def is_configured(self) -> bool:
        """Status lookups need an API token; without one the verify endpoint only reads the DB."""
        return bool(self.api_token)

    def webhook_url(self) -> str:
        return f"{self.app_url}{WEBHOOK_PATH}"

    def status_redirect_url(self, memo: str) -> str:
        return f"{self.app_url}{STATUS_PAGE_PATH}?{urlencode({'memo': memo})}"

    def build_payment_url(self, hotpay_item_id: str | None, amount: Decimal, memo: str) -> str:
        params = {
            "item_id": hotpay_item_id or self.default_item_id,
            "amount": format_amount(amount),
            "memo": memo,
            "webhook_url": self.webhook_url(),
            "redirect_url": self.status_redirect_url(memo),
        }
        return f"{self.base_url}/payment?{urlencode(params)}"

    async def lookup_payment(self, memo: str) -> GatewayPayment | None:
        """
        Most recent processed payment for `memo`, or None if HOT Pay has no record yet.

        Raises UpstreamUnavailable when the API cannot be reached or answers
        with an error or an unreadable body.
        """
        started = time.perf_counter()
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                resp = await client.get(
                    f"{self.api_url}/partners/processed_payments",
                    params={"memo": memo, "limit": 1},
                    headers={"Authorization": self.api_token},
                )
                resp.raise_for_status()
                body = resp.json()
        except (httpx.HTTPError, ValueError) as e:
            storefront_gateway_lookups_total.labels(result="error").inc()
            logger.warning("hotpay_lookup_failed", memo=memo, error=str(e))
            raise UpstreamUnavailable(detail=f"HOT Pay lookup failed: {e}") from e
        finally:
            storefront_gateway_lookup_duration_seconds.observe(time.perf_counter() - started)

        payments = body.get("payments") if isinstance(body, dict) else None
        if not isinstance(payments, list) or not payments:
            storefront_gateway_lookups_total.labels(result="empty").inc()
            return None

        try:
            payment = GatewayPayment.model_validate(payments[0])
        except PydanticValidationError as e:
            storefront_gateway_lookups_total.labels(result="error").inc()
            raise UpstreamUnavailable(detail=f"Unreadable HOT Pay payment record: {e}") from e

        storefront_gateway_lookups_total.labels(result="found").inc()
        return payment


def format_amount(amount) -> str:
    # 49.990 -> "49.99", 10.00 -> "10"
    return format(Decimal(str(amount)).normalize(), "f")


def get_gateway_client() -> HotPayClient:
    """FastAPI dependency; overridden in tests."""
    return HotPayClient(
        base_url=settings.HOTPAY_BASE_URL,
        api_url=settings.HOTPAY_API_URL,
        app_url=settings.APP_URL,
        api_token=settings.HOTPAY_API_TOKEN,
        default_item_id=settings.HOTPAY_ITEM_ID,
        timeout=settings.HOTPAY_TIMEOUT_SECONDS,
    )
