"""
Client side of the payment status page.

After HOT Pay redirects the buyer back to /payment/status?memo=..., the page
keeps asking GET /api/orders/verify until the order resolves. This module is
that loop for Python callers (integration checks, support tooling):

* a request every `interval` seconds, for at most `max_duration` seconds;
  running out of time leaves the order untouched and reports UNRESOLVED
* a 404 right after checkout usually means the order row is not visible
  yet, so NOT_FOUND is only reported after `not_found_grace` consecutive 404s
* transport errors and 5xx answers are ignored; the next tick retries
* COMPLETED / FAILED end the loop for good
"""
import asyncio
import enum
import time
from dataclasses import dataclass
from typing import Awaitable, Callable

import httpx
import structlog

logger = structlog.get_logger(__name__)

DEFAULT_INTERVAL_SECONDS = 3.0
DEFAULT_MAX_DURATION_SECONDS = 5 * 60.0
DEFAULT_NOT_FOUND_GRACE = 10

VERIFY_PATH = "/api/orders/verify"


class PollOutcome(str, enum.Enum):
    COMPLETED = "completed"
    FAILED = "failed"
    NOT_FOUND = "not_found"
    UNRESOLVED = "unresolved"


@dataclass
class PollResult:
    outcome: PollOutcome
    template_name: str | None = None
    attempts: int = 0


class PaymentStatusPoller:
    def __init__(
        self,
        client: httpx.AsyncClient,
        memo: str,
        interval: float = DEFAULT_INTERVAL_SECONDS,
        max_duration: float = DEFAULT_MAX_DURATION_SECONDS,
        not_found_grace: int = DEFAULT_NOT_FOUND_GRACE,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.client = client
        self.memo = memo
        self.interval = interval
        self.max_duration = max_duration
        self.not_found_grace = max(1, not_found_grace)
        self._sleep = sleep
        self._clock = clock
        self._stopped = False

    def stop(self):
        """Cooperative stop: takes effect before the next request; in-flight requests finish."""
        self._stopped = True

    async def run(self) -> PollResult:
        deadline = self._clock() + self.max_duration
        attempts = 0
        consecutive_misses = 0
        template_name = None

        while not self._stopped:
            attempts += 1
            status_code, body = await self._check()

            if status_code == 404:
                consecutive_misses += 1
                if consecutive_misses >= self.not_found_grace:
                    logger.info("poll_not_found", memo=self.memo, attempts=attempts)
                    return PollResult(PollOutcome.NOT_FOUND, template_name, attempts)
            elif status_code is not None:
                consecutive_misses = 0

            if status_code == 200 and body:
                template_name = body.get("template_name") or template_name
                payment_status = body.get("payment_status")
                if payment_status in (PollOutcome.COMPLETED.value, PollOutcome.FAILED.value):
                    logger.info("poll_resolved", memo=self.memo, payment_status=payment_status, attempts=attempts)
                    return PollResult(PollOutcome(payment_status), template_name, attempts)

            if self._clock() + self.interval > deadline:
                break
            await self._sleep(self.interval)

        logger.info("poll_unresolved", memo=self.memo, attempts=attempts, stopped=self._stopped)
        return PollResult(PollOutcome.UNRESOLVED, template_name, attempts)

    async def _check(self) -> tuple[int | None, dict | None]:
        try:
            resp = await self.client.get(VERIFY_PATH, params={"memo": self.memo})
        except httpx.HTTPError as e:
            logger.debug("poll_request_failed", memo=self.memo, error=str(e))
            return None, None

        if resp.status_code != 200:
            return resp.status_code, None
        try:
            body = resp.json()
        except ValueError:
            return resp.status_code, None
        return resp.status_code, body if isinstance(body, dict) else None
