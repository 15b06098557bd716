"""Bounded status polling as a cancellable task."""

import asyncio
from enum import Enum

import structlog

from payments.client import GatewayStatus, PaymentGatewayClient

logger = structlog.get_logger(__name__)

POLL_INTERVAL_SECONDS = 5
MAX_POLL_ATTEMPTS = 60


class PollOutcome(Enum):
    SUCCESS = "success"
    FAILED = "failed"
    TIMEOUT = "timeout"


async def poll_payment_status(
    client: PaymentGatewayClient,
    order_reference: str,
    interval: float = POLL_INTERVAL_SECONDS,
    max_attempts: int = MAX_POLL_ATTEMPTS,
    sleep=asyncio.sleep,
) -> PollOutcome:
    """Wait ``interval`` then poll, up to ``max_attempts`` times.

    Stops at the first terminal status. Exhaustion is TIMEOUT, never FAILED:
    the charge may still settle out-of-band.
    """
    for attempt in range(1, max_attempts + 1):
        await sleep(interval)
        status = await client.status(order_reference)
        if status == GatewayStatus.SUCCESS:
            return PollOutcome.SUCCESS
        if status == GatewayStatus.FAILED:
            return PollOutcome.FAILED
        logger.debug("payment_still_processing", order_reference=order_reference, attempt=attempt)

    client.session.mark_timed_out()
    logger.warning("payment_poll_timed_out", order_reference=order_reference, attempts=max_attempts)
    return PollOutcome.TIMEOUT


class PaymentPoll:
    """Owns the polling task; cancel() is safe on every exit path."""

    def __init__(
        self,
        client: PaymentGatewayClient,
        order_reference: str,
        interval: float = POLL_INTERVAL_SECONDS,
        max_attempts: int = MAX_POLL_ATTEMPTS,
        sleep=asyncio.sleep,
    ) -> None:
        self.client = client
        self.order_reference = order_reference
        self.interval = interval
        self.max_attempts = max_attempts
        self.sleep = sleep
        self._task: asyncio.Task | None = None

    def start(self) -> "PaymentPoll":
        if self._task is None:
            self._task = asyncio.create_task(
                poll_payment_status(
                    self.client,
                    self.order_reference,
                    interval=self.interval,
                    max_attempts=self.max_attempts,
                    sleep=self.sleep,
                )
            )
        return self

    async def result(self) -> PollOutcome:
        if self._task is None:
            self.start()
        return await self._task

    def cancel(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()
            logger.info("payment_poll_cancelled", order_reference=self.order_reference)

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()
