"""Driver-side location publishing for the active delivery.

While an order is active, the first fix is written at once and the latest
cached fix is written again every interval, moved or not. At most one order
is active and at most one heartbeat task runs.

Must be driven from a running event loop: the heartbeat is an asyncio task.
"""

import asyncio
from datetime import UTC, datetime

import structlog

from ordering.order.store import OrderStore
from tracking.geolocation import get_geolocation
from tracking.geolocation.port import NOT_SUPPORTED_MESSAGE, GeolocationSource, PositionFix, WatchOptions
from tracking.location.store import LocationStore

logger = structlog.get_logger(__name__)

LOCATION_UPDATE_INTERVAL = 5.0


class DriverLocationPublisher:
    def __init__(
        self,
        driver_id: str,
        geolocation: GeolocationSource | None = None,
        locations: LocationStore | None = None,
        orders: OrderStore | None = None,
        interval: float = LOCATION_UPDATE_INTERVAL,
        sleep=asyncio.sleep,
        options: WatchOptions | None = None,
    ) -> None:
        self.driver_id = driver_id
        self.geolocation = geolocation or get_geolocation()
        self.locations = locations or LocationStore()
        self.orders = orders or OrderStore()
        self.interval = interval
        self.sleep = sleep
        self.options = options or WatchOptions()

        self.active_order_id: str | None = None
        self.latest_fix: PositionFix | None = None
        self.error: str | None = None
        self.published = 0
        self._watch: int | None = None
        self._heartbeat: asyncio.Task | None = None
        self._first_fix_published = False

    @property
    def tracking(self) -> bool:
        return self._watch is not None

    # -------------------------------------------------------------------
    # Watch lifecycle
    # -------------------------------------------------------------------
    def start_tracking(self) -> bool:
        """Begin high-accuracy watching. Returns False (and sets ``error``) when unsupported."""
        if not self.geolocation.supported:
            self.error = NOT_SUPPORTED_MESSAGE
            logger.warning("geolocation_unsupported", driver_id=self.driver_id)
            return False

        self.error = None
        if self._watch is None:
            self._watch = self.geolocation.watch_position(self._on_fix, self._on_error, self.options)
        if self.active_order_id is not None and self._heartbeat is None:
            self._heartbeat = asyncio.create_task(self._heartbeat_loop())
        return True

    def stop_tracking(self) -> None:
        if self._watch is not None:
            self.geolocation.clear_watch(self._watch)
            self._watch = None
        if self._heartbeat is not None:
            self._heartbeat.cancel()
            self._heartbeat = None

    # -------------------------------------------------------------------
    # Delivery lifecycle
    # -------------------------------------------------------------------
    async def start_delivery(self, order_id: str) -> bool:
        """Mark the order shipped and publish its positions.

        Any previous delivery's watch and heartbeat are stopped first. If the
        order update fails, tracking does not start.
        """
        self.stop_tracking()
        self.active_order_id = None

        self.orders.start_delivery(order_id, self.driver_id)

        self.active_order_id = str(order_id)
        self._first_fix_published = False
        self.latest_fix = None
        logger.info("delivery_started", order_id=self.active_order_id, driver_id=self.driver_id)
        return self.start_tracking()

    async def complete_delivery(self, order_id: str) -> None:
        if self.active_order_id in (None, str(order_id)):
            self.stop_tracking()
            self.active_order_id = None

        self.orders.complete_delivery(order_id, self.driver_id)
        logger.info("delivery_completed", order_id=str(order_id), driver_id=self.driver_id)

    # -------------------------------------------------------------------
    # Callbacks and publishing
    # -------------------------------------------------------------------
    def _on_fix(self, fix: PositionFix) -> None:
        self.latest_fix = fix
        if self.active_order_id is not None and not self._first_fix_published:
            self._first_fix_published = True
            self._publish(fix)

    def _on_error(self, message: str) -> None:
        self.error = message
        logger.warning("geolocation_error", driver_id=self.driver_id, error=message)

    def _publish(self, fix: PositionFix) -> None:
        """Best effort: a failed write is logged and dropped; the next tick retries."""
        order_id = self.active_order_id
        if order_id is None:
            return
        try:
            self.locations.insert(
                order_id=order_id,
                driver_id=self.driver_id,
                latitude=fix.latitude,
                longitude=fix.longitude,
                accuracy=fix.accuracy,
                heading=fix.heading,
                speed=fix.speed,
                captured_at=datetime.now(UTC),
            )
            self.published += 1
        except Exception as exc:
            logger.warning("location_publish_dropped", order_id=order_id, driver_id=self.driver_id, error=str(exc))

    async def _heartbeat_loop(self) -> None:
        while True:
            await self.sleep(self.interval)
            if self.latest_fix is not None:
                self._publish(self.latest_fix)
