"""Customer e-mails on order status changes."""

import json

import structlog
from protean import handle

from ordering.domain import ordering
from ordering.mail import get_mailer
from ordering.mail.templates import get_template
from ordering.order.events import OrderStatusChanged
from ordering.order.order import Order

logger = structlog.get_logger(__name__)


@ordering.event_handler(part_of=Order)
class OrderStatusNotificationHandler:
    @handle(OrderStatusChanged)
    def notify_customer(self, event: OrderStatusChanged) -> None:
        if not event.customer_email:
            return

        content = get_template(event.new_status).render(
            {
                "order_id": str(event.order_id),
                "status": event.new_status,
                "customer_name": event.customer_name,
                "total_amount": event.total_amount,
                "items": json.loads(event.items) if event.items else [],
            }
        )
        try:
            result = get_mailer().send(to=event.customer_email, subject=content["subject"], body=content["body"])
        except Exception as exc:
            logger.exception("order_status_email_error", order_id=str(event.order_id), error=str(exc))
            return

        if result.get("status") != "sent":
            logger.warning(
                "order_status_email_failed",
                order_id=str(event.order_id),
                status=event.new_status,
                error=result.get("error"),
            )
