"""Order status e-mail templates, one per customer-facing status."""


def format_price(amount) -> str:
    return f"TZS {float(amount or 0):,.0f}"


def _items_block(items) -> str:
    lines = []
    for item in items or []:
        variant = f" ({item['selected_variant']})" if item.get("selected_variant") else ""
        lines.append(
            f"- {item.get('name', 'Item')}{variant} x {item.get('quantity', 1)}: "
            f"{format_price(float(item.get('price', 0)) * int(item.get('quantity', 1)))}"
        )
    return "\n".join(lines)


class StatusTemplate:
    subject = "Order status update"
    heading = "Order Update"
    message = "Your order status has been updated to: {status}"

    @classmethod
    def render(cls, context: dict) -> dict:
        order_id = str(context.get("order_id", "N/A"))
        status = context.get("status", "")
        name = context.get("customer_name") or "Customer"
        body = (
            f"{cls.heading}\n\n"
            f"Hi {name},\n\n"
            f"{cls.message.format(status=status)}\n\n"
            f"Order #{order_id[:8].upper()}\n"
            f"{_items_block(context.get('items'))}\n\n"
            f"Total: {format_price(context.get('total_amount'))}"
        )
        return {"subject": cls.subject, "body": body}


class ProcessingTemplate(StatusTemplate):
    subject = "Your order is being processed"
    heading = "Order Confirmed!"
    message = "Great news! Your payment has been verified and we're now preparing your order for shipment."


class ShippedTemplate(StatusTemplate):
    subject = "Your order has been shipped"
    heading = "Your Order is On Its Way!"
    message = "Exciting news! Your order has been shipped and is on its way to you."


class DeliveredTemplate(StatusTemplate):
    subject = "Your order has been delivered"
    heading = "Order Delivered!"
    message = "Your order has been successfully delivered. We hope you love your purchase!"


class CancelledTemplate(StatusTemplate):
    subject = "Your order has been cancelled"
    heading = "Order Cancelled"
    message = "Your order has been cancelled. If you have any questions, please contact our support team."


TEMPLATE_REGISTRY: dict[str, type[StatusTemplate]] = {
    "processing": ProcessingTemplate,
    "shipped": ShippedTemplate,
    "delivered": DeliveredTemplate,
    "cancelled": CancelledTemplate,
}


def get_template(status: str) -> type[StatusTemplate]:
    """Template for the status, falling back to the generic update."""
    return TEMPLATE_REGISTRY.get(status, StatusTemplate)
