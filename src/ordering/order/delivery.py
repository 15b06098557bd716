"""Driver delivery transitions: commands and handler."""

from protean import handle
from protean.fields import Identifier
from protean.utils.globals import current_domain

from ordering.domain import ordering
from ordering.order.order import Order


@ordering.command(part_of="Order")
class StartDelivery:
    order_id = Identifier(required=True)
    driver_id = Identifier(required=True)


@ordering.command(part_of="Order")
class CompleteDelivery:
    order_id = Identifier(required=True)
    driver_id = Identifier(required=True)


@ordering.command_handler(part_of=Order)
class DeliveryHandler:
    @handle(StartDelivery)
    def start_delivery(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.start_delivery(command.driver_id)
        repo.add(order)

    @handle(CompleteDelivery)
    def complete_delivery(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.complete_delivery(command.driver_id)
        repo.add(order)
