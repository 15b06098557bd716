"""Driver assignment: command and handler."""

from protean import handle
from protean.fields import Identifier
from protean.utils.globals import current_domain

from ordering.domain import ordering
from ordering.order.order import Order


@ordering.command(part_of="Order")
class AssignDriver:
    order_id = Identifier(required=True)
    driver_id = Identifier()  # Empty means "no driver"


@ordering.command_handler(part_of=Order)
class AssignDriverHandler:
    @handle(AssignDriver)
    def assign_driver(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.assign_driver(command.driver_id or None)
        repo.add(order)
