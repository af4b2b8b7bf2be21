"""Order placement: commands and handler for the two commit steps."""

import json

from protean import handle
from protean.fields import Float, Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from marketplace.domain import marketplace
from marketplace.order.order import Order


@marketplace.command(part_of="Order")
class PlaceOrder:
    """Write the order header. Returns the new order id."""

    customer_id = Identifier(required=True)
    customer_name = String(max_length=200)
    shipping_address = Text(required=True)  # JSON: address dict
    payment_method = String(required=True, max_length=10)
    subtotal = Float(required=True)
    delivery_fee = Integer(required=True)
    total = Float(required=True)


@marketplace.command(part_of="Order")
class RecordLineItems:
    """Attach the line-item snapshot to an existing order header."""

    order_id = Identifier(required=True)
    items = Text(required=True)  # JSON: list of line item dicts


@marketplace.command_handler(part_of=Order)
class PlaceOrderHandler:
    @handle(PlaceOrder)
    def place_order(self, command):
        shipping_address = (
            json.loads(command.shipping_address)
            if isinstance(command.shipping_address, str)
            else command.shipping_address
        )

        order = Order.place(
            customer_id=command.customer_id,
            customer_name=command.customer_name,
            shipping_address=shipping_address,
            payment_method=command.payment_method,
            subtotal=command.subtotal,
            delivery_fee=command.delivery_fee,
            total=command.total,
        )
        current_domain.repository_for(Order).add(order)
        return str(order.id)

    @handle(RecordLineItems)
    def record_line_items(self, command):
        items_data = json.loads(command.items) if isinstance(command.items, str) else command.items

        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        if order.record_line_items(items_data):
            repo.add(order)
            return True
        return False
