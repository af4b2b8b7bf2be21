"""Order status changes: commands, handler and the exposed operations."""

from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from marketplace.domain import logger, marketplace
from marketplace.identity.actor import Actor
from marketplace.order.order import Order


@marketplace.command(part_of="Order")
class AdvanceOrderStatus:
    order_id = Identifier(required=True)
    new_status = String(required=True, max_length=20)
    actor_id = Identifier(required=True)
    actor_role = String(required=True, max_length=20)


@marketplace.command(part_of="Order")
class CancelOrder:
    order_id = Identifier(required=True)
    actor_id = Identifier(required=True)
    actor_role = String(required=True, max_length=20)
    reason = String(max_length=500)


@marketplace.command_handler(part_of=Order)
class OrderStatusHandler:
    @handle(AdvanceOrderStatus)
    def advance_order_status(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.advance_to(
            command.new_status,
            actor_id=command.actor_id,
            actor_role=command.actor_role,
        )
        repo.add(order)

    @handle(CancelOrder)
    def cancel_order(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.cancel(
            actor_id=command.actor_id,
            actor_role=command.actor_role,
            reason=command.reason,
        )
        repo.add(order)


def advance_order_status(order_id: str, new_status: str, actor: Actor) -> Order:
    """Move an order to ``new_status`` and return the updated order.

    Raises ``AuthorizationError`` for customers or sellers without items in the
    order, and ``InvalidTransitionError`` for terminal or backward moves. In
    both cases nothing is written.
    """
    current_domain.process(
        AdvanceOrderStatus(
            order_id=order_id,
            new_status=new_status,
            actor_id=actor.user_id,
            actor_role=actor.role,
        ),
        asynchronous=False,
    )
    logger.info(
        "Order status changed",
        order_id=order_id,
        new_status=new_status,
        actor_id=actor.user_id,
        actor_role=actor.role,
    )
    return current_domain.repository_for(Order).get(order_id)


def cancel_order(order_id: str, actor: Actor, reason: str | None = None) -> Order:
    current_domain.process(
        CancelOrder(
            order_id=order_id,
            actor_id=actor.user_id,
            actor_role=actor.role,
            reason=reason,
        ),
        asynchronous=False,
    )
    logger.info("Order cancelled", order_id=order_id, actor_id=actor.user_id, actor_role=actor.role)
    return current_domain.repository_for(Order).get(order_id)
