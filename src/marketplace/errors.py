"""Error taxonomy for order placement and fulfillment.

Field-level input problems use Protean's ``ValidationError`` directly. The
classes here cover failures that callers need to tell apart: a checkout that
never wrote anything, one that stopped half-way, an actor without the right
privileges, and an illegal status move.
"""

from protean.exceptions import ValidationError


class MarketplaceError(Exception):
    """Base class for marketplace failures that are not field validation."""

    def __init__(self, message: str, **context):
        super().__init__(message)
        self.message = message
        self.context = context


class CommitError(MarketplaceError):
    """The order header could not be written. Nothing was committed."""


class PartialCommitError(MarketplaceError):
    """The order header was written but a later checkout step failed.

    The order stays visible to the buyer in ``pending`` status. Replaying the
    missing steps is left to ``reconcile_checkout``.
    """

    def __init__(self, message: str, order_id: str, checkout_id: str, stage: str, reason: str):
        super().__init__(
            message,
            order_id=order_id,
            checkout_id=checkout_id,
            stage=stage,
            reason=reason,
        )
        self.order_id = order_id
        self.checkout_id = checkout_id
        self.stage = stage
        self.reason = reason


class AuthorizationError(MarketplaceError):
    """The acting user is not allowed to perform the operation."""


class NotificationDispatchError(MarketplaceError):
    """The notification side call failed. Never surfaced to the buyer."""


class InvalidTransitionError(ValidationError):
    """An order status change that the state machine does not allow."""
