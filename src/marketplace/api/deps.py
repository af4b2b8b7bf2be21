"""Request dependencies."""

from fastapi import Header
from protean.exceptions import ValidationError

from marketplace.identity.actor import Actor


def current_actor(
    x_actor_id: str = Header(...),
    x_actor_role: str = Header("customer"),
) -> Actor:
    """The actor forwarded by the session provider in request headers."""
    try:
        return Actor(user_id=x_actor_id, role=x_actor_role)
    except ValueError:
        raise ValidationError({"role": [f"Unknown role: {x_actor_role}"]}) from None
