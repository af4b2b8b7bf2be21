"""Per-user state for load scenarios. Nothing is shared across users."""

from dataclasses import dataclass, field


@dataclass
class SellerState:
    seller_id: str | None = None
    product_ids: list[str] = field(default_factory=list)


@dataclass
class BuyerState:
    customer_id: str | None = None
    cart_id: str | None = None
    order_id: str | None = None
    checkout_id: str | None = None
