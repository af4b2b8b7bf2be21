"""Pydantic request/response schemas for the marketplace API.

These are the external contracts. Internal commands stay separate.
"""

from datetime import date, datetime

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Shared
# ---------------------------------------------------------------------------
class StatusResponse(BaseModel):
    status: str = "ok"


class ShippingAddressSchema(BaseModel):
    full_name: str
    phone: str
    address: str
    city: str
    state: str | None = None
    pincode: str

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "full_name": "Asha Rao",
                    "phone": "+91 98765 43210",
                    "address": "12 Market Road",
                    "city": "Mysuru",
                    "state": "Karnataka",
                    "pincode": "570001",
                }
            ]
        }
    }


# ---------------------------------------------------------------------------
# Cart
# ---------------------------------------------------------------------------
class CreateCartRequest(BaseModel):
    customer_id: str | None = None
    session_id: str | None = None


class CartIdResponse(BaseModel):
    cart_id: str


class AddToCartRequest(BaseModel):
    product_id: str
    name: str
    unit_price: float = Field(ge=0)
    image_url: str | None = None
    stock: int = 0
    seller_id: str | None = None
    seller_free_delivery: bool = False
    quantity: int = 1


class UpdateCartQuantityRequest(BaseModel):
    quantity: int


class CartItemResponse(BaseModel):
    product_id: str
    product_name: str
    unit_price: float
    image_url: str | None = None
    seller_id: str | None = None
    seller_free_delivery: bool = False
    quantity: int
    line_total: float


class CartResponse(BaseModel):
    cart_id: str
    customer_id: str | None = None
    items: list[CartItemResponse]
    total_item_count: int
    subtotal: float


class PricingResponse(BaseModel):
    subtotal: float
    total_item_count: int
    delivery_fee: int
    total: float


class PricingLine(BaseModel):
    unit_price: float = Field(ge=0)
    quantity: int = Field(ge=1)
    seller_free_delivery: bool = False


class PricingPreviewRequest(BaseModel):
    items: list[PricingLine]


# ---------------------------------------------------------------------------
# Checkout
# ---------------------------------------------------------------------------
class CheckoutRequest(BaseModel):
    cart_id: str
    shipping_address: ShippingAddressSchema
    payment_method: str


class PlacedOrderResponse(BaseModel):
    order_id: str
    checkout_id: str
    subtotal: float
    delivery_fee: int
    total: float
    notifications_dispatched: bool


class CheckoutResponse(BaseModel):
    checkout_id: str
    cart_id: str
    customer_id: str
    order_id: str | None = None
    stage: str
    failure_stage: str | None = None
    failure_reason: str | None = None
    notification_status: str
    needs_reconciliation: bool


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------
class ChangeStatusRequest(BaseModel):
    status: str


class CancelOrderRequest(BaseModel):
    reason: str | None = None


class OrderLineResponse(BaseModel):
    product_id: str
    product_name: str
    quantity: int
    unit_price: float
    seller_id: str | None = None


class OrderResponse(BaseModel):
    order_id: str
    customer_id: str
    customer_name: str | None = None
    status: str
    payment_method: str | None = None
    subtotal: float
    delivery_fee: int
    total: float
    items: list[OrderLineResponse]
    shipping_address: dict | None = None
    allowed_next_statuses: list[str]
    cancellation_reason: str | None = None
    created_at: datetime | None = None


class OrderSummaryResponse(BaseModel):
    order_id: str
    customer_id: str
    customer_name: str | None = None
    status: str
    payment_method: str | None = None
    item_count: int
    total: float
    created_at: datetime | None = None


class SellerOrderLineResponse(BaseModel):
    order_id: str
    product_id: str
    product_name: str | None = None
    quantity: int
    unit_price: float
    line_total: float
    status: str
    customer_name: str | None = None
    ordered_at: datetime | None = None


class OrderStatsResponse(BaseModel):
    total_orders: int
    by_status: dict[str, int]
    revenue: float


class SellerReportDay(BaseModel):
    day: date
    order_count: int
    total_revenue: float
    orders: list[dict]


class SellerReportResponse(BaseModel):
    seller_id: str
    total_orders: int
    total_revenue: float
    days: list[SellerReportDay]


# ---------------------------------------------------------------------------
# Stock
# ---------------------------------------------------------------------------
class RegisterStockRequest(BaseModel):
    product_id: str
    product_name: str | None = None
    stock: int = Field(ge=0, default=0)
    seller_id: str | None = None


class SetStockRequest(BaseModel):
    stock: int


class StockResponse(BaseModel):
    product_id: str
    seller_id: str | None = None
    product_name: str | None = None
    stock: int


# ---------------------------------------------------------------------------
# Notifications
# ---------------------------------------------------------------------------
class NotificationResponse(BaseModel):
    notification_id: str
    kind: str
    title: str
    message: str
    related_order_id: str | None = None
    is_read: bool
    created_at: datetime | None = None


class UnreadCountResponse(BaseModel):
    unread: int


class MarkedResponse(BaseModel):
    changed: int


# ---------------------------------------------------------------------------
# Members
# ---------------------------------------------------------------------------
class RegisterMemberRequest(BaseModel):
    user_id: str
    full_name: str | None = None
    role: str = "customer"


class ChangeRoleRequest(BaseModel):
    role: str


class MemberIdResponse(BaseModel):
    user_id: str
