"""FastAPI routes for the marketplace: carts, checkout, orders, stock,
notifications and members."""

from dataclasses import asdict
from datetime import date

from fastapi import APIRouter, Depends
from protean.utils.globals import current_domain

from marketplace.api.deps import current_actor
from marketplace.api.schemas import (
    AddToCartRequest,
    CancelOrderRequest,
    CartIdResponse,
    CartItemResponse,
    CartResponse,
    ChangeRoleRequest,
    ChangeStatusRequest,
    CheckoutRequest,
    CheckoutResponse,
    CreateCartRequest,
    MarkedResponse,
    MemberIdResponse,
    NotificationResponse,
    OrderLineResponse,
    OrderResponse,
    OrderStatsResponse,
    OrderSummaryResponse,
    PlacedOrderResponse,
    PricingPreviewRequest,
    PricingResponse,
    RegisterMemberRequest,
    RegisterStockRequest,
    SellerOrderLineResponse,
    SellerReportResponse,
    SetStockRequest,
    StatusResponse,
    StockResponse,
    UnreadCountResponse,
    UpdateCartQuantityRequest,
)
from marketplace.cart.cart import ShoppingCart
from marketplace.cart.delivery import compute_delivery_fee
from marketplace.cart.items import AddToCart, ClearCart, CreateCart, RemoveFromCart, UpdateCartQuantity
from marketplace.checkout.checkout import Checkout
from marketplace.checkout.orchestrator import place_order, reconcile_checkout, stalled_checkouts
from marketplace.errors import AuthorizationError
from marketplace.identity.actor import Actor, Role
from marketplace.identity.member import ChangeMemberRole, RegisterMember
from marketplace.notification.feed import recent_notifications, unread_count
from marketplace.notification.reading import mark_all_read, mark_read
from marketplace.order.order import Order
from marketplace.order.status import advance_order_status, cancel_order
from marketplace.projections.order_summary import OrderSummary
from marketplace.projections.reports import order_stats, seller_sales_report
from marketplace.projections.seller_order_lines import SellerOrderLine
from marketplace.stock.ledger import current_stock, register_stock, set_stock_level


def _require_admin(actor: Actor):
    if not actor.is_admin:
        raise AuthorizationError("Admins only", actor_id=actor.user_id)


def _require_self_or_admin(actor: Actor, user_id: str):
    if not actor.is_admin and str(actor.user_id) != str(user_id):
        raise AuthorizationError("You can only view your own records", actor_id=actor.user_id)


# ---------------------------------------------------------------------------
# Cart Router
# ---------------------------------------------------------------------------
cart_router = APIRouter(prefix="/carts", tags=["carts"])


def _cart_response(cart: ShoppingCart) -> CartResponse:
    return CartResponse(
        cart_id=str(cart.id),
        customer_id=str(cart.customer_id) if cart.customer_id else None,
        items=[
            CartItemResponse(
                product_id=str(item.product_id),
                product_name=item.product_name,
                unit_price=item.unit_price,
                image_url=item.image_url,
                seller_id=str(item.seller_id) if item.seller_id else None,
                seller_free_delivery=bool(item.seller_free_delivery),
                quantity=item.quantity,
                line_total=item.line_total,
            )
            for item in cart.items
        ],
        total_item_count=cart.total_item_count,
        subtotal=cart.subtotal,
    )


def _owned_cart(cart_id: str, actor: Actor) -> ShoppingCart:
    """Guest carts are open to any caller. An owned cart only to its buyer and admins."""
    cart = current_domain.repository_for(ShoppingCart).get(cart_id)
    if cart.customer_id and not actor.is_admin and str(cart.customer_id) != str(actor.user_id):
        raise AuthorizationError("This cart belongs to someone else", cart_id=str(cart_id))
    return cart


@cart_router.post("", status_code=201, response_model=CartIdResponse)
async def create_cart(body: CreateCartRequest, actor: Actor = Depends(current_actor)) -> CartIdResponse:
    if body.customer_id:
        _require_self_or_admin(actor, body.customer_id)
    command = CreateCart(customer_id=body.customer_id, session_id=body.session_id)
    result = current_domain.process(command, asynchronous=False)
    return CartIdResponse(cart_id=result)


@cart_router.get("/{cart_id}", response_model=CartResponse)
async def get_cart(cart_id: str, actor: Actor = Depends(current_actor)) -> CartResponse:
    return _cart_response(_owned_cart(cart_id, actor))


@cart_router.post("/{cart_id}/items", response_model=CartResponse)
async def add_cart_item(cart_id: str, body: AddToCartRequest, actor: Actor = Depends(current_actor)) -> CartResponse:
    _owned_cart(cart_id, actor)
    command = AddToCart(cart_id=cart_id, **body.model_dump())
    current_domain.process(command, asynchronous=False)
    return _cart_response(current_domain.repository_for(ShoppingCart).get(cart_id))


@cart_router.put("/{cart_id}/items/{product_id}", response_model=CartResponse)
async def update_cart_item(
    cart_id: str, product_id: str, body: UpdateCartQuantityRequest, actor: Actor = Depends(current_actor)
) -> CartResponse:
    _owned_cart(cart_id, actor)
    command = UpdateCartQuantity(cart_id=cart_id, product_id=product_id, quantity=body.quantity)
    current_domain.process(command, asynchronous=False)
    return _cart_response(current_domain.repository_for(ShoppingCart).get(cart_id))


@cart_router.delete("/{cart_id}/items/{product_id}", response_model=CartResponse)
async def remove_cart_item(cart_id: str, product_id: str, actor: Actor = Depends(current_actor)) -> CartResponse:
    _owned_cart(cart_id, actor)
    current_domain.process(RemoveFromCart(cart_id=cart_id, product_id=product_id), asynchronous=False)
    return _cart_response(current_domain.repository_for(ShoppingCart).get(cart_id))


@cart_router.post("/{cart_id}/clear", response_model=StatusResponse)
async def clear_cart(cart_id: str, actor: Actor = Depends(current_actor)) -> StatusResponse:
    _owned_cart(cart_id, actor)
    current_domain.process(ClearCart(cart_id=cart_id), asynchronous=False)
    return StatusResponse()


@cart_router.get("/{cart_id}/pricing", response_model=PricingResponse)
async def cart_pricing(cart_id: str, actor: Actor = Depends(current_actor)) -> PricingResponse:
    cart = _owned_cart(cart_id, actor)
    fee = compute_delivery_fee(cart)
    return PricingResponse(
        subtotal=cart.subtotal,
        total_item_count=cart.total_item_count,
        delivery_fee=fee,
        total=round(cart.subtotal + fee, 2),
    )


# ---------------------------------------------------------------------------
# Delivery Fee Router
# ---------------------------------------------------------------------------
delivery_router = APIRouter(prefix="/delivery-fee", tags=["delivery"])


@delivery_router.post("/preview", response_model=PricingResponse)
async def preview_delivery_fee(body: PricingPreviewRequest) -> PricingResponse:
    items = [line.model_dump() for line in body.items]
    subtotal = round(sum(i["unit_price"] * i["quantity"] for i in items), 2)
    fee = compute_delivery_fee(items)
    return PricingResponse(
        subtotal=subtotal,
        total_item_count=sum(i["quantity"] for i in items),
        delivery_fee=fee,
        total=round(subtotal + fee, 2),
    )


# ---------------------------------------------------------------------------
# Checkout Router
# ---------------------------------------------------------------------------
checkout_router = APIRouter(tags=["checkout"])


def _checkout_response(checkout: Checkout) -> CheckoutResponse:
    return CheckoutResponse(
        checkout_id=str(checkout.id),
        cart_id=str(checkout.cart_id),
        customer_id=str(checkout.customer_id),
        order_id=str(checkout.order_id) if checkout.order_id else None,
        stage=checkout.stage,
        failure_stage=checkout.failure_stage,
        failure_reason=checkout.failure_reason,
        notification_status=checkout.notification_status,
        needs_reconciliation=checkout.needs_reconciliation,
    )


@checkout_router.post("/checkout", status_code=201, response_model=PlacedOrderResponse)
async def checkout(body: CheckoutRequest, actor: Actor = Depends(current_actor)) -> PlacedOrderResponse:
    placed = place_order(
        cart_id=body.cart_id,
        shipping_address=body.shipping_address.model_dump(),
        payment_method=body.payment_method,
        actor=actor,
    )
    return PlacedOrderResponse(**asdict(placed))


@checkout_router.get("/checkouts/stalled", response_model=list[CheckoutResponse])
async def list_stalled_checkouts(actor: Actor = Depends(current_actor)) -> list[CheckoutResponse]:
    _require_admin(actor)
    return [_checkout_response(c) for c in stalled_checkouts()]


@checkout_router.get("/checkouts/{checkout_id}", response_model=CheckoutResponse)
async def get_checkout(checkout_id: str, actor: Actor = Depends(current_actor)) -> CheckoutResponse:
    checkout = current_domain.repository_for(Checkout).get(checkout_id)
    _require_self_or_admin(actor, checkout.customer_id)
    return _checkout_response(checkout)


@checkout_router.post("/checkouts/{checkout_id}/reconcile", response_model=CheckoutResponse)
async def reconcile(checkout_id: str, actor: Actor = Depends(current_actor)) -> CheckoutResponse:
    checkout = current_domain.repository_for(Checkout).get(checkout_id)
    _require_self_or_admin(actor, checkout.customer_id)
    return _checkout_response(reconcile_checkout(checkout_id))


# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


def _order_response(order: Order) -> OrderResponse:
    address = order.shipping_address
    return OrderResponse(
        order_id=str(order.id),
        customer_id=str(order.customer_id),
        customer_name=order.customer_name,
        status=order.status,
        payment_method=order.payment_method,
        subtotal=order.subtotal,
        delivery_fee=order.delivery_fee,
        total=order.total,
        items=[
            OrderLineResponse(
                product_id=str(item.product_id),
                product_name=item.product_name,
                quantity=item.quantity,
                unit_price=item.unit_price,
                seller_id=str(item.seller_id) if item.seller_id else None,
            )
            for item in order.items
        ],
        shipping_address=address.to_dict() if address else None,
        allowed_next_statuses=order.allowed_next_statuses(),
        cancellation_reason=order.cancellation_reason,
        created_at=order.created_at,
    )


def _summary_response(summary: OrderSummary) -> OrderSummaryResponse:
    return OrderSummaryResponse(
        order_id=str(summary.order_id),
        customer_id=str(summary.customer_id),
        customer_name=summary.customer_name,
        status=summary.status,
        payment_method=summary.payment_method,
        item_count=summary.item_count or 0,
        total=summary.total or 0.0,
        created_at=summary.created_at,
    )


@order_router.get("", response_model=list[OrderSummaryResponse])
async def list_orders(actor: Actor = Depends(current_actor)) -> list[OrderSummaryResponse]:
    """Customers see their own orders, sellers orders holding their items, admins all."""
    repo = current_domain.repository_for(OrderSummary)
    if actor.is_admin:
        summaries = repo._dao.query.all().items
    elif actor.is_seller:
        lines = current_domain.repository_for(SellerOrderLine)._dao.query.filter(seller_id=actor.user_id).all().items
        summaries = [repo.get(order_id) for order_id in {str(line.order_id) for line in lines}]
    else:
        summaries = repo._dao.query.filter(customer_id=actor.user_id).all().items

    summaries.sort(key=lambda s: s.created_at, reverse=True)
    return [_summary_response(s) for s in summaries]


@order_router.get("/stats", response_model=OrderStatsResponse)
async def get_order_stats(actor: Actor = Depends(current_actor)) -> OrderStatsResponse:
    _require_admin(actor)
    return OrderStatsResponse(**order_stats())


@order_router.get("/{order_id}", response_model=OrderResponse)
async def get_order(order_id: str, actor: Actor = Depends(current_actor)) -> OrderResponse:
    order = current_domain.repository_for(Order).get(order_id)
    allowed = (
        actor.is_admin
        or str(order.customer_id) == str(actor.user_id)
        or (actor.is_seller and str(actor.user_id) in order.seller_ids)
    )
    if not allowed:
        raise AuthorizationError("You are not allowed to view this order", order_id=order_id)
    return _order_response(order)


@order_router.put("/{order_id}/status", response_model=OrderResponse)
async def change_order_status(
    order_id: str, body: ChangeStatusRequest, actor: Actor = Depends(current_actor)
) -> OrderResponse:
    return _order_response(advance_order_status(order_id, body.status, actor))


@order_router.put("/{order_id}/cancel", response_model=OrderResponse)
async def cancel(order_id: str, body: CancelOrderRequest, actor: Actor = Depends(current_actor)) -> OrderResponse:
    return _order_response(cancel_order(order_id, actor, reason=body.reason))


# ---------------------------------------------------------------------------
# Seller Router
# ---------------------------------------------------------------------------
seller_router = APIRouter(prefix="/sellers", tags=["sellers"])


@seller_router.get("/{seller_id}/orders", response_model=list[SellerOrderLineResponse])
async def seller_orders(seller_id: str, actor: Actor = Depends(current_actor)) -> list[SellerOrderLineResponse]:
    _require_self_or_admin(actor, seller_id)
    lines = current_domain.repository_for(SellerOrderLine)._dao.query.filter(seller_id=seller_id).all().items
    lines.sort(key=lambda line: line.ordered_at, reverse=True)
    return [
        SellerOrderLineResponse(
            order_id=str(line.order_id),
            product_id=str(line.product_id),
            product_name=line.product_name,
            quantity=line.quantity,
            unit_price=line.unit_price,
            line_total=line.line_total,
            status=line.status,
            customer_name=line.customer_name,
            ordered_at=line.ordered_at,
        )
        for line in lines
    ]


@seller_router.get("/{seller_id}/report", response_model=SellerReportResponse)
async def seller_report(
    seller_id: str, day: date | None = None, actor: Actor = Depends(current_actor)
) -> SellerReportResponse:
    _require_self_or_admin(actor, seller_id)
    return SellerReportResponse(**seller_sales_report(seller_id, day=day))


# ---------------------------------------------------------------------------
# Stock Router
# ---------------------------------------------------------------------------
stock_router = APIRouter(prefix="/stock", tags=["stock"])


def _stock_response(item) -> StockResponse:
    return StockResponse(
        product_id=str(item.product_id),
        seller_id=str(item.seller_id) if item.seller_id else None,
        product_name=item.product_name,
        stock=item.stock,
    )


@stock_router.post("", status_code=201, response_model=StockResponse)
async def register_product_stock(body: RegisterStockRequest, actor: Actor = Depends(current_actor)) -> StockResponse:
    if actor.role not in (Role.SELLER.value, Role.ADMIN.value):
        raise AuthorizationError("Only sellers and admins can list stock", actor_id=actor.user_id)
    seller_id = actor.user_id if actor.is_seller else body.seller_id
    item = register_stock(body.product_id, seller_id=seller_id, product_name=body.product_name, stock=body.stock)
    return _stock_response(item)


@stock_router.get("/{product_id}", response_model=StockResponse)
async def get_stock(product_id: str) -> StockResponse:
    return _stock_response(current_stock(product_id))


@stock_router.put("/{product_id}", response_model=StockResponse)
async def set_stock(product_id: str, body: SetStockRequest, actor: Actor = Depends(current_actor)) -> StockResponse:
    set_stock_level(product_id, body.stock, actor)
    return _stock_response(current_stock(product_id))


# ---------------------------------------------------------------------------
# Notification Router
# ---------------------------------------------------------------------------
notification_router = APIRouter(prefix="/notifications", tags=["notifications"])


@notification_router.get("", response_model=list[NotificationResponse])
async def list_notifications(
    limit: int | None = None, actor: Actor = Depends(current_actor)
) -> list[NotificationResponse]:
    return [
        NotificationResponse(
            notification_id=str(n.id),
            kind=n.kind,
            title=n.title,
            message=n.message,
            related_order_id=str(n.related_order_id) if n.related_order_id else None,
            is_read=n.is_read,
            created_at=n.created_at,
        )
        for n in recent_notifications(actor.user_id, limit)
    ]


@notification_router.get("/unread-count", response_model=UnreadCountResponse)
async def get_unread_count(actor: Actor = Depends(current_actor)) -> UnreadCountResponse:
    return UnreadCountResponse(unread=unread_count(actor.user_id))


@notification_router.put("/read-all", response_model=MarkedResponse)
async def read_all(actor: Actor = Depends(current_actor)) -> MarkedResponse:
    return MarkedResponse(changed=mark_all_read(actor.user_id))


@notification_router.put("/{notification_id}/read", response_model=MarkedResponse)
async def read_one(notification_id: str, actor: Actor = Depends(current_actor)) -> MarkedResponse:
    return MarkedResponse(changed=1 if mark_read(notification_id, actor.user_id) else 0)


# ---------------------------------------------------------------------------
# Member Router
# ---------------------------------------------------------------------------
member_router = APIRouter(prefix="/members", tags=["members"])


@member_router.post("", status_code=201, response_model=MemberIdResponse)
async def register_member(body: RegisterMemberRequest, actor: Actor = Depends(current_actor)) -> MemberIdResponse:
    """Members register themselves as customers or sellers. Admins register anyone."""
    if not actor.is_admin and (str(body.user_id) != str(actor.user_id) or body.role == Role.ADMIN.value):
        raise AuthorizationError("Only admins can register other members or admins", actor_id=actor.user_id)
    command = RegisterMember(user_id=body.user_id, full_name=body.full_name, role=body.role)
    result = current_domain.process(command, asynchronous=False)
    return MemberIdResponse(user_id=result)


@member_router.put("/{user_id}/role", response_model=StatusResponse)
async def change_member_role(
    user_id: str, body: ChangeRoleRequest, actor: Actor = Depends(current_actor)
) -> StatusResponse:
    _require_admin(actor)
    current_domain.process(ChangeMemberRole(user_id=user_id, role=body.role), asynchronous=False)
    return StatusResponse()


ROUTERS = [
    cart_router,
    delivery_router,
    checkout_router,
    order_router,
    seller_router,
    stock_router,
    notification_router,
    member_router,
]

