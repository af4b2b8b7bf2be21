"""Seller and admin dashboard reports built from the order read models."""

from collections import defaultdict
from datetime import date

from protean.utils.globals import current_domain

from marketplace.order.order import OrderStatus
from marketplace.projections.order_summary import OrderSummary
from marketplace.projections.seller_order_lines import SellerOrderLine


def seller_sales_report(seller_id: str, day: date | None = None) -> dict:
    """Orders holding ``seller_id``'s items, grouped by order day, newest first.

    Revenue counts only this seller's lines. When ``day`` is given only that
    day is reported.
    """
    lines = current_domain.repository_for(SellerOrderLine)._dao.query.filter(seller_id=seller_id).all().items
    if day is not None:
        lines = [line for line in lines if line.ordered_at and line.ordered_at.date() == day]

    orders: dict[str, dict] = {}
    for line in lines:
        order = orders.setdefault(
            str(line.order_id),
            {
                "order_id": str(line.order_id),
                "customer_name": line.customer_name,
                "status": line.status,
                "ordered_at": line.ordered_at,
                "total": 0.0,
                "items": [],
            },
        )
        order["items"].append(
            {
                "product_id": str(line.product_id),
                "product_name": line.product_name,
                "quantity": line.quantity,
                "unit_price": line.unit_price,
                "line_total": line.line_total,
            }
        )
        order["total"] = round(order["total"] + line.line_total, 2)

    by_day: dict[date, list[dict]] = defaultdict(list)
    for order in orders.values():
        by_day[order["ordered_at"].date()].append(order)

    days = []
    for order_day in sorted(by_day, reverse=True):
        day_orders = sorted(by_day[order_day], key=lambda o: o["ordered_at"], reverse=True)
        days.append(
            {
                "day": order_day,
                "order_count": len(day_orders),
                "total_revenue": round(sum(o["total"] for o in day_orders), 2),
                "orders": day_orders,
            }
        )

    return {
        "seller_id": str(seller_id),
        "total_orders": len(orders),
        "total_revenue": round(sum(d["total_revenue"] for d in days), 2),
        "days": days,
    }


def order_stats() -> dict:
    """Admin counts by status and revenue from orders that were not cancelled."""
    summaries = current_domain.repository_for(OrderSummary)._dao.query.all().items

    by_status = {status.value: 0 for status in OrderStatus}
    revenue = 0.0
    for summary in summaries:
        by_status[summary.status] = by_status.get(summary.status, 0) + 1
        if summary.status != OrderStatus.CANCELLED.value:
            revenue += summary.total or 0.0

    return {
        "total_orders": len(summaries),
        "by_status": by_status,
        "revenue": round(revenue, 2),
    }
