from django.utils import timezone

from .models import Order


def _is_same_month(value, today):
    value = timezone.localtime(value) if timezone.is_aware(value) else value
    return value.year == today.year and value.month == today.month


def order_stats(orders, today=None):
    """
    Counters for the orders page.

    Revenue only counts paid and delivered orders; ``month_revenue`` keeps
    those created in the current calendar month.
    """
    if today is None:
        today = timezone.localdate()
    orders = list(orders)

    by_status = {choice: 0 for choice in Order.Status.values}
    total_revenue = 0
    month_revenue = 0
    for order in orders:
        by_status[order.status] = by_status.get(order.status, 0) + 1
        if order.status in Order.REVENUE_STATUSES:
            total_revenue += order.total_amount
            if _is_same_month(order.created_at, today):
                month_revenue += order.total_amount

    return {
        "total": len(orders),
        "by_status": by_status,
        "total_revenue": total_revenue,
        "month_revenue": month_revenue,
    }
