from django.conf import settings
from django.db.models import Q

from orders.models import Order
from orders.stats import order_stats


def dashboard_stats(shop, today=None):
    """Owner dashboard: order and revenue counters plus the latest orders."""
    orders = list(shop.orders.all())
    counters = order_stats(orders, today=today)
    products = shop.products.all()

    low_stock = products.filter(
        Q(stock__gt=0) & Q(stock__lte=settings.LOW_STOCK_THRESHOLD)
    ).count()

    return {
        "total_orders": counters["total"],
        "pending_orders": counters["by_status"][Order.Status.PENDING],
        "month_revenue": counters["month_revenue"],
        "total_revenue": counters["total_revenue"],
        "product_count": products.count(),
        "low_stock_count": low_stock,
        "recent_orders": orders[:3],
    }


def profile_stats(shop):
    orders = list(shop.orders.all())
    return {
        "product_count": shop.products.count(),
        "order_count": len(orders),
        "revenue": order_stats(orders)["total_revenue"],
        "joined_at": shop.created_at,
    }
