"""
In-memory catalog transforms shared by the public storefront and the
owner's product list. Everything here is a pure function over a list of
products (any objects with name/description/category/price/stock/created_at).
"""
from django.conf import settings

FILTERS = ("all", "available", "popular", "lowstock")
SORTS = ("newest", "price-low", "price-high", "name", "popularity")
OWNER_SORTS = ("recent", "name", "price")


def _stock(product):
    return product.stock or 0


def filter_products(products, key="all"):
    if key == "available":
        return [p for p in products if _stock(p) > 0]
    if key == "popular":
        # no sales counter yet: price stands in for popularity
        return sorted(products, key=lambda p: p.price, reverse=True)
    if key == "lowstock":
        return [p for p in products if p.stock is not None and 0 < p.stock <= settings.LOW_STOCK_THRESHOLD]
    return list(products)


def sort_products(products, key="newest"):
    if key == "price-low":
        return sorted(products, key=lambda p: p.price)
    if key in ("price-high", "popularity"):
        return sorted(products, key=lambda p: p.price, reverse=True)
    if key == "name":
        return sorted(products, key=lambda p: p.name.casefold())
    return sorted(products, key=lambda p: (p.created_at, p.pk or 0), reverse=True)


def search_products(products, query):
    """Case-insensitive substring match over name, description and category."""
    needle = (query or "").strip().casefold()
    if not needle:
        return list(products)
    return [
        p for p in products
        if needle in (p.name or "").casefold()
        or needle in (p.description or "").casefold()
        or needle in (p.category or "").casefold()
    ]


def apply_catalog(products, filter_key="all", sort_key=None, query="", cap=None):
    """
    Public storefront pipeline: filter, search, sort, then cap.

    Unknown keys fall back to the defaults. The ``popular`` filter already
    orders by popularity, so it is kept unless a sort is asked for.
    """
    if filter_key not in FILTERS:
        filter_key = "all"
    if sort_key is not None and sort_key not in SORTS:
        sort_key = None

    result = filter_products(products, filter_key)
    result = search_products(result, query)
    if sort_key or filter_key != "popular":
        result = sort_products(result, sort_key or "newest")

    if cap is None:
        cap = settings.PRODUCT_DISPLAY_CAP
    return result[:cap]


def owner_catalog(products, low_stock=False, sort_key="recent", query=""):
    """Dashboard list: optional low-stock view (stock <= threshold, untracked excluded)."""
    result = list(products)
    if low_stock:
        result = [p for p in result if p.stock is not None and p.stock <= settings.LOW_STOCK_THRESHOLD]
    result = search_products(result, query)

    if sort_key == "name":
        return sort_products(result, "name")
    if sort_key == "price":
        return sort_products(result, "price-high")
    return sort_products(result, "newest")


def catalog_summary(products):
    """Counters shown above the public product grid."""
    available = [p for p in products if _stock(p) > 0]
    return {
        "count": len(products),
        "available": len(available),
        "min_price": min((p.price for p in products), default=0),
    }
