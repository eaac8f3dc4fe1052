"""
SEO metadata for the public shop and product pages.

The front end renders these into <title>, <meta>, Open Graph, Twitter card
and JSON-LD tags; URLs point at the front end (``SITE_BASE_URL``).
"""
from django.conf import settings

from .whatsapp import format_amount


def page_url(path):
    return f"{settings.SITE_BASE_URL}{path}"


def not_found_metadata(kind="Boutique"):
    return {
        "title": f"{kind} introuvable - {settings.SITE_NAME}",
        "description": f"Cette {kind.lower()} n'existe pas ou n'est plus disponible.",
        "robots": "noindex, nofollow",
    }


def shop_metadata(shop, image_url=None):
    site = settings.SITE_NAME
    path = f"/{shop.slug}"
    description = shop.description or (
        f"Découvrez {shop.name}, spécialisé en {shop.activity} à {shop.city}. "
        f"Boutique en ligne sur {site}."
    )

    meta = {
        "title": f"{shop.name} - {shop.activity} à {shop.city} | {site}",
        "description": description,
        "keywords": f"{shop.name}, {shop.activity}, {shop.city}, boutique en ligne, shopping, {site}",
        "robots": "index, follow",
        "canonical": page_url(path),
        "open_graph": {
            "title": f"{shop.name} - Boutique en ligne",
            "description": shop.description or f"{shop.activity} à {shop.city}",
            "url": page_url(path),
            "site_name": site,
            "type": "website",
            "locale": "fr_FR",
            "images": [{
                "url": image_url,
                "width": 1200,
                "height": 630,
                "alt": f"Photo de {shop.name}",
            }] if image_url else [],
        },
        "twitter": {
            "card": "summary_large_image",
            "title": f"{shop.name} - {shop.activity}",
            "description": shop.description or f"Boutique {shop.activity} à {shop.city}",
        },
        "json_ld": {
            "@context": "https://schema.org",
            "@type": "Store",
            "name": shop.name,
            "description": description,
            "url": page_url(path),
            "image": image_url,
            "address": {
                "@type": "PostalAddress",
                "addressLocality": shop.city,
            },
        },
    }
    if settings.GOOGLE_SITE_VERIFICATION:
        meta["verification"] = {"google": settings.GOOGLE_SITE_VERIFICATION}
    return meta


def product_metadata(shop, product, image_url=None):
    site = settings.SITE_NAME
    path = f"/{shop.slug}/product/{product.id}"
    price = format_amount(product.price)
    in_stock = bool(product.stock and product.stock > 0)
    description = product.description or (
        f"{product.name} disponible chez {shop.name} à {shop.city}. Prix: {price} FCFA"
    )

    return {
        "title": f"{product.name} - {shop.name} | {site}",
        "description": description,
        "keywords": ", ".join(filter(None, [
            product.name, shop.name, shop.activity, shop.city, "achat en ligne", site, product.category,
        ])),
        "robots": "index, follow",
        "canonical": page_url(path),
        "open_graph": {
            "title": f"{product.name} - {price} FCFA",
            "description": description,
            "url": page_url(path),
            "site_name": site,
            "type": "website",
            "locale": "fr_FR",
            "images": [{"url": image_url, "width": 800, "height": 800, "alt": product.name}] if image_url else [],
        },
        "twitter": {
            "card": "summary_large_image",
            "title": f"{product.name} - {price} FCFA",
            "description": description[:160],
            "images": [image_url] if image_url else [],
        },
        "other": {
            "product:price:amount": str(product.price),
            "product:price:currency": "XOF",
            "product:availability": "in stock" if in_stock else "out of stock",
            "product:condition": "new",
            "product:category": product.category or shop.activity,
            "product:brand": shop.name,
        },
        "json_ld": {
            "@context": "https://schema.org",
            "@type": "Product",
            "name": product.name,
            "description": description,
            "image": image_url,
            "category": product.category or shop.activity,
            "brand": {"@type": "Brand", "name": shop.name},
            "offers": {
                "@type": "Offer",
                "price": product.price,
                "priceCurrency": "XOF",
                "availability": "https://schema.org/InStock" if in_stock else "https://schema.org/OutOfStock",
                "url": page_url(path),
                "seller": {"@type": "Organization", "name": shop.name},
            },
        },
    }
