import re
from urllib.parse import quote

WA_BASE_URL = "https://wa.me/"


def format_amount(amount):
    # 15000 -> "15 000"
    return f"{int(amount):,}".replace(",", " ")


def clean_phone(phone):
    return re.sub(r"\D", "", phone or "")


def whatsapp_link(phone, message):
    """wa.me deep link with a prefilled, URL-encoded message."""
    return f"{WA_BASE_URL}{clean_phone(phone)}?text={quote(message, safe='')}"


def product_message(product, shop, product_url=None):
    message = f"🛍️ *{product.name}*\n\n"
    message += f"💰 Prix: *{format_amount(product.price)} FCFA*\n\n"
    if product.description:
        message += f"📝 {product.description}\n\n"
    message += f"🏪 Boutique: *{shop.name}*\n\n"
    message += "✨ Je suis intéressé(e) par cet article !"
    if product_url:
        message += f"\n\n👉 {product_url}"
    return message


def shop_intro_message(shop, catalog_url=None):
    message = f"👋 Bienvenue chez *{shop.name}* !\n\n"
    message += f"🏪 {shop.activity} à {shop.city}\n\n"
    if shop.description:
        message += f"✨ {shop.description}\n\n"
    message += "📱 Découvrez tous nos produits en ligne et commandez directement via WhatsApp !\n\n"
    if catalog_url:
        message += f"👉 Notre catalogue: {catalog_url}\n\n"
    message += "🚚 Livraison disponible\n"
    message += "💳 Paiement sécurisé\n"
    message += "🎯 Service client réactif\n\n"
    message += "N'hésitez pas à me contacter ! 😊"
    return message


def order_reminder_message(order):
    if order.status == "pending":
        closing = "Votre commande est prête ! Merci de confirmer votre paiement."
    elif order.status == "paid":
        closing = "Votre commande sera livrée sous peu. Merci de votre confiance !"
    else:
        closing = "Merci pour votre commande !"

    message = f"Bonjour {order.client_name},\n\n"
    message += "Rappel concernant votre commande :\n"
    message += f"📦 {order.product_name} x{order.quantity}\n"
    message += f"💰 {format_amount(order.total_amount)} FCFA\n\n"
    message += f"{closing}\n\n"
    message += "Cordialement 🙏"
    return message
