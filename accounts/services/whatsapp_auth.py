import logging
import math
import re
import secrets
from dataclasses import dataclass
from datetime import timedelta

from django.utils import timezone

from accounts.models import WhatsAppVerification
from .twilio import TwilioError, TwilioNotConfigured, send_whatsapp_message

logger = logging.getLogger("accounts")

CODE_EXPIRY_MINUTES = 10
MAX_ATTEMPTS = 3
RATE_LIMIT_WINDOW_MINUTES = 15
MAX_REQUESTS_PER_WINDOW = 3

# Twilio error codes with a dedicated message
TWILIO_ERROR_MESSAGES = {
    21211: "Numéro de téléphone invalide",
    21614: "Ce numéro ne peut pas recevoir de messages WhatsApp",
    21408: "Permission refusée pour ce numéro",
}


@dataclass(frozen=True)
class Country:
    code: str
    flag: str
    name: str
    pattern: str
    prefix: str
    example: str

    def matches(self, number):
        return re.match(self.pattern, number) is not None


SUPPORTED_COUNTRIES = [
    Country("MA", "🇲🇦", "Maroc", r"^(212|0)?[67]\d{8}$", "212", "+212612345678"),
    Country("CI", "🇨🇮", "Côte d'Ivoire", r"^(225|0)?[0-9]\d{7,8}$", "225", "+22501234567"),
    Country("SN", "🇸🇳", "Sénégal", r"^(221|0)?[7]\d{8}$", "221", "+221701234567"),
    Country("BF", "🇧🇫", "Burkina Faso", r"^(226|0)?[567]\d{7}$", "226", "+22650123456"),
    Country("ML", "🇲🇱", "Mali", r"^(223|0)?[679]\d{7}$", "223", "+22360123456"),
]


class VerificationError(Exception):
    def __init__(self, message, status_code=400):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def normalize_phone_number(raw):
    """
    Validate ``raw`` against the supported countries and return
    ``(e164_number, country)``. Numbers carrying a country prefix are matched
    to that country first; local formats fall back to list order.
    """
    number = re.sub(r"[\s\-()]", "", raw or "").lstrip("+")

    candidates = sorted(SUPPORTED_COUNTRIES, key=lambda c: not number.startswith(c.prefix))
    for country in candidates:
        if not country.matches(number):
            continue
        formatted = number
        if not formatted.startswith(country.prefix):
            if formatted.startswith("0"):
                formatted = formatted[1:]
            formatted = country.prefix + formatted
        return f"+{formatted}", country

    names = ", ".join(c.name for c in SUPPORTED_COUNTRIES)
    raise VerificationError(f"Numéro non supporté. Pays supportés: {names}")


def generate_code():
    return str(100000 + secrets.randbelow(900000))


def build_verification_message(code, country=None):
    flag = country.flag if country else "🌍"
    message = f"{flag} *ShopShap* - Code de vérification\n\n"
    message += "Votre code de vérification WhatsApp est :\n\n"
    message += f"*{code}*\n\n"
    message += f"⏰ Ce code expire dans {CODE_EXPIRY_MINUTES} minutes.\n"
    message += "🔒 Ne partagez jamais ce code avec qui que ce soit.\n\n"
    if country:
        message += f"📍 Connexion depuis: {country.name}\n"
    message += "Merci de faire confiance à ShopShap ! 🛍️"
    return message


def _check_rate_limit(phone, now):
    window = timedelta(minutes=RATE_LIMIT_WINDOW_MINUTES)
    recent = WhatsAppVerification.objects.filter(phone=phone, created_at__gte=now - window)
    if recent.count() < MAX_REQUESTS_PER_WINDOW:
        return

    oldest = recent.order_by("created_at").first()
    wait_minutes = max(1, math.ceil((oldest.created_at + window - now).total_seconds() / 60))
    raise VerificationError(
        f"Trop de tentatives. Réessayez dans {wait_minutes} minute(s).",
        status_code=429,
    )


def send_verification_code(raw_phone):
    phone, country = normalize_phone_number(raw_phone)
    now = timezone.now()
    _check_rate_limit(phone, now)

    code = generate_code()
    WhatsAppVerification.objects.create(
        phone=phone,
        code=code,
        expires_at=now + timedelta(minutes=CODE_EXPIRY_MINUTES),
    )

    try:
        sid = send_whatsapp_message(phone, build_verification_message(code, country))
    except TwilioNotConfigured:
        logger.error("WhatsApp verification requested but Twilio is not configured")
        raise VerificationError("Service indisponible. Veuillez réessayer plus tard.", status_code=503)
    except TwilioError as e:
        if e.code in TWILIO_ERROR_MESSAGES:
            raise VerificationError(TWILIO_ERROR_MESSAGES[e.code])
        raise VerificationError("Erreur lors de l'envoi. Veuillez réessayer.", status_code=503)

    return {
        "message": f"Code envoyé sur WhatsApp {country.flag} {country.name}",
        "sid": sid,
        "country": country.name,
        "formatted_number": phone,
    }


def verify_code(raw_phone, provided_code):
    try:
        phone, country = normalize_phone_number(raw_phone)
    except VerificationError:
        raise VerificationError("Numéro de téléphone invalide")

    codes = WhatsAppVerification.objects.filter(phone=phone)
    stored = codes.order_by("-created_at").first()
    if stored is None:
        raise VerificationError("Aucun code trouvé. Demandez un nouveau code.")

    if stored.is_expired:
        codes.delete()
        raise VerificationError("Code expiré. Demandez un nouveau code.")

    if stored.attempts >= MAX_ATTEMPTS:
        codes.delete()
        raise VerificationError("Trop de tentatives. Demandez un nouveau code.")

    if not secrets.compare_digest(stored.code, (provided_code or "").strip()):
        stored.attempts += 1
        stored.save(update_fields=["attempts"])
        remaining = MAX_ATTEMPTS - stored.attempts
        if remaining <= 0:
            codes.delete()
            raise VerificationError("Code incorrect. Trop de tentatives.")
        raise VerificationError(f"Code incorrect. {remaining} tentative(s) restante(s).")

    codes.delete()
    return {
        "phone": phone,
        "country": country.code,
        "verified_at": timezone.now(),
    }
