import logging

import requests
from django.conf import settings

logger = logging.getLogger("accounts")

MESSAGES_URL = "https://api.twilio.com/2010-04-01/Accounts/{sid}/Messages.json"


class TwilioNotConfigured(Exception):
    pass


class TwilioError(Exception):
    def __init__(self, message, code=None):
        super().__init__(message)
        self.code = code


def send_whatsapp_message(to, body):
    """
    Send ``body`` to the E.164 number ``to`` over WhatsApp. Returns the message SID.
    """
    sid = settings.TWILIO_ACCOUNT_SID
    token = settings.TWILIO_AUTH_TOKEN
    if not sid or not token:
        raise TwilioNotConfigured("Twilio credentials not configured")

    try:
        resp = requests.post(
            MESSAGES_URL.format(sid=sid),
            data={
                "From": settings.TWILIO_WHATSAPP_FROM,
                "To": f"whatsapp:{to}",
                "Body": body,
            },
            auth=(sid, token),
            timeout=settings.TWILIO_TIMEOUT,
        )
    except requests.RequestException as e:
        logger.error("Twilio request failed for %s: %s", to, e)
        raise TwilioError(str(e))

    payload = resp.json() if resp.content else {}
    if resp.status_code >= 400:
        logger.error("Twilio rejected message to %s: %s", to, payload)
        raise TwilioError(payload.get("message", "Twilio error"), code=payload.get("code"))

    logger.info("WhatsApp message sent to %s (sid=%s)", to, payload.get("sid"))
    return payload.get("sid")
