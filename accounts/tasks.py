from celery import shared_task
from django.utils import timezone

from .models import WhatsAppVerification


@shared_task
def purge_expired_verifications():
    now = timezone.now()
    count, _ = WhatsAppVerification.objects.filter(expires_at__lt=now).delete()

    return f"{count} code(s) WhatsApp expiré(s) supprimé(s)."
