import logging
import mimetypes

from django.core import signing
from django.core.files.storage import default_storage
from django.http import FileResponse, Http404, HttpResponseForbidden
from django.views.decorators.http import require_GET

from .signing import read_signed_token

logger = logging.getLogger(__name__)


@require_GET
def signed_media(request, token):
    try:
        name = read_signed_token(token)
    except signing.SignatureExpired:
        return HttpResponseForbidden("Lien expiré.")
    except signing.BadSignature:
        logger.info("Rejected media token %s", token[:16])
        return HttpResponseForbidden("Lien invalide.")

    if not default_storage.exists(name):
        raise Http404("Fichier introuvable.")

    content_type, _ = mimetypes.guess_type(name)
    return FileResponse(
        default_storage.open(name, "rb"),
        content_type=content_type or "application/octet-stream",
    )
