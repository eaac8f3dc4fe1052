from django.conf import settings
from django.core import signing
from django.core.files.storage import default_storage
from django.urls import reverse

SALT = "mediafiles.signed-url"

_signer = signing.TimestampSigner(salt=SALT)


def create_signed_url(name, request=None):
    """
    Return a time-limited URL for a stored file.

    The storage name is embedded in a timestamped signature, so the link
    stops working once ``SIGNED_URL_MAX_AGE`` seconds have passed.
    Raises ``FileNotFoundError`` when the key does not exist in storage.
    """
    if not name:
        raise ValueError("Aucun fichier à signer.")
    if not default_storage.exists(name):
        raise FileNotFoundError(name)

    token = _signer.sign_object({"key": name}, compress=True)
    path = reverse("signed-media", kwargs={"token": token})
    if request is not None:
        return request.build_absolute_uri(path)
    return path


def read_signed_token(token, max_age=None):
    """Return the storage name carried by ``token``; raises ``signing.BadSignature``."""
    if max_age is None:
        max_age = settings.SIGNED_URL_MAX_AGE
    payload = _signer.unsign_object(token, max_age=max_age)
    return payload["key"]
