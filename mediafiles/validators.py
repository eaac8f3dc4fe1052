import mimetypes

from django.conf import settings
from rest_framework import serializers


def _content_type(upload):
    content_type = getattr(upload, "content_type", None)
    if not content_type:
        content_type, _ = mimetypes.guess_type(upload.name)
    return content_type or ""


def validate_image_upload(upload):
    if upload.size > settings.MAX_IMAGE_UPLOAD_SIZE:
        raise serializers.ValidationError("L'image ne doit pas dépasser 5 Mo.")
    if not _content_type(upload).startswith("image/"):
        raise serializers.ValidationError("Le fichier doit être une image.")
    return upload


def validate_video_upload(upload):
    if upload.size > settings.MAX_VIDEO_UPLOAD_SIZE:
        raise serializers.ValidationError("La vidéo ne doit pas dépasser 50 Mo.")
    if not _content_type(upload).startswith("video/"):
        raise serializers.ValidationError("Le fichier doit être une vidéo.")
    return upload
