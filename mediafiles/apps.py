from django.apps import AppConfig


class MediafilesConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "mediafiles"
    verbose_name = "Fichiers médias"
