import os
import time

from django.conf import settings
from django.db import models

DELETED_NAME = "[COMPTE SUPPRIMÉ]"
DELETED_FIELD = "[SUPPRIMÉ]"


def shop_photo_path(instance, filename):
    ext = os.path.splitext(filename)[1].lstrip(".").lower() or "jpg"
    return f"shop-photos/{instance.owner_id}_{int(time.time() * 1000)}.{ext}"


# Seller storefront (one per owner), addressed publicly by its slug
class Shop(models.Model):
    class Theme(models.TextChoices):
        ELEGANT = "elegant", "Élégant"
        WARM = "warm", "Chaleureux"
        NATURE = "nature", "Nature"
        LUXURY = "luxury", "Luxe"
        MODERN = "modern", "Moderne"
        OCEAN = "ocean", "Océan"

    owner = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='shop',
    )
    name = models.CharField(max_length=100)
    activity = models.CharField(max_length=100)
    city = models.CharField(max_length=100)
    slug = models.SlugField(max_length=50, unique=True)
    theme = models.CharField(max_length=20, choices=Theme.choices, default=Theme.ELEGANT)
    photo = models.ImageField(upload_to=shop_photo_path, blank=True)
    description = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"[{self.id}] {self.name} (/{self.slug})"

    @property
    def is_deleted(self):
        return self.name == DELETED_NAME
