import os
import time

from django.conf import settings
from django.db import models


def _stamped(filename):
    base, ext = os.path.splitext(os.path.basename(filename))
    return f"{int(time.time() * 1000)}_{base[:60]}{ext.lower()}"


def product_photo_path(instance, filename):
    return f"shop-photos/products/{_stamped(filename)}"


def product_video_path(instance, filename):
    return f"product-videos/products/{_stamped(filename)}"


class Product(models.Model):
    shop = models.ForeignKey('shops.Shop', on_delete=models.CASCADE, related_name='products')
    name = models.CharField(max_length=100)
    price = models.PositiveIntegerField(help_text="Prix en FCFA")
    # null: stock not tracked
    stock = models.PositiveIntegerField(null=True, blank=True)
    photo = models.ImageField(upload_to=product_photo_path, blank=True)
    video = models.FileField(upload_to=product_video_path, blank=True)
    description = models.TextField(blank=True)
    category = models.CharField(max_length=100, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at', '-id']

    def __str__(self):
        return f"[{self.id}] {self.name} ({self.price} FCFA)"

    @property
    def is_available(self):
        return (self.stock or 0) > 0

    @property
    def is_low_stock(self):
        return self.stock is not None and 0 < self.stock <= settings.LOW_STOCK_THRESHOLD
