import os
import time

from django.db import models


def payment_proof_path(instance, filename):
    base, ext = os.path.splitext(os.path.basename(filename))
    return f"payment-proofs/{instance.shop_id}/{int(time.time() * 1000)}_{base[:60]}{ext.lower()}"


class Order(models.Model):
    class Status(models.TextChoices):
        PENDING = 'pending', 'En attente'
        PAID = 'paid', 'Payée'
        DELIVERED = 'delivered', 'Livrée'
        CANCELLED = 'cancelled', 'Annulée'

    # pending -> paid -> delivered, pending|paid -> cancelled
    VALID_TRANSITIONS = {
        Status.PENDING: [Status.PAID, Status.CANCELLED],
        Status.PAID: [Status.DELIVERED, Status.CANCELLED],
        Status.DELIVERED: [],
        Status.CANCELLED: [],
    }
    REVENUE_STATUSES = (Status.PAID, Status.DELIVERED)

    shop = models.ForeignKey('shops.Shop', on_delete=models.CASCADE, related_name='orders')
    client_name = models.CharField(max_length=100)
    client_phone = models.CharField(max_length=20, blank=True, null=True)
    product = models.ForeignKey(
        'products.Product',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='orders',
    )
    product_name = models.CharField(max_length=200)
    quantity = models.PositiveIntegerField(default=1)
    unit_price = models.PositiveIntegerField()
    total_amount = models.PositiveIntegerField(default=0, editable=False)
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.PENDING)
    payment_proof = models.ImageField(upload_to=payment_proof_path, blank=True)
    notes = models.TextField(blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at', '-id']

    def __str__(self):
        return f"[{self.id}] {self.client_name} - {self.product_name} x{self.quantity} ({self.status})"

    @classmethod
    def can_transition(cls, current, new):
        return new in cls.VALID_TRANSITIONS.get(current, [])

    @property
    def is_terminal(self):
        return not self.VALID_TRANSITIONS.get(self.status)

    @property
    def allowed_transitions(self):
        return [str(s) for s in self.VALID_TRANSITIONS.get(self.status, [])]

    def compute_total(self):
        return self.unit_price * self.quantity

    def save(self, *args, **kwargs):
        # total always follows price x quantity
        self.total_amount = self.compute_total()
        update_fields = kwargs.get("update_fields")
        if update_fields is not None:
            kwargs["update_fields"] = set(update_fields) | {"total_amount", "updated_at"}
        super().save(*args, **kwargs)
