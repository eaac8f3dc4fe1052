from django.db.models.signals import post_delete, post_save, pre_save
from django.dispatch import receiver

from mediafiles.cleanup import remember_replaced_files, remove_instance_files, remove_replaced_files
from .models import Order

FILE_FIELDS = ["payment_proof"]


@receiver(pre_save, sender=Order)
def note_replaced_proof(sender, instance, **kwargs):
    remember_replaced_files(instance, FILE_FIELDS)


@receiver(post_save, sender=Order)
def remove_replaced_proof(sender, instance, **kwargs):
    remove_replaced_files(instance)


@receiver(post_delete, sender=Order)
def remove_deleted_proof(sender, instance, **kwargs):
    remove_instance_files(instance, FILE_FIELDS)
