import logging

from django.db.models.signals import post_delete, post_save, pre_save
from django.dispatch import receiver

from mediafiles.cleanup import remember_replaced_files, remove_instance_files, remove_replaced_files
from .models import Product

logger = logging.getLogger("products")

FILE_FIELDS = ["photo", "video"]


# Replaced photo/video: drop the previous object from storage once saved
@receiver(pre_save, sender=Product)
def note_replaced_media(sender, instance, **kwargs):
    remember_replaced_files(instance, FILE_FIELDS)


@receiver(post_save, sender=Product)
def remove_replaced_media(sender, instance, **kwargs):
    remove_replaced_files(instance)


# Deleted product (directly or through its shop): drop its media
@receiver(post_delete, sender=Product)
def remove_deleted_media(sender, instance, **kwargs):
    logger.debug("Scheduling media removal for product %s", instance.pk)
    remove_instance_files(instance, FILE_FIELDS)
