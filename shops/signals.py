from django.db.models.signals import post_delete, post_save, pre_save
from django.dispatch import receiver

from mediafiles.cleanup import remember_replaced_files, remove_instance_files, remove_replaced_files
from .models import Shop

FILE_FIELDS = ["photo"]


# New shop photo: the previous one is removed from storage
@receiver(pre_save, sender=Shop)
def note_replaced_photo(sender, instance, **kwargs):
    remember_replaced_files(instance, FILE_FIELDS)


@receiver(post_save, sender=Shop)
def remove_replaced_photo(sender, instance, **kwargs):
    remove_replaced_files(instance)


@receiver(post_delete, sender=Shop)
def remove_deleted_photo(sender, instance, **kwargs):
    remove_instance_files(instance, FILE_FIELDS)
