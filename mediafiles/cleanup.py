from .tasks import schedule_file_removal

REPLACED_ATTR = "_replaced_file_names"


def replaced_file_names(instance, fields):
    """
    Storage names on the saved row that ``instance`` is about to overwrite.

    Called from ``pre_save``; a new row has nothing to replace.
    """
    if instance.pk is None:
        return []
    previous = type(instance).objects.filter(pk=instance.pk).values(*fields).first()
    if previous is None:
        return []

    stale = []
    for field in fields:
        old_name = previous[field]
        new_name = getattr(instance, field).name if getattr(instance, field) else ""
        if old_name and old_name != new_name:
            stale.append(old_name)
    return stale


def remember_replaced_files(instance, fields):
    """``pre_save`` half: note what the pending save overwrites."""
    setattr(instance, REPLACED_ATTR, replaced_file_names(instance, fields))


def remove_replaced_files(instance):
    """``post_save`` half: the row is written, schedule the old files."""
    schedule_file_removal(*getattr(instance, REPLACED_ATTR, []))
    setattr(instance, REPLACED_ATTR, [])


def remove_instance_files(instance, fields):
    names = []
    for field in fields:
        file = getattr(instance, field)
        if file:
            names.append(file.name)
    schedule_file_removal(*names)
