import logging

from celery import shared_task
from django.core.files.storage import default_storage
from django.db import transaction

logger = logging.getLogger(__name__)


@shared_task
def remove_stored_files(names):
    removed = 0
    for name in names:
        try:
            default_storage.delete(name)
            removed += 1
        except OSError as e:
            logger.warning("Could not remove %s: %s", name, e)

    logger.info("Removed %d stored file(s)", removed)
    return f"{removed} fichier(s) supprimé(s)."


def queue_file_removal(names):
    # the row change is already committed; a broker outage only leaves orphan files
    try:
        remove_stored_files.delay(names)
    except Exception as e:
        logger.warning("Could not queue removal of %s: %s", names, e)


def schedule_file_removal(*names):
    """Queue removal of ``names`` once the surrounding transaction commits."""
    names = [name for name in names if name]
    if not names:
        return
    transaction.on_commit(lambda: queue_file_removal(names))
