import logging
from concurrent.futures import ThreadPoolExecutor, wait

from django.conf import settings

from .signing import create_signed_url

logger = logging.getLogger(__name__)


def resolve_signed_urls(objects, fields, request=None, signer=create_signed_url):
    """
    Sign every stored file referenced by ``fields`` on ``objects``.

    All signing jobs run concurrently and are settled together. A job that
    fails only blanks its own field; the rest of the page still gets URLs.
    Returns ``{obj.pk: {"<field>_url": url or None}}``.
    """
    resolved = {
        obj.pk: {f"{field}_url": None for field in fields}
        for obj in objects
    }

    jobs = []
    for obj in objects:
        for field in fields:
            file = getattr(obj, field, None)
            if file:
                jobs.append((obj.pk, field, file.name))

    if not jobs:
        return resolved

    workers = max(1, min(settings.SIGNED_URL_WORKERS, len(jobs)))
    with ThreadPoolExecutor(max_workers=workers) as pool:
        futures = {
            pool.submit(signer, name, request): (pk, field, name)
            for pk, field, name in jobs
        }
        wait(futures)

    for future, (pk, field, name) in futures.items():
        try:
            resolved[pk][f"{field}_url"] = future.result()
        except Exception as e:
            logger.warning("Signed URL failed for %s (%s): %s", name, field, e)

    return resolved


def resolve_signed_url(obj, field, request=None):
    """Single-object shortcut, same failure semantics as the batch."""
    return resolve_signed_urls([obj], [field], request=request)[obj.pk][f"{field}_url"]
