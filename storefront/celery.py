import os
from celery import Celery

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "storefront.settings")

app = Celery("storefront")

app.config_from_object("django.conf:settings", namespace="CELERY")

app.autodiscover_tasks()

# worker stdout / stderr go through logging
app.conf.update(
    worker_redirect_stdouts=True,
    worker_redirect_stdouts_level="INFO",
)
