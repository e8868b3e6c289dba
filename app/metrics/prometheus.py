import logging
import time
from contextlib import contextmanager
from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST

log = logging.getLogger(__name__)
request_count = Counter(
    'http_requests_total',
    'Total HTTP requests',
    ['method', 'endpoint', 'status']
)
request_duration = Histogram(
    'http_request_duration_seconds',
    'HTTP request duration in seconds',
    ['method', 'endpoint']
)
engagement_events = Counter(
    'engagement_events_total',
    'Engagement and social-graph mutations',
    ['kind', 'action']
)
notifications_created = Counter(
    'notifications_created_total',
    'Notifications enqueued',
    ['type']
)
notifications_purged = Counter(
    'notifications_purged_total',
    'Notifications deleted by the retention sweep',
    ['state']
)
notification_purge_duration = Histogram(
    'notification_purge_duration_seconds',
    'Duration of the notification retention sweep in seconds'
)
celery_tasks_total = Counter(
    'celery_tasks_total',
    'Total Celery tasks',
    ['task_name', 'status']
)
celery_task_duration = Histogram(
    'celery_task_duration_seconds',
    'Celery task duration in seconds',
    ['task_name']
)


@contextmanager
def track_duration(histogram, labels=None):
    start_time = time.time()
    try:
        yield
    finally:
        duration = time.time() - start_time
        if labels:
            histogram.labels(**labels).observe(duration)
        else:
            histogram.observe(duration)


def track_engagement(kind, action):
    engagement_events.labels(kind=kind, action=action).inc()


def track_notification(type_, count=1):
    if count:
        notifications_created.labels(type=getattr(type_, "value", type_)).inc(count)


def track_purge(read_deleted, unread_deleted):
    notifications_purged.labels(state='read').inc(read_deleted)
    notifications_purged.labels(state='unread').inc(unread_deleted)


def track_celery_task(task_name, status, duration=None):
    celery_tasks_total.labels(task_name=task_name, status=status).inc()
    if duration is not None:
        celery_task_duration.labels(task_name=task_name).observe(duration)


def get_metrics():
    return generate_latest()


async def metrics_endpoint():
    from fastapi import Response
    metrics = get_metrics()
    return Response(content=metrics, media_type=CONTENT_TYPE_LATEST)
