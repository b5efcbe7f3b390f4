"""
Celery application and periodic schedule.

The deadline sweep runs from Celery beat on a configurable crontab, daily
by default.
"""

from celery import Celery
from celery.schedules import crontab

from hostel_portal.config.logging import get_logger
from hostel_portal.config.settings import Settings, settings

logger = get_logger(__name__)

DEADLINE_SWEEP_TASK = "hostel_portal.tasks.run_deadline_sweep"


def build_beat_schedule(app_settings: Settings) -> dict:
    return {
        'check-payment-deadlines': {
            'task': DEADLINE_SWEEP_TASK,
            'schedule': crontab(
                hour=app_settings.DEADLINE_SWEEP_CRON_HOUR,
                minute=app_settings.DEADLINE_SWEEP_CRON_MINUTE,
            ),
        },
    }


def create_celery_app(app_settings: Settings = settings) -> Celery:
    """Create and configure the Celery application."""
    app = Celery(
        'hostel_portal',
        broker=app_settings.CELERY_BROKER_URL,
        backend=app_settings.CELERY_RESULT_BACKEND,
        include=['hostel_portal.tasks'],
    )
    app.conf.update(
        task_serializer='json',
        accept_content=['json'],
        result_serializer='json',
        timezone='UTC',
        enable_utc=True,
        task_track_started=True,
        worker_prefetch_multiplier=1,
        task_acks_late=True,
    )
    if app_settings.ENABLE_PERIODIC_TASKS:
        app.conf.beat_schedule = build_beat_schedule(app_settings)
        logger.debug("Periodic tasks configured")
    return app


celery_app = create_celery_app()
