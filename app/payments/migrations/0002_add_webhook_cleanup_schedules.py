"""
Add celery-beat schedules for webhook housekeeping.

- Cleanup Old Webhook Events: daily purge of processed events older than
  WEBHOOK_EVENT_RETENTION_DAYS
- Reset Stuck Webhooks: every 15 minutes
"""

from django.db import migrations

SCHEDULES = [
    {
        "name": "Cleanup Old Webhook Events",
        "task": "payments.tasks.cleanup_old_webhook_events",
        "every": 1,
        "period": "days",
        "description": "Deletes processed webhook events past the retention window.",
    },
    {
        "name": "Reset Stuck Webhooks",
        "task": "payments.tasks.cleanup_stuck_webhooks",
        "every": 15,
        "period": "minutes",
        "description": "Marks webhook events stuck in processing as failed.",
    },
]


def create_periodic_tasks(apps, schema_editor):
    """Create the periodic tasks for webhook housekeeping."""
    IntervalSchedule = apps.get_model("django_celery_beat", "IntervalSchedule")
    PeriodicTask = apps.get_model("django_celery_beat", "PeriodicTask")

    for entry in SCHEDULES:
        schedule, _ = IntervalSchedule.objects.get_or_create(
            every=entry["every"],
            period=entry["period"],
        )
        PeriodicTask.objects.get_or_create(
            name=entry["name"],
            defaults={
                "task": entry["task"],
                "interval": schedule,
                "enabled": True,
                "description": entry["description"],
            },
        )


def remove_periodic_tasks(apps, schema_editor):
    """Remove the periodic tasks on migration rollback."""
    PeriodicTask = apps.get_model("django_celery_beat", "PeriodicTask")

    PeriodicTask.objects.filter(name__in=[entry["name"] for entry in SCHEDULES]).delete()


class Migration(migrations.Migration):
    dependencies = [
        ("payments", "0001_initial"),
        ("django_celery_beat", "0019_alter_periodictasks_options"),
    ]

    operations = [
        migrations.RunPython(create_periodic_tasks, remove_periodic_tasks),
    ]
