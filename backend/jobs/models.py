from django.db import models
from django.utils import timezone


class JobExecutionLog(models.Model):
    class Status(models.TextChoices):
        RUNNING = "running", "Running"
        COMPLETED = "completed", "Completed"
        FAILED = "failed", "Failed"
        CANCELLED = "cancelled", "Cancelled"

    job_name = models.CharField(max_length=100, db_index=True)
    # Celery task id, or a generated id for synchronous runs
    job_id = models.CharField(max_length=100, db_index=True)
    status = models.CharField(max_length=12, choices=Status.choices, default=Status.RUNNING, db_index=True)
    success = models.BooleanField(default=False, db_index=True)

    started_at = models.DateTimeField(default=timezone.now, db_index=True)
    finished_at = models.DateTimeField(null=True, blank=True)
    duration_ms = models.PositiveIntegerField(null=True, blank=True, help_text="Duration (ms)")

    retry_count = models.PositiveSmallIntegerField(default=0)
    max_retries = models.PositiveSmallIntegerField(default=0)
    error_message = models.TextField(blank=True)

    input = models.JSONField(default=dict, blank=True, help_text="Job input data")
    output = models.JSONField(default=dict, blank=True, help_text="Job output data")
    queue = models.CharField(max_length=50, blank=True, db_index=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-started_at", "-id"]
        indexes = [
            models.Index(fields=["job_name", "-started_at"], name="idx_joblog_name_started"),
        ]

    def __str__(self) -> str:
        return f"{self.job_name} ({self.job_id}) • {self.status}"
