from __future__ import annotations
import logging
import uuid
from collections import Counter
from datetime import datetime

from django.db.models import Avg, Count, Q
from django.utils import timezone

from .models import JobExecutionLog

logger = logging.getLogger(__name__)


class JobLogger:
    """Persists one JobExecutionLog row per job attempt."""

    @staticmethod
    def start(
        job_name: str,
        job_id: str | None = None,
        *,
        input: dict | None = None,
        queue: str = "",
        retry_count: int = 0,
        max_retries: int = 0,
    ) -> JobExecutionLog:
        entry = JobExecutionLog.objects.create(
            job_name=job_name,
            job_id=job_id or f"{job_name}-{uuid.uuid4().hex[:12]}",
            status=JobExecutionLog.Status.RUNNING,
            success=False,
            started_at=timezone.now(),
            retry_count=retry_count,
            max_retries=max_retries,
            input=input or {},
            queue=queue or "",
        )
        logger.info("[JOB START] %s (%s) input=%s", entry.job_name, entry.job_id, entry.input)
        return entry

    @staticmethod
    def finish(
        entry: JobExecutionLog,
        *,
        success: bool,
        output: dict | None = None,
        error_message: str = "",
    ) -> JobExecutionLog:
        finished = timezone.now()
        entry.finished_at = finished
        entry.duration_ms = max(0, int((finished - entry.started_at).total_seconds() * 1000))
        entry.status = JobExecutionLog.Status.COMPLETED if success else JobExecutionLog.Status.FAILED
        entry.success = success
        entry.output = output or {}
        entry.error_message = error_message or ""
        entry.save(update_fields=[
            "finished_at", "duration_ms", "status", "success", "output", "error_message", "updated_at",
        ])
        log = logger.info if success else logger.warning
        log(
            "[JOB %s] %s (%s) in %sms",
            "COMPLETED" if success else "FAILED", entry.job_name, entry.job_id, entry.duration_ms,
        )
        return entry


def job_stats(
    job_name: str | None = None,
    start: datetime | None = None,
    end: datetime | None = None,
    top_errors: int = 10,
) -> dict:
    """Aggregate execution statistics over JobExecutionLog rows."""
    qs = JobExecutionLog.objects.all()
    if job_name:
        qs = qs.filter(job_name=job_name)
    if start:
        qs = qs.filter(started_at__gte=start)
    if end:
        qs = qs.filter(started_at__lte=end)

    totals = qs.aggregate(
        total=Count("id"),
        succeeded=Count("id", filter=Q(success=True)),
        failed=Count("id", filter=Q(status=JobExecutionLog.Status.FAILED)),
        avg_ms=Avg("duration_ms"),
    )
    total = totals["total"] or 0
    succeeded = totals["succeeded"] or 0
    failed = totals["failed"] or 0

    errors = Counter(qs.exclude(error_message="").values_list("error_message", flat=True))
    most_common = [
        {
            "error": msg,
            "count": count,
            "percentage": round(count * 100.0 / failed, 2) if failed else 0.0,
        }
        for msg, count in errors.most_common(top_errors)
    ]

    breakdown = {}
    for row in qs.values("job_name").annotate(
        executions=Count("id"),
        succeeded=Count("id", filter=Q(success=True)),
        avg_ms=Avg("duration_ms"),
    ).order_by("job_name"):
        breakdown[row["job_name"]] = {
            "executions": row["executions"],
            "success_rate": round(row["succeeded"] / row["executions"], 4) if row["executions"] else 0.0,
            "average_ms": round(row["avg_ms"] or 0, 2),
        }

    return {
        "total_executions": total,
        "successful_executions": succeeded,
        "failed_executions": failed,
        "success_rate": round(succeeded / total, 4) if total else 0.0,
        "failure_rate": round(failed / total, 4) if total else 0.0,
        "average_ms": round(totals["avg_ms"] or 0, 2),
        "most_common_errors": most_common,
        "job_breakdown": breakdown,
    }
