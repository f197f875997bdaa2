from __future__ import annotations
import logging
from datetime import date as _date

from celery import shared_task
from django.db import DatabaseError
from django.utils import timezone
from django.utils.dateparse import parse_date

from jobs.services import JobLogger
from .config import RentCycleConfig
from .exceptions import CustomerFetchError
from .models import PaymentConfig
from .resolver import RentCycleResolver

logger = logging.getLogger(__name__)

RENT_CYCLE_JOB = "rent-cycle"

# Celery reads retry options when the task is declared, so later RENT_CYCLE
# overrides do not change them. Only whole-run failures are retried.
_JOB_MAX_RETRIES = RentCycleConfig.from_settings().job_max_retries
_RETRY_ON = (CustomerFetchError, DatabaseError, OSError)


def _coerce_date(value) -> _date | None:
    if value is None or isinstance(value, _date):
        return value
    parsed = parse_date(str(value))
    if parsed is None:
        raise ValueError(f"Invalid run_date: {value!r} (expected YYYY-MM-DD)")
    return parsed


def run_rent_cycle_now(
    run_date=None,
    *,
    force: bool = False,
    dry_run: bool = False,
    job_id: str | None = None,
    retry_count: int = 0,
    queue: str = "",
    max_retries: int | None = None,
    config: RentCycleConfig | None = None,
    resolver: RentCycleResolver | None = None,
) -> dict:
    """Run one rent cycle synchronously and record it in the job execution log.

    Returns the run report as a dict. Whole-run failures are logged and re-raised.
    """
    config = config or RentCycleConfig.from_settings()
    today = _coerce_date(run_date) or timezone.localdate()
    entry = JobLogger.start(
        RENT_CYCLE_JOB,
        job_id,
        input={"run_date": today.isoformat(), "force": force, "dry_run": dry_run},
        queue=queue,
        retry_count=retry_count,
        max_retries=config.job_max_retries if max_retries is None else max_retries,
    )

    try:
        payment_config = PaymentConfig.current()
        if payment_config is not None and not force and not payment_config.allows_run(today):
            reason = "disabled" if not payment_config.is_enabled else "start date not reached"
            logger.info("Rent cycle %s skipped: payment system %s", today, reason)
            output = {"run_date": today.isoformat(), "skipped": True, "reason": reason}
            JobLogger.finish(entry, success=True, output=output)
            return output

        excluded = payment_config.excluded_customer_ids() if payment_config is not None else set()
        resolver = resolver or RentCycleResolver(config)
        report = resolver.run(today, exclude_customer_ids=excluded, dry_run=dry_run)

        if payment_config is not None and not dry_run:
            PaymentConfig.objects.filter(pk=payment_config.pk).update(last_run_at=timezone.now())
    except Exception as exc:
        logger.exception("Rent cycle %s failed", today)
        JobLogger.finish(entry, success=False, error_message=str(exc))
        raise

    output = report.as_dict()
    error_message = f"{report.failed} task(s) failed" if report.failed else ""
    JobLogger.finish(entry, success=report.success, output=output, error_message=error_message)
    return output


@shared_task(
    bind=True,
    name="payment.tasks.run_rent_cycle",
    autoretry_for=_RETRY_ON,
    retry_backoff=True,
    max_retries=_JOB_MAX_RETRIES,
)
def run_rent_cycle(self, run_date: str | None = None, force: bool = False, dry_run: bool = False) -> dict:
    """Daily rent cycle: create monthly obligations and send reminder e-mails."""
    return run_rent_cycle_now(
        run_date,
        force=force,
        dry_run=dry_run,
        job_id=self.request.id,
        retry_count=self.request.retries or 0,
        max_retries=self.max_retries,
        queue=(self.request.delivery_info or {}).get("routing_key") or "",
    )
