from django.core.management.base import BaseCommand, CommandError
from django.utils import timezone
from jobs.models import JobExecutionLog


class Command(BaseCommand):
    help = "Purge job execution logs by age. Running entries are never deleted."

    def add_arguments(self, parser):
        parser.add_argument(
            "--older-than",
            type=int,
            default=90,
            help="Age threshold in days. Deletes logs started before today-N days.",
        )
        parser.add_argument(
            "--job-name",
            default=None,
            help="Restrict purge to a single job name.",
        )
        parser.add_argument(
            "--failed-only",
            action="store_true",
            help="Only delete failed executions.",
        )
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="Do not delete; only print how many would be deleted.",
        )

    def handle(self, *args, **options):
        days = options["older_than"]
        job_name = options["job_name"]
        dry_run = options["dry_run"]

        if days < 0:
            raise CommandError("--older-than must be >= 0")

        cutoff = timezone.now() - timezone.timedelta(days=days)
        qs = JobExecutionLog.objects.filter(started_at__lt=cutoff).exclude(status=JobExecutionLog.Status.RUNNING)
        if job_name:
            qs = qs.filter(job_name=job_name)
        if options["failed_only"]:
            qs = qs.filter(status=JobExecutionLog.Status.FAILED)

        count = qs.count()
        if dry_run:
            self.stdout.write(self.style.WARNING(f"[DRY-RUN] Would delete {count} job log(s) older than {days} day(s)."))
            return

        deleted, _map = qs.delete()
        self.stdout.write(self.style.SUCCESS(f"Deleted {deleted} job log(s) older than {days} day(s)."))
