from django.core.management.base import BaseCommand, CommandError
from django.utils.dateparse import parse_date

from payment.exceptions import PaymentCycleError
from payment.tasks import run_rent_cycle_now


class Command(BaseCommand):
    help = "Run the monthly rent cycle synchronously (create obligations and send reminders)."

    def add_arguments(self, parser):
        parser.add_argument(
            "--date",
            default=None,
            help="Run as if today were this date (YYYY-MM-DD). Defaults to today.",
        )
        parser.add_argument(
            "--force",
            action="store_true",
            help="Run even if the payment system is disabled or before its start date.",
        )
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="Only report what would happen; no writes and no e-mails.",
        )

    def handle(self, *args, **options):
        run_date = None
        if options["date"]:
            run_date = parse_date(options["date"])
            if run_date is None:
                raise CommandError("--date must be YYYY-MM-DD")

        try:
            result = run_rent_cycle_now(run_date, force=options["force"], dry_run=options["dry_run"])
        except PaymentCycleError as exc:
            raise CommandError(str(exc)) from exc

        if result.get("skipped"):
            self.stdout.write(self.style.WARNING(f"Rent cycle skipped for {result['run_date']}: {result['reason']}."))
            return

        prefix = "[DRY-RUN] " if result["dry_run"] else ""
        summary = (
            f"{prefix}Rent cycle {result['run_date']}: {result['customers']} customer(s), "
            f"{result['bookings']} booking(s), {result['obligations_created']} created, "
            f"{result['gentle_reminders']} reminder(s), {result['late_warnings']} late warning(s), "
            f"{result['failed']} failed."
        )
        style = self.style.SUCCESS if not result["failed"] else self.style.WARNING
        self.stdout.write(style(summary))
        for failure in result["failures"]:
            self.stdout.write(f"  customer={failure['customer_id']} booking={failure['booking_id']}: {failure['error']}")
