from datetime import date

from django.core.management.base import BaseCommand, CommandError

from trade_projection.services.expiry import ExpirySweepScheduler, sweep
from trade_projection.services.storage import TransientStorageFailure


class Command(BaseCommand):
    help = "Mark projected trades whose maturity date has passed as EXPIRED, once or on an interval."

    def add_arguments(self, parser):
        parser.add_argument("--once", action="store_true", help="Run a single sweep and exit.")
        parser.add_argument("--today", type=date.fromisoformat, default=None,
                            help="Business date to sweep against (YYYY-MM-DD). Implies --once.")
        parser.add_argument("--interval", type=float, default=None,
                            help="Seconds between sweeps. Defaults to TRADE_STORE['EXPIRY_SWEEP_INTERVAL_SECONDS'].")

    def handle(self, *args, **options):
        if options["once"] or options["today"] is not None:
            try:
                transitioned = sweep(today=options["today"])
            except ValueError as exc:
                raise CommandError(str(exc)) from exc
            except TransientStorageFailure as exc:
                raise CommandError(f"Expiry sweep failed, retry later: {exc}") from exc
            self.stdout.write(self.style.SUCCESS(f"{transitioned} trade(s) marked as expired."))
            return

        try:
            scheduler = ExpirySweepScheduler(interval_seconds=options["interval"])
        except ValueError as exc:
            raise CommandError(str(exc)) from exc
        self.stdout.write(f"Sweeping every {scheduler.interval_seconds}s, Ctrl-C to stop.")
        try:
            scheduler.run()
        except KeyboardInterrupt:
            scheduler.stop()
            self.stdout.write("Stopped.")
