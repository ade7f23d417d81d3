"""
CLI for the weekly LIRF coverage digest.

Usage:
    # Run the hourly scheduler in the foreground (sends on the digest weekday)
    uv run python -m notifications.run_lirf_digest --watch

    # Send the digest now, regardless of weekday (still marks today as sent)
    uv run python -m notifications.run_lirf_digest --force

    # Show who would get which digest, without sending anything
    uv run python -m notifications.run_lirf_digest --dry-run

    # Show scheduler status
    uv run python -m notifications.run_lirf_digest --status
"""

import argparse
import time

from notifications.digest_scheduler import DigestScheduler
from notifications.email_dispatcher import shutdown_email_dispatcher
from notifications.lirf_digest import send_weekly_lirf_digest


def _print_status(scheduler: DigestScheduler) -> None:
    status = scheduler.get_status()
    print(f"Active:          {status['is_active']}")
    print(f"Running:         {status['is_running']}")
    print(f"Next check:      {status['next_check_time'] or '-'}")
    print(f"Sent today:      {status['has_sent_today']}")


def main() -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(description="Weekly LIRF coverage digest")

    mode = parser.add_mutually_exclusive_group(required=True)
    mode.add_argument(
        "--watch", action="store_true", help="Run the hourly digest scheduler until interrupted"
    )
    mode.add_argument(
        "--force", action="store_true", help="Send the digest now and mark today as sent"
    )
    mode.add_argument(
        "--dry-run", action="store_true", help="Print recipients and subjects without sending"
    )
    mode.add_argument("--status", action="store_true", help="Show scheduler status")

    args = parser.parse_args()
    scheduler = DigestScheduler()

    if args.status:
        _print_status(scheduler)
        return

    if args.dry_run:
        send_weekly_lirf_digest(dry_run=True)
        return

    if args.force:
        result = scheduler.force_trigger()
        print(f"Success:         {result.success}")
        print(f"Recipients:      {result.recipient_count}")
        print(f"Runs needing LIRF: {result.runs_requiring_lirf}")
        for error in result.errors:
            print(f"  ✗ {error}")
        return

    scheduler.start()
    try:
        while True:
            time.sleep(60)
    except KeyboardInterrupt:
        print("\nShutting down...")
    finally:
        scheduler.stop()
        shutdown_email_dispatcher(wait=True)


if __name__ == "__main__":
    main()
