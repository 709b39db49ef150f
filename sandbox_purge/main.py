"""Command-line entry point for a sandbox purge run.

Run:  sandbox-purge --dry-run
      python -m sandbox_purge.main --notify-days 60 --purge-days 90
"""

import argparse
import logging
import signal
import sys
import threading

from pydantic import ValidationError

from .config import Settings, settings
from .core import SandboxPurgeRunner
from .exceptions import PurgeCancelledError, SandboxPurgeError
from .services import CFResourceClient, SMTPMailSender

logger = logging.getLogger("sandbox_purge")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Notify and purge ageing spaces in sandbox organizations.",
    )
    parser.add_argument("--dry-run", action="store_true", default=None, help="Log what would happen without mailing or purging.")
    parser.add_argument("--disable-purge", action="store_true", default=None, help="Only send notifications.")
    parser.add_argument("--notify-days", type=int, default=None, metavar="N", help="Warn when the oldest resource is N days old.")
    parser.add_argument("--purge-days", type=int, default=None, metavar="N", help="Purge when the oldest resource is N days old.")
    parser.add_argument("--org-prefix", default=None, metavar="PREFIX", help="Name prefix of sandbox organizations.")
    parser.add_argument("--quota-name", dest="sandbox_quota_name", default=None, metavar="NAME", help="Space quota to apply to recreated spaces.")
    parser.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    return parser


def load_settings(args: argparse.Namespace) -> Settings:
    """Environment settings with any command-line flags layered on top."""
    overrides = {
        key: value
        for key, value in vars(args).items()
        if key != "log_level" and value is not None
    }
    if not overrides:
        return settings
    return Settings(**overrides)


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    try:
        run_settings = load_settings(args)
    except ValidationError as e:
        logger.error(f"Invalid configuration: {e}")
        return 2

    cancel_event = threading.Event()

    def _cancel(signum, frame):
        logger.warning(f"Received signal {signum}, cancelling run")
        cancel_event.set()

    previous = {sig: signal.signal(sig, _cancel) for sig in (signal.SIGINT, signal.SIGTERM)}

    if run_settings.dry_run:
        logger.info("Dry run: no mail will be sent and no space will be purged")

    try:
        with CFResourceClient.from_settings(run_settings) as client:
            runner = SandboxPurgeRunner(client, SMTPMailSender(), run_settings, cancel_event=cancel_event)
            summary = runner.run()
    except ValueError as e:
        logger.error(str(e))
        return 2
    except PurgeCancelledError:
        return 130
    except SandboxPurgeError as e:
        logger.error(f"Run failed: {e}")
        return 1
    finally:
        for sig, handler in previous.items():
            signal.signal(sig, handler)

    return 0 if summary.ok else 1


if __name__ == "__main__":
    sys.exit(main())
