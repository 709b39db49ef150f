"""Process every sandbox organization, one space at a time."""

import logging
import threading
from datetime import datetime, timezone

from ..config import Settings
from ..exceptions import PurgeCancelledError, SandboxPurgeError
from ..schemas import Options, Organization, PollingOptions, RunSummary, SMTPOptions
from ..services.cf_client import CFResourceClient
from ..services.protocols import MailSender
from .classifier import list_purge_spaces
from .inventory import list_org_resources, list_org_user_guids, list_sandbox_orgs
from .notify import notify_space
from .recreate import purge_and_recreate_space

logger = logging.getLogger(__name__)


def options_from_settings(settings: Settings) -> tuple[Options, SMTPOptions, PollingOptions]:
    options = Options(
        notify_days=settings.notify_days,
        purge_days=settings.purge_days,
        disable_purge=settings.disable_purge,
        dry_run=settings.dry_run,
        sandbox_quota_name=settings.sandbox_quota_name,
    )
    smtp = SMTPOptions(
        host=settings.smtp_host,
        port=settings.smtp_port,
        user=settings.smtp_user,
        password=settings.smtp_password,
        use_tls=settings.smtp_use_tls,
    )
    polling = PollingOptions(
        interval=settings.job_poll_interval,
        timeout=settings.job_poll_timeout,
    )
    return options, smtp, polling


def _check_cancelled(cancel_event: threading.Event | None) -> None:
    if cancel_event is not None and cancel_event.is_set():
        raise PurgeCancelledError("run cancelled")


class SandboxPurgeRunner:
    """Drives one run over all sandbox organizations.

    Organizations and spaces are processed strictly in order. A failure in one
    space is logged and recorded in the summary, then the run moves on; a
    failed inventory read skips the rest of that organization. Cancellation
    stops the run after aborting the current space.

    Usage:
        with CFResourceClient.from_settings(settings) as client:
            summary = SandboxPurgeRunner(client, SMTPMailSender(), settings).run()
    """

    def __init__(
        self,
        client: CFResourceClient,
        mail_sender: MailSender,
        settings: Settings,
        cancel_event: threading.Event | None = None,
    ):
        self.client = client
        self.mail_sender = mail_sender
        self.settings = settings
        self.cancel_event = cancel_event
        self.options, self.smtp, self.polling = options_from_settings(settings)

    def run(self, now: datetime | None = None) -> RunSummary:
        now = now or datetime.now(timezone.utc)
        summary = RunSummary()

        orgs = list_sandbox_orgs(self.client, self.settings.org_prefix)
        logger.info(f"Found {len(orgs)} sandbox organizations with prefix '{self.settings.org_prefix}'")
        try:
            for org in orgs:
                _check_cancelled(self.cancel_event)
                summary.organizations += 1
                self.process_org(org, now, summary)
        except PurgeCancelledError:
            logger.warning("Run cancelled, stopping before the remaining spaces")
            raise
        finally:
            logger.info(
                f"Run finished: {summary.organizations} orgs, {summary.notified} notified, "
                f"{summary.purged} purged, {len(summary.failed_spaces)} failed spaces, "
                f"{len(summary.failed_organizations)} failed orgs"
            )
        return summary

    def process_org(self, org: Organization, now: datetime, summary: RunSummary) -> None:
        try:
            spaces, apps, instances = list_org_resources(self.client, org)
            user_guids = list_org_user_guids(self.client, org)
        except SandboxPurgeError as e:
            logger.error(f"Skipping org {org.name}: {e}")
            summary.failed_organizations.append(org.name)
            return

        to_notify, to_purge = list_purge_spaces(
            spaces, apps, instances, self.options, now, self.settings.time_starts_at
        )
        logger.info(f"Org {org.name}: {len(to_notify)} spaces to notify, {len(to_purge)} to purge")

        for details in to_notify:
            _check_cancelled(self.cancel_event)
            label = f"{org.name}/{details.space.name}"
            try:
                recipients = notify_space(
                    self.client,
                    self.mail_sender,
                    self.options,
                    self.smtp,
                    self.settings.mail_sender,
                    org,
                    details,
                    user_guids,
                )
            except PurgeCancelledError:
                raise
            except SandboxPurgeError as e:
                logger.error(f"Failed to notify space {label}: {e}")
                summary.failed_spaces.append(label)
                continue
            if recipients:
                summary.notified += 1

        for details in to_purge:
            _check_cancelled(self.cancel_event)
            label = f"{org.name}/{details.space.name}"
            try:
                new_space = purge_and_recreate_space(
                    self.client,
                    self.options,
                    user_guids,
                    org,
                    details,
                    self.mail_sender,
                    smtp=self.smtp,
                    sender=self.settings.mail_sender,
                    polling=self.polling,
                    cancel_event=self.cancel_event,
                )
            except PurgeCancelledError:
                raise
            except SandboxPurgeError as e:
                logger.error(f"Failed to purge space {label}: {e}")
                summary.failed_spaces.append(label)
                continue
            if new_space is not None:
                summary.purged += 1
