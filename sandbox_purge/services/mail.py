"""SMTP mail transport for sandbox notifications."""

import logging
import smtplib
from email.message import EmailMessage
from typing import Sequence

from ..exceptions import MailSendError
from ..schemas import SMTPOptions

logger = logging.getLogger(__name__)


class SMTPMailSender:
    """Sends plain-text mail over SMTP.

    One connection per message, no retries.
    """

    def __init__(self, timeout: float = 30.0):
        self.timeout = timeout

    @staticmethod
    def build_message(
        sender: str,
        subject: str,
        body: str,
        recipients: Sequence[str],
    ) -> EmailMessage:
        msg = EmailMessage()
        msg["From"] = sender
        msg["To"] = ", ".join(recipients)
        msg["Subject"] = subject
        msg.set_content(body)
        return msg

    def send_mail(
        self,
        smtp: SMTPOptions,
        sender: str,
        subject: str,
        body: str,
        recipients: Sequence[str],
    ) -> None:
        """
        Send one message to all recipients.

        Raises:
            MailSendError: If connecting, authenticating or sending fails
        """
        msg = self.build_message(sender, subject, body, recipients)
        try:
            with smtplib.SMTP(smtp.host, smtp.port, timeout=self.timeout) as server:
                if smtp.use_tls:
                    server.starttls()
                if smtp.user and smtp.password:
                    server.login(smtp.user, smtp.password)
                server.send_message(msg, from_addr=sender, to_addrs=list(recipients))
        except (smtplib.SMTPException, OSError) as e:
            raise MailSendError(
                f"failed to send '{subject}' to {len(recipients)} recipient(s): {e}",
                details={"recipients": list(recipients)},
            ) from e
        logger.info(f"Sent '{subject}' to {', '.join(recipients)}")
