"""Platform API client, mail transport and message templates."""

from .cf_client import CFResourceClient
from .mail import SMTPMailSender
from .templates import render_notify_message, render_purge_message

__all__ = [
    "CFResourceClient",
    "SMTPMailSender",
    "render_notify_message",
    "render_purge_message",
]
