"""Warn space managers and developers before their sandbox is purged."""

import logging
from datetime import datetime, timedelta
from typing import Collection, Sequence

from pydantic.networks import validate_email

from ..exceptions import CFAPIError, InvalidRecipientError, ListError
from ..schemas import Options, Organization, Role, RoleType, SMTPOptions, SpaceDetails, User
from ..services.cf_client import CFResourceClient
from ..services.protocols import MailSender
from ..services.templates import render_notify_message

logger = logging.getLogger(__name__)

NOTIFIED_ROLES = (RoleType.SPACE_DEVELOPER, RoleType.SPACE_MANAGER)


def validate_recipient(username: str | None, user_guid: str) -> str:
    """Return the username if it is a deliverable email address.

    Raises:
        InvalidRecipientError: If the username is not an email address
    """
    try:
        validate_email(username or "")
    except ValueError as e:
        raise InvalidRecipientError(
            f"username {username!r} of user {user_guid} is not a valid email address",
            details={"user_guid": user_guid},
        ) from e
    return username


def list_recipients(
    user_guids: Collection[str],
    space_roles: Sequence[Role],
    space_users: Sequence[User],
) -> list[str]:
    """Email addresses of the organization members who manage or develop in a space.

    Raises:
        InvalidRecipientError: If a recipient's username is not an email address
    """
    bound = {
        role.user_guid
        for role in space_roles
        if role.type in NOTIFIED_ROLES and role.user_guid in user_guids
    }

    addresses: list[str] = []
    for user in space_users:
        if user.guid not in bound or user.username in addresses:
            continue
        addresses.append(validate_recipient(user.username, user.guid))
    return addresses


def list_space_roles(client: CFResourceClient, space_guid: str) -> tuple[list[Role], list[User]]:
    try:
        return client.roles.list_include_users_all(space_guids=[space_guid])
    except CFAPIError as e:
        raise ListError(f"error listing roles for space {space_guid}: {e}") from e


def notify_space(
    client: CFResourceClient,
    mail_sender: MailSender,
    options: Options,
    smtp: SMTPOptions,
    sender: str,
    organization: Organization,
    details: SpaceDetails,
    user_guids: Collection[str],
) -> list[str]:
    """Send the approaching-purge warning for one space.

    Returns:
        The recipients mailed (empty if nobody qualified or on a dry run)
    """
    roles, users = list_space_roles(client, details.space.guid)
    recipients = list_recipients(user_guids, roles, users)
    if not recipients:
        logger.info(f"No managers or developers to notify for {organization.name}/{details.space.name}")
        return []

    purge_date: datetime = details.timestamp + timedelta(days=options.purge_days)
    subject, body = render_notify_message(
        options.purge_days, purge_date, organization.name, details.space.name
    )
    if options.dry_run:
        logger.info(f"[dry run] Would notify {', '.join(recipients)}: {subject}")
        return []

    mail_sender.send_mail(smtp, sender, subject, body, recipients)
    return recipients
