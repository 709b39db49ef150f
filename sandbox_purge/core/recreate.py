"""Purge a sandbox space and recreate it empty with the same roles and quota."""

import logging
import threading
from datetime import timedelta
from typing import Collection, Sequence

from ..exceptions import CFAPIError, ListError, QuotaNotFoundError, RoleCreateError, SpaceCreateError
from ..schemas import (
    Options,
    Organization,
    PollingOptions,
    Role,
    RoleType,
    SMTPOptions,
    Space,
    SpaceCreate,
    SpaceDetails,
    SpaceUser,
    User,
)
from ..services.cf_client import CFResourceClient
from ..services.protocols import MailSender
from ..services.templates import render_purge_message
from .notify import list_space_roles, validate_recipient
from .purge import purge_space, wait_for_space_deletion

logger = logging.getLogger(__name__)


def list_space_devs_and_managers(
    user_guids: Collection[str],
    space_roles: Sequence[Role],
    space_users: Sequence[User],
) -> tuple[list[SpaceUser], list[SpaceUser]]:
    """Split a space's role bindings into developers and managers.

    Users who are no longer organization members are dropped even if they
    still hold a role. Users whose username cannot be resolved are logged and
    skipped.

    Returns:
        (developers, managers)
    """
    usernames = {user.guid: user.username for user in space_users if user.username}

    developers: list[SpaceUser] = []
    managers: list[SpaceUser] = []
    for role in space_roles:
        user_guid = role.user_guid
        if user_guid not in user_guids:
            continue

        username = usernames.get(user_guid)
        if not username:
            logger.warning(f"Could not find a username for user GUID {user_guid} in role {role.type.value}")
            continue

        if role.type == RoleType.SPACE_DEVELOPER:
            developers.append(SpaceUser(guid=user_guid, username=username))
        elif role.type == RoleType.SPACE_MANAGER:
            managers.append(SpaceUser(guid=user_guid, username=username))
    return developers, managers


def recreate_space(
    client: CFResourceClient,
    options: Options,
    organization: Organization,
    details: SpaceDetails,
) -> Space:
    """Create an empty space with the old name and organization, then apply the quota.

    The quota is looked up before anything is created, so a missing quota
    leaves nothing half-built.

    Raises:
        QuotaNotFoundError: If no quota matches the organization and configured name
        SpaceCreateError: If creating the space or applying the quota fails
    """
    old = details.space
    try:
        quota = client.space_quotas.single(
            organization_guids=[organization.guid],
            names=[options.sandbox_quota_name] if options.sandbox_quota_name else None,
        )
    except CFAPIError as e:
        raise QuotaNotFoundError(
            f"error finding quota {options.sandbox_quota_name} for space {old.name} in org {organization.name}: {e}"
        ) from e
    if quota is None:
        raise QuotaNotFoundError(
            f"no quota {options.sandbox_quota_name} for space {old.name} in org {organization.name}"
        )

    # The quota is applied separately below, never carried over
    relationships = old.relationships.model_copy(update={"quota": None})
    request = SpaceCreate(name=old.name, relationships=relationships)
    try:
        space = client.spaces.create(request)
    except CFAPIError as e:
        raise SpaceCreateError(f"error creating space {old.name} in org {organization.name}: {e}") from e

    try:
        client.space_quotas.apply(quota.guid, [space.guid])
    except CFAPIError as e:
        raise SpaceCreateError(
            f"error applying space quota {quota.name or quota.guid} to space {old.name}: {e}"
        ) from e
    logger.info(f"Recreated space {organization.name}/{space.name} as {space.guid} with quota {quota.name or quota.guid}")
    return space


def recreate_space_devs_and_managers(
    client: CFResourceClient,
    space_guid: str,
    developers: Sequence[SpaceUser],
    managers: Sequence[SpaceUser],
) -> None:
    """Grant the snapshotted roles on the new space. Stops at the first failure."""
    grants = [(dev, RoleType.SPACE_DEVELOPER) for dev in developers]
    grants += [(manager, RoleType.SPACE_MANAGER) for manager in managers]
    for user, role_type in grants:
        try:
            client.roles.create_space_role(space_guid, user.guid, role_type)
        except CFAPIError as e:
            raise RoleCreateError(
                f"error granting {role_type.value} to {user.username} on space {space_guid}: {e}",
                details={"space_guid": space_guid, "user_guid": user.guid},
            ) from e


def _send_purge_notice(
    mail_sender: MailSender,
    smtp: SMTPOptions,
    sender: str,
    options: Options,
    organization: Organization,
    details: SpaceDetails,
    recipients: list[str],
) -> None:
    if not recipients:
        return
    purge_date = details.timestamp + timedelta(days=options.purge_days)
    subject, body = render_purge_message(
        options.purge_days, purge_date, organization.name, details.space.name
    )
    mail_sender.send_mail(smtp, sender, subject, body, recipients)


def purge_and_recreate_space(
    client: CFResourceClient,
    options: Options,
    user_guids: Collection[str],
    organization: Organization,
    details: SpaceDetails,
    mail_sender: MailSender,
    smtp: SMTPOptions | None = None,
    sender: str = "",
    polling: PollingOptions | None = None,
    cancel_event: threading.Event | None = None,
) -> Space | None:
    """Run one full purge cycle for a space.

    Snapshots the space's developers and managers, deletes the space, waits
    for the deletion job, recreates the space with its quota, grants the
    snapshotted roles on the new space and tells those users it was purged.
    On a dry run only the snapshot is taken.

    Returns:
        The new space, or None on a dry run
    """
    space = details.space
    try:
        space_users = client.spaces.list_users_all(space.guid)
    except CFAPIError as e:
        raise ListError(f"error listing users for space {space.name}: {e}") from e
    roles, role_users = list_space_roles(client, space.guid)

    known = {user.guid: user for user in role_users}
    known.update({user.guid: user for user in space_users})
    developers, managers = list_space_devs_and_managers(user_guids, roles, list(known.values()))

    if options.dry_run:
        logger.info(
            f"[dry run] Would purge {organization.name}/{space.name} "
            f"({len(developers)} developers, {len(managers)} managers)"
        )
        return None

    logger.info(f"Purging space {organization.name}/{space.name}")
    job_guid = purge_space(client, space)
    wait_for_space_deletion(client, job_guid, polling, cancel_event)

    new_space = recreate_space(client, options, organization, details)
    recreate_space_devs_and_managers(client, new_space.guid, developers, managers)

    recipients = list(
        dict.fromkeys(validate_recipient(u.username, u.guid) for u in [*managers, *developers])
    )
    _send_purge_notice(
        mail_sender, smtp or SMTPOptions(), sender, options, organization, details, recipients
    )
    return new_space
