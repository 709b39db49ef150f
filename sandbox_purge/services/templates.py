"""Notification message templates.

Two variants: a warning that a space is approaching its purge date, and a
notice that the space has been purged and recreated empty.
"""

from datetime import datetime


def _format_date(value: datetime) -> str:
    return value.strftime("%A, %B %d, %Y")


def render_notify_message(
    days: int,
    purge_date: datetime,
    org_name: str,
    space_name: str,
) -> tuple[str, str]:
    """Build the warning sent to managers and developers of an ageing space.

    Args:
        days: Purge threshold in days.
        purge_date: Day the space becomes eligible for purge.
        org_name: Organization name.
        space_name: Space name.

    Returns:
        (subject, body)
    """
    subject = f"Your sandbox space {org_name}/{space_name} will be purged on {_format_date(purge_date)}"
    body = f"""Hello,

You are receiving this message because you are a manager or developer of the
sandbox space "{space_name}" in organization "{org_name}".

Sandbox spaces are reset {days} days after their oldest application or
service instance was created. All applications and service instances in
"{space_name}" will be deleted on {_format_date(purge_date)}.

The space itself will be recreated empty with the same name, quota and user
roles, so you can keep using it afterwards. If you need to keep anything,
export it before that date.

This is an automated message."""
    return subject, body


def render_purge_message(
    days: int,
    purge_date: datetime,
    org_name: str,
    space_name: str,
) -> tuple[str, str]:
    """Build the notice sent after a space has been purged and recreated.

    Returns:
        (subject, body)
    """
    subject = f"Your sandbox space {org_name}/{space_name} has been purged"
    body = f"""Hello,

You are receiving this message because you are a manager or developer of the
sandbox space "{space_name}" in organization "{org_name}".

Its oldest resource reached the {days}-day sandbox limit, so on
{_format_date(purge_date)} all applications and service instances in the space
were deleted. The space has been recreated empty with the same name, quota and
user roles.

This is an automated message."""
    return subject, body
