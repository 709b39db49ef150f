"""Classify sandbox spaces by the age of their oldest resource."""

from collections import defaultdict
from datetime import datetime, timedelta, timezone
from typing import Sequence

from ..schemas import App, Options, ServiceInstance, Space, SpaceDetails

ONE_DAY = timedelta(days=1)


def group_apps_by_space(apps: Sequence[App]) -> dict[str, list[App]]:
    grouped: dict[str, list[App]] = defaultdict(list)
    for app in apps:
        grouped[app.space_guid].append(app)
    return dict(grouped)


def group_instances_by_space(instances: Sequence[ServiceInstance]) -> dict[str, list[ServiceInstance]]:
    grouped: dict[str, list[ServiceInstance]] = defaultdict(list)
    for instance in instances:
        grouped[instance.space_guid].append(instance)
    return dict(grouped)


def first_resource_timestamp(
    space: Space,
    grouped_apps: dict[str, list[App]],
    grouped_instances: dict[str, list[ServiceInstance]],
) -> datetime | None:
    """Creation time of the earliest app or service instance in a space, or None if it has neither."""
    created = [app.created_at for app in grouped_apps.get(space.guid, [])]
    created += [instance.created_at for instance in grouped_instances.get(space.guid, [])]
    return min(created, default=None)


def truncate_to_day(value: datetime) -> datetime:
    """Midnight UTC of the given instant."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).replace(hour=0, minute=0, second=0, microsecond=0)


def list_purge_spaces(
    spaces: Sequence[Space],
    apps: Sequence[App],
    instances: Sequence[ServiceInstance],
    options: Options,
    now: datetime,
    time_starts_at: datetime,
) -> tuple[list[SpaceDetails], list[SpaceDetails]]:
    """Identify spaces to notify and spaces to purge.

    A space's age is counted from its oldest resource, clamped to
    ``time_starts_at`` and truncated to the day. Spaces without resources
    cannot be aged and are left out. The age is computed once and checked
    against the purge threshold first, so a space is never in both lists.

    Returns:
        (to_notify, to_purge)
    """
    grouped_apps = group_apps_by_space(apps)
    grouped_instances = group_instances_by_space(instances)

    to_notify: list[SpaceDetails] = []
    to_purge: list[SpaceDetails] = []
    for space in spaces:
        first_resource = first_resource_timestamp(space, grouped_apps, grouped_instances)
        if first_resource is None:
            continue
        if time_starts_at > first_resource:
            first_resource = time_starts_at

        first_resource = truncate_to_day(first_resource)
        delta = int((now - first_resource) / ONE_DAY)
        if not options.disable_purge and delta >= options.purge_days:
            to_purge.append(SpaceDetails(timestamp=first_resource, space=space))
        elif delta >= options.notify_days:
            to_notify.append(SpaceDetails(timestamp=first_resource, space=space))
    return to_notify, to_purge
