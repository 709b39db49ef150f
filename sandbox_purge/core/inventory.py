"""Read-only inventory of sandbox organizations and their resources."""

import logging

from ..exceptions import CFAPIError, ListError
from ..schemas import App, Organization, ServiceInstance, Space
from ..services.cf_client import CFResourceClient

logger = logging.getLogger(__name__)


def list_sandbox_orgs(client: CFResourceClient, prefix: str) -> list[Organization]:
    """List all organizations whose name starts with ``prefix``."""
    try:
        orgs = client.organizations.list_all()
    except CFAPIError as e:
        raise ListError(f"error listing organizations: {e}") from e
    return [org for org in orgs if org.name.startswith(prefix)]


def list_org_resources(
    client: CFResourceClient,
    org: Organization,
) -> tuple[list[Space], list[App], list[ServiceInstance]]:
    """Fetch spaces, apps and service instances within an organization.

    Returns:
        (spaces, apps, instances)

    Raises:
        ListError: If any of the three listings fails; nothing partial is returned
    """
    try:
        apps = client.applications.list_all(organization_guids=[org.guid])
        instances = client.service_instances.list_all(organization_guids=[org.guid])
        spaces = client.spaces.list_all(organization_guids=[org.guid])
    except CFAPIError as e:
        raise ListError(f"error listing resources in org {org.name}: {e}", details={"org_guid": org.guid}) from e

    logger.debug(f"Org {org.name}: {len(spaces)} spaces, {len(apps)} apps, {len(instances)} service instances")
    return spaces, apps, instances


def list_org_user_guids(client: CFResourceClient, org: Organization) -> set[str]:
    """Current organization membership, as a set of user guids."""
    try:
        users = client.organizations.list_users_all(org.guid)
    except CFAPIError as e:
        raise ListError(f"error listing users in org {org.name}: {e}", details={"org_guid": org.guid}) from e
    return {user.guid for user in users}
