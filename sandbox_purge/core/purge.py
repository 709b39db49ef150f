"""Space deletion and deletion-job tracking."""

import logging
import threading

from ..exceptions import (
    CFAPIError,
    JobPollError,
    NoSpaceDeleteJobGUIDError,
    SpaceDeleteError,
)
from ..schemas import PollingOptions, Space
from ..services.cf_client import CFResourceClient

logger = logging.getLogger(__name__)


def _delete_space_apps(client: CFResourceClient, space: Space) -> list[Exception]:
    """Delete every app in a space, collecting failures instead of raising."""
    try:
        apps = client.applications.list_all(space_guids=[space.guid])
    except CFAPIError as e:
        return [e]

    errors: list[Exception] = []
    for app in apps:
        try:
            client.applications.delete(app.guid)
            logger.info(f"Deleted app {app.name or app.guid} from space {space.name}")
        except CFAPIError as e:
            errors.append(e)
    return errors


def purge_space(client: CFResourceClient, space: Space) -> str | None:
    """Delete a space and return the guid of the deletion job.

    The platform usually rejects deleting a space that still holds
    resources. When the delete fails, the apps in the space are deleted one by
    one so the next run has a better chance, and the original failure is
    still raised. The delete itself is not retried here.

    Raises:
        SpaceDeleteError: If the delete call fails. Failures of the app
            cleanup are attached as ``cleanup_errors``.
    """
    try:
        return client.spaces.delete(space.guid)
    except CFAPIError as e:
        logger.warning(f"Deleting space {space.name} failed, deleting its apps instead: {e}")
        cleanup_errors = _delete_space_apps(client, space)
        raise SpaceDeleteError(
            f"error deleting space {space.name}: {e}",
            space_guid=space.guid,
            cleanup_errors=cleanup_errors,
        ) from e


def wait_for_space_deletion(
    client: CFResourceClient,
    job_guid: str | None,
    polling: PollingOptions | None = None,
    cancel_event: threading.Event | None = None,
) -> None:
    """Block until the space deletion job completes.

    Raises:
        NoSpaceDeleteJobGUIDError: If there is no job to poll
        JobPollError: If the job fails or cannot be tracked to completion
    """
    if not job_guid:
        raise NoSpaceDeleteJobGUIDError("space deletion returned no job guid")

    try:
        client.jobs.poll_complete(job_guid, polling or PollingOptions(), cancel_event)
    except JobPollError:
        raise
    except CFAPIError as e:
        raise JobPollError(f"error waiting for space deletion job {job_guid}: {e}", job_guid=job_guid) from e
