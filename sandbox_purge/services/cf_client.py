"""Cloud Foundry v3 API client.

Uses direct REST calls over httpx rather than a generated SDK. Each resource
kind gets its own small client sharing one ``httpx.Client``; CFResourceClient
bundles them for the lifecycle engine.
"""

import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Iterator, Sequence, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from ..config import Settings
from ..exceptions import CFAPIError, JobPollError, PurgeCancelledError
from ..schemas import (
    App,
    Job,
    JobState,
    Organization,
    PollingOptions,
    Relationship,
    Role,
    RoleType,
    ServiceInstance,
    Space,
    SpaceCreate,
    SpaceQuota,
    ToOneRelationship,
    User,
)
from .protocols import (
    ApplicationsAPI,
    JobsAPI,
    OrganizationsAPI,
    RolesAPI,
    ServiceInstancesAPI,
    SpaceQuotasAPI,
    SpacesAPI,
)

logger = logging.getLogger(__name__)

PER_PAGE = 5000

ModelT = TypeVar("ModelT", bound=BaseModel)


def _filters(**values: Sequence[str] | None) -> dict[str, str]:
    """Turn list filters into the API's comma-separated query parameters."""
    return {key: ",".join(v) for key, v in values.items() if v}


def _job_guid_from_location(response: httpx.Response) -> str | None:
    """Deletes answer 202 with ``Location: .../v3/jobs/<guid>``."""
    location = response.headers.get("Location", "")
    if not location:
        return None
    return location.rstrip("/").rsplit("/", 1)[-1] or None


class _ResourceClient:
    """Shared request, pagination and error handling for a resource path."""

    path = ""

    def __init__(self, http: httpx.Client):
        self._http = http

    def _request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        try:
            response = self._http.request(method, url, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            errors: list[dict[str, Any]] = []
            try:
                body = e.response.json()
            except ValueError:
                body = None
            if isinstance(body, dict) and isinstance(body.get("errors"), list):
                errors = [err for err in body["errors"] if isinstance(err, dict)]
            detail = "; ".join(str(err.get("detail", "")) for err in errors) or e.response.text
            raise CFAPIError(
                f"{method} {url} failed: HTTP {e.response.status_code} - {detail}",
                status_code=e.response.status_code,
                errors=errors,
            ) from e
        except httpx.RequestError as e:
            raise CFAPIError(f"{method} {url} failed: {e}") from e
        return response

    @staticmethod
    def _json(response: httpx.Response) -> dict[str, Any]:
        """Decode a success body, which must be a JSON object."""
        where = f"{response.request.method} {response.request.url}"
        try:
            body = response.json()
        except ValueError as e:
            raise CFAPIError(
                f"{where} returned a non-JSON body", status_code=response.status_code
            ) from e
        if not isinstance(body, dict):
            raise CFAPIError(
                f"{where} returned {type(body).__name__}, expected an object",
                status_code=response.status_code,
            )
        return body

    def _parse(self, model: type[ModelT], data: Any) -> ModelT:
        try:
            return model.model_validate(data)
        except ValidationError as e:
            raise CFAPIError(
                f"unexpected {model.__name__} payload from {self.path}: {e}",
                details={"model": model.__name__},
            ) from e

    def _pages(self, url: str, params: dict[str, str]) -> Iterator[dict[str, Any]]:
        """Yield each page body, following ``pagination.next``."""
        next_url: str | None = url
        next_params: dict[str, str] | None = {**params, "per_page": str(PER_PAGE)}
        while next_url:
            body = self._json(self._request("GET", next_url, params=next_params))
            yield body
            pagination = body.get("pagination") or {}
            next_page = pagination.get("next") if isinstance(pagination, dict) else None
            next_url = next_page.get("href") if isinstance(next_page, dict) else None
            next_params = None  # next href already carries the query

    def _list_all(self, params: dict[str, str], url: str | None = None) -> list[dict[str, Any]]:
        resources: list[dict[str, Any]] = []
        for page in self._pages(url or self.path, params):
            resources.extend(page.get("resources") or [])
        return resources

    def _single(self, params: dict[str, str]) -> dict[str, Any] | None:
        resources = self._list_all(params)
        if not resources:
            return None
        if len(resources) > 1:
            raise CFAPIError(
                f"expected exactly one result from {self.path}, got {len(resources)}",
                details={"params": params},
            )
        return resources[0]

    def _delete(self, guid: str) -> str | None:
        return _job_guid_from_location(self._request("DELETE", f"{self.path}/{guid}"))


class OrganizationsClient(_ResourceClient):
    path = "/v3/organizations"

    def list_all(self) -> list[Organization]:
        return [self._parse(Organization, r) for r in self._list_all({})]

    def list_users_all(self, org_guid: str) -> list[User]:
        return [
            self._parse(User, r)
            for r in self._list_all({}, url=f"{self.path}/{org_guid}/users")
        ]


class SpacesClient(_ResourceClient):
    path = "/v3/spaces"

    def list_all(self, *, organization_guids: Sequence[str] | None = None) -> list[Space]:
        params = _filters(organization_guids=organization_guids)
        return [self._parse(Space, r) for r in self._list_all(params)]

    def single(
        self,
        *,
        names: Sequence[str] | None = None,
        organization_guids: Sequence[str] | None = None,
    ) -> Space | None:
        found = self._single(_filters(names=names, organization_guids=organization_guids))
        return self._parse(Space, found) if found else None

    def create(self, request: SpaceCreate) -> Space:
        body = request.model_dump(mode="json", exclude_none=True)
        return self._parse(Space, self._json(self._request("POST", self.path, json=body)))

    def delete(self, guid: str) -> str | None:
        return self._delete(guid)

    def list_users_all(self, space_guid: str) -> list[User]:
        return [
            self._parse(User, r)
            for r in self._list_all({}, url=f"{self.path}/{space_guid}/users")
        ]


class ApplicationsClient(_ResourceClient):
    path = "/v3/apps"

    def list_all(
        self,
        *,
        organization_guids: Sequence[str] | None = None,
        space_guids: Sequence[str] | None = None,
    ) -> list[App]:
        params = _filters(organization_guids=organization_guids, space_guids=space_guids)
        return [self._parse(App, r) for r in self._list_all(params)]

    def delete(self, guid: str) -> str | None:
        return self._delete(guid)


class ServiceInstancesClient(_ResourceClient):
    path = "/v3/service_instances"

    def list_all(self, *, organization_guids: Sequence[str] | None = None) -> list[ServiceInstance]:
        params = _filters(organization_guids=organization_guids)
        return [self._parse(ServiceInstance, r) for r in self._list_all(params)]


class RolesClient(_ResourceClient):
    path = "/v3/roles"

    def list_include_users_all(
        self, *, space_guids: Sequence[str] | None = None
    ) -> tuple[list[Role], list[User]]:
        """List roles together with the users they bind (``include=user``)."""
        params = {**_filters(space_guids=space_guids), "include": "user"}
        roles: list[Role] = []
        users: dict[str, User] = {}
        for page in self._pages(self.path, params):
            roles.extend(self._parse(Role, r) for r in page.get("resources") or [])
            included = page.get("included") or {}
            if not isinstance(included, dict):
                raise CFAPIError(f"unexpected included block from {self.path}")
            for u in included.get("users") or []:
                user = self._parse(User, u)
                users[user.guid] = user
        return roles, list(users.values())

    def create_space_role(self, space_guid: str, user_guid: str, role_type: RoleType) -> Role:
        body = {
            "type": role_type.value,
            "relationships": {
                "user": ToOneRelationship.to(user_guid).model_dump(),
                "space": ToOneRelationship.to(space_guid).model_dump(),
            },
        }
        return self._parse(Role, self._json(self._request("POST", self.path, json=body)))


class SpaceQuotasClient(_ResourceClient):
    path = "/v3/space_quotas"

    def single(
        self,
        *,
        organization_guids: Sequence[str] | None = None,
        names: Sequence[str] | None = None,
    ) -> SpaceQuota | None:
        found = self._single(_filters(organization_guids=organization_guids, names=names))
        return self._parse(SpaceQuota, found) if found else None

    def apply(self, quota_guid: str, space_guids: Sequence[str]) -> list[str]:
        body = {"data": [{"guid": guid} for guid in space_guids]}
        response = self._request(
            "POST", f"{self.path}/{quota_guid}/relationships/spaces", json=body
        )
        data = self._json(response).get("data") or []
        return [self._parse(Relationship, item).guid for item in data]


class JobsClient(_ResourceClient):
    path = "/v3/jobs"

    def get(self, job_guid: str) -> Job:
        return self._parse(Job, self._json(self._request("GET", f"{self.path}/{job_guid}")))

    def poll_complete(
        self,
        job_guid: str,
        polling: PollingOptions,
        cancel_event: threading.Event | None = None,
    ) -> None:
        """Block until the job is COMPLETE.

        Raises:
            JobPollError: If the job fails, the timeout elapses or a poll request fails
            PurgeCancelledError: If cancel_event is set while waiting
        """
        deadline = time.monotonic() + polling.timeout
        while True:
            try:
                job = self.get(job_guid)
            except CFAPIError as e:
                raise JobPollError(f"error polling job {job_guid}: {e}", job_guid=job_guid) from e

            if job.state == JobState.COMPLETE:
                return
            if job.state == JobState.FAILED:
                detail = "; ".join(err.get("detail", "") for err in job.errors) or "no details"
                raise JobPollError(f"job {job_guid} failed: {detail}", job_guid=job_guid)

            if time.monotonic() + polling.interval > deadline:
                raise JobPollError(
                    f"timed out after {polling.timeout}s waiting for job {job_guid} (state {job.state.value})",
                    job_guid=job_guid,
                )
            logger.debug(f"Job {job_guid} is {job.state.value}, polling again in {polling.interval}s")
            if cancel_event is None:
                time.sleep(polling.interval)
            elif cancel_event.wait(polling.interval):
                raise PurgeCancelledError(f"cancelled while waiting for job {job_guid}")


@dataclass
class CFResourceClient:
    """One client per resource kind, as consumed by the lifecycle engine."""

    organizations: OrganizationsAPI
    spaces: SpacesAPI
    applications: ApplicationsAPI
    service_instances: ServiceInstancesAPI
    roles: RolesAPI
    space_quotas: SpaceQuotasAPI
    jobs: JobsAPI
    http: httpx.Client | None = None

    @classmethod
    def from_http(cls, http: httpx.Client) -> "CFResourceClient":
        return cls(
            organizations=OrganizationsClient(http),
            spaces=SpacesClient(http),
            applications=ApplicationsClient(http),
            service_instances=ServiceInstancesClient(http),
            roles=RolesClient(http),
            space_quotas=SpaceQuotasClient(http),
            jobs=JobsClient(http),
            http=http,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "CFResourceClient":
        """Build a client for the configured API endpoint.

        Raises:
            ValueError: If no API token is configured
        """
        if not settings.cf_api_token:
            raise ValueError(
                "Platform API token not configured. Set SANDBOX_PURGE_CF_API_TOKEN"
            )
        http = httpx.Client(
            base_url=settings.cf_api_url,
            headers={
                "Authorization": f"Bearer {settings.cf_api_token}",
                "Accept": "application/json",
            },
            timeout=settings.request_timeout,
        )
        return cls.from_http(http)

    def close(self) -> None:
        if self.http is not None:
            self.http.close()

    def __enter__(self) -> "CFResourceClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()
