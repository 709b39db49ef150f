"""Narrow interfaces for each platform resource kind.

The lifecycle engine only talks to these protocols, so each resource client
can be replaced by a fake in tests independently of the others.
"""

import threading
from typing import Protocol, Sequence

from ..schemas import (
    App,
    Organization,
    PollingOptions,
    Role,
    RoleType,
    ServiceInstance,
    SMTPOptions,
    Space,
    SpaceCreate,
    SpaceQuota,
    User,
)


class OrganizationsAPI(Protocol):
    def list_all(self) -> list[Organization]: ...

    def list_users_all(self, org_guid: str) -> list[User]: ...


class SpacesAPI(Protocol):
    def list_all(self, *, organization_guids: Sequence[str] | None = None) -> list[Space]: ...

    def single(
        self,
        *,
        names: Sequence[str] | None = None,
        organization_guids: Sequence[str] | None = None,
    ) -> Space | None: ...

    def create(self, request: SpaceCreate) -> Space: ...

    def delete(self, guid: str) -> str | None: ...

    def list_users_all(self, space_guid: str) -> list[User]: ...


class ApplicationsAPI(Protocol):
    def list_all(
        self,
        *,
        organization_guids: Sequence[str] | None = None,
        space_guids: Sequence[str] | None = None,
    ) -> list[App]: ...

    def delete(self, guid: str) -> str | None: ...


class ServiceInstancesAPI(Protocol):
    def list_all(self, *, organization_guids: Sequence[str] | None = None) -> list[ServiceInstance]: ...


class RolesAPI(Protocol):
    def list_include_users_all(
        self, *, space_guids: Sequence[str] | None = None
    ) -> tuple[list[Role], list[User]]: ...

    def create_space_role(self, space_guid: str, user_guid: str, role_type: RoleType) -> Role: ...


class SpaceQuotasAPI(Protocol):
    def single(
        self,
        *,
        organization_guids: Sequence[str] | None = None,
        names: Sequence[str] | None = None,
    ) -> SpaceQuota | None: ...

    def apply(self, quota_guid: str, space_guids: Sequence[str]) -> list[str]: ...


class JobsAPI(Protocol):
    def poll_complete(
        self,
        job_guid: str,
        polling: PollingOptions,
        cancel_event: threading.Event | None = None,
    ) -> None: ...


class MailSender(Protocol):
    def send_mail(
        self,
        smtp: SMTPOptions,
        sender: str,
        subject: str,
        body: str,
        recipients: Sequence[str],
    ) -> None: ...
