"""Fakes for each platform resource protocol.

Each fake records the calls the lifecycle engine makes, so tests can assert
on them directly.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone

from sandbox_purge.exceptions import CFAPIError
from sandbox_purge.schemas import (
    App,
    Organization,
    Role,
    RoleType,
    ServiceInstance,
    Space,
    SpaceQuota,
    SpaceRelationships,
    ToOneRelationship,
    User,
)
from sandbox_purge.services.cf_client import CFResourceClient


def utc(*args: int) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


def make_space(guid: str, name: str, org_guid: str = "org-1", quota_guid: str | None = None) -> Space:
    return Space(
        guid=guid,
        name=name,
        relationships=SpaceRelationships(
            organization=ToOneRelationship.to(org_guid),
            quota=ToOneRelationship.to(quota_guid) if quota_guid else None,
        ),
    )


def make_app(guid: str, space_guid: str, created_at: datetime) -> App:
    return App.model_validate({
        "guid": guid,
        "name": guid,
        "created_at": created_at,
        "relationships": {"space": {"data": {"guid": space_guid}}},
    })


def make_instance(guid: str, space_guid: str, created_at: datetime) -> ServiceInstance:
    return ServiceInstance.model_validate({
        "guid": guid,
        "name": guid,
        "created_at": created_at,
        "relationships": {"space": {"data": {"guid": space_guid}}},
    })


def make_role(role_type: RoleType, user_guid: str, space_guid: str = "space-1-guid") -> Role:
    return Role.model_validate({
        "guid": f"{role_type.value}-{user_guid}",
        "type": role_type.value,
        "relationships": {
            "user": {"data": {"guid": user_guid}},
            "space": {"data": {"guid": space_guid}},
            "organization": {"data": None},
        },
    })


@dataclass
class CreatedRole:
    space_guid: str
    user_guid: str
    role_type: RoleType


@dataclass
class FakeOrganizations:
    orgs: list[Organization] = field(default_factory=list)
    users: list[User] = field(default_factory=list)
    list_err: Exception | None = None
    list_users_err: Exception | None = None

    def list_all(self):
        if self.list_err:
            raise self.list_err
        return self.orgs

    def list_users_all(self, org_guid):
        if self.list_users_err:
            raise self.list_users_err
        return self.users


@dataclass
class FakeApplications:
    apps: list[App] = field(default_factory=list)
    list_err: Exception | None = None
    delete_err: Exception | None = None
    list_calls: list[dict] = field(default_factory=list)
    deleted: list[str] = field(default_factory=list)

    def list_all(self, *, organization_guids=None, space_guids=None):
        self.list_calls.append({"organization_guids": organization_guids, "space_guids": space_guids})
        if self.list_err:
            raise self.list_err
        return self.apps

    def delete(self, guid):
        self.deleted.append(guid)
        if self.delete_err:
            raise self.delete_err
        return None


@dataclass
class FakeServiceInstances:
    instances: list[ServiceInstance] = field(default_factory=list)
    list_err: Exception | None = None

    def list_all(self, *, organization_guids=None):
        if self.list_err:
            raise self.list_err
        return self.instances


@dataclass
class FakeSpaces:
    space_guid: str = ""
    spaces: list[Space] = field(default_factory=list)
    users: list[User] = field(default_factory=list)
    created_space: Space | None = None
    delete_job_guid: str | None = None
    delete_err: Exception | None = None
    list_err: Exception | None = None
    create_err: Exception | None = None
    create_requests: list = field(default_factory=list)
    deleted: list[str] = field(default_factory=list)

    def list_all(self, *, organization_guids=None):
        if self.list_err:
            raise self.list_err
        return self.spaces

    def single(self, *, names=None, organization_guids=None):
        return None

    def create(self, request):
        self.create_requests.append(request)
        if self.create_err:
            raise self.create_err
        return self.created_space

    def delete(self, guid):
        self.deleted.append(guid)
        if self.delete_err:
            raise self.delete_err
        return self.delete_job_guid

    def list_users_all(self, space_guid):
        if space_guid != self.space_guid:
            raise CFAPIError(f"expected {self.space_guid}, got {space_guid}")
        return self.users


@dataclass
class FakeRoles:
    space_guid: str = ""
    roles: list[Role] = field(default_factory=list)
    users: list[User] = field(default_factory=list)
    list_err: Exception | None = None
    create_err: Exception | None = None
    created: list[CreatedRole] = field(default_factory=list)

    def list_include_users_all(self, *, space_guids=None):
        if self.list_err:
            raise self.list_err
        if space_guids != [self.space_guid]:
            raise CFAPIError(f"expected space_guids [{self.space_guid}], got {space_guids}")
        return self.roles, self.users

    def create_space_role(self, space_guid, user_guid, role_type):
        if self.create_err:
            raise self.create_err
        self.created.append(CreatedRole(space_guid, user_guid, role_type))
        return make_role(role_type, user_guid, space_guid)


@dataclass
class FakeSpaceQuotas:
    org_guid: str = ""
    quota_name: str = ""
    quota: SpaceQuota | None = None
    applied: list[tuple[str, list[str]]] = field(default_factory=list)

    def single(self, *, organization_guids=None, names=None):
        expected_names = [self.quota_name] if self.quota_name else None
        if organization_guids != [self.org_guid] or names != expected_names:
            raise CFAPIError(
                f"unexpected quota filter: orgs={organization_guids} names={names}"
            )
        return self.quota

    def apply(self, quota_guid, space_guids):
        self.applied.append((quota_guid, list(space_guids)))
        return list(space_guids)


@dataclass
class FakeJobs:
    expected_job_guid: str = ""
    poll_err: Exception | None = None
    polled: list[str] = field(default_factory=list)

    def poll_complete(self, job_guid, polling, cancel_event=None):
        self.polled.append(job_guid)
        if job_guid != self.expected_job_guid:
            raise CFAPIError(f"expected job GUID: {self.expected_job_guid}, received: {job_guid}")
        if self.poll_err:
            raise self.poll_err


@dataclass
class SentMail:
    sender: str
    subject: str
    body: str
    recipients: list[str]


@dataclass
class FakeMailSender:
    send_err: Exception | None = None
    sent: list[SentMail] = field(default_factory=list)

    def send_mail(self, smtp, sender, subject, body, recipients):
        if self.send_err:
            raise self.send_err
        self.sent.append(SentMail(sender, subject, body, list(recipients)))


def make_client(**overrides) -> CFResourceClient:
    """A CFResourceClient built from fakes; pass any fake to replace the default."""
    fakes = {
        "organizations": FakeOrganizations(),
        "spaces": FakeSpaces(),
        "applications": FakeApplications(),
        "service_instances": FakeServiceInstances(),
        "roles": FakeRoles(),
        "space_quotas": FakeSpaceQuotas(),
        "jobs": FakeJobs(),
    }
    fakes.update(overrides)
    return CFResourceClient(**fakes)


