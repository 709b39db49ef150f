"""Platform v3 API resource models.

Only the fields the lifecycle engine reads are modelled; unknown fields in
API responses are ignored.
"""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class Relationship(BaseModel):
    guid: str


class ToOneRelationship(BaseModel):
    data: Relationship | None = None

    @classmethod
    def to(cls, guid: str) -> "ToOneRelationship":
        return cls(data=Relationship(guid=guid))

    @property
    def guid(self) -> str | None:
        return self.data.guid if self.data else None


class Organization(BaseModel):
    guid: str
    name: str
    created_at: datetime | None = None


class SpaceRelationships(BaseModel):
    organization: ToOneRelationship = Field(default_factory=ToOneRelationship)
    quota: ToOneRelationship | None = None


class Space(BaseModel):
    guid: str
    name: str
    created_at: datetime | None = None
    relationships: SpaceRelationships = Field(default_factory=SpaceRelationships)


class SpaceCreate(BaseModel):
    """Request body for POST /v3/spaces."""

    name: str
    relationships: SpaceRelationships


class SpaceResourceRelationships(BaseModel):
    space: ToOneRelationship = Field(default_factory=ToOneRelationship)


class App(BaseModel):
    guid: str
    name: str = ""
    created_at: datetime
    relationships: SpaceResourceRelationships = Field(default_factory=SpaceResourceRelationships)

    @property
    def space_guid(self) -> str | None:
        return self.relationships.space.guid


class ServiceInstance(BaseModel):
    guid: str
    name: str = ""
    created_at: datetime
    relationships: SpaceResourceRelationships = Field(default_factory=SpaceResourceRelationships)

    @property
    def space_guid(self) -> str | None:
        return self.relationships.space.guid


class RoleType(str, Enum):
    ORGANIZATION_USER = "organization_user"
    ORGANIZATION_AUDITOR = "organization_auditor"
    ORGANIZATION_MANAGER = "organization_manager"
    ORGANIZATION_BILLING_MANAGER = "organization_billing_manager"
    SPACE_AUDITOR = "space_auditor"
    SPACE_DEVELOPER = "space_developer"
    SPACE_MANAGER = "space_manager"
    SPACE_SUPPORTER = "space_supporter"


class RoleRelationships(BaseModel):
    user: ToOneRelationship = Field(default_factory=ToOneRelationship)
    space: ToOneRelationship = Field(default_factory=ToOneRelationship)
    organization: ToOneRelationship = Field(default_factory=ToOneRelationship)


class Role(BaseModel):
    guid: str = ""
    type: RoleType
    relationships: RoleRelationships = Field(default_factory=RoleRelationships)

    @property
    def user_guid(self) -> str | None:
        return self.relationships.user.guid


class User(BaseModel):
    guid: str
    username: str | None = None


class SpaceQuota(BaseModel):
    guid: str
    name: str = ""


class JobState(str, Enum):
    PROCESSING = "PROCESSING"
    POLLING = "POLLING"
    COMPLETE = "COMPLETE"
    FAILED = "FAILED"


class Job(BaseModel):
    guid: str
    operation: str = ""
    state: JobState
    errors: list[dict[str, Any]] = Field(default_factory=list)
