"""Pydantic models for platform resources and lifecycle state."""

from .resources import (
    App,
    Job,
    JobState,
    Organization,
    Relationship,
    Role,
    RoleType,
    ServiceInstance,
    Space,
    SpaceCreate,
    SpaceQuota,
    SpaceRelationships,
    ToOneRelationship,
    User,
)
from .lifecycle import (
    Options,
    PollingOptions,
    RunSummary,
    SMTPOptions,
    SpaceDetails,
    SpaceUser,
)

__all__ = [
    "App",
    "Job",
    "JobState",
    "Organization",
    "Relationship",
    "Role",
    "RoleType",
    "ServiceInstance",
    "Space",
    "SpaceCreate",
    "SpaceQuota",
    "SpaceRelationships",
    "ToOneRelationship",
    "User",
    "Options",
    "PollingOptions",
    "RunSummary",
    "SMTPOptions",
    "SpaceDetails",
    "SpaceUser",
]
