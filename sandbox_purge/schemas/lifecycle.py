"""Models passed between the lifecycle stages."""

from datetime import datetime

from pydantic import BaseModel, Field, model_validator

from .resources import Space


class SpaceDetails(BaseModel):
    """A space and the day its oldest resource counts as created."""

    timestamp: datetime
    space: Space


class SpaceUser(BaseModel):
    """A user captured from a space's role bindings before deletion."""

    guid: str
    username: str


class Options(BaseModel):
    """Lifecycle thresholds and run switches."""

    notify_days: int = Field(default=76, ge=0)
    purge_days: int = Field(default=90, ge=0)
    disable_purge: bool = False
    dry_run: bool = False
    sandbox_quota_name: str = ""

    @model_validator(mode="after")
    def check_thresholds(self) -> "Options":
        if self.purge_days < self.notify_days:
            raise ValueError(
                f"purge_days ({self.purge_days}) must be >= notify_days ({self.notify_days})"
            )
        return self


class PollingOptions(BaseModel):
    """How long and how often to poll an asynchronous job (seconds)."""

    interval: float = Field(default=5.0, gt=0)
    timeout: float = Field(default=600.0, gt=0)


class SMTPOptions(BaseModel):
    host: str = "localhost"
    port: int = 587
    user: str | None = None
    password: str | None = None
    use_tls: bool = True


class RunSummary(BaseModel):
    """Counts reported at the end of a run."""

    organizations: int = 0
    notified: int = 0
    purged: int = 0
    failed_spaces: list[str] = Field(default_factory=list)
    failed_organizations: list[str] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed_spaces and not self.failed_organizations
