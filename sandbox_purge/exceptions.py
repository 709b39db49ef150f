"""
Typed exceptions for sandbox purge runs.

Every failure the lifecycle engine can surface derives from SandboxPurgeError:
- CFAPIError: the platform API rejected a request
- ListError: an inventory read failed (aborts the organization pass)
- QuotaNotFoundError, SpaceCreateError, SpaceDeleteError,
  NoSpaceDeleteJobGUIDError, JobPollError, RoleCreateError: abort one space cycle
- InvalidRecipientError, MailSendError: notification failures
- PurgeCancelledError: the run was asked to stop
"""

from typing import Any, Optional


class SandboxPurgeError(Exception):
    """Base exception for all sandbox purge errors.

    Attributes:
        message: Human-readable error description
        details: Additional context as key-value pairs
    """

    def __init__(self, message: str, *, details: Optional[dict[str, Any]] = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """Serialize exception for logging."""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
        }


class CFAPIError(SandboxPurgeError):
    """Platform API returned an error response.

    Attributes:
        status_code: HTTP status code
        errors: Error objects from the response body (``{"code", "title", "detail"}``)
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: Optional[int] = None,
        errors: Optional[list[dict[str, Any]]] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        self.status_code = status_code
        self.errors = errors or []
        super().__init__(
            message,
            details={"status_code": status_code, "errors": self.errors, **(details or {})},
        )


class ListError(SandboxPurgeError):
    """Listing organizations, spaces, apps, service instances or users failed."""


class QuotaNotFoundError(SandboxPurgeError):
    """No space quota matched the organization (and configured name)."""


class SpaceCreateError(SandboxPurgeError):
    """Creating the replacement space, or applying its quota, failed."""


class SpaceDeleteError(SandboxPurgeError):
    """The platform refused to delete a space.

    Attributes:
        space_guid: Space that could not be deleted
        cleanup_errors: Failures from deleting the space's apps afterwards
    """

    def __init__(
        self,
        message: str,
        *,
        space_guid: str,
        cleanup_errors: Optional[list[Exception]] = None,
    ) -> None:
        self.space_guid = space_guid
        self.cleanup_errors = cleanup_errors or []
        super().__init__(
            message,
            details={
                "space_guid": space_guid,
                "cleanup_errors": [str(e) for e in self.cleanup_errors],
            },
        )


class NoSpaceDeleteJobGUIDError(SandboxPurgeError):
    """Space deletion did not return a job to track."""


class JobPollError(SandboxPurgeError):
    """An asynchronous job failed, timed out, or could not be polled."""

    def __init__(self, message: str, *, job_guid: str) -> None:
        self.job_guid = job_guid
        super().__init__(message, details={"job_guid": job_guid})


class RoleCreateError(SandboxPurgeError):
    """Recreating a space role failed."""


class InvalidRecipientError(SandboxPurgeError):
    """A username used as a mail recipient is not a valid email address."""


class MailSendError(SandboxPurgeError):
    """The mail transport failed to deliver a message."""


class PurgeCancelledError(SandboxPurgeError):
    """The run was cancelled while a space cycle was in progress."""
