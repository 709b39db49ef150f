"""Sandbox lifecycle engine: inventory, age classification, purge and recreation."""

from .classifier import list_purge_spaces
from .inventory import list_org_resources, list_org_user_guids, list_sandbox_orgs
from .notify import list_recipients, notify_space, validate_recipient
from .purge import purge_space, wait_for_space_deletion
from .recreate import (
    list_space_devs_and_managers,
    purge_and_recreate_space,
    recreate_space,
    recreate_space_devs_and_managers,
)
from .runner import SandboxPurgeRunner

__all__ = [
    "list_purge_spaces",
    "list_org_resources",
    "list_org_user_guids",
    "list_sandbox_orgs",
    "list_recipients",
    "validate_recipient",
    "notify_space",
    "purge_space",
    "wait_for_space_deletion",
    "list_space_devs_and_managers",
    "purge_and_recreate_space",
    "recreate_space",
    "recreate_space_devs_and_managers",
    "SandboxPurgeRunner",
]
