"""Test configuration and fixtures."""

import pytest

from sandbox_purge.schemas import Organization
from tests.fakes import FakeMailSender


@pytest.fixture
def mail_sender() -> FakeMailSender:
    return FakeMailSender()


@pytest.fixture
def org() -> Organization:
    return Organization(guid="org-1", name="sandbox-agency")
