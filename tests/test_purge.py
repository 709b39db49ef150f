"""Unit tests for space deletion and deletion-job tracking.

Run:  pytest tests/test_purge.py -v
"""

import pytest

from sandbox_purge.core.purge import purge_space, wait_for_space_deletion
from sandbox_purge.exceptions import (
    CFAPIError,
    JobPollError,
    NoSpaceDeleteJobGUIDError,
    SpaceDeleteError,
)
from tests.fakes import FakeApplications, FakeJobs, FakeSpaces, make_app, make_client, make_space, utc


class TestPurgeSpace:

    def test_returns_job_guid(self):
        spaces = FakeSpaces(delete_job_guid="delete-1")
        applications = FakeApplications()
        client = make_client(spaces=spaces, applications=applications)

        assert purge_space(client, make_space("space-1-guid", "space-1")) == "delete-1"
        assert spaces.deleted == ["space-1-guid"]
        assert applications.list_calls == []

    def test_failed_delete_removes_apps_and_raises_original(self):
        delete_err = CFAPIError("space not empty", status_code=422)
        spaces = FakeSpaces(delete_err=delete_err)
        applications = FakeApplications(apps=[
            make_app("app-1", "space-1-guid", utc(2026, 1, 1)),
            make_app("app-2", "space-1-guid", utc(2026, 1, 2)),
        ])
        client = make_client(spaces=spaces, applications=applications)

        with pytest.raises(SpaceDeleteError) as exc_info:
            purge_space(client, make_space("space-1-guid", "space-1"))

        assert exc_info.value.__cause__ is delete_err
        assert exc_info.value.cleanup_errors == []
        assert applications.list_calls == [{"organization_guids": None, "space_guids": ["space-1-guid"]}]
        assert applications.deleted == ["app-1", "app-2"]
        # The delete is not retried within the same call
        assert spaces.deleted == ["space-1-guid"]

    def test_cleanup_failures_are_folded_into_delete_error(self):
        delete_err = CFAPIError("space not empty", status_code=422)
        app_err = CFAPIError("app busy", status_code=409)
        applications = FakeApplications(
            apps=[make_app("app-1", "space-1-guid", utc(2026, 1, 1)), make_app("app-2", "space-1-guid", utc(2026, 1, 1))],
            delete_err=app_err,
        )
        client = make_client(spaces=FakeSpaces(delete_err=delete_err), applications=applications)

        with pytest.raises(SpaceDeleteError) as exc_info:
            purge_space(client, make_space("space-1-guid", "space-1"))

        assert exc_info.value.__cause__ is delete_err
        assert exc_info.value.cleanup_errors == [app_err, app_err]
        # Every app is attempted even after one fails
        assert applications.deleted == ["app-1", "app-2"]

    def test_cleanup_list_failure_is_folded_into_delete_error(self):
        delete_err = CFAPIError("space not empty")
        list_err = CFAPIError("list failed")
        client = make_client(
            spaces=FakeSpaces(delete_err=delete_err),
            applications=FakeApplications(list_err=list_err),
        )

        with pytest.raises(SpaceDeleteError) as exc_info:
            purge_space(client, make_space("space-1-guid", "space-1"))

        assert exc_info.value.__cause__ is delete_err
        assert exc_info.value.cleanup_errors == [list_err]


class TestWaitForSpaceDeletion:

    def test_success(self):
        jobs = FakeJobs(expected_job_guid="delete-1")
        wait_for_space_deletion(make_client(jobs=jobs), "delete-1")
        assert jobs.polled == ["delete-1"]

    @pytest.mark.parametrize("job_guid", [None, ""])
    def test_no_job_guid_skips_polling(self, job_guid):
        jobs = FakeJobs()

        with pytest.raises(NoSpaceDeleteJobGUIDError):
            wait_for_space_deletion(make_client(jobs=jobs), job_guid)

        assert jobs.polled == []

    def test_poll_error_is_wrapped(self):
        poll_err = CFAPIError("polling error")
        jobs = FakeJobs(expected_job_guid="delete-1", poll_err=poll_err)

        with pytest.raises(JobPollError) as exc_info:
            wait_for_space_deletion(make_client(jobs=jobs), "delete-1")

        assert exc_info.value.__cause__ is poll_err
        assert exc_info.value.job_guid == "delete-1"

    def test_job_failure_propagates(self):
        job_err = JobPollError("job delete-1 failed: space not empty", job_guid="delete-1")
        jobs = FakeJobs(expected_job_guid="delete-1", poll_err=job_err)

        with pytest.raises(JobPollError) as exc_info:
            wait_for_space_deletion(make_client(jobs=jobs), "delete-1")

        assert exc_info.value is job_err
