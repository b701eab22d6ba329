"""Tests for the fallback dataset and the fallback policy switch."""

from __future__ import annotations

import pytest

from squashlink.services.fallback import FallbackDataSource, FallbackSwitch
from squashlink.shared.constants import FallbackPolicy
from squashlink.shared.errors import (
    AuthRejectedError,
    CircuitOpenError,
    NetworkError,
    ServerUnavailableError,
    TokenExpiredError,
)
from squashlink.shared.models import Folder, HalCollection, Project, TestCase


@pytest.fixture
def source() -> FallbackDataSource:
    return FallbackDataSource()


class TestFallbackDataSource:
    def test_projects(self, source: FallbackDataSource) -> None:
        response = source.response_for("/projects")
        projects = HalCollection.from_payload(response, "projects", Project)

        assert [p.id for p in projects.items] == [1, 2]
        assert projects.page is not None
        assert projects.page.total_elements == 2

    def test_root_folders_of_project(self, source: FallbackDataSource) -> None:
        folders = HalCollection.from_payload(
            source.response_for("/projects/1/test-case-folders"),
            "folders",
            Folder,
        )
        assert [f.id for f in folders.items] == [101, 102]

    def test_project_without_folders(self, source: FallbackDataSource) -> None:
        response = source.response_for("/projects/2/test-case-folders")
        assert response["_embedded"]["folders"] == []

    def test_sample_folders_have_no_subfolders(self, source: FallbackDataSource) -> None:
        response = source.response_for("/test-case-folders/101/folders")
        assert response["_embedded"]["folders"] == []

    def test_folder_test_cases(self, source: FallbackDataSource) -> None:
        test_cases = HalCollection.from_payload(
            source.response_for("/test-case-folders/101/test-cases"),
            "testCases",
            TestCase,
        )
        assert [tc.id for tc in test_cases.items] == [1001]
        assert source.response_for("/test-case-folders/102/test-cases")["_embedded"]["testCases"] == []

    def test_single_test_case(self, source: FallbackDataSource) -> None:
        test_case = TestCase.model_validate(source.response_for("/test-cases/1001"))

        assert test_case.name == "Login with valid credentials"
        assert [step.index for step in test_case.steps] == [1, 2]

    def test_unknown_test_case_is_empty(self, source: FallbackDataSource) -> None:
        assert source.response_for("/test-cases/4242") == {}

    def test_flat_test_case_collection(self, source: FallbackDataSource) -> None:
        response = source.response_for("/test-cases")
        assert len(response["_embedded"]["testCases"]) == 1

    def test_unknown_endpoint_is_empty(self, source: FallbackDataSource) -> None:
        assert source.response_for("/requirements") == {}

    def test_responses_are_independent_copies(self, source: FallbackDataSource) -> None:
        first = source.response_for("/projects")
        first["_embedded"]["projects"][0]["name"] = "changed"

        second = source.response_for("/projects")

        assert second["_embedded"]["projects"][0]["name"] == "Sample Project 1"


class TestFallbackSwitch:
    @pytest.mark.parametrize(
        "error",
        [
            NetworkError("down"),
            ServerUnavailableError(503),
            CircuitOpenError(),
        ],
    )
    def test_transport_failures_are_absorbed(self, error: Exception) -> None:
        assert FallbackSwitch().absorbs(error) is True

    @pytest.mark.parametrize("error", [AuthRejectedError(401), TokenExpiredError()])
    def test_credential_failures_are_not_absorbed(self, error: Exception) -> None:
        assert FallbackSwitch().absorbs(error) is False

    def test_sticky_policy_stays_tripped_until_reset(self) -> None:
        switch = FallbackSwitch(FallbackPolicy.STICKY)

        switch.trip(NetworkError("down"))
        assert switch.use_fallback() is True

        switch.reset()
        assert switch.use_fallback() is False

    def test_per_call_policy_never_stays_tripped(self) -> None:
        switch = FallbackSwitch(FallbackPolicy.PER_CALL)

        switch.trip(NetworkError("down"))

        assert switch.use_fallback() is False
        assert switch.tripped is False

    def test_disabled_policy_absorbs_nothing(self) -> None:
        switch = FallbackSwitch(FallbackPolicy.DISABLED)
        assert switch.absorbs(NetworkError("down")) is False

    def test_sticky_trip_is_logged_once(self, caplog: pytest.LogCaptureFixture) -> None:
        switch = FallbackSwitch()

        with caplog.at_level("WARNING", logger="squashlink"):
            switch.trip(NetworkError("down"))
            switch.trip(NetworkError("down again"))

        assert sum("switching to fallback" in r.getMessage() for r in caplog.records) == 1
