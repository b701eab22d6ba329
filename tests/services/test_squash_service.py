"""Tests for typed SquashTM operations and fallback handling."""

from __future__ import annotations

import pytest
from conftest import FakeResponse, FakeSession, connection_error, hal

from squashlink.services.fallback import FallbackSwitch
from squashlink.services.squash_service import SquashApiService
from squashlink.shared.constants import FallbackPolicy
from squashlink.shared.errors import (
    AuthRejectedError,
    DomainError,
    ErrorCode,
    MalformedResponseError,
    NetworkError,
    TokenExpiredError,
)


@pytest.fixture
def client(mocker):
    client = mocker.Mock()
    client.get = mocker.AsyncMock()
    return client


def make_service(client, policy: FallbackPolicy = FallbackPolicy.STICKY) -> SquashApiService:
    return SquashApiService(client, fallback_switch=FallbackSwitch(policy))


class TestTypedOperations:
    @pytest.mark.asyncio
    async def test_get_projects(self, client) -> None:
        client.get.return_value = hal("projects", [{"id": 1, "name": "P1"}, {"id": 2, "name": "P2"}])
        service = make_service(client)

        projects = await service.get_projects()

        assert [p.name for p in projects] == ["P1", "P2"]
        client.get.assert_awaited_once_with(
            "/projects",
            page=0,
            size=20,
            fields=None,
            timeout_ms=None,
        )

    @pytest.mark.asyncio
    async def test_get_project_folders(self, client) -> None:
        client.get.return_value = hal("folders", [{"id": 11, "name": "F"}])
        service = make_service(client)

        folders = await service.get_project_folders(7)

        assert [f.id for f in folders] == [11]
        assert client.get.await_args.args == ("/projects/7/test-case-folders",)
        assert client.get.await_args.kwargs["size"] == 50

    @pytest.mark.asyncio
    async def test_get_folder_subfolders(self, client) -> None:
        client.get.return_value = hal("folders", [])
        service = make_service(client)

        assert await service.get_folder_subfolders(11) == []
        assert client.get.await_args.args == ("/test-case-folders/11/folders",)

    @pytest.mark.asyncio
    async def test_get_folder_test_cases_uses_projection(self, client) -> None:
        client.get.return_value = hal("testCases", [{"id": 5, "name": "TC"}])
        service = make_service(client)

        test_cases = await service.get_folder_test_cases(11)

        assert [tc.id for tc in test_cases] == [5]
        kwargs = client.get.await_args.kwargs
        assert client.get.await_args.args == ("/test-case-folders/11/test-cases",)
        assert kwargs["size"] == 100
        assert "name" in kwargs["fields"]

    @pytest.mark.asyncio
    async def test_get_test_cases_keeps_page_block(self, client) -> None:
        client.get.return_value = hal(
            "testCases",
            [{"id": 5, "name": "TC"}],
            size=25,
            total=101,
            pages=5,
            number=2,
        )
        service = make_service(client)

        collection = await service.get_test_cases(page=2, size=25)

        assert collection.page is not None
        assert collection.page.total_elements == 101
        assert client.get.await_args.kwargs["page"] == 2

    @pytest.mark.asyncio
    async def test_missing_collection_is_empty(self, client) -> None:
        client.get.return_value = {"_links": {}}
        service = make_service(client)

        assert await service.get_projects() == []

    @pytest.mark.asyncio
    async def test_wrong_collection_shape_is_malformed(self, client) -> None:
        client.get.return_value = {"_embedded": {"projects": {"id": 1}}}
        service = make_service(client)

        with pytest.raises(MalformedResponseError):
            await service.get_projects()

    @pytest.mark.asyncio
    async def test_get_test_case_orders_steps(self, client) -> None:
        client.get.return_value = {
            "id": 9,
            "name": "TC",
            "steps": [
                {"id": 2, "action": "second", "expectedResult": "b", "index": 1},
                {"id": 1, "action": "first", "expectedResult": "a", "index": 0},
            ],
        }
        service = make_service(client)

        test_case = await service.get_test_case(9)

        assert [s.action for s in test_case.steps] == ["first", "second"]
        assert test_case.steps[0].expected_result == "a"


class TestFallbackBehaviour:
    @pytest.mark.asyncio
    async def test_network_failure_switches_to_sample_data(self, client) -> None:
        client.get.side_effect = NetworkError("down")
        service = make_service(client)

        projects = await service.get_projects()

        assert [p.name for p in projects] == ["Sample Project 1", "Sample Project 2"]
        assert service.using_fallback is True

    @pytest.mark.asyncio
    async def test_sticky_fallback_skips_live_calls(self, client) -> None:
        client.get.side_effect = NetworkError("down")
        service = make_service(client)

        await service.get_projects()
        await service.get_project_folders(1)

        assert client.get.await_count == 1

    @pytest.mark.asyncio
    async def test_reset_fallback_goes_live_again(self, client) -> None:
        client.get.side_effect = [NetworkError("down"), hal("projects", [{"id": 9, "name": "Live"}])]
        service = make_service(client)

        await service.get_projects()
        service.reset_fallback()
        projects = await service.get_projects()

        assert [p.name for p in projects] == ["Live"]
        assert service.using_fallback is False

    @pytest.mark.asyncio
    async def test_per_call_policy_retries_live_each_time(self, client) -> None:
        client.get.side_effect = [NetworkError("down"), hal("projects", [{"id": 9, "name": "Live"}])]
        service = make_service(client, FallbackPolicy.PER_CALL)

        first = await service.get_projects()
        second = await service.get_projects()

        assert len(first) == 2
        assert [p.name for p in second] == ["Live"]

    @pytest.mark.asyncio
    async def test_disabled_policy_propagates(self, client) -> None:
        client.get.side_effect = NetworkError("down")
        service = make_service(client, FallbackPolicy.DISABLED)

        with pytest.raises(NetworkError):
            await service.get_projects()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("error", [AuthRejectedError(401), TokenExpiredError()])
    async def test_credential_errors_always_propagate(self, client, error) -> None:
        client.get.side_effect = error
        service = make_service(client)

        with pytest.raises(type(error)):
            await service.get_projects()
        assert service.using_fallback is False

    @pytest.mark.asyncio
    async def test_unknown_test_case_in_fallback_is_not_found(self, client) -> None:
        client.get.side_effect = NetworkError("down")
        service = make_service(client)

        with pytest.raises(DomainError) as exc_info:
            await service.get_test_case(4242)

        assert exc_info.value.code == ErrorCode.RESOURCE_NOT_FOUND


@pytest.mark.integration
class TestServiceOverHttp:
    @pytest.mark.asyncio
    async def test_exhausted_retries_fall_back(self, client_factory) -> None:
        session = FakeSession(connection_error(), connection_error(), connection_error())
        service = SquashApiService(client_factory(session))

        projects = await service.get_projects()

        assert len(session.calls) == 3
        assert [p.id for p in projects] == [1, 2]

    @pytest.mark.asyncio
    async def test_live_folder_listing(self, client_factory) -> None:
        session = FakeSession(FakeResponse(200, hal("folders", [{"id": 3, "name": "Smoke"}])))
        service = SquashApiService(client_factory(session))

        folders = await service.get_project_folders(1)

        assert folders[0].name == "Smoke"
