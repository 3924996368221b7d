"""
Unit tests for the employee operations layer.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from service_employees.app.caching.collection_cache import CollectionCache
from service_employees.app.models import EmployeeRecord
from service_employees.app.service import EmployeeService
from shared.errors import ClientError, NotFoundError, RateLimitedError, ServerError
from shared.test_helpers import TestDataFactory


def _record(index: int, salary: int = None, name: str = None) -> EmployeeRecord:
    return EmployeeRecord.model_validate(TestDataFactory.create_employee(index, salary=salary, name=name))


def _service(records):
    api_client = MagicMock()
    api_client.fetch_all = AsyncMock(return_value=list(records))
    api_client.fetch_by_id = AsyncMock()
    api_client.create = AsyncMock()
    api_client.delete_by_name = AsyncMock()
    cache = CollectionCache(api_client.fetch_all)
    return EmployeeService(api_client, cache), api_client


class TestEmployeeService:
    """Test cases for EmployeeService."""

    @pytest.mark.asyncio
    async def test_fetch_all_uses_cache(self):
        records = [_record(i) for i in range(5)]
        service, api_client = _service(records)

        assert await service.fetch_all() == records
        assert await service.fetch_all() == records
        api_client.fetch_all.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_search_is_case_insensitive_and_ordered(self):
        records = [
            _record(0, name="Winfred Kautzer"),
            _record(1, name="Ada Lovelace"),
            _record(2, name="Fred Winters"),
            _record(3, name="winfield"),
        ]
        service, _ = _service(records)

        matches = await service.search_by_name("WIN")

        assert [m.name for m in matches] == ["Winfred Kautzer", "Fred Winters", "winfield"]
        assert await service.search_by_name("WIN") == matches

    @pytest.mark.asyncio
    async def test_search_without_matches_is_empty(self):
        service, _ = _service([_record(0, name="Ada")])

        assert await service.search_by_name("zzz") == []

    @pytest.mark.asyncio
    async def test_highest_salary(self):
        records = [_record(0, salary=100), _record(1, salary=9000), _record(2, salary=700)]
        service, _ = _service(records)

        assert await service.highest_salary() == 9000

    @pytest.mark.asyncio
    async def test_highest_salary_of_empty_collection(self):
        service, _ = _service([])

        with pytest.raises(NotFoundError, match="No elements"):
            await service.highest_salary()

    @pytest.mark.asyncio
    async def test_top_ten_keeps_order_of_ties(self):
        records = [_record(i, salary=1000, name=f"Tied {i}") for i in range(12)]
        records.append(_record(12, salary=5000, name="Top"))
        service, _ = _service(records)

        names = await service.top_ten_earner_names()

        assert names == ["Top"] + [f"Tied {i}" for i in range(9)]

    @pytest.mark.asyncio
    async def test_top_ten_with_fewer_employees(self):
        records = [_record(0, salary=10, name="Low"), _record(1, salary=30, name="High"), _record(2, salary=20, name="Mid")]
        service, _ = _service(records)

        assert await service.top_ten_earner_names() == ["High", "Mid", "Low"]

    @pytest.mark.asyncio
    async def test_top_ten_of_empty_collection(self):
        service, _ = _service([])

        assert await service.top_ten_earner_names() == []

    @pytest.mark.asyncio
    async def test_fetch_by_id_bypasses_cache(self):
        service, api_client = _service([])
        api_client.fetch_by_id.return_value = _record(1)

        employee = await service.fetch_by_id("some-id")

        assert employee == _record(1)
        api_client.fetch_all.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_create_evicts_cache(self):
        service, api_client = _service([_record(0)])
        created = _record(1, name="Jane")
        api_client.create.return_value = created

        await service.fetch_all()
        result = await service.create("Jane", 5000, 30, "Engineer")
        await service.fetch_all()

        assert result == created
        registration = api_client.create.await_args.args[0]
        assert registration.name == "Jane"
        assert api_client.fetch_all.await_count == 2

    @pytest.mark.asyncio
    async def test_failed_create_keeps_cache(self):
        service, api_client = _service([_record(0)])
        api_client.create.side_effect = RateLimitedError()

        await service.fetch_all()
        with pytest.raises(RateLimitedError):
            await service.create("Jane", 5000, 30, "Engineer")

        assert service.cache.is_populated

    @pytest.mark.asyncio
    @pytest.mark.parametrize("name,salary,age,title", [
        ("", 5000, 30, "Engineer"),
        ("Jane", -1, 30, "Engineer"),
        ("Jane", 5000, 15, "Engineer"),
        ("Jane", 5000, 76, "Engineer"),
        ("Jane", 5000, 30, "  "),
    ])
    async def test_invalid_input_is_rejected_before_upstream(self, name, salary, age, title):
        service, api_client = _service([])

        with pytest.raises(ClientError, match="Invalid employee input"):
            await service.create(name, salary, age, title)

        api_client.create.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_delete_looks_up_name_then_deletes(self):
        service, api_client = _service([_record(0)])
        api_client.fetch_by_id.return_value = _record(4, name="Jane")
        api_client.delete_by_name.return_value = True

        await service.fetch_all()
        assert await service.delete("jane-id") is True

        api_client.fetch_by_id.assert_awaited_once_with("jane-id")
        api_client.delete_by_name.assert_awaited_once_with("Jane")
        assert not service.cache.is_populated

    @pytest.mark.asyncio
    async def test_declined_delete_keeps_cache(self):
        service, api_client = _service([_record(0)])
        api_client.fetch_by_id.return_value = _record(4, name="Jane")
        api_client.delete_by_name.return_value = False

        await service.fetch_all()
        assert await service.delete("jane-id") is False

        assert service.cache.is_populated

    @pytest.mark.asyncio
    async def test_delete_of_unknown_id_never_deletes(self):
        service, api_client = _service([])
        api_client.fetch_by_id.side_effect = NotFoundError("Employee with id: x not found")

        with pytest.raises(NotFoundError):
            await service.delete("x")

        api_client.delete_by_name.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_delete_by_id_returns_name(self):
        service, api_client = _service([])
        api_client.fetch_by_id.return_value = _record(4, name="Jane")
        api_client.delete_by_name.return_value = True

        assert await service.delete_by_id("jane-id") == "Jane"

    @pytest.mark.asyncio
    async def test_delete_by_id_raises_when_declined(self):
        service, api_client = _service([])
        api_client.fetch_by_id.return_value = _record(4, name="Jane")
        api_client.delete_by_name.return_value = False

        with pytest.raises(ServerError, match="deleting employee by id"):
            await service.delete_by_id("jane-id")
