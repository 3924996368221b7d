"""
Employee operations exposed to the REST layer.

Collection reads and aggregates go through the collection cache; lookups and
writes go straight to the upstream. A confirmed create or delete evicts the
cache.
"""

from typing import List

from pydantic import ValidationError

from shared.errors import ClientError, NotFoundError, ServerError
from shared.logging import get_logger

from .adapters.employee_client import EmployeeApiClient
from .caching.collection_cache import CollectionCache
from .models import EmployeeRecord, EmployeeRegister


TOP_EARNERS_LIMIT = 10


class EmployeeService:
    """Resilient access to the upstream employee service."""

    def __init__(self, api_client: EmployeeApiClient, cache: CollectionCache):
        self.api_client = api_client
        self.cache = cache
        self.logger = get_logger("employees.service")

    async def fetch_all(self) -> List[EmployeeRecord]:
        """All employees, served from the cache when populated."""
        return list(await self.cache.get())

    async def search_by_name(self, search_string: str) -> List[EmployeeRecord]:
        """Employees whose name contains ``search_string``, ignoring case."""
        needle = search_string.lower()
        employees = await self.cache.get()

        matches = [
            employee for employee in employees
            if needle in employee.name.lower() or employee.name.lower() == needle
        ]
        self.logger.info("Searched employees by name", search_string=search_string, matches=len(matches))
        return matches

    async def fetch_by_id(self, employee_id: str) -> EmployeeRecord:
        return await self.api_client.fetch_by_id(employee_id)

    async def highest_salary(self) -> int:
        employees = await self.cache.get()
        if not employees:
            raise NotFoundError("No elements: the employee collection is empty")
        return max(employee.salary for employee in employees)

    async def top_ten_earner_names(self) -> List[str]:
        """Names of the ten best paid employees, highest first.

        ``sorted`` is stable, so equal salaries keep their collection order.
        """
        employees = await self.cache.get()
        ranked = sorted(employees, key=lambda employee: employee.salary, reverse=True)
        return [employee.name for employee in ranked[:TOP_EARNERS_LIMIT]]

    async def create(self, name: str, salary: int, age: int, title: str) -> EmployeeRecord:
        try:
            registration = EmployeeRegister(name=name, salary=salary, age=age, title=title)
        except ValidationError as exc:
            raise ClientError(
                "Invalid employee input",
                details={"errors": exc.errors(include_url=False, include_context=False)}
            ) from exc

        employee = await self.api_client.create(registration)
        self.cache.evict(reason="create")
        self.logger.info("Employee created", employee_id=employee.id)
        return employee

    async def delete(self, employee_id: str) -> bool:
        """Delete by id. Returns the upstream's verdict.

        The upstream deletes by name, so the record is looked up first.
        """
        employee = await self.api_client.fetch_by_id(employee_id)
        return await self._delete(employee)

    async def delete_by_id(self, employee_id: str) -> str:
        """Delete by id and return the deleted employee's name."""
        employee = await self.api_client.fetch_by_id(employee_id)
        if not await self._delete(employee):
            raise ServerError(
                "Exception occurred while deleting employee by id",
                details={"id": employee_id}
            )
        return employee.name

    async def _delete(self, employee: EmployeeRecord) -> bool:
        deleted = await self.api_client.delete_by_name(employee.name)
        if deleted:
            self.cache.evict(reason="delete")
            self.logger.info("Employee deleted", employee_id=employee.id)
        else:
            self.logger.warning("Employee service declined deletion", employee_id=employee.id)
        return deleted
