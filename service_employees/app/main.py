"""
Employees service for the Employee Access Layer.
"""

from typing import Any, Dict, List, Optional

from shared.base_service import BaseService
from shared.retry import RetryConfig

from .adapters.employee_client import EmployeeApiClient
from .caching.collection_cache import CollectionCache
from .models import REQUIRED_FIELD_MESSAGES, EmployeeRecord, EmployeeRegister
from .service import EmployeeService


class EmployeesService(BaseService):
    """Employees service implementation."""

    required_field_messages = REQUIRED_FIELD_MESSAGES

    def __init__(self, api_client: Optional[EmployeeApiClient] = None, **config_overrides):
        super().__init__("employees", 8111, **config_overrides)

        retry_config = RetryConfig(
            max_retries=self.config.retry_max_retries,
            base_delay=self.config.retry_base_delay_seconds,
            max_delay=self.config.retry_max_delay_seconds,
            jitter=self.config.retry_jitter
        )
        self.api_client = api_client or EmployeeApiClient(
            self.config.employee_api_url,
            timeout=self.config.request_timeout_seconds,
            retry_config=retry_config,
            metrics=self.metrics
        )
        self.cache = CollectionCache(
            self.api_client.fetch_all,
            sweep_interval=self.config.cache_ttl_seconds,
            metrics=self.metrics
        )
        self.employees = EmployeeService(self.api_client, self.cache)

        self._setup_employee_routes()

    def _setup_employee_routes(self):
        """Set up employee routes."""
        prefix = "/api/v2/employees"

        @self.app.get(prefix, response_model=List[EmployeeRecord])
        async def get_all_employees():
            return await self.employees.fetch_all()

        @self.app.get(f"{prefix}/search/{{search_string}}", response_model=List[EmployeeRecord])
        async def get_employees_by_name_search(search_string: str):
            return await self.employees.search_by_name(search_string)

        @self.app.get(f"{prefix}/highestSalary", response_model=int)
        async def get_highest_salary_of_employees():
            highest_salary = await self.employees.highest_salary()
            self.logger.info("Highest salary amongst all employees", highest_salary=highest_salary)
            return highest_salary

        @self.app.get(f"{prefix}/topTenHighestEarningEmployeeNames", response_model=List[str])
        async def get_top_ten_highest_earning_employee_names():
            return await self.employees.top_ten_earner_names()

        @self.app.get(f"{prefix}/{{employee_id}}", response_model=EmployeeRecord)
        async def get_employee_by_id(employee_id: str):
            return await self.employees.fetch_by_id(employee_id)

        @self.app.post(prefix, response_model=EmployeeRecord)
        async def create_employee(employee_input: EmployeeRegister):
            return await self.employees.create(
                employee_input.name,
                employee_input.salary,
                employee_input.age,
                employee_input.title
            )

        @self.app.delete(f"{prefix}/{{employee_id}}", response_model=str)
        async def delete_employee_by_id(employee_id: str):
            return await self.employees.delete_by_id(employee_id)

        @self.app.get("/cache/stats")
        async def cache_stats():
            """Collection cache statistics."""
            return self.cache.get_stats()

    async def _check_dependencies(self) -> Dict[str, Any]:
        return {"collection_cache": "populated" if self.cache.is_populated else "empty"}

    async def start(self):
        """Start employees service components."""
        await self.cache.start()
        self.logger.info("Employees service started", upstream=self.api_client.base_url)

    async def stop(self):
        """Stop employees service components."""
        await self.cache.stop()
        await self.api_client.close()
        self.logger.info("Employees service stopped")


def create_app(**config_overrides):
    """Create employees service application."""
    service = EmployeesService(**config_overrides)
    return service.app


if __name__ == "__main__":
    service = EmployeesService()
    service.run()
