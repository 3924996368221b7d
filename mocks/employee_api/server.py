"""
Mock upstream employee service returning envelope-wrapped responses.
"""

import random
import uuid
from typing import Dict, Any, Optional, List
from collections import Counter
from fastapi import FastAPI, Body
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from shared.logging import get_logger
from service_employees.app.models import Status


SEED_NAMES = [
    ("Winfred Kautzer", "Product Manager"),
    ("Hana Wehner", "Regional Sales Engineer"),
    ("Bob Schimmel", "Legacy Consultant"),
    ("Tiara Heller", "Human Hospitality Officer"),
    ("Cleo Mraz", "Dynamic Farming Strategist"),
    ("Harley Gorczany", "District Banking Analyst"),
    ("Shanita Hodkiewicz", "Chief Agent"),
    ("Deon Kiehn", "Accounting Specialist"),
    ("Jerold Rolfson", "Central Liaison"),
    ("Lorita Harber", "Senior Designer"),
    ("Myles Crona", "Mining Developer"),
    ("Rhett Hauck", "Corporate Administrator"),
]


class CreateEmployeeInput(BaseModel):
    name: str
    salary: int
    age: int
    title: str


class DeleteEmployeeInput(BaseModel):
    name: str


class MockEmployeeApiServer:
    """Mock employee service implementation.

    ``queue_rate_limits(n)`` makes the next ``n`` requests answer 429;
    ``rate_limit_probability`` adds random 429s on top.
    """

    def __init__(self, port: int = 8112, seed: int = 7, rate_limit_probability: float = 0.0):
        self.port = port
        self.logger = get_logger("mock.employee_api")
        self.app = FastAPI(title="Mock Employee API", version="1.0.0")
        self.rate_limit_probability = rate_limit_probability
        self._random = random.Random(seed)
        self._pending_rate_limits = 0
        self.request_counts: Counter = Counter()

        self.employees: Dict[str, Dict[str, Any]] = {}
        self._seed_employees()

        self._setup_routes()

    def _seed_employees(self):
        for name, title in SEED_NAMES:
            self._add_employee(
                name=name,
                salary=self._random.randint(30, 400) * 1000,
                age=self._random.randint(18, 70),
                title=title
            )

    def _add_employee(self, name: str, salary: int, age: int, title: str) -> Dict[str, Any]:
        employee = {
            "id": str(uuid.UUID(int=self._random.getrandbits(128), version=4)),
            "employee_name": name,
            "employee_salary": salary,
            "employee_age": age,
            "employee_title": title,
            "employee_email": f"{name.split()[0].lower()}@company.com",
        }
        self.employees[employee["id"]] = employee
        return employee

    def queue_rate_limits(self, count: int):
        """Answer the next ``count`` requests with 429."""
        self._pending_rate_limits += count

    def _rate_limited(self) -> bool:
        if self._pending_rate_limits > 0:
            self._pending_rate_limits -= 1
            return True
        return self.rate_limit_probability > 0 and self._random.random() < self.rate_limit_probability

    @staticmethod
    def _envelope(data: Any, status: Status = Status.HANDLED, error: Optional[str] = None) -> Dict[str, Any]:
        return {"data": data, "status": status.description, "error": error}

    def _guard(self, route: str) -> Optional[JSONResponse]:
        self.request_counts[route] += 1
        if self._rate_limited():
            self.logger.info("Rate limiting request", route=route)
            return JSONResponse(status_code=429, content={"error": "Too Many Requests"})
        return None

    def _setup_routes(self):

        @self.app.get("/api/v1/employee")
        async def list_employees():
            limited = self._guard("list")
            if limited:
                return limited
            employees: List[Dict[str, Any]] = list(self.employees.values())
            return self._envelope(employees)

        @self.app.get("/api/v1/employee/{employee_id}")
        async def get_employee(employee_id: str):
            limited = self._guard("get")
            if limited:
                return limited
            employee = self.employees.get(employee_id)
            if employee is None:
                return JSONResponse(status_code=404, content={"error": "Not Found"})
            return self._envelope(employee)

        @self.app.post("/api/v1/employee")
        async def create_employee(employee_input: CreateEmployeeInput):
            limited = self._guard("create")
            if limited:
                return limited
            employee = self._add_employee(**employee_input.model_dump())
            return self._envelope(employee)

        @self.app.delete("/api/v1/employee")
        async def delete_employee(deletion: DeleteEmployeeInput = Body(...)):
            limited = self._guard("delete")
            if limited:
                return limited
            for employee_id, employee in list(self.employees.items()):
                if employee["employee_name"] == deletion.name:
                    del self.employees[employee_id]
                    return self._envelope(True)
            return self._envelope(False)


def create_app(**kwargs):
    """Create mock employee API application."""
    server = MockEmployeeApiServer(**kwargs)
    return server.app


if __name__ == "__main__":
    import uvicorn
    server = MockEmployeeApiServer()
    uvicorn.run(server.app, host="0.0.0.0", port=server.port)
