"""
Employee data models for the Employees Service.

Field aliases follow the upstream wire format (``employee_name`` and so on);
records are serialized back out under the same names.
"""

from typing import Optional
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Status(str, Enum):
    """Envelope status markers."""
    HANDLED = "HANDLED"
    ERROR = "ERROR"

    @property
    def description(self) -> str:
        return STATUS_DESCRIPTIONS[self]


STATUS_DESCRIPTIONS = {
    Status.HANDLED: "Successfully processed request.",
    Status.ERROR: "Failed to process request.",
}


class EmployeeRecord(BaseModel):
    """Employee as returned by the upstream service. Immutable."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(..., description="Opaque unique identifier")
    name: str = Field(..., alias="employee_name")
    salary: int = Field(..., ge=0, alias="employee_salary")
    age: int = Field(..., alias="employee_age")
    title: str = Field(..., alias="employee_title")
    email: Optional[str] = Field(None, alias="employee_email")


class EmployeeRegister(BaseModel):
    """Request model for creating an employee."""

    name: str
    salary: int
    age: int
    title: str

    @field_validator("name")
    @classmethod
    def _name_not_blank(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("Name is required and cannot be blank.")
        return value

    @field_validator("salary")
    @classmethod
    def _salary_positive(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("Salary must be a positive number")
        return value

    @field_validator("age")
    @classmethod
    def _age_in_range(cls, value: int) -> int:
        if value < 16:
            raise ValueError("Age must be at least 16")
        if value > 75:
            raise ValueError("Age must be at most 75")
        return value

    @field_validator("title")
    @classmethod
    def _title_not_blank(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("Title is required and cannot be blank")
        return value


class EmployeeDeletion(BaseModel):
    """Upstream delete body; the upstream deletes by name."""
    name: str


# Reported when a registration field is absent or null
REQUIRED_FIELD_MESSAGES = {
    "name": "Name is required and cannot be blank.",
    "salary": "Salary is required and cannot be blank",
    "age": "Age is required and cannot be blank",
    "title": "Title is required and cannot be blank",
}
