"""Validated shapes of the partner pay item feed.

The partner publishes no schema contract, so every page is parsed into these
models before anything reaches the database. A page that does not fit is
rejected as a whole.
"""
from datetime import date
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_validator


class PartnerPayItem(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    external_id: str = Field(alias="id")
    employee_id: str = Field(alias="employeeId")
    pay_rate: Decimal = Field(alias="payRate")
    hours_worked: Decimal = Field(alias="hoursWorked")
    pay_date: date = Field(alias="date")

    @field_validator("external_id", "employee_id", mode="before")
    @classmethod
    def _coerce_identifier(cls, v):
        # Partner IDs arrive as numbers for some tenants
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        return v


class PartnerPage(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    pay_items: list[PartnerPayItem] = Field(alias="payItems")
    is_last_page: bool | None = Field(default=None, alias="isLastPage")
