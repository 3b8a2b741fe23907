"""
Validated plan options.

The command line (or any other caller) hands raw values to ``PlanOptions``;
once constructed, every field is legal for the planning engine and exactly
one of properties / tokens / usd is set.
"""

import math
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, field_validator, model_validator
from pydantic_core import PydanticCustomError

from config import CONFIG


def _as_number(value: Any, error_type: str, message: str) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise PydanticCustomError(error_type, message + ": {value}", {"value": value})
    if math.isnan(number) or math.isinf(number):
        raise PydanticCustomError(error_type, message + ": {value}", {"value": value})
    return number


def _as_whole_number(value: Any, error_type: str, invalid: str, fractional: str) -> int:
    number = _as_number(value, error_type, invalid)
    if not number.is_integer():
        raise PydanticCustomError(error_type, fractional)
    return int(number)


class PlanOptions(BaseModel):
    """Options record consumed by ``PlanningEngine.plan_from_options``."""

    model_config = ConfigDict(frozen=True)

    properties: Optional[int] = None
    tokens: Optional[float] = None
    usd: Optional[float] = None
    data_group: str = CONFIG.default_data_group
    extracted_properties: int = 0
    max_total_workers: Optional[int] = None
    max_new_hires_per_week: Optional[int] = None

    @field_validator("properties", mode="before")
    @classmethod
    def _check_properties(cls, value):
        if value is None:
            return None
        count = _as_whole_number(
            value, "properties", "Invalid properties count", "Properties count must be a whole number"
        )
        if count < 0:
            raise PydanticCustomError("properties", "Invalid properties count: {value}", {"value": value})
        return count

    @field_validator("tokens", mode="before")
    @classmethod
    def _check_tokens(cls, value):
        if value is None:
            return None
        amount = _as_number(value, "tokens", "Invalid token amount")
        if amount < 0:
            raise PydanticCustomError("tokens", "Invalid token amount: {value}", {"value": value})
        return amount

    @field_validator("usd", mode="before")
    @classmethod
    def _check_usd(cls, value):
        if value is None:
            return None
        amount = _as_number(value, "usd", "Invalid USD amount")
        if amount < 0:
            raise PydanticCustomError("usd", "Invalid USD amount: {value}", {"value": value})
        return amount

    @field_validator("data_group", mode="before")
    @classmethod
    def _check_data_group(cls, value):
        if value is None:
            return CONFIG.default_data_group
        key = str(value).strip().lower()
        if key not in CONFIG.data_groups:
            raise PydanticCustomError(
                "data_group",
                "Unsupported data group: {value} (expected one of {choices})",
                {"value": value, "choices": ", ".join(CONFIG.data_groups)}
            )
        return key

    @field_validator("extracted_properties", mode="before")
    @classmethod
    def _check_extracted(cls, value):
        if value is None:
            return 0
        count = _as_whole_number(
            value,
            "extracted_properties",
            "Invalid extracted properties count",
            "Extracted properties must be a whole number"
        )
        if count < 0 or count >= CONFIG.total_properties:
            raise PydanticCustomError(
                "extracted_properties",
                "Extracted properties must be between 0 and {limit}",
                {"limit": f"{CONFIG.total_properties - 1:,}"}
            )
        return count

    @field_validator("max_total_workers", mode="before")
    @classmethod
    def _check_max_workers(cls, value):
        if value is None:
            return None
        count = _as_whole_number(
            value, "max_total_workers", "Invalid max workers value", "Invalid max workers value"
        )
        if count <= 0:
            raise PydanticCustomError("max_total_workers", "Invalid max workers value: {value}", {"value": value})
        return count

    @field_validator("max_new_hires_per_week", mode="before")
    @classmethod
    def _check_max_hires(cls, value):
        if value is None:
            return None
        count = _as_whole_number(
            value, "max_new_hires_per_week", "Invalid max hires per week value", "Invalid max hires per week value"
        )
        if count <= 0:
            raise PydanticCustomError(
                "max_new_hires_per_week", "Invalid max hires per week value: {value}", {"value": value}
            )
        return count

    @model_validator(mode="after")
    def _check_quantity(self):
        provided = [v for v in (self.properties, self.tokens, self.usd) if v is not None]
        if not provided:
            raise PydanticCustomError(
                "quantity", "One of --properties (-p), --tokens (-t) or --usd (-u) is required"
            )
        if len(provided) > 1:
            raise PydanticCustomError(
                "quantity", "Only one of --properties (-p), --tokens (-t) or --usd (-u) can be provided"
            )

        remaining = CONFIG.total_properties - self.extracted_properties
        if self.properties is not None and self.properties > remaining:
            raise PydanticCustomError(
                "capacity",
                "Requested properties ({requested}) exceed remaining capacity ({remaining})",
                {"requested": f"{self.properties:,}", "remaining": f"{remaining:,}"}
            )
        return self

    @property
    def mode(self) -> str:
        if self.tokens is not None:
            return "tokens"
        if self.usd is not None:
            return "usd"
        return "properties"
