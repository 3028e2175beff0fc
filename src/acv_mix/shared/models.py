"""
Core data models for the ACV mix service.

This module contains the input record model (one exported pipeline row),
the category field tags that select each dataset's grouping column, and the
aggregation result types that make up the served response.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .exceptions import InvalidRecordError

QUARTER_FIELD = "closed_fiscal_quarter"


class CategoryField(str, Enum):
    """Raw field holding the category value for each dataset."""

    CUSTOMER_TYPE = "Cust_Type"
    INDUSTRY = "Acct_Industry"
    ACV_RANGE = "ACV_Range"
    TEAM = "Team"


# ================================
# INPUT RECORDS
# ================================


def _resolve_label(
    raw: Mapping[str, Any], key: str, record_index: int | None
) -> str:
    """Resolve a bucketing key to its string label."""
    value = raw.get(key)

    if value is None:
        raise InvalidRecordError(
            "Missing required bucketing key", record_index=record_index, field=key
        )

    if isinstance(value, bool) or not isinstance(value, str | int | float):
        raise InvalidRecordError(
            "Bucketing key must be a string",
            record_index=record_index,
            field=key,
            invalid_value=value,
        )

    label = str(value)
    if not label.strip():
        raise InvalidRecordError(
            "Blank bucketing key", record_index=record_index, field=key
        )
    return label


def _resolve_measure(
    raw: Mapping[str, Any], key: str, default: int | float, record_index: int | None
) -> int | float:
    """Resolve a measure to a number; missing or null is ``default``."""
    value = raw.get(key)

    if value is None:
        return default

    # bool is an int subclass; strings are not coerced
    if isinstance(value, bool) or not isinstance(value, int | float):
        raise InvalidRecordError(
            "Measure must be a number",
            record_index=record_index,
            field=key,
            invalid_value=value,
        )
    return value


class Record(BaseModel):
    """One exported pipeline row, resolved against a dataset's category field."""

    model_config = ConfigDict(frozen=True)

    fiscal_quarter: str = Field(..., min_length=1, description="Fiscal quarter label")
    category: str = Field(..., min_length=1, description="Category label")
    count: int = Field(0, ge=0, description="Number of won opportunities")
    acv: float = Field(0.0, allow_inf_nan=False, description="Annual contract value")

    @classmethod
    def from_raw(
        cls,
        raw: Any,
        category_field: CategoryField,
        record_index: int | None = None,
    ) -> "Record":
        """
        Build a record from a raw exported row.

        Missing or null ``count``/``acv`` are treated as 0. A missing quarter
        or category, or a measure that is not a JSON number, raises
        ``InvalidRecordError``.
        """
        if not isinstance(raw, Mapping):
            raise InvalidRecordError(
                "Record is not an object",
                record_index=record_index,
                invalid_value=type(raw).__name__,
            )

        quarter = _resolve_label(raw, QUARTER_FIELD, record_index)
        category = _resolve_label(raw, category_field.value, record_index)

        count = _resolve_measure(raw, "count", 0, record_index)
        acv = _resolve_measure(raw, "acv", 0.0, record_index)

        try:
            return cls(
                fiscal_quarter=quarter,
                category=category,
                count=count,
                acv=acv,
            )
        except ValidationError as e:
            error = e.errors()[0]
            field_name = str(error["loc"][0]) if error["loc"] else None
            raise InvalidRecordError(
                f"Invalid measure: {error['msg']}",
                record_index=record_index,
                field=field_name,
                invalid_value=error.get("input"),
            ) from e


# ================================
# AGGREGATION RESULTS
# ================================


@dataclass(frozen=True)
class Group:
    """Aggregation bucket for one (quarter, category) pair."""

    count: int = 0
    acv: float = 0.0
    acv_percentage: str = "0"

    def add(self, record: Record) -> "Group":
        """Return a new group with ``record``'s measures added."""
        return replace(self, count=self.count + record.count, acv=self.acv + record.acv)

    def to_dict(self) -> dict[str, Any]:
        return {
            "count": self.count,
            "acv": self.acv,
            "acvPercentage": self.acv_percentage,
        }


# quarter -> category -> Group, in first-seen order
AggregatedTable = dict[str, dict[str, Group]]


@dataclass(frozen=True)
class Totals:
    """Count and ACV summed over every group of a dataset."""

    count: int = 0
    acv: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return {"count": self.count, "acv": self.acv}


@dataclass
class Dataset:
    """One aggregated table plus its totals."""

    aggregated: AggregatedTable = field(default_factory=dict)
    totals: Totals = field(default_factory=Totals)

    def iter_groups(self):
        """Yield ``(quarter, category, group)`` for every group."""
        for quarter, categories in self.aggregated.items():
            for category, group in categories.items():
                yield quarter, category, group

    def to_dict(self) -> dict[str, Any]:
        return {
            "aggregated": {
                quarter: {
                    category: group.to_dict() for category, group in categories.items()
                }
                for quarter, categories in self.aggregated.items()
            },
            "totals": self.totals.to_dict(),
        }


# dataset name -> Dataset
Response = dict[str, Dataset]


def response_to_dict(response: Response) -> dict[str, Any]:
    """Serialize a response to its JSON-ready shape."""
    return {name: dataset.to_dict() for name, dataset in response.items()}
