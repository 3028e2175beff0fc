"""
Pydantic models for FastAPI responses.

This module contains the response models for the ACV mix API: the
aggregated dataset payload, per-dataset display summaries, and the shared
health and error envelopes.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

# ================================
# DATASET RESPONSE MODELS
# ================================


class GroupResponse(BaseModel):
    """Counts and ACV for one (quarter, category) bucket."""

    model_config = ConfigDict(populate_by_name=True)

    count: int = Field(..., ge=0, description="Summed record count")
    acv: float = Field(..., description="Summed annual contract value")
    acv_percentage: str = Field(
        ...,
        alias="acvPercentage",
        description="Share of the dataset's total ACV, two decimals ('0' when total is 0)",
        examples=["37.50"],
    )


class TotalsResponse(BaseModel):
    """Count and ACV summed over every group of a dataset."""

    count: int = Field(..., ge=0)
    acv: float


class DatasetResponse(BaseModel):
    """Aggregated table and totals for one dataset."""

    aggregated: dict[str, dict[str, GroupResponse]] = Field(
        ...,
        description="quarter -> category -> group",
        examples=[
            {
                "2024-Q1": {
                    "New Customer": {
                        "count": 8,
                        "acv": 150000.0,
                        "acvPercentage": "100.00",
                    }
                }
            }
        ],
    )
    totals: TotalsResponse


class DatasetSummaryResponse(BaseModel):
    """Quarter totals, category totals and share labels for one dataset."""

    model_config = ConfigDict(populate_by_name=True)

    dataset: str
    quarters: list[str]
    categories: list[str]
    quarter_totals: dict[str, GroupResponse] = Field(..., alias="quarterTotals")
    category_totals: dict[str, GroupResponse] = Field(..., alias="categoryTotals")
    quarter_shares: dict[str, dict[str, str]] = Field(
        ...,
        alias="quarterShares",
        description="quarter -> category -> whole-number share of the quarter's ACV",
    )
    category_shares: dict[str, str] = Field(
        ...,
        alias="categoryShares",
        description="category -> whole-number share of the dataset's ACV",
    )
    totals: GroupResponse


class DatasetInfoResponse(BaseModel):
    """Descriptor of one served dataset."""

    model_config = ConfigDict(populate_by_name=True)

    name: str
    category_field: str = Field(..., alias="categoryField")
    filename: str
    description: str = ""


# ================================
# STATUS RESPONSE MODELS
# ================================


class HealthCheckResponse(BaseModel):
    """Response model for health checks."""

    status: str = Field(..., description="Overall health status")
    timestamp: datetime = Field(..., description="Health check timestamp")
    version: str = Field(..., description="Application version")
    checks: dict[str, dict[str, Any]] = Field(
        ..., description="Individual component health checks"
    )


class ErrorResponse(BaseModel):
    """Standard error response model."""

    error: str = Field(..., description="Error type or code")
    message: str = Field(..., description="Human-readable error message")
    details: dict[str, Any] | None = Field(
        None, description="Additional error details"
    )
    timestamp: datetime = Field(..., description="Error timestamp")


class ValidationErrorResponse(BaseModel):
    """Response model for validation errors."""

    error: str = Field(..., description="Error type")
    message: str = Field(..., description="General error message")
    field_errors: list[dict[str, Any]] = Field(
        ..., description="Detailed field validation errors"
    )
    timestamp: datetime = Field(..., description="Error timestamp")
