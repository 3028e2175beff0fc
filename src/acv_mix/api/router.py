"""
FastAPI router for the aggregated dataset endpoints.

Every request re-reads the record sources and recomputes all datasets.
Source and aggregation errors are not caught here; the application's
exception handlers turn them into a single 500 response.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status

from ..aggregation.assembler import DATASETS, compute_response
from ..aggregation.views import summarize_dataset
from ..config.models import MixConfig
from ..services.record_source import RecordSource
from ..shared.dependencies import get_config, get_record_source
from ..shared.models import response_to_dict
from .models import DatasetInfoResponse, DatasetResponse, DatasetSummaryResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Datasets"])


def _correlation_id(request: Request) -> str | None:
    return getattr(request.state, "correlation_id", None)


def _compute(request: Request, config: MixConfig, source: RecordSource):
    return compute_response(
        source,
        parallel=config.processing.parallel,
        max_workers=config.processing.max_workers,
        correlation_id=_correlation_id(request),
    )


@router.get(
    "/data",
    response_model=dict[str, DatasetResponse],
    summary="Aggregated datasets",
    description=(
        "Quarter-by-category counts, summed ACV and ACV share for the "
        "customerTypes, industries, acvRanges and teams datasets."
    ),
)
def get_data(
    request: Request,
    config: MixConfig = Depends(get_config),
    source: RecordSource = Depends(get_record_source),
):
    """Compute and return every dataset."""
    response = _compute(request, config, source)
    return response_to_dict(response)


@router.get(
    "/datasets",
    response_model=list[DatasetInfoResponse],
    summary="List datasets",
    description="Names, category fields and default source files of the served datasets",
)
async def list_datasets():
    """List the fixed dataset descriptors."""
    return [
        DatasetInfoResponse(
            name=descriptor.name,
            category_field=descriptor.category_field.value,
            filename=descriptor.filename,
            description=descriptor.description,
        )
        for descriptor in DATASETS.values()
    ]


@router.get(
    "/data/{dataset_name}/summary",
    response_model=DatasetSummaryResponse,
    summary="Dataset display summary",
    description=(
        "Quarter totals, category totals and within-quarter shares for one "
        "dataset, derived from the same computation as /api/data."
    ),
)
def get_dataset_summary(
    dataset_name: str,
    request: Request,
    config: MixConfig = Depends(get_config),
    source: RecordSource = Depends(get_record_source),
):
    """Summarize one dataset for the table and chart views."""
    if dataset_name not in DATASETS:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Unknown dataset: {dataset_name}",
        )

    response = _compute(request, config, source)
    summary = summarize_dataset(response[dataset_name])
    return {"dataset": dataset_name, **summary.to_dict()}
