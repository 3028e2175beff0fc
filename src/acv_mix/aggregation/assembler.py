"""
Assembly of the four fixed datasets into a single response.

Each dataset is aggregated independently from its own record collection.
The response is all four datasets or an exception: a failure in any one
dataset aborts the whole response and is attributed to that dataset.
"""

import time
from collections.abc import Mapping, Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any

from ..shared.exceptions import AcvMixException, DataSourceError, InvalidRecordError
from ..shared.logging_utils import StructuredLogger, get_structured_logger
from ..shared.metrics import metrics_collector
from ..shared.models import CategoryField, Dataset, Response
from .aggregator import aggregate, apply_percentages, totalize


@dataclass(frozen=True)
class DatasetDescriptor:
    """Name, category field and default source file of a dataset."""

    name: str
    category_field: CategoryField
    filename: str
    description: str = ""


DATASETS: dict[str, DatasetDescriptor] = {
    "customerTypes": DatasetDescriptor(
        name="customerTypes",
        category_field=CategoryField.CUSTOMER_TYPE,
        filename="Customer type.json",
        description="Won ACV mix by customer type",
    ),
    "industries": DatasetDescriptor(
        name="industries",
        category_field=CategoryField.INDUSTRY,
        filename="Account Industry.json",
        description="Won ACV mix by account industry",
    ),
    "acvRanges": DatasetDescriptor(
        name="acvRanges",
        category_field=CategoryField.ACV_RANGE,
        filename="ACV Range.json",
        description="Won ACV mix by ACV range",
    ),
    "teams": DatasetDescriptor(
        name="teams",
        category_field=CategoryField.TEAM,
        filename="Team.json",
        description="Won ACV mix by team",
    ),
}

# dataset name -> (records, category field)
SourceMap = Mapping[str, tuple[Sequence[Any], CategoryField | str]]


def build_dataset(
    name: str, records: Sequence[Any], category_field: CategoryField
) -> Dataset:
    """
    Run aggregate, totalize and apply_percentages for one dataset.

    Raises:
        InvalidRecordError: With ``dataset`` set to ``name``
    """
    try:
        table = aggregate(records, category_field)
        totals = totalize(table)
    except InvalidRecordError as e:
        if e.dataset is None:
            raise e.with_dataset(name) from e
        raise

    return Dataset(aggregated=apply_percentages(table, totals), totals=totals)


def _resolve_source(descriptor: DatasetDescriptor, sources: SourceMap) -> Sequence[Any]:
    """Check a declared source and return its records."""
    if descriptor.name not in sources:
        raise DataSourceError("Declared source is missing", dataset=descriptor.name)

    try:
        records, category_field = sources[descriptor.name]
    except (TypeError, ValueError) as e:
        raise DataSourceError(
            "Source must be a (records, category_field) pair",
            dataset=descriptor.name,
            original_error=e,
        ) from e

    if not isinstance(records, list | tuple):
        raise DataSourceError(
            f"Source records must be a list, got {type(records).__name__}",
            dataset=descriptor.name,
        )

    try:
        field = CategoryField(category_field)
    except ValueError as e:
        raise DataSourceError(
            f"Unknown category field: {category_field!r}", dataset=descriptor.name
        ) from e

    if field is not descriptor.category_field:
        raise DataSourceError(
            f"Category field {field.value} does not match dataset "
            f"(expected {descriptor.category_field.value})",
            dataset=descriptor.name,
        )

    return records


def assemble_response(
    sources: SourceMap,
    parallel: bool = False,
    max_workers: int | None = None,
    logger: StructuredLogger | None = None,
) -> Response:
    """
    Build every fixed dataset from ``sources``.

    Args:
        sources: Mapping of dataset name to ``(records, category_field)``
        parallel: Compute datasets in a thread pool
        max_workers: Thread pool size when ``parallel`` is set
        logger: Structured logger carrying the request correlation ID

    Returns:
        Response keyed by dataset name, in descriptor order

    Raises:
        DataSourceError: If a declared source is missing or malformed
        InvalidRecordError: If a record cannot be bucketed (with dataset set)
    """
    log = logger or get_structured_logger(__name__)

    resolved = {
        name: _resolve_source(descriptor, sources)
        for name, descriptor in DATASETS.items()
    }

    def run(name: str) -> Dataset:
        records = resolved[name]
        try:
            dataset = build_dataset(name, records, DATASETS[name].category_field)
        except AcvMixException as e:
            metrics_collector.record_dataset_failed(name, type(e).__name__)
            log.error("Dataset aggregation failed", dataset=name, error=str(e))
            raise

        metrics_collector.record_dataset_aggregated(name, len(records))
        log.debug(
            "Dataset aggregated",
            dataset=name,
            records=len(records),
            quarters=len(dataset.aggregated),
            total_count=dataset.totals.count,
            total_acv=dataset.totals.acv,
        )
        return dataset

    if not parallel:
        return {name: run(name) for name in DATASETS}

    # Results and the first failure are taken in descriptor order
    with ThreadPoolExecutor(max_workers=max_workers or len(DATASETS)) as executor:
        futures = {name: executor.submit(run, name) for name in DATASETS}
        return {name: futures[name].result() for name in DATASETS}


def compute_response(
    source,
    parallel: bool = False,
    max_workers: int | None = None,
    correlation_id: str | None = None,
) -> Response:
    """
    Read every source collection and assemble a fresh response.

    Args:
        source: Record source providing ``load_all()``
        parallel: Compute datasets in a thread pool
        max_workers: Thread pool size when ``parallel`` is set
        correlation_id: Request correlation ID for log entries

    Returns:
        Response for all four datasets
    """
    log = get_structured_logger(
        __name__, correlation_id or StructuredLogger.generate_correlation_id()
    )

    start = time.perf_counter()
    succeeded = False
    try:
        sources = source.load_all()
        response = assemble_response(
            sources, parallel=parallel, max_workers=max_workers, logger=log
        )
        succeeded = True
    finally:
        metrics_collector.record_response(time.perf_counter() - start, succeeded)

    log.info(
        "Response computed",
        datasets=list(response),
        duration_ms=round((time.perf_counter() - start) * 1000, 2),
    )
    return response
