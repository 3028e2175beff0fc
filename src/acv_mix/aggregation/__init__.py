"""
Aggregation core: quarter-by-category grouping, totals and ACV shares.
"""

from .aggregator import (
    aggregate,
    apply_percentages,
    format_percentage,
    merge_record,
    totalize,
)
from .assembler import (
    DATASETS,
    DatasetDescriptor,
    assemble_response,
    build_dataset,
    compute_response,
)
from .views import DatasetSummary, summarize_dataset

__all__ = [
    "DATASETS",
    "DatasetDescriptor",
    "DatasetSummary",
    "aggregate",
    "apply_percentages",
    "assemble_response",
    "build_dataset",
    "compute_response",
    "format_percentage",
    "merge_record",
    "summarize_dataset",
    "totalize",
]
