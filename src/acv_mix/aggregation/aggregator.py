"""
Quarter-by-category aggregation of pipeline records.

The pipeline for one dataset is ``aggregate`` -> ``totalize`` ->
``apply_percentages``. Each step is a pure function: inputs are never
mutated and a fresh table is returned.
"""

import math
from collections.abc import Iterable
from decimal import ROUND_HALF_UP, Decimal, localcontext
from functools import reduce
from typing import Any

from ..shared.exceptions import InvalidRecordError
from ..shared.models import AggregatedTable, CategoryField, Group, Record, Totals

ZERO_PERCENTAGE = "0"


def merge_record(table: AggregatedTable, record: Record) -> AggregatedTable:
    """Fold one record into ``table``, returning a new table."""
    categories = table.get(record.fiscal_quarter, {})
    group = categories.get(record.category, Group())

    merged = dict(table)
    merged[record.fiscal_quarter] = {
        **categories,
        record.category: group.add(record),
    }
    return merged


def resolve_records(
    records: Iterable[Any], category_field: CategoryField
) -> Iterable[Record]:
    """Resolve raw rows to ``Record`` objects; ``Record`` instances pass through."""
    for index, raw in enumerate(records):
        if isinstance(raw, Record):
            yield raw
        else:
            yield Record.from_raw(raw, category_field, record_index=index)


def aggregate(
    records: Iterable[Any], category_field: CategoryField
) -> AggregatedTable:
    """
    Group records by (fiscal quarter, category), summing count and ACV.

    Args:
        records: Raw exported rows or ``Record`` objects
        category_field: Field holding the category for this dataset

    Returns:
        AggregatedTable with every ``acv_percentage`` left at ``"0"``

    Raises:
        InvalidRecordError: If a record lacks a quarter or category
    """
    return reduce(merge_record, resolve_records(records, category_field), {})


def totalize(table: AggregatedTable) -> Totals:
    """Sum count and ACV over every group in ``table``."""
    count = 0
    acv = 0.0
    for categories in table.values():
        for group in categories.values():
            count += group.count
            acv += group.acv

    # A float sum can overflow to inf, or to nan across opposite signs
    if not math.isfinite(acv):
        raise InvalidRecordError(
            "Total ACV is not a finite number", field="acv", invalid_value=acv
        )
    return Totals(count=count, acv=acv)


def format_percentage(part: float, whole: float, places: int = 2) -> str:
    """
    Format ``part`` as a percentage of ``whole``.

    Rounds half away from zero. A zero ``whole`` renders as ``"0"`` without
    dividing.
    """
    if whole == 0:
        return ZERO_PERCENTAGE

    numerator = Decimal(repr(float(part)))
    denominator = Decimal(repr(float(whole)))
    quantum = Decimal(1).scaleb(-places)

    with localcontext() as ctx:
        # Enough digits for the integer part of any ratio plus the fraction
        ctx.prec = max(
            28, numerator.adjusted() - denominator.adjusted() + places + 6
        )
        percentage = numerator / denominator * 100
        return str(percentage.quantize(quantum, rounding=ROUND_HALF_UP))


def apply_percentages(table: AggregatedTable, totals: Totals) -> AggregatedTable:
    """Return a copy of ``table`` with each group's share of ``totals.acv`` set."""
    return {
        quarter: {
            category: Group(
                count=group.count,
                acv=group.acv,
                acv_percentage=format_percentage(group.acv, totals.acv),
            )
            for category, group in categories.items()
        }
        for quarter, categories in table.items()
    }
