"""
Display figures derived from an assembled dataset.

The summary table, bar chart and doughnut chart all need quarter totals,
per-category totals and share labels. They are computed here from the
dataset's groups so every view reconciles with ``Dataset.totals``.
"""

from dataclasses import dataclass, field
from typing import Any

from ..shared.models import Dataset, Group
from .aggregator import format_percentage


@dataclass
class DatasetSummary:
    """Totals and shares for rendering one dataset."""

    quarters: list[str] = field(default_factory=list)
    categories: list[str] = field(default_factory=list)
    quarter_totals: dict[str, Group] = field(default_factory=dict)
    category_totals: dict[str, Group] = field(default_factory=dict)
    # quarter -> category -> whole-number share of the quarter's ACV
    quarter_shares: dict[str, dict[str, str]] = field(default_factory=dict)
    # category -> whole-number share of the dataset's ACV
    category_shares: dict[str, str] = field(default_factory=dict)
    totals: Group = field(default_factory=Group)

    def to_dict(self) -> dict[str, Any]:
        return {
            "quarters": self.quarters,
            "categories": self.categories,
            "quarterTotals": {q: g.to_dict() for q, g in self.quarter_totals.items()},
            "categoryTotals": {
                c: g.to_dict() for c, g in self.category_totals.items()
            },
            "quarterShares": self.quarter_shares,
            "categoryShares": self.category_shares,
            "totals": self.totals.to_dict(),
        }


def _sum_groups(groups) -> Group:
    count = 0
    acv = 0.0
    for group in groups:
        count += group.count
        acv += group.acv
    return Group(count=count, acv=acv)


def _with_share(group: Group, total_acv: float) -> Group:
    return Group(
        count=group.count,
        acv=group.acv,
        acv_percentage=format_percentage(group.acv, total_acv),
    )


def summarize_dataset(dataset: Dataset) -> DatasetSummary:
    """
    Derive quarter totals, category totals and quarter shares.

    Percentages in ``quarter_totals``, ``category_totals`` and ``totals`` are
    of the dataset's total ACV. ``category_shares`` are the same shares of
    the dataset total rounded to whole percents; ``quarter_shares`` are of
    each quarter's ACV, also rounded to whole percents.
    """
    total_acv = dataset.totals.acv

    categories: list[str] = []
    by_category: dict[str, list[Group]] = {}
    for _quarter, category, group in dataset.iter_groups():
        if category not in by_category:
            categories.append(category)
            by_category[category] = []
        by_category[category].append(group)

    quarter_totals = {}
    quarter_shares = {}
    for quarter, groups in dataset.aggregated.items():
        quarter_total = _sum_groups(groups.values())
        quarter_totals[quarter] = _with_share(quarter_total, total_acv)
        quarter_shares[quarter] = {
            category: format_percentage(group.acv, quarter_total.acv, places=0)
            for category, group in groups.items()
        }

    category_totals = {
        category: _with_share(_sum_groups(by_category[category]), total_acv)
        for category in categories
    }
    category_shares = {
        category: format_percentage(group.acv, total_acv, places=0)
        for category, group in category_totals.items()
    }

    return DatasetSummary(
        quarters=list(dataset.aggregated),
        categories=categories,
        quarter_totals=quarter_totals,
        category_totals=category_totals,
        quarter_shares=quarter_shares,
        category_shares=category_shares,
        totals=_with_share(
            Group(count=dataset.totals.count, acv=dataset.totals.acv), total_acv
        ),
    )
