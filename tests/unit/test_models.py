"""
Test the record model, aggregation result types and error taxonomy.
"""

from pathlib import Path

import pytest
from pydantic import ValidationError

from acv_mix.shared.exceptions import (
    AcvMixException,
    DataSourceError,
    InvalidRecordError,
    SourceFileNotFoundError,
    SourceParsingError,
)
from acv_mix.shared.models import (
    CategoryField,
    Dataset,
    Group,
    Record,
    Totals,
    response_to_dict,
)


class TestRecord:
    """Test resolving raw rows into records."""

    def test_from_raw(self):
        raw = {
            "closed_fiscal_quarter": "2024-Q2",
            "ACV_Range": "$20K - 50K",
            "count": 3,
            "acv": 91250.75,
            "Opportunity_Owner": "ignored",
        }

        record = Record.from_raw(raw, CategoryField.ACV_RANGE)

        assert record == Record(
            fiscal_quarter="2024-Q2", category="$20K - 50K", count=3, acv=91250.75
        )

    def test_defaults_for_missing_measures(self):
        record = Record.from_raw(
            {"closed_fiscal_quarter": "2024-Q2", "Team": "SMB"}, CategoryField.TEAM
        )

        assert record.count == 0
        assert record.acv == 0.0

    def test_numeric_category_becomes_label(self):
        record = Record.from_raw(
            {"closed_fiscal_quarter": "2024-Q2", "Team": 7}, CategoryField.TEAM
        )

        assert record.category == "7"

    def test_not_an_object(self):
        with pytest.raises(InvalidRecordError) as exc_info:
            Record.from_raw(["2024-Q2", "SMB"], CategoryField.TEAM, record_index=4)

        assert exc_info.value.record_index == 4

    @pytest.mark.parametrize("value", [True, ["SMB"], {"name": "SMB"}])
    def test_non_scalar_category(self, value):
        with pytest.raises(InvalidRecordError):
            Record.from_raw(
                {"closed_fiscal_quarter": "2024-Q2", "Team": value}, CategoryField.TEAM
            )

    def test_negative_count(self):
        with pytest.raises(InvalidRecordError) as exc_info:
            Record.from_raw(
                {"closed_fiscal_quarter": "2024-Q2", "Team": "SMB", "count": -1},
                CategoryField.TEAM,
            )

        assert exc_info.value.field == "count"

    def test_fractional_count(self):
        with pytest.raises(InvalidRecordError):
            Record.from_raw(
                {"closed_fiscal_quarter": "2024-Q2", "Team": "SMB", "count": 1.5},
                CategoryField.TEAM,
            )

    @pytest.mark.parametrize(
        "field,value",
        [
            ("count", True),
            ("count", "5"),
            ("acv", False),
            ("acv", "100"),
            ("acv", {"amount": 100}),
        ],
    )
    def test_measure_must_be_a_number(self, field, value):
        raw = {"closed_fiscal_quarter": "2024-Q2", "Team": "SMB", field: value}

        with pytest.raises(InvalidRecordError) as exc_info:
            Record.from_raw(raw, CategoryField.TEAM, record_index=3)

        assert exc_info.value.field == field
        assert exc_info.value.record_index == 3

    def test_whole_float_count_accepted(self):
        # CSV columns with blank cells read back as floats
        record = Record.from_raw(
            {"closed_fiscal_quarter": "2024-Q2", "Team": "SMB", "count": 2.0},
            CategoryField.TEAM,
        )

        assert record.count == 2

    def test_nan_acv(self):
        with pytest.raises(InvalidRecordError):
            Record.from_raw(
                {"closed_fiscal_quarter": "2024-Q2", "Team": "SMB", "acv": float("nan")},
                CategoryField.TEAM,
            )

    def test_record_is_immutable(self):
        record = Record(fiscal_quarter="2024-Q2", category="SMB")

        with pytest.raises(ValidationError):
            record.count = 5


class TestResultTypes:
    """Test group accumulation and serialization."""

    def test_group_add_returns_new_group(self):
        group = Group(count=1, acv=10.0)
        record = Record(fiscal_quarter="2024-Q2", category="SMB", count=2, acv=5.5)

        added = group.add(record)

        assert added == Group(count=3, acv=15.5)
        assert group == Group(count=1, acv=10.0)

    def test_group_to_dict(self):
        group = Group(count=2, acv=300.0, acv_percentage="30.00")

        assert group.to_dict() == {"count": 2, "acv": 300.0, "acvPercentage": "30.00"}

    def test_dataset_iter_groups(self):
        dataset = Dataset(
            aggregated={
                "2024-Q1": {"A": Group(count=1), "B": Group(count=2)},
                "2024-Q2": {"A": Group(count=3)},
            },
            totals=Totals(count=6),
        )

        assert [(q, c, g.count) for q, c, g in dataset.iter_groups()] == [
            ("2024-Q1", "A", 1),
            ("2024-Q1", "B", 2),
            ("2024-Q2", "A", 3),
        ]

    def test_response_to_dict(self):
        response = {
            "teams": Dataset(
                aggregated={"2024-Q1": {"SMB": Group(count=1, acv=0.0)}},
                totals=Totals(count=1, acv=0.0),
            )
        }

        assert response_to_dict(response) == {
            "teams": {
                "aggregated": {
                    "2024-Q1": {"SMB": {"count": 1, "acv": 0.0, "acvPercentage": "0"}}
                },
                "totals": {"count": 1, "acv": 0.0},
            }
        }


class TestExceptions:
    """Test error messages and context."""

    def test_hierarchy(self):
        assert issubclass(DataSourceError, AcvMixException)
        assert issubclass(SourceFileNotFoundError, DataSourceError)
        assert issubclass(SourceParsingError, DataSourceError)
        assert issubclass(InvalidRecordError, AcvMixException)

    def test_data_source_error_message(self):
        error = DataSourceError(
            "Invalid JSON",
            dataset="teams",
            file_path=Path("data/Team.json"),
            original_error=ValueError("bad"),
        )

        message = str(error)
        assert message.startswith("[teams]")
        assert "data/Team.json" in message
        assert "Original error: bad" in message

    def test_invalid_record_with_dataset(self):
        error = InvalidRecordError(
            "Missing required bucketing key", record_index=2, field="Team"
        )

        attributed = error.with_dataset("teams")

        assert error.dataset is None
        assert attributed.dataset == "teams"
        assert attributed.record_index == 2
        assert attributed.field == "Team"
        assert str(attributed) == (
            "Missing required bucketing key | Dataset: teams | Record: 2 | Field: Team"
        )
