"""
Pytest configuration and fixtures for ACV mix service tests.

Provides common test fixtures, sample records, and test utilities.
"""

import json
import sys
from pathlib import Path

import pytest

# Ensure src/ is on sys.path for local test runs without installation
_SRC = Path(__file__).resolve().parents[1] / "src"
if _SRC.exists() and str(_SRC) not in sys.path:
    sys.path.insert(0, str(_SRC))

from acv_mix.shared.models import CategoryField  # noqa: E402


@pytest.fixture
def customer_type_records() -> list[dict]:
    """Sample customer type records across two quarters."""
    return [
        {
            "closed_fiscal_quarter": "2024-Q1",
            "Cust_Type": "New Customer",
            "count": 5,
            "acv": 100000,
        },
        {
            "closed_fiscal_quarter": "2024-Q1",
            "Cust_Type": "New Customer",
            "count": 3,
            "acv": 50000,
        },
        {
            "closed_fiscal_quarter": "2024-Q1",
            "Cust_Type": "Existing Customer",
            "count": 4,
            "acv": 150000,
        },
        {
            "closed_fiscal_quarter": "2024-Q2",
            "Cust_Type": "Existing Customer",
            "count": 2,
            "acv": 100000,
        },
    ]


@pytest.fixture
def industry_records() -> list[dict]:
    """Sample industry records, one of them without an ACV."""
    return [
        {
            "closed_fiscal_quarter": "2023-Q4",
            "Acct_Industry": "Retail",
            "count": 1,
            "acv": 300,
        },
        {
            "closed_fiscal_quarter": "2023-Q4",
            "Acct_Industry": "Technology",
            "count": 1,
            "acv": 700,
        },
        {
            "closed_fiscal_quarter": "2024-Q1",
            "Acct_Industry": "Retail",
            "count": 1,
        },
    ]


@pytest.fixture
def acv_range_records() -> list[dict]:
    """Sample ACV range records."""
    return [
        {
            "closed_fiscal_quarter": "2024-Q2",
            "ACV_Range": "<$20K",
            "count": 6,
            "acv": 60000,
        },
        {
            "closed_fiscal_quarter": "2024-Q2",
            "ACV_Range": ">=$100K",
            "count": 1,
            "acv": 140000,
        },
    ]


@pytest.fixture
def team_records() -> list[dict]:
    """Sample team records with zero ACV throughout."""
    return [
        {"closed_fiscal_quarter": "2024-Q1", "Team": "SMB", "count": 2, "acv": 0},
        {"closed_fiscal_quarter": "2024-Q2", "Team": "SMB", "count": 1},
    ]


@pytest.fixture
def raw_sources(
    customer_type_records, industry_records, acv_range_records, team_records
) -> dict[str, list[dict]]:
    """Raw records keyed by dataset name."""
    return {
        "customerTypes": customer_type_records,
        "industries": industry_records,
        "acvRanges": acv_range_records,
        "teams": team_records,
    }


@pytest.fixture
def sources(raw_sources) -> dict[str, tuple[list[dict], CategoryField]]:
    """Source mapping as accepted by assemble_response."""
    fields = {
        "customerTypes": CategoryField.CUSTOMER_TYPE,
        "industries": CategoryField.INDUSTRY,
        "acvRanges": CategoryField.ACV_RANGE,
        "teams": CategoryField.TEAM,
    }
    return {name: (records, fields[name]) for name, records in raw_sources.items()}


SOURCE_FILENAMES = {
    "customerTypes": "Customer type.json",
    "industries": "Account Industry.json",
    "acvRanges": "ACV Range.json",
    "teams": "Team.json",
}


@pytest.fixture
def data_dir(tmp_path, raw_sources) -> Path:
    """Temporary data directory holding the four JSON source files."""
    directory = tmp_path / "data"
    directory.mkdir()
    for name, records in raw_sources.items():
        (directory / SOURCE_FILENAMES[name]).write_text(json.dumps(records))
    return directory


@pytest.fixture
def mix_config(data_dir):
    """Configuration pointing at the temporary data directory."""
    from acv_mix.config.models import MixConfig

    return MixConfig(paths={"data_dir": str(data_dir)})
