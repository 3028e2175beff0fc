"""
File-backed record source.

Reads the four exported record collections from a data directory. Each
collection is a JSON array of flat objects or a CSV file with one row per
record. Every call re-reads the files; nothing is cached between requests.
"""

import json
import logging
from pathlib import Path
from typing import Any

import pandas as pd

from ..aggregation.assembler import DATASETS, SourceMap
from ..config.models import MixConfig
from ..shared.exceptions import (
    DataSourceError,
    SourceFileNotFoundError,
    SourceParsingError,
)

logger = logging.getLogger(__name__)


class RecordSource:
    """Lists the full record collection for each dataset from disk."""

    def __init__(self, data_dir: str | Path, filenames: dict[str, str] | None = None):
        self.data_dir = Path(data_dir)
        self.filenames = {
            name: descriptor.filename for name, descriptor in DATASETS.items()
        }
        if filenames:
            self.filenames.update(filenames)

    @classmethod
    def from_config(cls, config: MixConfig) -> "RecordSource":
        return cls(config.paths.data_dir, config.sources.filenames())

    def path_for(self, name: str) -> Path:
        """Resolve the source file path of a dataset."""
        if name not in self.filenames:
            raise DataSourceError(f"Unknown dataset: {name}", dataset=name)
        return self.data_dir / self.filenames[name]

    def load(self, name: str) -> list[dict[str, Any]]:
        """
        Read every record of one dataset.

        Raises:
            SourceFileNotFoundError: If the file does not exist
            SourceParsingError: If the file is not a list of records
            DataSourceError: If the file cannot be read
        """
        path = self.path_for(name)
        if not path.is_file():
            raise SourceFileNotFoundError(path, dataset=name)

        if path.suffix.lower() == ".csv":
            records = self._read_csv(path, name)
        else:
            records = self._read_json(path, name)

        logger.debug(f"Loaded {len(records)} records for {name} from {path}")
        return records

    def load_all(self) -> SourceMap:
        """Read every dataset, paired with its category field."""
        return {
            name: (self.load(name), descriptor.category_field)
            for name, descriptor in DATASETS.items()
        }

    def missing_files(self) -> list[Path]:
        """Source files that do not exist."""
        return [
            path
            for path in (self.path_for(name) for name in DATASETS)
            if not path.is_file()
        ]

    def _read_json(self, path: Path, name: str) -> list[dict[str, Any]]:
        try:
            with path.open("r", encoding="utf-8-sig") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise SourceParsingError(
                path, "Invalid JSON", dataset=name, original_error=e
            ) from e
        except (OSError, UnicodeDecodeError) as e:
            raise DataSourceError(
                "Unable to read file", dataset=name, file_path=path, original_error=e
            ) from e

        if not isinstance(data, list):
            raise SourceParsingError(
                path,
                f"Expected a JSON array of records, got {type(data).__name__}",
                dataset=name,
            )
        return data

    def _read_csv(self, path: Path, name: str) -> list[dict[str, Any]]:
        try:
            # Only empty cells are missing; labels such as "NA" stay strings
            df = pd.read_csv(path, keep_default_na=False, na_values=[""])
        except pd.errors.EmptyDataError:
            return []
        except pd.errors.ParserError as e:
            raise SourceParsingError(
                path, "CSV parsing failed", dataset=name, original_error=e
            ) from e
        except (OSError, UnicodeDecodeError) as e:
            raise DataSourceError(
                "Unable to read file", dataset=name, file_path=path, original_error=e
            ) from e

        # Round-trip through JSON for native types with NaN as None
        return json.loads(df.to_json(orient="records", double_precision=15))
