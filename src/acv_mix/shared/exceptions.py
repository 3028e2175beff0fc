"""
Custom exceptions for the ACV mix service.

This module contains the error taxonomy for reading record collections and
aggregating them. All of these propagate out of the aggregation core
unchanged; the API layer converts them to a single failure response.
"""

from pathlib import Path
from typing import Any


class AcvMixException(Exception):
    """Base exception for all ACV mix service errors."""

    pass


class DataSourceError(AcvMixException):
    """Exception raised when a record collection cannot be read or parsed."""

    def __init__(
        self,
        message: str,
        dataset: str | None = None,
        file_path: Path | None = None,
        original_error: Exception | None = None,
    ):
        self.reason = message
        self.dataset = dataset
        self.file_path = file_path
        self.original_error = original_error

        if file_path:
            message = f"Error reading source file '{file_path}': {message}"

        if dataset:
            message = f"[{dataset}] {message}"

        if original_error:
            message = f"{message} (Original error: {original_error})"

        super().__init__(message)


class SourceFileNotFoundError(DataSourceError):
    """Exception raised when a declared source file is missing."""

    def __init__(self, file_path: Path, dataset: str | None = None):
        super().__init__("Source file not found", dataset=dataset, file_path=file_path)


class SourceParsingError(DataSourceError):
    """Exception raised when a source file is not a list of record objects."""

    def __init__(
        self,
        file_path: Path,
        message: str = "Source parsing failed",
        dataset: str | None = None,
        original_error: Exception | None = None,
    ):
        super().__init__(message, dataset, file_path, original_error)


class InvalidRecordError(AcvMixException):
    """Exception raised when a record cannot be bucketed."""

    def __init__(
        self,
        message: str,
        dataset: str | None = None,
        record_index: int | None = None,
        field: str | None = None,
        invalid_value: Any | None = None,
    ):
        self.reason = message
        self.dataset = dataset
        self.record_index = record_index
        self.field = field
        self.invalid_value = invalid_value

        error_parts = [message]

        if dataset:
            error_parts.append(f"Dataset: {dataset}")

        if record_index is not None:
            error_parts.append(f"Record: {record_index}")

        if field:
            error_parts.append(f"Field: {field}")

        if invalid_value is not None:
            error_parts.append(f"Value: {invalid_value!r}")

        super().__init__(" | ".join(error_parts))

    def with_dataset(self, dataset: str) -> "InvalidRecordError":
        """Return a copy of this error attributed to ``dataset``."""
        return InvalidRecordError(
            self.reason,
            dataset=dataset,
            record_index=self.record_index,
            field=self.field,
            invalid_value=self.invalid_value,
        )
