"""
Configuration models for the ACV mix service.

These models define the structure and validation for the config.json file.
"""

import json
import logging
from pathlib import Path

from pydantic import BaseModel, Field, field_validator

logger = logging.getLogger(__name__)

DEFAULT_ALLOWED_ORIGINS = [
    "http://localhost:3000",
    "http://localhost:5173",
]


class PathsConfig(BaseModel):
    """Configuration for data file paths."""

    data_dir: str = Field(
        "data", min_length=1, description="Directory holding the exported record files"
    )

    @field_validator("data_dir")
    @classmethod
    def validate_non_empty_path(cls, v: str) -> str:
        """Validate that the path is not empty or whitespace only."""
        if not v or not v.strip():
            raise ValueError("Path cannot be empty or whitespace only")
        return v.strip()


class SourcesConfig(BaseModel):
    """Source file name for each dataset, relative to ``paths.data_dir``."""

    model_config = {"populate_by_name": True}

    customer_types: str = Field(
        "Customer type.json", min_length=1, alias="customerTypes"
    )
    industries: str = Field("Account Industry.json", min_length=1)
    acv_ranges: str = Field("ACV Range.json", min_length=1, alias="acvRanges")
    teams: str = Field("Team.json", min_length=1)

    @field_validator("customer_types", "industries", "acv_ranges", "teams")
    @classmethod
    def validate_extension(cls, v: str) -> str:
        """Only JSON and CSV exports are readable."""
        if Path(v).suffix.lower() not in (".json", ".csv"):
            raise ValueError(f"Source file must be .json or .csv: {v}")
        return v

    def filenames(self) -> dict[str, str]:
        """Filenames keyed by dataset name."""
        return {
            "customerTypes": self.customer_types,
            "industries": self.industries,
            "acvRanges": self.acv_ranges,
            "teams": self.teams,
        }


class ServerConfig(BaseModel):
    """Configuration for the HTTP server."""

    host: str = Field("0.0.0.0", min_length=1, description="Bind address")
    port: int = Field(5000, gt=0, le=65535, description="Listen port")
    allowed_origins: list[str] = Field(
        default_factory=lambda: list(DEFAULT_ALLOWED_ORIGINS),
        description="CORS origins allowed to call the API",
    )


class ProcessingConfig(BaseModel):
    """Configuration for dataset computation."""

    parallel: bool = Field(
        False, description="Compute the four datasets in a thread pool"
    )
    max_workers: int | None = Field(
        None,
        gt=0,
        description="Override thread pool size. If None, one worker per dataset.",
    )


class LoggingConfig(BaseModel):
    """Configuration for application logging."""

    level: str = Field("INFO", description="Root log level")

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unknown log level: {v}")
        return level


class MixConfig(BaseModel):
    """Main configuration model for the ACV mix service."""

    paths: PathsConfig = Field(default_factory=PathsConfig)
    sources: SourcesConfig = Field(default_factory=SourcesConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    processing: ProcessingConfig = Field(default_factory=ProcessingConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def from_file(cls, file_path: str | Path) -> "MixConfig":
        """
        Load configuration from a JSON file.

        Args:
            file_path: Path to the configuration JSON file

        Returns:
            MixConfig instance

        Raises:
            FileNotFoundError: If the file doesn't exist
            ValueError: If the JSON is invalid or doesn't match the schema
        """
        path = Path(file_path)

        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {file_path}")

        try:
            with path.open("r") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in configuration file: {e}")

        return cls(**data)

    def to_file(self, file_path: str | Path) -> None:
        """
        Save configuration to a JSON file.

        Args:
            file_path: Path where to save the configuration
        """
        path = Path(file_path)
        path.parent.mkdir(parents=True, exist_ok=True)

        with path.open("w") as f:
            json.dump(self.model_dump(by_alias=True), f, indent=2)

        logger.info(f"Configuration saved to {path}")
