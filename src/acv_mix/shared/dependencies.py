"""
FastAPI dependencies for the ACV mix service.

This module provides the shared configuration and record source
dependencies plus the health check helpers used by the application.
"""

import logging
from pathlib import Path
from typing import Any

from fastapi import Depends

from ..config.models import MixConfig
from ..config.settings import load_config_with_fallback
from ..services.record_source import RecordSource

logger = logging.getLogger(__name__)

# Global configuration (initialized on startup or first use)
_config: MixConfig | None = None


# ================================
# CONFIGURATION DEPENDENCIES
# ================================


async def get_config() -> MixConfig:
    """Get the current service configuration."""
    global _config
    if _config is None:
        _config = load_config_with_fallback()
    return _config


async def update_config(new_config: MixConfig) -> None:
    """Update the global configuration."""
    global _config
    _config = new_config
    logger.info(f"Configuration updated (data_dir={new_config.paths.data_dir})")


def reset_config() -> None:
    """Forget the loaded configuration so the next request reloads it."""
    global _config
    _config = None


# ================================
# SOURCE DEPENDENCIES
# ================================


async def get_record_source(
    config: MixConfig = Depends(get_config),
) -> RecordSource:
    """Get a record source for the configured data directory."""
    return RecordSource.from_config(config)


# ================================
# HEALTH CHECK HELPERS
# ================================


async def check_data_sources_health() -> dict[str, Any]:
    """Check that the data directory and every source file exist."""
    try:
        config = await get_config()
        source = RecordSource.from_config(config)
        data_dir = Path(config.paths.data_dir)

        missing = source.missing_files()
        details = {
            "data_dir": str(data_dir),
            "exists": data_dir.is_dir(),
            "missing_files": [str(p) for p in missing],
        }

        if not data_dir.is_dir() or missing:
            return {"status": "unhealthy", "details": details}
        return {"status": "healthy", "details": details}
    except Exception as e:
        return {"status": "unhealthy", "error": str(e)}
