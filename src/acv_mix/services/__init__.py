"""
Services module for the ACV mix service.

Provides the file-backed record source that feeds the aggregation core.
"""

from .record_source import RecordSource

__all__ = ["RecordSource"]
