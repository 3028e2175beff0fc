"""Shared models, exceptions, and utilities for the ACV mix service."""
