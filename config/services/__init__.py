"""
Service Configuration

This module contains per-service configuration models.
"""

from .storage_config import ClientSettings, StorageConfig, get_storage_config

__all__ = [
    "ClientSettings",
    "StorageConfig",
    "get_storage_config",
]
