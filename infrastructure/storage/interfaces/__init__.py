"""
Storage Interfaces

This module contains the abstract interfaces, result types and exceptions of the storage toolkit.
"""

from .storage_interface import (
    # Storage interfaces and error kinds
    ClientSettingsSource,
    MinioClientFactoryInterface,
    StorageErrorKind,

    # Storage exceptions
    StorageException,
    ConfigurationException,
    ValidationException,
    InvalidBucketNameException,
    InvalidObjectNameException,
    ArgumentNullException,
    BucketNotFoundException,
    InvalidOperationException,
    ObjectDisposedException,
)
from .results import OperationResult, ValueResult

__all__ = [
    # Storage interfaces
    "ClientSettingsSource",
    "MinioClientFactoryInterface",
    "StorageErrorKind",

    # Results
    "OperationResult",
    "ValueResult",

    # Storage exceptions
    "StorageException",
    "ConfigurationException",
    "ValidationException",
    "InvalidBucketNameException",
    "InvalidObjectNameException",
    "ArgumentNullException",
    "BucketNotFoundException",
    "InvalidOperationException",
    "ObjectDisposedException",
]
