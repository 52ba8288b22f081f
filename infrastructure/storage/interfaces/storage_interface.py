"""
Object Storage Interface Abstract Classes

This module defines the abstract seams of the storage toolkit: where named
client settings come from, how clients are created, the closed set of error
kinds an operation can report and the toolkit's own exception hierarchy.
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable, Optional

if TYPE_CHECKING:
    from minio import Minio

    from config.services.storage_config import ClientSettings
    from ..implementations.client_factory import MinioClientBuilder


class StorageErrorKind(str, Enum):
    """
    Closed set of failure causes reported by storage operations.

    Callers branch on these values for retry and alerting decisions instead of
    catching exception types. ``NONE`` marks a successful operation.
    """

    NONE = "none"
    AUTHORIZATION = "authorization"  # invalid or expired credentials
    INVALID_BUCKET_NAME = "invalid_bucket_name"
    INVALID_OBJECT_NAME = "invalid_object_name"
    BUCKET_NOT_FOUND = "bucket_not_found"
    OBJECT_NOT_FOUND = "object_not_found"
    NOT_IMPLEMENTED = "not_implemented"
    FILE_NOT_FOUND = "file_not_found"  # local source or destination file
    OBJECT_DISPOSED = "object_disposed"  # stream used after close
    NOT_SUPPORTED = "not_supported"  # stream lacks the needed capability
    INVALID_OPERATION = "invalid_operation"
    ACCESS_DENIED = "access_denied"
    CONNECTION = "connection"
    ARGUMENT_NULL = "argument_null"
    TIMEOUT = "timeout"
    UNKNOWN_STORAGE_ERROR = "unknown_storage_error"
    UNEXPECTED_ERROR = "unexpected_error"


class ClientSettingsSource(ABC):
    """Named mapping from configuration name to client settings."""

    @abstractmethod
    def get(self, name: str) -> Optional["ClientSettings"]:
        """
        Get the settings registered under a name.

        Args:
            name: Configuration name

        Returns:
            Optional[ClientSettings]: Settings, or None when nothing is registered
        """
        pass


class MinioClientFactoryInterface(ABC):
    """
    Abstract factory for named storage clients.

    Supports several independently configured clients within one process.
    """

    @abstractmethod
    def create_client(
        self,
        name: str,
        configure_client: Optional[Callable[["MinioClientBuilder"], Any]] = None,
    ) -> "Minio":
        """
        Create a client from the settings registered under ``name``.

        Args:
            name: Configuration name
            configure_client: Hook receiving the builder after all settings are applied

        Returns:
            Minio: Configured client

        Raises:
            ConfigurationException: If name is empty or has no registered settings
        """
        pass


class StorageException(Exception):
    """Exception raised by the storage toolkit."""

    def __init__(
        self,
        message: str,
        bucket: str = None,
        key: str = None,
    ):
        super().__init__(message)
        self.message = message
        self.bucket = bucket
        self.key = key


class ConfigurationException(StorageException, ValueError):
    """Exception raised when a named client cannot be configured."""
    pass


class ValidationException(StorageException):
    """Exception raised when operation arguments are invalid."""
    pass


class InvalidBucketNameException(ValidationException):
    """Exception raised when a bucket name breaks S3 naming rules."""
    pass


class InvalidObjectNameException(ValidationException):
    """Exception raised when an object name is empty or malformed."""
    pass


class ArgumentNullException(ValidationException):
    """Exception raised when a required argument is missing."""
    pass


class BucketNotFoundException(StorageException):
    """Exception raised when the target bucket does not exist."""
    pass


class InvalidOperationException(StorageException):
    """Exception raised when an object is used in the wrong state."""
    pass


class ObjectDisposedException(StorageException):
    """Exception raised when a closed stream is used."""
    pass
