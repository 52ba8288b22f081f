"""
Infrastructure Storage Layer

This module provides named MinIO/S3 client creation and object operations
that report failures as typed results instead of raising.
"""

from .interfaces import (
    ClientSettingsSource,
    MinioClientFactoryInterface,
    StorageErrorKind,
    OperationResult,
    ValueResult,
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

from .implementations import (
    MinioClientBuilder,
    MinioClientFactory,
    ObjectArgs,
    PutObjectArgs,
    GetObjectArgs,
    StatObjectArgs,
    RemoveObjectArgs,
    compose,
    ObjectStream,
    classify_exception,
    put_object,
    put_stream,
    get_object,
    download_object,
    download_object_to_memory,
    download_object_range,
    remove_object,
    stat_object,
)

__all__ = [
    # Interfaces
    'ClientSettingsSource',
    'MinioClientFactoryInterface',
    'StorageErrorKind',
    'OperationResult',
    'ValueResult',

    # Exceptions
    'StorageException',
    'ConfigurationException',
    'ValidationException',
    'InvalidBucketNameException',
    'InvalidObjectNameException',
    'ArgumentNullException',
    'BucketNotFoundException',
    'InvalidOperationException',
    'ObjectDisposedException',

    # Client creation
    'MinioClientBuilder',
    'MinioClientFactory',

    # Operation arguments
    'ObjectArgs',
    'PutObjectArgs',
    'GetObjectArgs',
    'StatObjectArgs',
    'RemoveObjectArgs',
    'compose',
    'ObjectStream',
    'classify_exception',

    # Operations
    'put_object',
    'put_stream',
    'get_object',
    'download_object',
    'download_object_to_memory',
    'download_object_range',
    'remove_object',
    'stat_object',
]
