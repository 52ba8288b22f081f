"""
Storage Implementations

This module contains the MinIO client factory, operation arguments and the
result-returning object operations.
"""

from .client_factory import MinioClientBuilder, MinioClientFactory
from .arguments import (
    GetObjectArgs,
    ObjectArgs,
    PutObjectArgs,
    RemoveObjectArgs,
    StatObjectArgs,
    compose,
)
from .streams import ObjectStream
from .error_mapping import classify_exception
from .minio_client import (
    download_object,
    download_object_range,
    download_object_to_memory,
    get_object,
    put_object,
    put_stream,
    remove_object,
    stat_object,
)

__all__ = [
    'MinioClientBuilder',
    'MinioClientFactory',
    'ObjectArgs',
    'PutObjectArgs',
    'GetObjectArgs',
    'StatObjectArgs',
    'RemoveObjectArgs',
    'compose',
    'ObjectStream',
    'classify_exception',
    'put_object',
    'put_stream',
    'get_object',
    'download_object',
    'download_object_to_memory',
    'download_object_range',
    'remove_object',
    'stat_object',
]
