"""
Storage Operation Arguments

Immutable parameter objects for storage operations. Every ``with_*`` method
returns a modified copy, so a ``configure`` callback is simply a function
from arguments to arguments:

    result = await stat_object(
        client, "bucket", "report.pdf",
        configure=lambda args: args.with_version_id("3f2a"),
    )

The operation sets its required fields first and applies ``configure``
afterwards. Last write wins: a callback that calls ``with_bucket`` or
``with_object`` replaces the names passed to the operation.
"""

import ipaddress
import re
from dataclasses import dataclass, field, replace
from typing import Any, Awaitable, BinaryIO, Callable, Dict, Optional, TypeVar

from minio.sse import SseCustomerKey

from ..interfaces.storage_interface import (
    ArgumentNullException,
    InvalidBucketNameException,
    InvalidObjectNameException,
    ValidationException,
)
from .streams import ObjectStream

A = TypeVar("A", bound="ObjectArgs")

MAX_OBJECT_NAME_BYTES = 1024
_BUCKET_NAME_PATTERN = re.compile(r"^[a-z0-9][a-z0-9.\-]{1,61}[a-z0-9]$")

StreamCallback = Callable[[ObjectStream], Awaitable[None]]


def check_bucket_name(bucket_name: Optional[str]) -> None:
    """
    Validate a bucket name against S3 naming rules.

    Raises:
        ArgumentNullException: If the name is missing
        InvalidBucketNameException: If the name breaks the rules
    """
    if bucket_name is None:
        raise ArgumentNullException("Bucket name cannot be None")
    if not _BUCKET_NAME_PATTERN.match(bucket_name):
        raise InvalidBucketNameException(
            f"Invalid bucket name '{bucket_name}': use 3-63 lowercase letters, digits, dots or hyphens, "
            "starting and ending with a letter or digit",
            bucket=bucket_name,
        )
    if ".." in bucket_name or ".-" in bucket_name or "-." in bucket_name:
        raise InvalidBucketNameException(
            f"Invalid bucket name '{bucket_name}': adjacent dots or hyphens",
            bucket=bucket_name,
        )
    try:
        ipaddress.IPv4Address(bucket_name)
    except ValueError:
        return
    raise InvalidBucketNameException(
        f"Invalid bucket name '{bucket_name}': must not be formatted as an IP address",
        bucket=bucket_name,
    )


def check_object_name(object_name: Optional[str], bucket_name: Optional[str] = None) -> None:
    """
    Validate an object name.

    Raises:
        ArgumentNullException: If the name is missing
        InvalidObjectNameException: If the name is blank or too long
    """
    if object_name is None:
        raise ArgumentNullException("Object name cannot be None", bucket=bucket_name)
    if not object_name.strip():
        raise InvalidObjectNameException("Object name cannot be empty", bucket=bucket_name)
    if len(object_name.encode("utf-8")) > MAX_OBJECT_NAME_BYTES:
        raise InvalidObjectNameException(
            f"Object name exceeds {MAX_OBJECT_NAME_BYTES} bytes",
            bucket=bucket_name,
            key=object_name,
        )


def compose(*configures: Optional[Callable[[A], A]]) -> Optional[Callable[[A], A]]:
    """Chain configure callbacks left to right, skipping missing ones."""
    steps = [configure for configure in configures if configure is not None]
    if not steps:
        return None

    def configure(args: A) -> A:
        for step in steps:
            args = step(args)
        return args

    return configure


@dataclass(frozen=True)
class ObjectArgs:
    """Arguments shared by every object operation."""

    bucket_name: Optional[str] = None
    object_name: Optional[str] = None

    def with_bucket(self: A, bucket_name: str) -> A:
        return replace(self, bucket_name=bucket_name)

    def with_object(self: A, object_name: str) -> A:
        return replace(self, object_name=object_name)

    def apply(self: A, configure: Optional[Callable[[A], A]]) -> A:
        """Run a configure callback over these arguments."""
        if configure is None:
            return self
        configured = configure(self)
        if not isinstance(configured, type(self)):
            raise ValidationException(
                f"configure must return {type(self).__name__}, got {type(configured).__name__}"
            )
        return configured

    def validate(self) -> None:
        check_bucket_name(self.bucket_name)
        check_object_name(self.object_name, self.bucket_name)


@dataclass(frozen=True)
class PutObjectArgs(ObjectArgs):
    """Arguments for uploading an object."""

    data: Optional[BinaryIO] = None
    length: int = -1  # -1 means unknown, part_size is then required
    content_type: str = "application/octet-stream"
    metadata: Dict[str, Any] = field(default_factory=dict)
    part_size: int = 0
    progress: Optional[Any] = None

    def with_stream_data(self, data: BinaryIO) -> "PutObjectArgs":
        return replace(self, data=data)

    def with_object_size(self, length: int) -> "PutObjectArgs":
        return replace(self, length=length)

    def with_content_type(self, content_type: str) -> "PutObjectArgs":
        return replace(self, content_type=content_type)

    def with_headers(self, headers: Dict[str, Any]) -> "PutObjectArgs":
        """Add user metadata or headers, merged over those already set."""
        return replace(self, metadata={**self.metadata, **headers})

    def with_part_size(self, part_size: int) -> "PutObjectArgs":
        return replace(self, part_size=part_size)

    def with_progress(self, progress: Any) -> "PutObjectArgs":
        return replace(self, progress=progress)

    def validate(self) -> None:
        super().validate()
        if self.data is None:
            raise ArgumentNullException(
                "Object data cannot be None",
                bucket=self.bucket_name,
                key=self.object_name,
            )
        if self.length < -1:
            raise ValidationException("Object size must be -1 (unknown) or non-negative")


@dataclass(frozen=True)
class GetObjectArgs(ObjectArgs):
    """Arguments for downloading an object."""

    version_id: Optional[str] = None
    offset: int = 0
    length: int = 0  # 0 reads to the end of the object
    request_headers: Dict[str, Any] = field(default_factory=dict)
    ssec: Optional[SseCustomerKey] = None
    callback: Optional[StreamCallback] = None
    file_name: Optional[str] = None

    def with_version_id(self, version_id: str) -> "GetObjectArgs":
        return replace(self, version_id=version_id)

    def with_offset_and_length(self, offset: int, length: int) -> "GetObjectArgs":
        return replace(self, offset=offset, length=length)

    def with_headers(self, headers: Dict[str, Any]) -> "GetObjectArgs":
        return replace(self, request_headers={**self.request_headers, **headers})

    def with_server_side_encryption(self, ssec: SseCustomerKey) -> "GetObjectArgs":
        return replace(self, ssec=ssec)

    def with_callback_stream(self, callback: StreamCallback) -> "GetObjectArgs":
        """Receive the object body as an ``ObjectStream``."""
        return replace(self, callback=callback)

    def with_file(self, file_name: str) -> "GetObjectArgs":
        """Write the object body to a local file."""
        return replace(self, file_name=file_name)

    def validate(self) -> None:
        super().validate()
        if self.offset < 0 or self.length < 0:
            raise ValidationException("Offset and length must not be negative")
        if self.callback is not None and self.file_name is not None:
            raise ValidationException("Set either a callback stream or a file, not both")


@dataclass(frozen=True)
class StatObjectArgs(ObjectArgs):
    """Arguments for reading object metadata."""

    version_id: Optional[str] = None
    ssec: Optional[SseCustomerKey] = None

    def with_version_id(self, version_id: str) -> "StatObjectArgs":
        return replace(self, version_id=version_id)

    def with_server_side_encryption(self, ssec: SseCustomerKey) -> "StatObjectArgs":
        return replace(self, ssec=ssec)


@dataclass(frozen=True)
class RemoveObjectArgs(ObjectArgs):
    """Arguments for removing an object."""

    version_id: Optional[str] = None

    def with_version_id(self, version_id: str) -> "RemoveObjectArgs":
        return replace(self, version_id=version_id)
