"""
Storage Error Classification

Maps exceptions raised during a storage operation onto ``StorageErrorKind``.

Rules are checked in order and the first match wins, because the same failure
can surface through several exception types (an ``S3Error`` code, a urllib3
transport error, a builtin). Anything unmatched falls through two generic
tiers: exceptions from the storage stack itself (``minio``, urllib3, this
toolkit) become ``UNKNOWN_STORAGE_ERROR``, everything else ``UNEXPECTED_ERROR``.
"""

import io
from typing import Callable, Tuple, Type

from minio.error import MinioException, S3Error
from urllib3 import exceptions as urllib3_exceptions

from ..interfaces.storage_interface import (
    ArgumentNullException,
    BucketNotFoundException,
    InvalidBucketNameException,
    InvalidObjectNameException,
    InvalidOperationException,
    ObjectDisposedException,
    StorageErrorKind,
    StorageException,
)

Predicate = Callable[[BaseException], bool]

AUTHORIZATION_CODES = frozenset({
    "InvalidAccessKeyId",
    "SignatureDoesNotMatch",
    "ExpiredToken",
    "InvalidToken",
    "AuthorizationHeaderMalformed",
    "InvalidSecurity",
})
INVALID_OBJECT_NAME_CODES = frozenset({"XMinioInvalidObjectName", "InvalidObjectName", "KeyTooLongError"})
OBJECT_NOT_FOUND_CODES = frozenset({"NoSuchKey", "NoSuchObject", "NoSuchVersion"})
ACCESS_DENIED_CODES = frozenset({"AccessDenied", "AllAccessDisabled"})

LIBRARY_EXCEPTIONS: Tuple[Type[BaseException], ...] = (
    MinioException,
    StorageException,
    urllib3_exceptions.HTTPError,
)


def _s3_code(*codes: str) -> Predicate:
    code_set = frozenset(codes)

    def matches(exc: BaseException) -> bool:
        return isinstance(exc, S3Error) and exc.code in code_set

    return matches


def _instance_of(*types: Type[BaseException], excluding: Tuple[Type[BaseException], ...] = ()) -> Predicate:
    def matches(exc: BaseException) -> bool:
        return isinstance(exc, types) and not isinstance(exc, excluding)

    return matches


def _any_of(*predicates: Predicate) -> Predicate:
    def matches(exc: BaseException) -> bool:
        return any(predicate(exc) for predicate in predicates)

    return matches


def _transport_cause(exc: BaseException) -> BaseException:
    """Unwrap urllib3's retry wrapper to the error that exhausted the retries."""
    if isinstance(exc, urllib3_exceptions.MaxRetryError) and exc.reason is not None:
        return exc.reason
    return exc


def _is_closed_file_error(exc: BaseException) -> bool:
    return type(exc) is ValueError and "closed file" in str(exc)


def _is_connection_failure(exc: BaseException) -> bool:
    cause = _transport_cause(exc)
    if isinstance(cause, urllib3_exceptions.MaxRetryError):
        # Retries exhausted without a recorded reason
        return True
    return isinstance(cause, (
        ConnectionError,
        urllib3_exceptions.NewConnectionError,
        urllib3_exceptions.ProtocolError,
        urllib3_exceptions.SSLError,
        urllib3_exceptions.ProxyError,
    ))


def _is_timeout(exc: BaseException) -> bool:
    cause = _transport_cause(exc)
    # NewConnectionError subclasses ConnectTimeoutError in urllib3
    if isinstance(cause, urllib3_exceptions.NewConnectionError):
        return False
    return isinstance(cause, (TimeoutError, urllib3_exceptions.TimeoutError))


CLASSIFICATION_RULES: Tuple[Tuple[StorageErrorKind, Predicate], ...] = (
    (StorageErrorKind.AUTHORIZATION, _s3_code(*AUTHORIZATION_CODES)),
    (StorageErrorKind.INVALID_BUCKET_NAME, _any_of(
        _instance_of(InvalidBucketNameException),
        _s3_code("InvalidBucketName"),
    )),
    (StorageErrorKind.INVALID_OBJECT_NAME, _any_of(
        _instance_of(InvalidObjectNameException),
        _s3_code(*INVALID_OBJECT_NAME_CODES),
    )),
    (StorageErrorKind.BUCKET_NOT_FOUND, _any_of(
        _instance_of(BucketNotFoundException),
        _s3_code("NoSuchBucket"),
    )),
    (StorageErrorKind.OBJECT_NOT_FOUND, _s3_code(*OBJECT_NOT_FOUND_CODES)),
    (StorageErrorKind.NOT_IMPLEMENTED, _any_of(
        _instance_of(NotImplementedError),
        _s3_code("NotImplemented"),
    )),
    (StorageErrorKind.FILE_NOT_FOUND, _instance_of(FileNotFoundError)),
    (StorageErrorKind.OBJECT_DISPOSED, _any_of(
        _instance_of(ObjectDisposedException),
        _is_closed_file_error,
    )),
    (StorageErrorKind.NOT_SUPPORTED, _instance_of(io.UnsupportedOperation)),
    (StorageErrorKind.INVALID_OPERATION, _instance_of(
        InvalidOperationException,
        RuntimeError,
        excluding=(NotImplementedError,),
    )),
    (StorageErrorKind.ACCESS_DENIED, _s3_code(*ACCESS_DENIED_CODES)),
    (StorageErrorKind.CONNECTION, _is_connection_failure),
    (StorageErrorKind.ARGUMENT_NULL, _instance_of(ArgumentNullException, TypeError)),
    (StorageErrorKind.TIMEOUT, _any_of(_is_timeout, _s3_code("RequestTimeout"))),
)


def classify_exception(exc: BaseException) -> StorageErrorKind:
    """
    Classify an exception raised by a storage operation.

    Args:
        exc: The raised exception

    Returns:
        StorageErrorKind: The first matching specific kind, else a generic kind
    """
    for kind, matches in CLASSIFICATION_RULES:
        if matches(exc):
            return kind
    if isinstance(exc, LIBRARY_EXCEPTIONS):
        return StorageErrorKind.UNKNOWN_STORAGE_ERROR
    return StorageErrorKind.UNEXPECTED_ERROR


def describe_exception(exc: BaseException) -> str:
    """Diagnostic text for a failed result."""
    return str(exc) or type(exc).__name__
