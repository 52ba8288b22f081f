"""
MinIO Object Operations

Result-returning wrappers around the ``minio`` client's object operations.

Every function takes an already constructed ``Minio`` client and returns an
``OperationResult`` or ``ValueResult``; no exception raised by the storage
stack crosses this boundary. The blocking client calls run in worker threads,
so the caller's event loop is never blocked.

Cancelling the awaiting task releases the caller at once with
``asyncio.CancelledError``, which is never turned into a result. The
``minio`` client is synchronous and cannot abort a request that a worker
thread has already sent: such a request runs to completion in its thread,
its outcome is discarded and a streamed response it returns is closed.
Body transfers stop at the next chunk.

Each function accepts an optional ``configure`` callback that receives the
operation's argument object after the required fields are set and returns the
adjusted copy (see ``arguments``).
"""

import asyncio
import io
import mimetypes
import uuid
from typing import BinaryIO, Callable, Optional, Type

from minio import Minio
from minio.error import S3Error
from minio.datatypes import Object
from minio.helpers import ObjectWriteResult

from config.loguru_config import get_logger

from ..interfaces.results import OperationResult, ValueResult
from ..interfaces.storage_interface import (
    ArgumentNullException,
    BucketNotFoundException,
    ValidationException,
)
from .arguments import (
    GetObjectArgs,
    PutObjectArgs,
    RemoveObjectArgs,
    StatObjectArgs,
    compose,
)
from .error_mapping import classify_exception, describe_exception
from .streams import ObjectStream

logger = get_logger(__name__)

DEFAULT_BUCKET = "default"
UNKNOWN_LENGTH_PART_SIZE = 10 * 1024 * 1024
DOWNLOAD_FAILED_MESSAGE = "Failed to download object"
ERROR_CODE_HEADER = "x-minio-error-code"

# Built-in table only, so extensions do not depend on the host's mime.types files
_mime_types = mimetypes.MimeTypes()


def generate_object_name() -> str:
    """Generate a unique, opaque object name."""
    return uuid.uuid4().hex


def extension_for(content_type: str) -> str:
    """Filename extension for a MIME type, empty when the type is unknown."""
    return _mime_types.guess_extension(content_type.split(";", 1)[0].strip()) or ""


def _stream_length(stream: BinaryIO) -> int:
    """Remaining bytes of a seekable stream, -1 when the length cannot be known."""
    if stream is None or not getattr(stream, "seekable", lambda: False)():
        return -1
    position = stream.tell()
    end = stream.seek(0, io.SEEK_END)
    stream.seek(position)
    return end - position


def _require_client(client: Minio) -> None:
    if client is None:
        raise ArgumentNullException("Storage client cannot be None")


async def _bucket_missing(client: Minio, bucket_name: str, error: S3Error) -> bool:
    """
    Tell a missing bucket from a missing object after a failed HEAD request.

    HEAD responses carry no error body, so minio reports every 404 on an
    object as ``NoSuchKey``. MinIO servers name the real cause in a header;
    other services need a bucket lookup.
    """
    headers = getattr(error.response, "headers", None) or {}
    code = headers.get(ERROR_CODE_HEADER)
    if code:
        return code == "NoSuchBucket"
    return not await asyncio.to_thread(client.bucket_exists, bucket_name=bucket_name)


async def _stat(client: Minio, args) -> Object:
    try:
        return await asyncio.to_thread(
            client.stat_object,
            bucket_name=args.bucket_name,
            object_name=args.object_name,
            ssec=args.ssec,
            version_id=args.version_id,
        )
    except S3Error as e:
        if e.code == "NoSuchKey" and await _bucket_missing(client, args.bucket_name, e):
            raise BucketNotFoundException(
                f"Bucket '{args.bucket_name}' does not exist",
                bucket=args.bucket_name,
                key=args.object_name,
            ) from e
        raise


def _close_abandoned_response(request: "asyncio.Future") -> None:
    if request.cancelled():
        return
    error = request.exception()
    if error is not None:
        logger.debug(f"Abandoned object request failed: {describe_exception(error)}")
        return
    ObjectStream(request.result()).close()


async def _open_object(client: Minio, args: GetObjectArgs) -> ObjectStream:
    """Start a streamed GET; a response arriving after cancellation is closed."""
    request = asyncio.ensure_future(asyncio.to_thread(
        client.get_object,
        bucket_name=args.bucket_name,
        object_name=args.object_name,
        offset=args.offset,
        length=args.length,
        request_headers=args.request_headers or None,
        ssec=args.ssec,
        version_id=args.version_id,
    ))
    try:
        response = await asyncio.shield(request)
    except asyncio.CancelledError:
        request.add_done_callback(_close_abandoned_response)
        raise
    return ObjectStream(response)


def _failure(
    result_type: Type[OperationResult],
    operation: str,
    exc: Exception,
    bucket_name: Optional[str],
    object_name: Optional[str] = None,
):
    error_kind = classify_exception(exc)
    message = describe_exception(exc)
    logger.bind(
        operation=operation,
        bucket=bucket_name,
        object=object_name,
        error_kind=error_kind.value,
    ).warning(f"Storage operation {operation} failed ({error_kind.value}): {message}")
    return result_type.failure(error_kind, message)


async def put_object(
    client: Minio,
    bucket_name: str = DEFAULT_BUCKET,
    configure: Optional[Callable[[PutObjectArgs], PutObjectArgs]] = None,
) -> ValueResult[ObjectWriteResult]:
    """
    Upload an object.

    The object name, payload and size are supplied through ``configure``.
    Objects larger than the part size are uploaded in parts by the client.

    Args:
        client: MinIO client
        bucket_name: Bucket name
        configure: Callback adjusting the PutObjectArgs

    Returns:
        ValueResult[ObjectWriteResult]: Write result with etag and version id
    """
    object_name = None
    try:
        _require_client(client)
        args = PutObjectArgs().with_bucket(bucket_name).apply(configure)
        bucket_name, object_name = args.bucket_name, args.object_name
        args.validate()

        response = await asyncio.to_thread(
            client.put_object,
            bucket_name=args.bucket_name,
            object_name=args.object_name,
            data=args.data,
            length=args.length,
            content_type=args.content_type,
            metadata=args.metadata or None,
            progress=args.progress,
            part_size=args.part_size,
        )

        logger.debug(f"Uploaded object {args.object_name} to {args.bucket_name}")
        return ValueResult.success(response)

    except Exception as e:
        return _failure(ValueResult, "put_object", e, bucket_name, object_name)


async def put_stream(
    client: Minio,
    bucket_name: str,
    stream: BinaryIO,
    content_type: str,
    object_name: Optional[str] = None,
    mime_type_map: bool = True,
    configure: Optional[Callable[[PutObjectArgs], PutObjectArgs]] = None,
) -> ValueResult[ObjectWriteResult]:
    """
    Upload a stream, generating the object name when none is given.

    Args:
        client: MinIO client
        bucket_name: Bucket name
        stream: Payload, read from its current position
        content_type: MIME type of the payload
        object_name: Object name (optional, a unique hex name is generated)
        mime_type_map: Append the extension mapped from ``content_type`` to the name
        configure: Callback applied after the name, content type and payload are set

    Returns:
        ValueResult[ObjectWriteResult]: Write result; ``value.object_name`` is the final name
    """

    def with_stream_defaults(args: PutObjectArgs) -> PutObjectArgs:
        name = object_name if object_name is not None else generate_object_name()
        if mime_type_map:
            name += extension_for(content_type)

        length = _stream_length(stream)
        args = (
            args.with_object(name)
            .with_content_type(content_type)
            .with_stream_data(stream)
            .with_object_size(length)
        )
        if length < 0:
            args = args.with_part_size(UNKNOWN_LENGTH_PART_SIZE)
        return args

    return await put_object(client, bucket_name, compose(with_stream_defaults, configure))


async def get_object(
    client: Minio,
    bucket_name: str,
    object_name: str,
    configure: Optional[Callable[[GetObjectArgs], GetObjectArgs]] = None,
) -> ValueResult[Object]:
    """
    Get an object's metadata and deliver its body.

    The body goes to the callback set with ``with_callback_stream`` or to the
    file set with ``with_file``. Without either only the metadata is read.

    Args:
        client: MinIO client
        bucket_name: Bucket name
        object_name: Object name
        configure: Callback adjusting the GetObjectArgs

    Returns:
        ValueResult[Object]: Object metadata
    """
    try:
        _require_client(client)
        args = GetObjectArgs().with_bucket(bucket_name).with_object(object_name).apply(configure)
        bucket_name, object_name = args.bucket_name, args.object_name
        args.validate()

        stat = await _stat(client, args)

        if args.file_name is not None:
            await asyncio.to_thread(
                client.fget_object,
                bucket_name=args.bucket_name,
                object_name=args.object_name,
                file_path=args.file_name,
                request_headers=args.request_headers or None,
                ssec=args.ssec,
                version_id=args.version_id,
            )
        elif args.callback is not None:
            async with await _open_object(client, args) as body:
                await args.callback(body)

        logger.debug(f"Got object {args.object_name} from {args.bucket_name}")
        return ValueResult.success(stat)

    except Exception as e:
        return _failure(ValueResult, "get_object", e, bucket_name, object_name)


async def download_object(
    client: Minio,
    bucket_name: str,
    object_name: str,
    destination: BinaryIO,
    configure: Optional[Callable[[GetObjectArgs], GetObjectArgs]] = None,
) -> ValueResult[Object]:
    """
    Download an object into a caller-provided writable stream.

    Args:
        client: MinIO client
        bucket_name: Bucket name
        object_name: Object name
        destination: Writable binary stream receiving the body
        configure: Callback adjusting the GetObjectArgs

    Returns:
        ValueResult[Object]: Object metadata, not the payload
    """
    if destination is None:
        return _failure(
            ValueResult,
            "download_object",
            ArgumentNullException("Destination stream cannot be None"),
            bucket_name,
            object_name,
        )

    async def copy_to_destination(body: ObjectStream) -> None:
        await body.copy_to(destination)

    return await get_object(
        client,
        bucket_name,
        object_name,
        compose(configure, lambda args: args.with_callback_stream(copy_to_destination)),
    )


async def download_object_to_memory(
    client: Minio,
    bucket_name: str,
    object_name: str,
    configure: Optional[Callable[[GetObjectArgs], GetObjectArgs]] = None,
) -> ValueResult[io.BytesIO]:
    """
    Download an object into memory.

    Returns:
        ValueResult[io.BytesIO]: The payload, positioned at its start
    """
    buffer = io.BytesIO()
    result = await download_object(client, bucket_name, object_name, buffer, configure)

    if result.is_success:
        buffer.seek(0)
        return ValueResult.success(buffer)

    return ValueResult.failure(result.error_kind, result.error_message or DOWNLOAD_FAILED_MESSAGE)


async def download_object_range(
    client: Minio,
    bucket_name: str,
    object_name: str,
    destination: BinaryIO,
    offset: int,
    length: int,
    configure: Optional[Callable[[GetObjectArgs], GetObjectArgs]] = None,
) -> ValueResult[Object]:
    """
    Download the byte range ``[offset, offset + length)`` of an object.

    ``length`` must be positive; the client reads to the end of the object
    for a zero length.

    Returns:
        ValueResult[Object]: Object metadata
    """
    if length is None or length <= 0:
        return _failure(
            ValueResult,
            "download_object_range",
            ValidationException(
                f"Range length must be positive, got {length}",
                bucket=bucket_name,
                key=object_name,
            ),
            bucket_name,
            object_name,
        )

    return await download_object(
        client,
        bucket_name,
        object_name,
        destination,
        compose(configure, lambda args: args.with_offset_and_length(offset, length)),
    )


async def remove_object(
    client: Minio,
    bucket_name: str,
    object_name: str,
    configure: Optional[Callable[[RemoveObjectArgs], RemoveObjectArgs]] = None,
) -> OperationResult:
    """
    Remove an object.

    Args:
        client: MinIO client
        bucket_name: Bucket name
        object_name: Object name
        configure: Callback adjusting the RemoveObjectArgs, e.g. to set a version id

    Returns:
        OperationResult: Success or failure
    """
    try:
        _require_client(client)
        args = RemoveObjectArgs().with_bucket(bucket_name).with_object(object_name).apply(configure)
        bucket_name, object_name = args.bucket_name, args.object_name
        args.validate()

        await asyncio.to_thread(
            client.remove_object,
            bucket_name=args.bucket_name,
            object_name=args.object_name,
            version_id=args.version_id,
        )

        logger.debug(f"Removed object {args.object_name} from {args.bucket_name}")
        return OperationResult.success()

    except Exception as e:
        return _failure(OperationResult, "remove_object", e, bucket_name, object_name)


async def stat_object(
    client: Minio,
    bucket_name: str,
    object_name: str,
    configure: Optional[Callable[[StatObjectArgs], StatObjectArgs]] = None,
) -> ValueResult[Object]:
    """
    Get object metadata.

    Args:
        client: MinIO client
        bucket_name: Bucket name
        object_name: Object name
        configure: Callback adjusting the StatObjectArgs

    Returns:
        ValueResult[Object]: Object metadata
    """
    try:
        _require_client(client)
        args = StatObjectArgs().with_bucket(bucket_name).with_object(object_name).apply(configure)
        bucket_name, object_name = args.bucket_name, args.object_name
        args.validate()

        stat = await _stat(client, args)
        return ValueResult.success(stat)

    except Exception as e:
        return _failure(ValueResult, "stat_object", e, bucket_name, object_name)
