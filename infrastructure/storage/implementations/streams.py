"""
Streamed Object Bodies

Async access to an object body returned by the MinIO client. Reads and the
writes of ``copy_to`` run in a worker thread one chunk at a time, so a
cancelled task stops between chunks.
"""

import asyncio
from typing import AsyncIterator, BinaryIO

from ..interfaces.storage_interface import ObjectDisposedException

DEFAULT_CHUNK_SIZE = 64 * 1024


class ObjectStream:
    """Async reader over an HTTP response body."""

    def __init__(self, response, chunk_size: int = DEFAULT_CHUNK_SIZE):
        self._response = response
        self._chunk_size = chunk_size
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    async def read(self, size: int = -1) -> bytes:
        """Read up to ``size`` bytes, or everything left when ``size`` is negative."""
        if self._closed:
            raise ObjectDisposedException("Cannot read from a closed object stream")
        if size is None or size < 0:
            return await asyncio.to_thread(self._response.read)
        return await asyncio.to_thread(self._response.read, size)

    async def iter_chunks(self) -> AsyncIterator[bytes]:
        while True:
            chunk = await self.read(self._chunk_size)
            if not chunk:
                break
            yield chunk

    async def copy_to(self, destination: BinaryIO) -> int:
        """Copy the remaining body into ``destination`` and return the byte count."""
        copied = 0
        async for chunk in self.iter_chunks():
            await asyncio.to_thread(destination.write, chunk)
            copied += len(chunk)
        return copied

    def close(self) -> None:
        """Close the response and hand the connection back to the pool."""
        if self._closed:
            return
        self._closed = True
        self._response.close()
        release_conn = getattr(self._response, "release_conn", None)
        if release_conn is not None:
            release_conn()

    async def __aenter__(self) -> "ObjectStream":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self.close()
