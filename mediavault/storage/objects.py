"""Object store backends.

``S3ObjectStore`` talks to any S3-compatible service (Cloudflare R2 in
production) through boto3; ``LocalObjectStore`` reads the same key layout
from a directory for local development.
"""

import logging
import mimetypes
import re
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Protocol

from botocore.exceptions import ClientError
from starlette.concurrency import run_in_threadpool

from mediavault.constants import STREAM_CHUNK_SIZE

logger = logging.getLogger(__name__)

DEFAULT_CONTENT_TYPE = "application/octet-stream"
_RANGE_RE = re.compile(r"^bytes=(\d*)-(\d*)$")
_MISSING_KEY_CODES = {"NoSuchKey", "404", "NotFound"}


class RangeNotSatisfiable(Exception):
    """Requested byte range lies outside the object."""

    def __init__(self, size: int) -> None:
        super().__init__(f"Range not satisfiable for object of {size} bytes")
        self.size = size


@dataclass(frozen=True)
class ByteRange:
    """A single ``Range: bytes=`` request.

    ``start=None`` means a suffix range: the last ``end`` bytes.
    """

    start: int | None
    end: int | None

    def resolve(self, size: int) -> tuple[int, int]:
        """Inclusive (first, last) offsets for an object of ``size`` bytes."""
        if self.start is None:
            length = self.end or 0
            if length <= 0 or size == 0:
                raise RangeNotSatisfiable(size)
            return max(size - length, 0), size - 1
        if self.start >= size:
            raise RangeNotSatisfiable(size)
        last = size - 1 if self.end is None else min(self.end, size - 1)
        return self.start, last

    def header_value(self) -> str:
        start = "" if self.start is None else str(self.start)
        end = "" if self.end is None else str(self.end)
        return f"bytes={start}-{end}"


def parse_byte_range(header: str | None) -> ByteRange | None:
    """Parse a single-range ``Range`` header; anything else means the full object."""
    if not header:
        return None
    match = _RANGE_RE.match(header.strip())
    if not match:
        return None
    start_text, end_text = match.groups()
    if not start_text and not end_text:
        return None
    start = int(start_text) if start_text else None
    end = int(end_text) if end_text else None
    if start is not None and end is not None and end < start:
        return None
    return ByteRange(start, end)


@dataclass
class StoredObject:
    """An object (or the requested slice of it) ready to stream."""

    body: Iterator[bytes]
    size: int
    content_type: str
    etag: str | None = None
    content_range: str | None = None


class ObjectStore(Protocol):
    name: str

    async def get(self, key: str, byte_range: ByteRange | None = None) -> StoredObject | None:
        """Fetch an object, or None when the key does not exist."""
        ...


def _iter_s3_body(body: Any, chunk_size: int) -> Iterator[bytes]:
    try:
        yield from body.iter_chunks(chunk_size)
    finally:
        body.close()


class S3ObjectStore:
    """Bucket on an S3-compatible service."""

    def __init__(self, client: Any, bucket: str, chunk_size: int = STREAM_CHUNK_SIZE) -> None:
        self.client = client
        self.bucket = bucket
        self.name = bucket
        self.chunk_size = chunk_size

    def _object_size(self, key: str) -> int:
        head = self.client.head_object(Bucket=self.bucket, Key=key)
        return int(head["ContentLength"])

    def _get_object(self, key: str, byte_range: ByteRange | None) -> dict[str, Any] | None:
        params: dict[str, Any] = {"Bucket": self.bucket, "Key": key}
        if byte_range is not None:
            params["Range"] = byte_range.header_value()
        try:
            return self.client.get_object(**params)
        except ClientError as e:
            code = e.response.get("Error", {}).get("Code", "")
            if code in _MISSING_KEY_CODES:
                return None
            if code == "InvalidRange":
                raise RangeNotSatisfiable(self._object_size(key)) from e
            raise

    async def get(self, key: str, byte_range: ByteRange | None = None) -> StoredObject | None:
        response = await run_in_threadpool(self._get_object, key, byte_range)
        if response is None:
            logger.debug(f"Object not found: s3://{self.bucket}/{key}")
            return None

        content_range = response.get("ContentRange") if byte_range is not None else None
        return StoredObject(
            body=_iter_s3_body(response["Body"], self.chunk_size),
            size=int(response["ContentLength"]),
            content_type=response.get("ContentType") or DEFAULT_CONTENT_TYPE,
            etag=response.get("ETag"),
            content_range=content_range,
        )


def _iter_file(path: Path, first: int, last: int, chunk_size: int) -> Iterator[bytes]:
    remaining = last - first + 1
    with path.open("rb") as fh:
        fh.seek(first)
        while remaining > 0:
            chunk = fh.read(min(chunk_size, remaining))
            if not chunk:
                break
            remaining -= len(chunk)
            yield chunk


class LocalObjectStore:
    """Directory laid out like a bucket: the key is the relative path."""

    def __init__(self, root: Path, chunk_size: int = STREAM_CHUNK_SIZE) -> None:
        self.root = root.resolve()
        self.name = str(root)
        self.chunk_size = chunk_size

    def _path_for(self, key: str) -> Path | None:
        path = (self.root / key.lstrip("/")).resolve()
        if not path.is_relative_to(self.root) or not path.is_file():
            return None
        return path

    async def get(self, key: str, byte_range: ByteRange | None = None) -> StoredObject | None:
        path = self._path_for(key)
        if path is None:
            logger.debug(f"Object not found: {self.root}/{key}")
            return None

        stat = path.stat()
        size = stat.st_size
        first, last = 0, size - 1
        content_range = None
        if byte_range is not None:
            first, last = byte_range.resolve(size)
            content_range = f"bytes {first}-{last}/{size}"

        content_type, _ = mimetypes.guess_type(str(path))
        return StoredObject(
            body=_iter_file(path, first, last, self.chunk_size),
            size=max(last - first + 1, 0),
            content_type=content_type or DEFAULT_CONTENT_TYPE,
            etag=f'"{stat.st_mtime_ns:x}-{size:x}"',
            content_range=content_range,
        )
