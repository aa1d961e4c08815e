"""Tests for object store backends and byte range handling."""

import io
from pathlib import Path

import boto3
import pytest
from botocore.exceptions import ClientError
from botocore.response import StreamingBody
from botocore.stub import Stubber

from mediavault.storage import (
    ByteRange,
    LocalObjectStore,
    RangeNotSatisfiable,
    S3ObjectStore,
    parse_byte_range,
)

DATA = b"0123456789"


async def _read(obj) -> bytes:
    return b"".join(obj.body)


class TestParseByteRange:
    """Tests for Range header parsing."""

    @pytest.mark.parametrize(
        ("header", "expected"),
        [
            ("bytes=0-4", ByteRange(0, 4)),
            ("bytes=5-", ByteRange(5, None)),
            ("bytes=-3", ByteRange(None, 3)),
            (" bytes=2-2 ", ByteRange(2, 2)),
        ],
    )
    def test_single_ranges(self, header, expected):
        assert parse_byte_range(header) == expected

    @pytest.mark.parametrize(
        "header",
        [None, "", "bytes=-", "bytes=4-2", "bytes=0-1,3-4", "items=0-4", "bytes=a-b"],
    )
    def test_unsupported_means_full_object(self, header):
        assert parse_byte_range(header) is None


class TestByteRangeResolve:
    """Tests for resolving a range against an object size."""

    def test_end_is_clamped(self):
        assert ByteRange(5, 100).resolve(10) == (5, 9)

    def test_open_ended(self):
        assert ByteRange(3, None).resolve(10) == (3, 9)

    def test_suffix_longer_than_object(self):
        assert ByteRange(None, 50).resolve(10) == (0, 9)

    @pytest.mark.parametrize("byte_range", [ByteRange(10, None), ByteRange(None, 0)])
    def test_unsatisfiable(self, byte_range):
        with pytest.raises(RangeNotSatisfiable) as exc_info:
            byte_range.resolve(10)
        assert exc_info.value.size == 10

    def test_header_value(self):
        assert ByteRange(None, 3).header_value() == "bytes=-3"
        assert ByteRange(2, None).header_value() == "bytes=2-"


class TestLocalObjectStore:
    """Tests for the directory-backed store."""

    @pytest.fixture
    def store(self, tmp_path: Path) -> LocalObjectStore:
        bucket = tmp_path / "bucket"
        (bucket / "dir").mkdir(parents=True)
        (bucket / "dir" / "file.txt").write_bytes(DATA)
        (tmp_path / "outside.txt").write_bytes(b"secret")
        return LocalObjectStore(bucket, chunk_size=4)

    @pytest.mark.asyncio
    async def test_full_object(self, store: LocalObjectStore):
        obj = await store.get("dir/file.txt")

        assert obj is not None
        assert obj.size == len(DATA)
        assert obj.content_type == "text/plain"
        assert obj.content_range is None
        assert obj.etag
        assert await _read(obj) == DATA

    @pytest.mark.asyncio
    async def test_range(self, store: LocalObjectStore):
        obj = await store.get("dir/file.txt", ByteRange(2, 6))

        assert obj.size == 5
        assert obj.content_range == "bytes 2-6/10"
        assert await _read(obj) == b"23456"

    @pytest.mark.asyncio
    async def test_suffix_range(self, store: LocalObjectStore):
        obj = await store.get("dir/file.txt", ByteRange(None, 3))
        assert obj.content_range == "bytes 7-9/10"
        assert await _read(obj) == b"789"

    @pytest.mark.asyncio
    async def test_unsatisfiable_range(self, store: LocalObjectStore):
        with pytest.raises(RangeNotSatisfiable):
            await store.get("dir/file.txt", ByteRange(10, None))

    @pytest.mark.asyncio
    @pytest.mark.parametrize("key", ["missing.txt", "dir", "../outside.txt", "dir/../../outside.txt"])
    async def test_missing_or_outside_root(self, store: LocalObjectStore, key: str):
        assert await store.get(key) is None


class TestS3ObjectStore:
    """Tests for the S3 backend against a stubbed client."""

    @pytest.fixture
    def s3(self):
        client = boto3.client(
            "s3",
            region_name="us-east-1",
            aws_access_key_id="testing",
            aws_secret_access_key="testing",
        )
        with Stubber(client) as stubber:
            yield client, stubber
            stubber.assert_no_pending_responses()

    @pytest.mark.asyncio
    async def test_get_object(self, s3):
        client, stubber = s3
        stubber.add_response(
            "get_object",
            {
                "Body": StreamingBody(io.BytesIO(DATA), len(DATA)),
                "ContentLength": len(DATA),
                "ContentType": "video/mp4",
                "ETag": '"etag-1"',
            },
            {"Bucket": "movies", "Key": "videos/a.mp4"},
        )
        store = S3ObjectStore(client, "movies", chunk_size=4)

        obj = await store.get("videos/a.mp4")

        assert obj.size == len(DATA)
        assert obj.content_type == "video/mp4"
        assert obj.etag == '"etag-1"'
        assert obj.content_range is None
        assert await _read(obj) == DATA

    @pytest.mark.asyncio
    async def test_range_is_forwarded(self, s3):
        client, stubber = s3
        stubber.add_response(
            "get_object",
            {
                "Body": StreamingBody(io.BytesIO(DATA[:3]), 3),
                "ContentLength": 3,
                "ContentRange": "bytes 0-2/10",
            },
            {"Bucket": "movies", "Key": "videos/a.mp4", "Range": "bytes=0-2"},
        )
        store = S3ObjectStore(client, "movies")

        obj = await store.get("videos/a.mp4", ByteRange(0, 2))

        assert obj.content_range == "bytes 0-2/10"
        assert obj.content_type == "application/octet-stream"
        assert await _read(obj) == b"012"

    @pytest.mark.asyncio
    async def test_missing_key(self, s3):
        client, stubber = s3
        stubber.add_client_error(
            "get_object", service_error_code="NoSuchKey", http_status_code=404
        )
        store = S3ObjectStore(client, "movies")

        assert await store.get("nope.jpg") is None

    @pytest.mark.asyncio
    async def test_invalid_range_reports_size(self, s3):
        client, stubber = s3
        stubber.add_client_error(
            "get_object", service_error_code="InvalidRange", http_status_code=416
        )
        stubber.add_response(
            "head_object", {"ContentLength": 10}, {"Bucket": "movies", "Key": "videos/a.mp4"}
        )
        store = S3ObjectStore(client, "movies")

        with pytest.raises(RangeNotSatisfiable) as exc_info:
            await store.get("videos/a.mp4", ByteRange(50, None))
        assert exc_info.value.size == 10

    @pytest.mark.asyncio
    async def test_other_errors_propagate(self, s3):
        client, stubber = s3
        stubber.add_client_error(
            "get_object", service_error_code="AccessDenied", http_status_code=403
        )
        store = S3ObjectStore(client, "movies")

        with pytest.raises(ClientError):
            await store.get("private.jpg")
