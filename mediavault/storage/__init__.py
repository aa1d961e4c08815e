"""Object storage for artwork, streams, manga pages and static files."""

from mediavault.storage.objects import (
    ByteRange,
    LocalObjectStore,
    ObjectStore,
    RangeNotSatisfiable,
    S3ObjectStore,
    StoredObject,
    parse_byte_range,
)
from mediavault.storage.registry import Storage, build_storage, get_storage
from mediavault.storage.responses import require_store, serve_object

__all__ = [
    "ByteRange",
    "LocalObjectStore",
    "ObjectStore",
    "RangeNotSatisfiable",
    "S3ObjectStore",
    "Storage",
    "StoredObject",
    "build_storage",
    "get_storage",
    "parse_byte_range",
    "require_store",
    "serve_object",
]
