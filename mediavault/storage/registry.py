"""Bucket wiring for the three stores the service reads from."""

import logging
from dataclasses import dataclass
from pathlib import Path

import boto3
from botocore.config import Config
from fastapi import Request

from mediavault.config import Settings
from mediavault.storage.objects import LocalObjectStore, ObjectStore, S3ObjectStore

logger = logging.getLogger(__name__)


@dataclass
class Storage:
    """Configured stores; a bucket left unset stays None."""

    movie_assets: ObjectStore | None = None
    manga: ObjectStore | None = None
    static_files: ObjectStore | None = None


def _s3_client(settings: Settings):
    return boto3.client(
        "s3",
        endpoint_url=settings.s3_endpoint_url,
        aws_access_key_id=settings.s3_access_key_id,
        aws_secret_access_key=settings.s3_secret_access_key,
        region_name=settings.s3_region,
        config=Config(signature_version="s3v4", retries={"max_attempts": 3, "mode": "standard"}),
    )


def build_storage(settings: Settings) -> Storage:
    """Create a store per configured bucket name."""
    buckets = {
        "movie_assets": settings.movies_assets_bucket,
        "manga": settings.manga_bucket,
        "static_files": settings.static_files_bucket,
    }

    stores: dict[str, ObjectStore | None] = {}
    if settings.storage_backend == "local":
        root = Path(settings.local_storage_root)
        for field, bucket in buckets.items():
            stores[field] = LocalObjectStore(root / bucket) if bucket else None
    else:
        client = _s3_client(settings) if any(buckets.values()) else None
        for field, bucket in buckets.items():
            stores[field] = S3ObjectStore(client, bucket) if bucket else None

    missing = [field for field, store in stores.items() if store is None]
    if missing:
        logger.warning(f"Storage buckets not configured: {', '.join(missing)}")
    logger.info(f"Object storage backend: {settings.storage_backend}")
    return Storage(**stores)


def get_storage(request: Request) -> Storage:
    """Dependency returning the stores created at startup."""
    return request.app.state.storage
