"""Turn stored objects into HTTP responses."""

from fastapi import HTTPException, status
from fastapi.responses import PlainTextResponse, Response, StreamingResponse

from mediavault.constants import CACHE_CONTROL_DEFAULT, SERVED_BY_HEADER
from mediavault.storage.objects import ObjectStore, RangeNotSatisfiable, parse_byte_range


def require_store(
    store: ObjectStore | None, detail: str, served_by: str = "Error-BucketMissing"
) -> ObjectStore:
    """Fail with a 500 when a bucket the route needs is not configured."""
    if store is None:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=detail,
            headers={SERVED_BY_HEADER: served_by},
        )
    return store


async def serve_object(
    store: ObjectStore,
    key: str,
    *,
    cache_control: str = CACHE_CONTROL_DEFAULT,
    range_header: str | None = None,
    served_by: str | None = None,
    content_type: str | None = None,
) -> Response:
    """Stream ``key`` from ``store``, honouring a single byte range.

    ``content_type`` overrides the type recorded with the object.
    """
    extra: dict[str, str] = {}
    if served_by:
        extra[SERVED_BY_HEADER] = served_by

    byte_range = parse_byte_range(range_header)
    try:
        obj = await store.get(key, byte_range)
    except RangeNotSatisfiable as e:
        return Response(
            status_code=status.HTTP_416_REQUESTED_RANGE_NOT_SATISFIABLE,
            headers={"Content-Range": f"bytes */{e.size}", **extra},
        )

    if obj is None:
        return PlainTextResponse(
            f"Object Not Found in storage: {key}",
            status_code=status.HTTP_404_NOT_FOUND,
            headers=extra,
        )

    headers = {
        "Content-Length": str(obj.size),
        "Cache-Control": cache_control,
        "Accept-Ranges": "bytes",
        **extra,
    }
    if obj.etag:
        headers["ETag"] = obj.etag

    status_code = status.HTTP_200_OK
    if obj.content_range:
        headers["Content-Range"] = obj.content_range
        status_code = status.HTTP_206_PARTIAL_CONTENT

    return StreamingResponse(
        obj.body,
        status_code=status_code,
        media_type=content_type or obj.content_type,
        headers=headers,
    )
