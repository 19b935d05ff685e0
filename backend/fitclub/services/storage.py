from __future__ import annotations
import io
from datetime import timedelta
from functools import lru_cache
import structlog
from fastapi.concurrency import run_in_threadpool
from minio import Minio
from minio.error import S3Error
from fitclub.config import settings

log = structlog.get_logger()

def _parse_endpoint(ep: str) -> tuple[str, bool]:
    # Return (host:port, secure)
    secure = ep.startswith("https://")
    host = ep.replace("http://", "").replace("https://", "")
    return host, secure

@lru_cache(maxsize=1)
def get_client() -> Minio:
    host, secure = _parse_endpoint(settings.s3_endpoint)
    return Minio(host, access_key=settings.s3_access_key, secret_key=settings.s3_secret_key, secure=secure)

def ensure_bucket(bucket: str) -> None:
    client = get_client()
    try:
        if not client.bucket_exists(bucket):
            client.make_bucket(bucket)
    except S3Error as e:
        # concurrent creators race on make_bucket; the bucket exists either way
        if e.code not in ("BucketAlreadyOwnedByYou", "BucketAlreadyExists"):
            raise

def put_bytes(bucket: str, key: str, data: bytes, content_type: str) -> None:
    get_client().put_object(bucket, key, io.BytesIO(data), length=len(data), content_type=content_type)

def sign_get(bucket: str, path: str, ttl_seconds: int) -> str:
    """
    Presign a GET for `bucket/path`. Returns "" when the object does not exist
    or the storage rejects the request, so callers can try another bucket.
    Blocking: stat_object is a network round trip.
    """
    client = get_client()
    try:
        # presigning never touches the object, so check it exists first
        client.stat_object(bucket, path)
        return client.presigned_get_object(bucket, path, expires=timedelta(seconds=ttl_seconds))
    except S3Error as e:
        if e.code not in ("NoSuchKey", "NoSuchBucket"):
            log.warning("storage_sign_failed", bucket=bucket, code=e.code)
        return ""

async def create_signed_url(bucket: str, path: str, ttl_seconds: int) -> str:
    return await run_in_threadpool(sign_get, bucket, path, ttl_seconds)
