"""
Polystore CRUD API — Object Storage (S3) Connection Manager
=============================================================

What:  Thin async facade over a boto3 S3 client.
Why:   boto3 is synchronous; calling it directly from a coroutine would block
       the event loop for the whole round trip.
How:   Each method runs the boto3 call in Starlette's threadpool
       (run_in_threadpool). Every call is an independent remote request;
       the client itself holds no per-request state.
Who:   Built by the app lifespan (or injected by tests); reached by route
       handlers through crud_api.deps.

Errors are not translated here: botocore's ClientError/BotoCoreError
propagate to BucketService, which maps them onto the app's exceptions.
"""

import logging
from typing import Any, Dict, Optional

import boto3
from starlette.concurrency import run_in_threadpool

from crud_api.config import Settings, settings as default_settings

logger = logging.getLogger(__name__)


class ObjectStorage:
    """Async wrapper around the S3 operations the bucket routes need."""

    def __init__(self, client: Any):
        self.client = client

    @classmethod
    def from_settings(cls, config: Optional[Settings] = None) -> "ObjectStorage":
        config = config or default_settings
        client = boto3.client("s3", **config.aws_client_kwargs())
        logger.info("Object storage configured (region=%s)", config.region or "default")
        return cls(client)

    async def list_buckets(self) -> Dict[str, Any]:
        return await run_in_threadpool(self.client.list_buckets)

    async def list_objects(self, bucket: str) -> Dict[str, Any]:
        # Single page (up to 1000 keys); the API does not paginate listings
        return await run_in_threadpool(self.client.list_objects_v2, Bucket=bucket)

    async def put_object(
        self,
        bucket: str,
        key: str,
        body: bytes,
        content_type: Optional[str] = None,
    ) -> Dict[str, Any]:
        params: Dict[str, Any] = {"Bucket": bucket, "Key": key, "Body": body}
        if content_type:
            params["ContentType"] = content_type
        return await run_in_threadpool(self.client.put_object, **params)

    async def head_object(self, bucket: str, key: str) -> Dict[str, Any]:
        return await run_in_threadpool(self.client.head_object, Bucket=bucket, Key=key)

    async def delete_object(self, bucket: str, key: str) -> Dict[str, Any]:
        return await run_in_threadpool(self.client.delete_object, Bucket=bucket, Key=key)
