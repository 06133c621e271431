"""
Polystore CRUD API — Bucket Service (Object Storage)
======================================================

What:  Bucket listing, object listing, upload and delete against S3.
How:   Calls the injected ObjectStorage facade and shapes the S3 response
       dicts into the API's schemas.
Who:   Called by crud_api.routes.buckets.

Error Translation:
    HeadObject "not found" (404 / NotFound / NoSuchKey) → NotFoundError (404)
    any other ClientError / BotoCoreError               → ObjectStorageError (500)
"""

import logging
from typing import List, Optional

from botocore.exceptions import BotoCoreError, ClientError

from crud_api.exceptions import NotFoundError, ObjectStorageError, ValidationError
from crud_api.object_storage import ObjectStorage
from crud_api.schemas.bucket import (
    BucketResponse,
    ObjectResponse,
    UploadResponse,
    UploadResult,
)

logger = logging.getLogger(__name__)

# Codes S3 (and S3-compatible servers) use for a missing key on HeadObject
NOT_FOUND_CODES = {"404", "NotFound", "NoSuchKey"}


def error_code(exc: BaseException) -> Optional[str]:
    """The AWS error code of a ClientError, None for transport errors."""
    if isinstance(exc, ClientError):
        return exc.response.get("Error", {}).get("Code")
    return None


class BucketService:
    """Business logic layer for buckets and objects."""

    async def list_buckets(self, storage: ObjectStorage) -> List[BucketResponse]:
        try:
            data = await storage.list_buckets()
        except (ClientError, BotoCoreError) as e:
            raise ObjectStorageError.from_exception("Could not list buckets", e, error_code(e))
        return [BucketResponse.from_s3(bucket) for bucket in data.get("Buckets", [])]

    async def list_objects(self, storage: ObjectStorage, bucket: str) -> List[ObjectResponse]:
        try:
            data = await storage.list_objects(bucket)
        except (ClientError, BotoCoreError) as e:
            raise ObjectStorageError.from_exception(
                "Could not list the bucket objects", e, error_code(e)
            )
        # An empty bucket has no Contents key at all
        return [ObjectResponse.from_s3(entry) for entry in data.get("Contents", [])]

    async def upload_file(
        self,
        storage: ObjectStorage,
        bucket: str,
        filename: Optional[str],
        content: bytes,
        content_type: Optional[str] = None,
    ) -> UploadResponse:
        """
        Store the file under its original filename.

        Last write wins: an existing object with the same key is replaced.
        """
        if not filename:
            raise ValidationError(message="The uploaded file has no filename", field="file")
        try:
            data = await storage.put_object(bucket, filename, content, content_type)
        except (ClientError, BotoCoreError) as e:
            raise ObjectStorageError.from_exception("Could not upload the file", e, error_code(e))
        return UploadResponse(
            data=UploadResult(
                bucket=bucket,
                key=filename,
                etag=data.get("ETag"),
                version_id=data.get("VersionId"),
            )
        )

    async def delete_file(self, storage: ObjectStorage, bucket: str, key: str) -> None:
        """
        Delete an object after checking that it exists.

        S3's DeleteObject succeeds for missing keys, so HeadObject runs first
        to be able to answer 404.
        """
        try:
            await storage.head_object(bucket, key)
        except ClientError as e:
            if error_code(e) in NOT_FOUND_CODES:
                raise NotFoundError(
                    resource="file",
                    resource_id=key,
                    context={"bucket": bucket},
                )
            raise ObjectStorageError.from_exception("Could not delete the file", e, error_code(e))
        except BotoCoreError as e:
            raise ObjectStorageError.from_exception("Could not delete the file", e)

        try:
            await storage.delete_object(bucket, key)
        except (ClientError, BotoCoreError) as e:
            raise ObjectStorageError.from_exception("Could not delete the file", e, error_code(e))
        logger.debug("Deleted s3://%s/%s", bucket, key)


bucket_service = BucketService()
