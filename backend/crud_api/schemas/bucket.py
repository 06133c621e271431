"""
Polystore CRUD API — Bucket/Object Response Schemas
=====================================================

What:  Pydantic models for the /buckets routes.
Why:   S3 responses are large dicts with PascalCase keys and response
       metadata; these models keep only what the API returns.
"""

from datetime import datetime
from typing import Any, Mapping, Optional

from pydantic import BaseModel, Field


class BucketResponse(BaseModel):
    name: str = Field(description="Bucket name")
    creation_date: Optional[datetime] = Field(default=None, description="Bucket creation time")

    @classmethod
    def from_s3(cls, bucket: Mapping[str, Any]) -> "BucketResponse":
        return cls(name=bucket["Name"], creation_date=bucket.get("CreationDate"))


class ObjectResponse(BaseModel):
    key: str = Field(description="Object key")
    size: int = Field(default=0, description="Size in bytes")
    last_modified: Optional[datetime] = None
    etag: Optional[str] = None
    storage_class: Optional[str] = None

    @classmethod
    def from_s3(cls, entry: Mapping[str, Any]) -> "ObjectResponse":
        return cls(
            key=entry["Key"],
            size=entry.get("Size", 0),
            last_modified=entry.get("LastModified"),
            etag=entry.get("ETag"),
            storage_class=entry.get("StorageClass"),
        )


class UploadResult(BaseModel):
    bucket: str
    key: str
    etag: Optional[str] = None
    version_id: Optional[str] = None


class UploadResponse(BaseModel):
    """Returned by POST /buckets/{bucketName}/upload."""

    message: str = Field(default="Upload completed successfully")
    data: UploadResult
