"""
Polystore CRUD API — Bucket Route Handlers (S3)
=================================================

What:  List buckets, list a bucket's objects, upload a file, delete a file.

Upload Flow:
    1. Client sends multipart/form-data with a single 'file' field
    2. FastAPI parses it into an UploadFile
    3. Content is read fully into memory
    4. BucketService writes it under its original filename (last write wins)
"""

import logging
from typing import Annotated, List

from fastapi import APIRouter, Depends, File, Path, Request, UploadFile

from crud_api.deps import get_object_storage
from crud_api.event_log import event_log
from crud_api.object_storage import ObjectStorage
from crud_api.schemas.bucket import BucketResponse, ObjectResponse, UploadResponse
from crud_api.schemas.common import ErrorResponse, MessageResponse
from crud_api.services.bucket_service import bucket_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/buckets", tags=["Buckets"])

BucketName = Annotated[str, Path(alias="bucketName", description="Bucket name")]
FileName = Annotated[str, Path(alias="fileName", description="Name of the file to delete")]

SERVER_ERROR = {500: {"description": "S3 error", "model": ErrorResponse}}


@router.get(
    "",
    response_model=List[BucketResponse],
    responses=SERVER_ERROR,
    summary="List all buckets",
)
async def list_buckets(
    request: Request,
    storage: ObjectStorage = Depends(get_object_storage),
) -> List[BucketResponse]:
    buckets = await bucket_service.list_buckets(storage)
    event_log.info("Buckets found", request, buckets)
    return buckets


@router.get(
    "/{bucketName}",
    response_model=List[ObjectResponse],
    responses=SERVER_ERROR,
    summary="List the objects of a bucket",
)
async def list_objects(
    request: Request,
    bucket_name: BucketName,
    storage: ObjectStorage = Depends(get_object_storage),
) -> List[ObjectResponse]:
    objects = await bucket_service.list_objects(storage, bucket_name)
    event_log.info("Objects found", request, objects)
    return objects


@router.post(
    "/{bucketName}/upload",
    status_code=200,
    response_model=UploadResponse,
    responses={
        400: {"description": "File part has no filename", "model": ErrorResponse},
        **SERVER_ERROR,
    },
    summary="Upload a file to a bucket",
    description="Stores the uploaded file under its original filename, replacing any existing object.",
)
async def upload_file(
    request: Request,
    bucket_name: BucketName,
    file: UploadFile = File(..., description="File to upload"),
    storage: ObjectStorage = Depends(get_object_storage),
) -> UploadResponse:
    content = await file.read()
    logger.info(
        "Received upload: bucket=%s, filename=%s, size=%d bytes",
        bucket_name,
        file.filename or "unknown",
        len(content),
    )
    try:
        result = await bucket_service.upload_file(
            storage,
            bucket=bucket_name,
            filename=file.filename,
            content=content,
            content_type=file.content_type,
        )
    finally:
        await file.close()
    event_log.info("Upload completed", request, result.data)
    return result


@router.delete(
    "/{bucketName}/file/{fileName}",
    response_model=MessageResponse,
    responses={
        404: {"description": "File not found in the bucket", "model": ErrorResponse},
        **SERVER_ERROR,
    },
    summary="Delete a file from a bucket",
)
async def delete_file(
    request: Request,
    bucket_name: BucketName,
    file_name: FileName,
    storage: ObjectStorage = Depends(get_object_storage),
) -> MessageResponse:
    await bucket_service.delete_file(storage, bucket_name, file_name)
    event_log.info(f"File {file_name} deleted from bucket {bucket_name}", request)
    return MessageResponse(
        message=f"File '{file_name}' deleted successfully from bucket '{bucket_name}'"
    )
