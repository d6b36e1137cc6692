from fastapi import APIRouter, Depends, Query
from typing import List, Optional
import logging

from image_gateway.storage.dynamodb import DynamoDBService
from image_gateway.storage.s3 import S3Service
from image_gateway.dependencies.dependencies import get_s3_service, get_dynamodb_service, get_client_address
from image_gateway.catalog.service import issue_upload_url, save_metadata, search_images, remove_image
from image_gateway.catalog.models import (
    PresignedUrlRequest,
    PresignedUrlResponse,
    SaveMetadataRequest,
    DeleteImageRequest,
    OperationResponse,
    SearchResult,
)

log = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api",
    tags=["image-gateway"]
)

@router.post("/generate-presigned-url", response_model=PresignedUrlResponse)
def generate_presigned_url(
    body: PresignedUrlRequest,
    s3: S3Service = Depends(get_s3_service)
):
    """
    Issues a presigned POST for a new image.

    The client uploads the bytes straight to the bucket using the returned
    ``url`` and ``fields``, then records metadata under the returned ``key``.
    The authorization expires after five minutes and caps the upload at 10 MiB.
    """
    return issue_upload_url(s3, body.fileName, body.fileType)

@router.post("/save-metadata", response_model=OperationResponse)
def save_metadata_handler(
    body: SaveMetadataRequest,
    uploader_id: str = Depends(get_client_address),
    db: DynamoDBService = Depends(get_dynamodb_service)
):
    """Records caption and tags for an uploaded image."""
    save_metadata(db, body.key, body.caption, body.tags, uploader_id)
    return OperationResponse(success=True, message="Metadata saved")

@router.get("/search", response_model=List[SearchResult])
def search_handler(
    q: Optional[str] = Query(None),
    db: DynamoDBService = Depends(get_dynamodb_service),
    s3: S3Service = Depends(get_s3_service)
):
    """Lists images whose caption or tags contain ``q``; every image when ``q`` is blank."""
    return search_images(db, s3, q)

@router.post("/delete-image", response_model=OperationResponse)
def delete_image_handler(
    body: DeleteImageRequest,
    db: DynamoDBService = Depends(get_dynamodb_service),
    s3: S3Service = Depends(get_s3_service)
):
    """Deletes an image and its metadata."""
    remove_image(db, s3, body.key)
    return OperationResponse(success=True, message="Image deleted")
