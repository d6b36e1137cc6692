from typing import Any, Dict, List, Optional
from decimal import Decimal
import logging
import re
import time
from botocore.exceptions import BotoCoreError, ClientError

from image_gateway.storage.dynamodb import DynamoDBService
from image_gateway.storage.s3 import S3Service
from image_gateway.catalog.models import ImageRecord, PresignedUrlResponse, SearchResult
from image_gateway.exceptions import (
    UploadUrlException,
    MetadataSaveException,
    SearchException,
    ImageDeleteException,
)

log = logging.getLogger(__name__)

KEY_PREFIX = "images/"
_WHITESPACE = re.compile(r"\s+")

def now_millis() -> int:
    """Current epoch time in milliseconds."""
    return int(time.time() * 1000)

def build_object_key(file_name: str, timestamp_ms: Optional[int] = None) -> str:
    """Storage key for a new upload: ``images/<millis>-<name with whitespace runs as hyphens>``."""
    if timestamp_ms is None:
        timestamp_ms = now_millis()
    return f"{KEY_PREFIX}{timestamp_ms}-{_WHITESPACE.sub('-', file_name)}"

def issue_upload_url(s3: S3Service, file_name: str, file_type: str) -> PresignedUrlResponse:
    """Generates the object key and a presigned POST the client uploads to directly."""
    key = build_object_key(file_name)
    log.info("Generating presigned URL for %s (type %s)", key, file_type)
    try:
        presigned = s3.generate_presigned_post(key)
    except (BotoCoreError, ClientError) as e:
        log.error(f"Presigned URL generation failed for {key}: {e}", exc_info=e)
        raise UploadUrlException()
    return PresignedUrlResponse(url=presigned["url"], fields=presigned["fields"], key=key)

def save_metadata(
    db: DynamoDBService,
    key: str,
    caption: Optional[str],
    tags: Optional[List[str]],
    uploader_id: str,
) -> ImageRecord:
    """Writes the metadata record for ``key``, replacing any earlier one."""
    record = ImageRecord(
        imageId=key,
        caption=caption or "",
        tags=tags or [],
        uploadTime=now_millis(),
        uploaderId=uploader_id,
    )
    try:
        db.put_metadata(record.model_dump())
    except (BotoCoreError, ClientError) as e:
        log.error(f"DynamoDB put_metadata failed for {key}: {e}", exc_info=e)
        raise MetadataSaveException()

    log.info("Saved metadata %s", key)
    return record

def matches(item: Dict[str, Any], term: str) -> bool:
    """True when ``term`` (already lower-cased) occurs in the caption or any tag."""
    caption = item.get("caption")
    if isinstance(caption, str) and term in caption.lower():
        return True
    return any(term in tag.lower() for tag in string_tags(item) or [])

def string_tags(item: Dict[str, Any]) -> Optional[List[str]]:
    """Tags of a record as a list of strings; records written elsewhere may hold other shapes."""
    tags = item.get("tags")
    if not isinstance(tags, (list, tuple, set)):
        return None
    return [tag for tag in tags if isinstance(tag, str)]

def to_search_result(s3: S3Service, item: Dict[str, Any]) -> SearchResult:
    upload_time = item.get("uploadTime")
    caption = item.get("caption")
    return SearchResult(
        key=item["imageId"],
        caption=caption if isinstance(caption, str) else None,
        tags=string_tags(item),
        # the resource API hands numbers back as Decimal
        uploadTime=int(upload_time) if isinstance(upload_time, (int, Decimal)) else None,
        presignedGetUrl=s3.public_url(item["imageId"]),
    )

def search_images(db: DynamoDBService, s3: S3Service, q: Optional[str] = None) -> List[SearchResult]:
    """
        Scans the metadata table once and filters it in process.

        A blank query returns every record. Otherwise the query is trimmed and
        lower-cased and a record is kept when it is a substring of the
        lower-cased caption or of any lower-cased tag. Only the first scan
        page is considered.
    """
    log.info("Search query received: %s", q or "(empty)")
    try:
        resp = db.scan_metadata()
    except (BotoCoreError, ClientError) as e:
        log.error(f"DynamoDB scan failed: {e}", exc_info=e)
        raise SearchException()

    items = resp.get("Items", [])
    if resp.get("LastEvaluatedKey"):
        log.warning("Scan returned a continuation token; records beyond the first page are not searched")
    log.info("Total items scanned: %d", len(items))

    if q is None or not q.strip():
        return [to_search_result(s3, item) for item in items]

    term = q.strip().lower()
    found = [to_search_result(s3, item) for item in items if matches(item, term)]
    log.info("Found %d matching images for %r", len(found), term)
    return found

def remove_image(db: DynamoDBService, s3: S3Service, key: str) -> bool:
    """
        Deletes the object, then its metadata record.

        The two deletes are independent: a failure in the second leaves the
        first in place. A key that does not exist deletes successfully.
    """
    try:
        s3.delete(key)
        db.delete_metadata(key)
    except (BotoCoreError, ClientError) as e:
        log.error(f"Delete failed for {key}: {e}", exc_info=e)
        raise ImageDeleteException()

    log.info("Deleted image %s", key)
    return True
