import boto3
from typing import Any, Dict, Optional
from botocore.exceptions import ClientError
from image_gateway.settings import Settings, settings
from image_gateway.storage.aws import client_kwargs
import logging

log = logging.getLogger(__name__)

# -------------------------
# S3 Service
# -------------------------
class S3Service:
    def __init__(self, config: Optional[Settings] = None):
        self.config = config or settings
        session = boto3.session.Session(region_name=self.config.aws_region)
        self.client = session.client("s3", **client_kwargs(self.config))
        self.bucket = self.config.s3_bucket_name
        log.info("Initialized S3 client for bucket %s", self.bucket)

    def ensure_bucket(self):
        try:
            self.client.head_bucket(Bucket=self.bucket)
            log.debug("Bucket %s already exists", self.bucket)
        except ClientError as e:
            error_code = e.response["Error"]["Code"]
            if error_code in ("404", "NoSuchBucket"):
                params = {"Bucket": self.bucket}
                if self.config.aws_region != "us-east-1":
                    params["CreateBucketConfiguration"] = {"LocationConstraint": self.config.aws_region}
                self.client.create_bucket(**params)
                log.info("Created bucket %s", self.bucket)
            else:
                log.error("Failed to check/create bucket: %s", e)
                raise

    def generate_presigned_post(self, key: str) -> Dict[str, Any]:
        """
            Issues a browser-form upload authorization for ``key``.

            Only the payload size is constrained; the content type of the
            upload is left to the client.
        """
        presigned = self.client.generate_presigned_post(
            Bucket=self.bucket,
            Key=key,
            Conditions=[["content-length-range", 0, self.config.max_upload_bytes]],
            ExpiresIn=self.config.presign_expire_seconds,
        )
        log.debug("Issued presigned POST for s3://%s/%s", self.bucket, key)
        return presigned

    def public_url(self, key: str) -> str:
        """Virtual-hosted style object URL; not signed."""
        return f"https://{self.bucket}.s3.{self.config.aws_region}.amazonaws.com/{key}"

    def delete(self, key: str):
        self.client.delete_object(Bucket=self.bucket, Key=key)
        log.debug("Deleted s3://%s/%s", self.bucket, key)

    def close(self):
        self.client.close()
        log.info("Closed S3 client")
