import boto3
from typing import Optional, Dict, Any
from botocore.exceptions import ClientError
from image_gateway.settings import Settings, settings
from image_gateway.storage.aws import client_kwargs
import logging

log = logging.getLogger(__name__)

PRIMARY_KEY = "imageId"

# -------------------------
# DynamoDB Service
# -------------------------
class DynamoDBService:
    def __init__(self, config: Optional[Settings] = None):
        self.config = config or settings
        session = boto3.session.Session(region_name=self.config.aws_region)
        self.resource = session.resource("dynamodb", **client_kwargs(self.config))
        self.table = self.resource.Table(self.config.dynamodb_table_name)
        log.info("Initialized DynamoDB resource for table %s", self.config.dynamodb_table_name)

    # Refer here: https://boto3.amazonaws.com/v1/documentation/api/latest/reference/services/dynamodb/client/create_table.html
    def ensure_table(self):
        try:
            self.table.load()
            log.debug("Table %s already exists", self.config.dynamodb_table_name)
        except ClientError as e:
            if e.response["Error"]["Code"] != "ResourceNotFoundException":
                log.error("Failed to check/create table: %s", e)
                raise
            table = self.resource.create_table(
                TableName=self.config.dynamodb_table_name,
                KeySchema=[{"AttributeName": PRIMARY_KEY, "KeyType": "HASH"}],
                AttributeDefinitions=[{"AttributeName": PRIMARY_KEY, "AttributeType": "S"}],
                BillingMode="PAY_PER_REQUEST",
            )
            table.wait_until_exists()
            self.table = table
            log.info("Created table %s", self.config.dynamodb_table_name)

    def put_metadata(self, item: Dict[str, Any]):
        # Unconditional put: an existing record with the same key is replaced
        self.table.put_item(Item=item)
        log.debug("Put metadata %s", item.get(PRIMARY_KEY))

    def scan_metadata(self) -> Dict[str, Any]:
        """
            Single scan call over the whole table.

            Returns the raw response; ``LastEvaluatedKey`` is left for the
            caller to inspect and is never followed here.
        """
        resp = self.table.scan()
        log.debug("Scanned %s items from %s", resp.get("Count", 0), self.config.dynamodb_table_name)
        return resp

    def delete_metadata(self, image_id: str):
        self.table.delete_item(Key={PRIMARY_KEY: image_id})
        log.debug("Deleted metadata %s", image_id)

    def close(self):
        self.resource.meta.client.close()
        log.info("Closed DynamoDB resource")
