from fastapi import Request
from image_gateway.storage.dynamodb import DynamoDBService
from image_gateway.storage.s3 import S3Service

def get_s3_service(request: Request) -> S3Service:
    """Dependency provider for S3Service"""
    return request.app.state.s3

def get_dynamodb_service(request: Request) -> DynamoDBService:
    """Dependency provider for DynamoDBService"""
    return request.app.state.db

def get_client_address(request: Request) -> str:
    """Network address of the caller as seen by the server."""
    if request.client and request.client.host:
        return request.client.host
    return "unknown"
