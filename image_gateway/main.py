from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse
from contextlib import asynccontextmanager
from datetime import datetime, timezone
import uvicorn
import logging

from image_gateway.storage.dynamodb import DynamoDBService
from image_gateway.storage.s3 import S3Service
from image_gateway.settings import settings
from image_gateway.routers.images import router as images_router
from image_gateway.catalog.models import HealthResponse
from image_gateway.exceptions import add_exception_handlers
from image_gateway.middleware.request_middleware import RequestTimingMiddleware, RequestSizeLimitMiddleware

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
log = logging.getLogger("image-gateway")

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
        Async context manager for FastAPI application lifecycle events.
        Creates the shared S3 and DynamoDB clients once and closes them on shutdown.
    """
    app.state.s3 = S3Service()
    app.state.db = DynamoDBService()
    if settings.auto_create_resources:
        app.state.s3.ensure_bucket()
        app.state.db.ensure_table()
    yield
    app.state.s3.close()
    app.state.db.close()

# Initialize App
app = FastAPI(
    title=settings.app_title,
    lifespan=lifespan,
    description="Brokers direct-to-S3 image uploads and indexes their metadata in DynamoDB",
)

# Add exception handlers
add_exception_handlers(app)

# Middleware, innermost first
app.add_middleware(RequestSizeLimitMiddleware, max_bytes=settings.max_request_body_bytes)
app.add_middleware(RequestTimingMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Add the routers
app.include_router(images_router)

@app.get("/health", response_model=HealthResponse)
def health():
    """Liveness probe."""
    timestamp = datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")
    return HealthResponse(status="OK", timestamp=timestamp)

@app.get("/", response_class=PlainTextResponse)
def read_root():
    """
        Default end point

    """
    return "Image Metadata Gateway is running."

def run():
    """Console entry point; a no-op when an external layer invokes the app."""
    if settings.serverless:
        log.info("Serverless mode, not starting a listener")
        return
    log.info("Server running on port %s", settings.port)
    uvicorn.run("image_gateway.main:app", host=settings.host, port=settings.port)

if __name__ == "__main__":
    run()
