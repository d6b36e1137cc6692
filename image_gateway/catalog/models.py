from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field, StrictStr, field_validator

# -------------------------
# Requests
# -------------------------
class PresignedUrlRequest(BaseModel):
    fileName: StrictStr = Field(..., min_length=1)
    # Accepted for the client's benefit; the upload policy does not constrain it
    fileType: StrictStr = Field(..., min_length=1)

class SaveMetadataRequest(BaseModel):
    key: StrictStr = Field(..., min_length=1)
    caption: Optional[StrictStr] = None
    tags: Optional[List[StrictStr]] = None

    @field_validator("caption", "tags", mode="before")
    @classmethod
    def reject_null(cls, value, info):
        # Omitted means default; an explicit null is a type error
        if value is None:
            raise ValueError(f"{info.field_name} must not be null")
        return value

class DeleteImageRequest(BaseModel):
    key: StrictStr = Field(..., min_length=1)

# -------------------------
# Stored record
# -------------------------
class ImageRecord(BaseModel):
    """Metadata row, attribute names as stored in the table."""
    imageId: str
    caption: str = ""
    tags: List[str] = []
    uploadTime: int
    uploaderId: str

# -------------------------
# Responses
# -------------------------
class PresignedUrlResponse(BaseModel):
    url: str
    fields: Dict[str, Any]
    key: str

class OperationResponse(BaseModel):
    success: bool = True
    message: str

class SearchResult(BaseModel):
    key: str
    caption: Optional[str] = None
    tags: Optional[List[str]] = None
    uploadTime: Optional[int] = None
    presignedGetUrl: str

class HealthResponse(BaseModel):
    status: str
    timestamp: str
