from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import AliasChoices, Field
from typing import List, Optional

LOCAL_FRONTEND_ORIGIN = "http://localhost:5173"

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore", populate_by_name=True)

    aws_region: str = Field("us-east-1")
    aws_access_key_id: Optional[str] = Field(None)
    aws_secret_access_key: Optional[str] = Field(None)
    aws_endpoint_url: Optional[str] = Field(None)

    s3_bucket_name: str = Field("image-gateway-bucket")
    dynamodb_table_name: str = Field("ImageMetadata")

    presign_expire_seconds: int = Field(300)
    max_upload_bytes: int = Field(10 * 1024 * 1024)
    max_request_body_bytes: int = Field(10 * 1024 * 1024)

    app_env: str = Field("development")
    frontend_url: Optional[str] = Field(None)

    host: str = Field("0.0.0.0")
    port: int = Field(3001)
    # Hosted behind an external invocation layer, never bind a port ourselves
    serverless: bool = Field(False, validation_alias=AliasChoices("SERVERLESS", "VERCEL"))
    auto_create_resources: bool = Field(False)

    log_level: str = Field("INFO")
    app_title: str = Field("Image Metadata Gateway")

    @property
    def is_production(self) -> bool:
        return self.app_env.lower() == "production"

    @property
    def allowed_origins(self) -> List[str]:
        """
            Origins allowed by CORS: the configured frontend in production,
            the local dev server otherwise. Production without FRONTEND_URL
            allows no cross-origin callers.
        """
        if self.is_production:
            return [self.frontend_url] if self.frontend_url else []
        return [LOCAL_FRONTEND_ORIGIN]

settings = Settings()
