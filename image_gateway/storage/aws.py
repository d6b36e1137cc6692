from typing import Any, Dict
from image_gateway.settings import Settings

def client_kwargs(config: Settings) -> Dict[str, Any]:
    """Explicit credentials and endpoint; anything unset falls back to the botocore chain."""
    kwargs = {}
    if config.aws_access_key_id and config.aws_secret_access_key:
        kwargs["aws_access_key_id"] = config.aws_access_key_id
        kwargs["aws_secret_access_key"] = config.aws_secret_access_key
    if config.aws_endpoint_url:
        kwargs["endpoint_url"] = config.aws_endpoint_url
    return kwargs
