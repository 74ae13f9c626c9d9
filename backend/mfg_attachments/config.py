from pydantic_settings import BaseSettings

MIB = 1024 * 1024


class Settings(BaseSettings):
    api_base_url: str = "http://localhost:4000"
    api_token: str | None = None
    request_timeout_seconds: float = 30.0
    # Matches the per-file limit enforced by the attachment API.
    max_upload_bytes: int = 50 * MIB
    # How long a completed upload task stays visible before it is dropped.
    task_retention_seconds: float = 2.0

    model_config = {"env_prefix": "MFG_"}


settings = Settings()
