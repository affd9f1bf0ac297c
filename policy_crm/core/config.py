
from pydantic import Field
from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    """Application configuration loaded from environment variables / .env file."""

    app_name: str = "Policy CRM API"
    app_env: str = "development"
    app_port: int = 8000
    frontend_url: str = "http://localhost:5173"
    max_upload_size_mb: int = 10

    # Database (PostgreSQL via asyncpg, or SQLite for local dev)
    database_url: str = Field(
        default="sqlite+aiosqlite:///./policy_crm_dev.db",
        alias="DATABASE_URL",
    )

    # Auth
    jwt_secret: str = Field(default="change-me", alias="JWT_SECRET")
    jwt_algorithm: str = Field(default="HS256", alias="JWT_ALGORITHM")
    jwt_expires_minutes: int = Field(default=60 * 24 * 7, alias="JWT_EXPIRES_MINUTES")
    internal_api_token: str | None = Field(default=None, alias="INTERNAL_API_TOKEN")

    # AWS
    aws_region: str = Field(default="us-east-1", alias="AWS_REGION")
    aws_s3_bucket: str | None = Field(default=None, alias="AWS_S3_BUCKET")
    presigned_url_expires: int = Field(default=3600, alias="PRESIGNED_URL_EXPIRES")

    # Textract polling (fixed interval, no backoff)
    textract_poll_interval: float = Field(default=5.0, alias="TEXTRACT_POLL_INTERVAL")
    textract_max_attempts: int = Field(default=60, alias="TEXTRACT_MAX_ATTEMPTS")

    # Extraction confidence
    confidence_base: float = Field(default=0.3, alias="CONFIDENCE_BASE")
    confidence_step: float = Field(default=0.1, alias="CONFIDENCE_STEP")
    confidence_cap: float = Field(default=0.95, alias="CONFIDENCE_CAP")
    auto_create_confidence_threshold: float = Field(
        default=0.7, alias="AUTO_CREATE_CONFIDENCE_THRESHOLD",
    )  # Parsed results strictly above this create a policy row

    # Lambda -> API callback
    backend_api_url: str = Field(default="http://localhost:8000", alias="BACKEND_API_URL")
    backend_api_timeout: int = Field(default=30, alias="BACKEND_API_TIMEOUT")

    # OpenAI (optional insurer detection)
    openai_api_key: str | None = Field(default=None, alias="OPENAI_API_KEY")
    openai_model: str = Field(default="gpt-4o-mini", alias="OPENAI_MODEL")
    openai_timeout: int = Field(default=30, alias="OPENAI_TIMEOUT")

    default_insurer: str = Field(default="TATA_AIG", alias="DEFAULT_INSURER")

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "populate_by_name": True,
        "extra": "ignore",
    }

    @property
    def max_upload_size_bytes(self) -> int:
        return self.max_upload_size_mb * 1024 * 1024

    @property
    def ai_enabled(self) -> bool:
        """AI insurer detection is available only when an OpenAI key is configured."""
        return bool(self.openai_api_key)

    @property
    def storage_enabled(self) -> bool:
        return bool(self.aws_s3_bucket)

settings = Settings()
