from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    app_name: str = Field("receipt-ledger", alias="APP_NAME")
    app_env: str = Field("dev", alias="APP_ENV")

    # Logging
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    log_file: str | None = Field(default=None, alias="LOG_FILE")  # Rotating file sink (unset = console only)
    log_json: bool = Field(False, alias="LOG_JSON")

    # AWS
    aws_region: str | None = Field(default=None, alias="AWS_REGION")
    aws_access_key_id: str | None = Field(default=None, alias="AWS_ACCESS_KEY_ID")
    aws_secret_access_key: str | None = Field(default=None, alias="AWS_SECRET_ACCESS_KEY")

    # S3 bucket for uploaded receipts (unset = in-memory storage)
    s3_bucket_name: str | None = Field(default=None, alias="S3_BUCKET_NAME")

    # Textract AnalyzeExpense (needs AWS_REGION, otherwise mock analysis is used)
    textract_enabled: bool = Field(True, alias="TEXTRACT_ENABLED")

    # Bill records and running stats
    record_store: Literal["memory", "sqlite"] = Field("memory", alias="RECORD_STORE")
    record_db_path: str = Field("receipts.db", alias="RECORD_DB_PATH")

    # Static results page to redirect to after a successful upload (unset = JSON response)
    results_page_url: str | None = Field(default=None, alias="RESULTS_PAGE_URL")

    # CORS allowed origins (comma-separated list for production deployment)
    cors_origins: str = Field("http://localhost:3000,http://127.0.0.1:3000", alias="CORS_ORIGINS")

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    @property
    def aws_configured(self) -> bool:
        return bool(self.aws_region)

settings = Settings()
