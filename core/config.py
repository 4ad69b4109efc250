"""
Application configuration using Pydantic Settings
"""

from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    """Application settings with environment variable support"""

    # Paths
    ROOT_PATH: Optional[str] = None
    REPORTS_PATH: str = "Reports"
    ARCHIVE_FOLDER: str = "Archive"
    FAILED_FOLDER: str = "Failed"
    LOGS_PATH: Optional[str] = None

    # Source database
    DATABASE_URL: Optional[str] = None
    STAFF_STORED_PROCEDURE: Optional[str] = "dbo.usp_GetProviderListGainsight"
    STAFF_QUERY_PATH: Optional[str] = None
    SQL_COMMAND_TIMEOUT_SECONDS: float = 180.0

    # Remote transfer
    TRANSFER_PROTOCOL: str = "sftp"
    SFTP_HOST: Optional[str] = None
    SFTP_USERNAME: Optional[str] = None
    SFTP_PASSWORD: Optional[str] = None
    SFTP_PORT: int = 22
    SFTP_REMOTE_DIRECTORY: str = "TEST/Sharenote/{0}"
    SFTP_TIMEOUT_SECONDS: float = 30.0

    # Retry policy
    UPLOAD_MAX_ATTEMPTS: int = 3
    UPLOAD_RETRY_DELAY_SECONDS: float = 5.0

    # Scheduling (quarter-start cron)
    SCHEDULE_HOUR: int = 6
    SCHEDULE_MINUTE: int = 0

    # Environment
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"


settings = Settings()
