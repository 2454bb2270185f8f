# Standard library imports
import os
from typing import Final, List, Optional


def _split_csv(value: str) -> List[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


class Settings:
    """
    Application settings loaded from environment variables.
    
    This class centralizes all configuration settings for the application.
    All settings are loaded from environment variables with sensible defaults.
    """
    
    def __init__(self) -> None:
        # Database Configuration
        self.mongo_uri: Final[str] = os.getenv("MONGO_URI", "mongodb://localhost:27017/?replicaSet=rs0")
        self.mongo_database_name: Final[str] = os.getenv("MONGO_DB_NAME", "eventpix")
        self.transaction_max_retries: Final[int] = int(os.getenv("TRANSACTION_MAX_RETRIES", "3"))
        
        # Face matching configuration
        # Distances are Euclidean between unit vectors, so the range is [0, 2]
        self.embedding_dimension: Final[int] = int(os.getenv("EMBEDDING_DIMENSION", "512"))
        self.association_threshold: Final[float] = float(os.getenv("ASSOCIATION_THRESHOLD", "0.6"))
        self.propagation_threshold: Final[float] = float(os.getenv("PROPAGATION_THRESHOLD", "0.75"))
        self.search_threshold: Final[float] = float(os.getenv("SEARCH_THRESHOLD", "0.6"))
        self.search_result_limit: Final[int] = int(os.getenv("SEARCH_RESULT_LIMIT", "50"))
        
        # Detection service configuration
        self.detection_backend: Final[str] = os.getenv("DETECTION_BACKEND", "http").lower()
        self.detection_service_url: Final[str] = os.getenv(
            "DETECTION_SERVICE_URL",
            "http://localhost:8001"
        )
        self.detection_timeout_seconds: Final[float] = float(os.getenv("DETECTION_TIMEOUT_SECONDS", "30"))
        
        # Object storage configuration
        self.storage_dir: Final[str] = os.getenv("STORAGE_DIR", "./media")
        self.public_base_url: Final[str] = os.getenv("PUBLIC_BASE_URL", "http://localhost:8000")
        
        # Messaging (chat bridge) configuration
        self.messaging_enabled: Final[bool] = os.getenv("MESSAGING_ENABLED", "true").lower() in ("1", "true", "yes")
        self.messaging_bridge_url: Final[str] = os.getenv("MESSAGING_BRIDGE_URL", "http://localhost:3001")
        self.messaging_credentials_path: Final[str] = os.getenv(
            "MESSAGING_CREDENTIALS_PATH",
            "./auth_info/credentials.json"
        )
        self.messaging_backoff_initial_seconds: Final[float] = float(
            os.getenv("MESSAGING_BACKOFF_INITIAL_SECONDS", "1.0")
        )
        self.messaging_backoff_max_seconds: Final[float] = float(
            os.getenv("MESSAGING_BACKOFF_MAX_SECONDS", "60.0")
        )
        
        # Web configuration
        self.cors_origins: Final[List[str]] = _split_csv(
            os.getenv("CORS_ORIGINS", "http://localhost:3000,http://localhost:5173")
        )
        self.local_timezone: Final[str] = os.getenv("LOCAL_TIMEZONE", "UTC")


# Global settings instance (singleton pattern)
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """
    Get application settings (singleton pattern)
    
    Returns:
        Settings instance with all configuration values
    """
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
