"""Configuration management with YAML and environment variable support"""

import os
from typing import Any, Dict, List, Optional, Tuple, Type

import yaml
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict


class BaseConfigSection(BaseSettings):
    """Base class for all config sections with correct environment variable precedence.

    This class customizes the settings source priority to ensure that:
    1. Environment variables have highest priority
    2. Init kwargs (YAML data) have second priority
    3. Default values have lowest priority
    """

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: Type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> Tuple[PydanticBaseSettingsSource, ...]:
        """Customize settings source priority: env vars > init kwargs > defaults."""
        return (env_settings, init_settings, dotenv_settings, file_secret_settings)


class ServerConfig(BaseConfigSection):
    """Server configuration"""

    host: str = (
        "0.0.0.0"  # nosec B104 - Intentional binding to all interfaces for containerized deployment
    )
    port: int = 8000

    model_config = SettingsConfigDict(env_prefix="APP_SERVER_")


class YouTubeConfig(BaseConfigSection):
    """YouTube Data API configuration"""

    api_key: str = ""
    base_url: str = "https://www.googleapis.com/youtube/v3"
    timeout: float = 10.0  # seconds
    max_results_per_page: int = 50
    max_concurrent_requests: int = 4

    model_config = SettingsConfigDict(env_prefix="APP_YOUTUBE_")

    @field_validator("max_results_per_page")
    @classmethod
    def validate_page_size(cls, v: int) -> int:
        if not 1 <= v <= 50:
            raise ValueError("max_results_per_page must be between 1 and 50")
        return v


class CacheConfig(BaseConfigSection):
    """Metadata cache configuration"""

    enabled: bool = True
    maxsize: int = 2048
    video_ttl: int = 3600  # seconds
    live_ttl: int = 300
    playlist_ttl: int = 1800

    model_config = SettingsConfigDict(env_prefix="APP_CACHE_")


class RateLimitingConfig(BaseConfigSection):
    """Rate limiting configuration"""

    enabled: bool = True
    convert_rpm: int = 60  # requests per minute per client
    burst_capacity: int = 20  # maximum tokens

    model_config = SettingsConfigDict(env_prefix="APP_RATE_LIMITING_")


class GenerationConfig(BaseConfigSection):
    """Remote stream document generation defaults"""

    default_script_options: str = "--hls-use-mpegts"
    always_include_live_duration: bool = True
    max_playlist_videos: int = 500

    model_config = SettingsConfigDict(env_prefix="APP_GENERATION_")


class LoggingConfig(BaseConfigSection):
    """Logging configuration"""

    level: str = "INFO"
    format: str = "json"

    model_config = SettingsConfigDict(env_prefix="APP_LOGGING_")

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"level must be one of {valid_levels}")
        return v_upper


class SecurityConfig(BaseConfigSection):
    """Security configuration"""

    environment: str = "development"
    cors_origins: List[str] = Field(
        default_factory=lambda: [
            "http://localhost:5173",
            "http://localhost:3000",
        ]
    )

    model_config = SettingsConfigDict(env_prefix="APP_SECURITY_")


class MonitoringConfig(BaseConfigSection):
    """Monitoring configuration"""

    metrics_enabled: bool = True

    model_config = SettingsConfigDict(env_prefix="APP_MONITORING_")


class Config(BaseSettings):
    """Main application configuration"""

    server: ServerConfig = Field(default_factory=ServerConfig)
    youtube: YouTubeConfig = Field(default_factory=YouTubeConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)
    rate_limiting: RateLimitingConfig = Field(default_factory=RateLimitingConfig)
    generation: GenerationConfig = Field(default_factory=GenerationConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    security: SecurityConfig = Field(default_factory=SecurityConfig)
    monitoring: MonitoringConfig = Field(default_factory=MonitoringConfig)

    model_config = SettingsConfigDict(env_prefix="APP_")


class ConfigService:
    """Service for loading and managing configuration"""

    def __init__(self, config_path: Optional[str] = None):
        self.config_path = config_path or os.environ.get("APP_CONFIG_PATH", "config.yaml")
        self._config: Optional[Config] = None

    def load(self) -> Config:
        """Load configuration from YAML file with environment variable overrides."""
        config_data: Dict[str, Any] = {}

        if os.path.exists(self.config_path):
            with open(self.config_path, "r", encoding="utf-8") as f:
                yaml_data = yaml.safe_load(f)
                if yaml_data:
                    config_data = yaml_data

        self._config = Config(
            server=ServerConfig(**config_data.get("server", {})),
            youtube=YouTubeConfig(**config_data.get("youtube", {})),
            cache=CacheConfig(**config_data.get("cache", {})),
            rate_limiting=RateLimitingConfig(**config_data.get("rate_limiting", {})),
            generation=GenerationConfig(**config_data.get("generation", {})),
            logging=LoggingConfig(**config_data.get("logging", {})),
            security=SecurityConfig(**config_data.get("security", {})),
            monitoring=MonitoringConfig(**config_data.get("monitoring", {})),
        )

        return self._config

    def validate(self) -> bool:
        """Validate the loaded configuration"""
        if self._config is None:
            raise ValueError("Configuration not loaded. Call load() first.")

        if not self._config.youtube.api_key:
            raise ValueError("A YouTube Data API key must be configured")

        return True

    @property
    def config(self) -> Config:
        """Get the loaded configuration"""
        if self._config is None:
            raise ValueError("Configuration not loaded. Call load() first.")
        return self._config
