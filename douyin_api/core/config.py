"""Configuration management with YAML and environment variable support"""

import os
from typing import Any, Dict, List, Optional, Tuple, Type

import yaml
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (iPhone; CPU iPhone OS 17_5_1 like Mac OS X) "
    "AppleWebKit/605.1.15 (KHTML, like Gecko) Mobile/15E148"
)


class BaseConfigSection(BaseSettings):
    """Base class for all config sections with correct environment variable precedence.

    Environment variables win over init kwargs (YAML data), which win over
    default values.
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
    workers: int = 4

    model_config = SettingsConfigDict(env_prefix="APP_SERVER_")


class TimeoutsConfig(BaseConfigSection):
    """Upstream timeout configuration"""

    upstream: float = 10.0  # seconds, applies to every network call

    model_config = SettingsConfigDict(env_prefix="APP_TIMEOUTS_")

    @field_validator("upstream")
    @classmethod
    def validate_upstream(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("upstream timeout must be positive")
        return v


class CacheConfig(BaseConfigSection):
    """Resolution cache configuration"""

    cache_dir: str = "./cache"
    ttl: int = 3600  # seconds
    sweep_interval: int = 3600  # seconds, 0 disables the background sweeper
    sweep_on_request: bool = True

    model_config = SettingsConfigDict(env_prefix="APP_CACHE_")

    @field_validator("ttl")
    @classmethod
    def validate_ttl(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("ttl must be a positive number of seconds")
        return v

    @field_validator("sweep_interval")
    @classmethod
    def validate_sweep_interval(cls, v: int) -> int:
        if v < 0:
            raise ValueError("sweep_interval cannot be negative")
        return v


class TikHubConfig(BaseConfigSection):
    """TikHub upstream credentials"""

    api_key: str = ""
    base_url: str = "https://api.tikhub.dev"

    model_config = SettingsConfigDict(env_prefix="APP_TIKHUB_")


class DouyinConfig(BaseConfigSection):
    """Douyin web scraping configuration"""

    user_agent: str = DEFAULT_USER_AGENT
    referer: str = "https://www.douyin.com/"
    accept_language: str = "zh-CN,zh;q=0.9"
    verify_ssl: bool = True

    model_config = SettingsConfigDict(env_prefix="APP_DOUYIN_")


class BrandingConfig(BaseConfigSection):
    """Informational lines prepended to every quality list"""

    title: str = "prajna's Douyin API"
    disclaimer: str = "未经作者授权不得用于商业或非法途径"

    model_config = SettingsConfigDict(env_prefix="APP_BRANDING_")


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

    @field_validator("format")
    @classmethod
    def validate_format(cls, v: str) -> str:
        if v not in ("json", "console"):
            raise ValueError("format must be 'json' or 'console'")
        return v


class SecurityConfig(BaseConfigSection):
    """Security configuration"""

    api_keys: List[str] = Field(default_factory=list)
    cors_origins: List[str] = Field(default_factory=lambda: ["*"])
    allow_degraded_start: bool = False

    model_config = SettingsConfigDict(env_prefix="APP_SECURITY_")


class MonitoringConfig(BaseConfigSection):
    """Monitoring configuration"""

    metrics_enabled: bool = True

    model_config = SettingsConfigDict(env_prefix="APP_MONITORING_")


class TestingConfig(BaseConfigSection):
    """Test mode configuration"""

    test_mode: bool = False

    model_config = SettingsConfigDict(env_prefix="APP_TESTING_")


class Config(BaseSettings):
    """Main application configuration"""

    server: ServerConfig = Field(default_factory=ServerConfig)
    timeouts: TimeoutsConfig = Field(default_factory=TimeoutsConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)
    tikhub: TikHubConfig = Field(default_factory=TikHubConfig)
    douyin: DouyinConfig = Field(default_factory=DouyinConfig)
    branding: BrandingConfig = Field(default_factory=BrandingConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    security: SecurityConfig = Field(default_factory=SecurityConfig)
    monitoring: MonitoringConfig = Field(default_factory=MonitoringConfig)
    testing: TestingConfig = Field(default_factory=TestingConfig)

    model_config = SettingsConfigDict(env_prefix="APP_")


class ConfigService:
    """Service for loading and managing configuration"""

    def __init__(self, config_path: Optional[str] = None):
        self.config_path = config_path or "config.yaml"
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
            timeouts=TimeoutsConfig(**config_data.get("timeouts", {})),
            cache=CacheConfig(**config_data.get("cache", {})),
            tikhub=TikHubConfig(**config_data.get("tikhub", {})),
            douyin=DouyinConfig(**config_data.get("douyin", {})),
            branding=BrandingConfig(**config_data.get("branding", {})),
            logging=LoggingConfig(**config_data.get("logging", {})),
            security=SecurityConfig(**config_data.get("security", {})),
            monitoring=MonitoringConfig(**config_data.get("monitoring", {})),
            testing=TestingConfig(**config_data.get("testing", {})),
        )

        return self._config

    def validate(self) -> bool:
        """Validate the loaded configuration"""
        if self._config is None:
            raise ValueError("Configuration not loaded. Call load() first.")

        if self._config.security.allow_degraded_start:
            return True

        if not self._config.security.api_keys:
            raise ValueError("At least one API key must be configured")

        if not self._config.tikhub.api_key:
            raise ValueError("TikHub API key must be configured")

        return True

    @property
    def config(self) -> Config:
        """Get the loaded configuration"""
        if self._config is None:
            raise ValueError("Configuration not loaded. Call load() first.")
        return self._config
