"""Configuration for the DigitalOcean metrics exporter"""
from pathlib import Path
from typing import Literal, Optional
from pydantic import Field, validator
from pydantic_settings import BaseSettings


class Config(BaseSettings):
    """Exporter configuration loaded from environment variables"""

    # DigitalOcean API settings
    digitalocean_token: str = Field(..., description="DigitalOcean API token (required)")
    digitalocean_api_url: str = Field(default="https://api.digitalocean.com", description="DigitalOcean API base URL")
    request_timeout: float = Field(default=30.0, gt=0, description="API request timeout in seconds")
    page_size: int = Field(default=200, ge=1, le=200, description="Items requested per API page")

    # Metric settings
    namespace: str = Field(default="digitalocean", description="Metric namespace prefix")
    scrape_error_handling: Literal["http_error", "continue"] = Field(
        default="http_error",
        description="Behaviour when a scrape fails (http_error or continue)"
    )
    include_process_metrics: bool = Field(default=True, description="Export process and platform metrics")

    # Server settings
    metrics_port: int = Field(default=9212, ge=1, le=65535, description="Metrics server port")
    metrics_host: str = Field(default="0.0.0.0", description="Metrics server host")
    metrics_path: str = Field(default="/metrics", description="Path under which metrics are exposed")

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(default="INFO", description="Log level")
    log_file: Optional[Path] = Field(default=None, description="Optional log file path")
    enable_request_logging: bool = Field(default=True, description="Enable HTTP request logging")

    # Service settings
    service_name: str = Field(default="digitalocean-exporter", description="Service name")
    service_version: str = Field(default="1.0.0", description="Service version")

    class Config:
        env_prefix = ""
        case_sensitive = False

    @validator('digitalocean_token')
    def validate_token(cls, v):
        if not v or not v.strip():
            raise ValueError("DIGITALOCEAN_TOKEN is required")
        return v.strip()

    @validator('digitalocean_api_url')
    def strip_trailing_slash(cls, v):
        return v.rstrip('/')

    @validator('metrics_path')
    def validate_metrics_path(cls, v):
        """Metrics path must be absolute and must not shadow the index page"""
        if not v.startswith('/') or v == '/':
            raise ValueError("METRICS_PATH must start with '/' and cannot be '/'")
        return v

    @validator('namespace')
    def validate_namespace(cls, v):
        if not v or not v.replace('_', '').isalnum() or v[0].isdigit():
            raise ValueError("NAMESPACE must be a valid Prometheus metric name prefix")
        return v

    @validator('log_level', pre=True)
    def normalize_log_level(cls, v):
        if isinstance(v, str):
            return v.upper()
        return v

    @validator('log_file')
    def ensure_log_directory(cls, v):
        """Ensure the parent directory exists for the log file"""
        if isinstance(v, Path):
            v.parent.mkdir(parents=True, exist_ok=True)
        return v

    def is_continue_on_error(self) -> bool:
        """Check if failed scrapes should still serve partial output"""
        return self.scrape_error_handling == "continue"
