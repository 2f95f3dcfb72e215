"""Core configuration settings - logging and HTTP."""

from pydantic import BaseModel, Field, field_validator


# === Logging Configuration ===


class LoggingSettings(BaseModel):
    """Logging configuration settings."""

    level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )

    format: str = Field(
        default="auto",
        description="Logging output format: 'console' for humans, 'json' for machines, 'auto' to pick based on the terminal",
    )

    file: str | None = Field(
        default=None,
        description="Path to JSON log file. If specified, logs are also written to this file in JSON format",
    )

    @field_validator("level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate and normalize log level."""
        upper_v = v.upper()
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if upper_v not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of {valid_levels}")
        return upper_v

    @field_validator("format")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        """Validate and normalize log format."""
        lower_v = v.lower()
        valid_formats = ["auto", "console", "json"]
        if lower_v not in valid_formats:
            raise ValueError(f"Invalid log format: {v}. Must be one of {valid_formats}")
        return lower_v


# === HTTP Configuration ===


class HTTPSettings(BaseModel):
    """HTTP client configuration settings.

    Controls where warm-up requests are sent and how their bodies are encoded.
    """

    target_url: str = Field(
        default="http://localhost:8080",
        description="Base URL that request paths are resolved against",
    )

    gzip_compression: bool = Field(
        default=False,
        description="Compress request bodies with gzip (sets Content-Encoding: gzip)",
    )

    timeout_connect: float = Field(
        default=5.0,
        description="Connection timeout in seconds",
        gt=0,
    )

    timeout_read: float = Field(
        default=30.0,
        description="Read timeout in seconds",
        gt=0,
    )

    http2: bool = Field(
        default=False,
        description="Enable HTTP/2 (requires httpx[http2])",
    )

    headers: dict[str, str] = Field(
        default_factory=dict,
        description="Headers added to every request",
    )

    chunk_size: int = Field(
        default=64 * 1024,
        description="Size of the chunks request bodies are streamed in",
        ge=1,
    )

    @field_validator("target_url")
    @classmethod
    def validate_target_url(cls, v: str) -> str:
        """Require an absolute http(s) URL."""
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"Invalid target URL: {v}. Must start with http:// or https://")
        return v.rstrip("/")
