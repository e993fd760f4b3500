"""Configuration system for globals-guard using Pydantic Settings."""

from pathlib import Path
from typing import Annotated, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class SniffConfig(BaseSettings):
    """Settings for the global variables override sniff."""

    model_config = SettingsConfigDict(env_prefix="SNIFF_")

    # Env values are comma separated, not JSON
    custom_test_classes: Annotated[list[str], NoDecode] = Field(
        default_factory=list,
        description="Extra (namespaced) class names treated as test base classes",
    )
    extra_reserved_globals: list[str] = Field(
        default_factory=list,
        description="Additional global names which may not be overridden",
    )
    ignore_annotations: bool = Field(
        default=False,
        description="Ignore suppression comments and report everything",
    )

    @field_validator("custom_test_classes", mode="before")
    @classmethod
    def split_class_list(cls, v: str | list[str]) -> list[str]:
        """Accept a comma separated string as well as a list."""
        if isinstance(v, str):
            return [item.strip() for item in v.split(",") if item.strip()]
        return v


class ScanConfig(BaseSettings):
    """File discovery configuration."""

    model_config = SettingsConfigDict(env_prefix="SCAN_")

    include_patterns: list[str] = Field(
        default=["**/*.php", "**/*.inc"],
    )
    exclude_patterns: list[str] = Field(
        default=[
            "**/vendor/**",
            "**/node_modules/**",
            "**/.git/**",
        ],
    )
    max_file_size_mb: float = Field(
        default=5.0,
        gt=0.0,
        description="Skip files larger than this",
    )
    parallel_workers: int = Field(
        default=4,
        ge=1,
        description="Number of threads scanning files concurrently",
    )


class AppConfig(BaseSettings):
    """Main application configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
    )

    sniff: SniffConfig = Field(default_factory=SniffConfig)
    scan: ScanConfig = Field(default_factory=ScanConfig)

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(default="WARNING")
    log_file: Path | None = Field(default=None)

    @classmethod
    def from_yaml(cls, path: Path) -> "AppConfig":
        """Load configuration from YAML file."""
        import yaml

        with open(path) as f:
            data = yaml.safe_load(f) or {}
        return cls(**data)

    def to_yaml(self, path: Path) -> None:
        """Save configuration to YAML file."""
        import yaml

        with open(path, "w") as f:
            yaml.dump(self.model_dump(mode="json"), f, default_flow_style=False, allow_unicode=True)


# Global config instance (lazy-loaded)
_config: AppConfig | None = None


def get_config() -> AppConfig:
    """Get or create the global configuration instance."""
    global _config
    if _config is None:
        _config = AppConfig()
    return _config


def load_config(path: Path | None = None) -> AppConfig:
    """Load configuration from file or create default."""
    global _config
    if path and path.exists():
        _config = AppConfig.from_yaml(path)
    else:
        _config = AppConfig()
    return _config
