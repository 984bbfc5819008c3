"""
Configuration management for featuredocs.

This module provides centralized configuration using Pydantic settings
with support for environment variables and .env files.
"""

from pathlib import Path
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

BUNDLED_CATALOG_DIRECTORY = Path(__file__).resolve().parent.parent / "data" / "catalogs"


class ValidationResult(BaseModel):
    valid: bool = True
    errors: list[str] = []
    warnings: list[str] = []


class FeatureDocsSettings(BaseSettings):
    """featuredocs configuration settings."""

    # Application
    debug: bool = Field(default=False)

    # Catalog settings
    catalog_directory: str = Field(default="", description="Directory holding <runtime>/features-<version>.json datasets (bundled data if empty)")
    default_runtime: str = Field(default="ol", description="Runtime type used when none can be resolved")
    default_version: str = Field(default="", description="Version used when none can be resolved (latest bundled dataset if empty)")

    # Remote refresh settings
    remote_refresh_enabled: bool = Field(default=False, description="Allow refreshing catalogs from the remote endpoint")
    request_delay_ms: int = Field(default=0, ge=0, description="Minimum delay between remote fetch attempts for the same version/runtime, in milliseconds")
    remote_timeout_seconds: float = Field(default=10.0, description="Timeout for a remote catalog fetch")
    remote_catalog_urls: dict[str, str] = Field(
        default={
            "ol": "https://repo1.maven.org/maven2/io/openliberty/features/features/{version}/features-{version}.json",
            "wlp": "https://repo1.maven.org/maven2/com/ibm/websphere/appserver/features/features/{version}/features-{version}.json",
        },
        description="Remote catalog URL template per runtime type"
    )

    # Cache settings
    cache_max_entries: int = Field(default=16, description="Maximum number of feature graphs kept in memory")
    invalidate_on_config_change: bool = Field(default=False, description="Drop a workspace's previous graph when its configuration changes")

    # Logging settings
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(default="%(asctime)s - %(name)s - %(levelname)s - %(message)s", description="Logging format")
    log_file: str = Field(default="", description="Log file path (console only if empty)")
    structured_logging: bool = Field(default=False, description="Emit JSON log records")

    # Pydantic v2 settings configuration
    model_config = SettingsConfigDict(
        env_file="config/.env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        env_prefix="FEATUREDOCS_",
        extra="ignore",
    )

    def get_catalog_directory(self) -> Path:
        """Get catalog directory as Path object."""
        if self.catalog_directory:
            return Path(self.catalog_directory).expanduser().resolve()
        return BUNDLED_CATALOG_DIRECTORY

    def get_log_file_path(self) -> Path | None:
        """Get log file path as Path object."""
        if not self.log_file:
            return None
        path = Path(self.log_file).expanduser().resolve()
        path.parent.mkdir(parents=True, exist_ok=True)
        return path

    def validate_settings(self) -> ValidationResult:
        """Validate settings and return status information."""
        status = ValidationResult()

        catalog_dir = self.get_catalog_directory()
        if not catalog_dir.is_dir():
            status.errors.append(f"Catalog directory does not exist: {catalog_dir}")
            status.valid = False
        elif not (catalog_dir / self.default_runtime).is_dir():
            status.warnings.append(
                f"No bundled catalogs for default runtime '{self.default_runtime}' in {catalog_dir}"
            )

        if self.cache_max_entries < 1:
            status.errors.append("Cache must hold at least one feature graph")
            status.valid = False

        if self.remote_refresh_enabled:
            if not self.remote_catalog_urls:
                status.warnings.append("Remote refresh enabled but no remote catalog URLs configured")
            for runtime_type, template in self.remote_catalog_urls.items():
                if "{version}" not in template:
                    status.errors.append(f"Remote catalog URL for '{runtime_type}' has no {{version}} placeholder")
                    status.valid = False

        return status


# Global settings instance
settings = FeatureDocsSettings()


def get_settings() -> FeatureDocsSettings:
    """Get the global settings instance."""
    return settings


def reload_settings() -> FeatureDocsSettings:
    """Reload settings from environment and return new instance."""
    global settings
    settings = FeatureDocsSettings()
    return settings
