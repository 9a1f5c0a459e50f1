"""Application settings using Pydantic Settings."""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from electron_rebuild.core.config.loader import DEFAULT_CONFIG_PATH, ConfigLoader

DEFAULT_DIST_URL = "https://gh-contractor-zcbenz.s3.amazonaws.com/atom-shell/dist"
DEFAULT_HEADERS_DIR = Path.home() / ".electron-rebuild" / "headers"


class RebuildSettings(BaseSettings):
    """Header fetching and rebuild configuration settings."""

    model_config = SettingsConfigDict(
        env_prefix="ELECTRON_REBUILD_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    headers_dir: Path | None = Field(
        default=None,
        description="Fake home directory node-gyp caches headers under",
    )
    dist_url: str = Field(
        default=DEFAULT_DIST_URL,
        description="Distribution URL Electron headers are downloaded from",
    )
    node: str = Field(
        default="node",
        description="Host Node.js executable",
    )
    node_gyp: str = Field(
        default="node-gyp",
        description="Header fetch tool",
    )
    npm: str = Field(
        default="npm",
        description="Rebuild tool",
    )
    canary_module: str = Field(
        default="nslog",
        description="Native module loaded to test host ABI compatibility",
    )
    host_abi: str | None = Field(
        default=None,
        description="Host module ABI (queried from node when unset)",
    )

    @field_validator("headers_dir", mode="before")
    @classmethod
    def validate_headers_dir(cls, v: str | None) -> Path | None:
        """Validate and convert headers_dir to Path."""
        if v is None or v == "":
            return None
        return Path(v).expanduser()

    @field_validator("host_abi", mode="before")
    @classmethod
    def validate_host_abi(cls, v: str | int | None) -> str | None:
        """Validate host_abi is a digit sequence."""
        if v is None or v == "":
            return None
        value = str(v).strip()
        if not (value.isascii() and value.isdigit()):
            raise ValueError(f"Invalid host ABI: {v}. Must be digits only")
        return value


class ProcessSettings(BaseSettings):
    """Subprocess execution settings."""

    model_config = SettingsConfigDict(
        env_prefix="ELECTRON_REBUILD_PROCESS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    timeout: int | None = Field(
        default=None,
        ge=1,
        description="Subprocess timeout in seconds (None = wait forever)",
    )


class LoggingSettings(BaseSettings):
    """Logging configuration settings."""

    model_config = SettingsConfigDict(
        env_prefix="ELECTRON_REBUILD_LOGGING_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    level: str = Field(
        default="INFO",
        description="Log level",
    )
    format: str = Field(
        default="[%(name)s] %(message)s",
        description="Log format string",
    )
    file: Path | None = Field(
        default=None,
        description="Log file path",
    )
    use_rich: bool = Field(
        default=True,
        description="Use Rich console for output",
    )

    @field_validator("level", mode="before")
    @classmethod
    def validate_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of {valid_levels}")
        return v_upper

    @field_validator("file", mode="before")
    @classmethod
    def validate_file(cls, v: str | None) -> Path | None:
        """Validate and convert file to Path."""
        if v is None or v == "":
            return None
        return Path(v)


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_prefix="ELECTRON_REBUILD_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    rebuild: RebuildSettings = Field(default_factory=RebuildSettings)
    process: ProcessSettings = Field(default_factory=ProcessSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    @property
    def headers_dir(self) -> Path:
        """Headers directory with the default applied."""
        return self.rebuild.headers_dir or DEFAULT_HEADERS_DIR

    @classmethod
    def from_yaml(cls, path: Path) -> "Settings":
        """Load settings from YAML file.

        Args:
            path: Path to YAML configuration file.

        Returns:
            Settings instance with values from YAML.
        """
        loader = ConfigLoader(path)
        loader.load()

        return cls(
            rebuild=RebuildSettings(**loader.get_section("rebuild")),
            process=ProcessSettings(**loader.get_section("process")),
            logging=LoggingSettings(**loader.get_section("logging")),
        )

    @classmethod
    def load(cls) -> "Settings":
        """Load settings from default locations.

        Values in config/default.yaml take precedence over environment
        variables and .env, which take precedence over defaults.

        Returns:
            Settings instance.
        """
        if DEFAULT_CONFIG_PATH.exists():
            return cls.from_yaml(DEFAULT_CONFIG_PATH)

        return cls()


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Returns:
        Settings singleton.
    """
    return Settings.load()
