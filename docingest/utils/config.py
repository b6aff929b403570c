"""Configuration management for the document ingestion service.

Settings come from a YAML file, overridden by environment variables
(optionally loaded from a ``.env`` file). The resulting configuration is
validated once at startup and is immutable afterwards.
"""

import logging
import os
from pathlib import Path
from typing import Any, Literal

import pydantic
import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, field_validator

from docingest.exceptions import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("configs/config.yaml")

# Environment variable -> (section, key) in the YAML document.
ENV_OVERRIDES: dict[str, tuple[str | None, str]] = {
    "PROJECT_ID": ("ocr", "project_id"),
    "LOCATION": ("ocr", "location"),
    "PROCESSOR_ID": ("ocr", "processor_id"),
    "GOOGLE_APPLICATION_CREDENTIALS": ("ocr", "credentials_path"),
    "OCR_BACKEND": ("ocr", "backend"),
    "PORT": ("server", "port"),
    "LOG_LEVEL": (None, "log_level"),
}


class ServerConfig(BaseModel):
    """Configuration for the HTTP listener."""

    model_config = ConfigDict(frozen=True)

    host: str = "0.0.0.0"
    port: int = Field(default=3000, ge=1, le=65535)
    max_port_attempts: int = Field(default=100, ge=1)


class DocumentAIConfig(BaseModel):
    """Configuration for the Document AI processor used for OCR."""

    model_config = ConfigDict(frozen=True)

    project_id: str = Field(min_length=1)
    location: str = Field(min_length=1)
    processor_id: str = Field(min_length=1)
    credentials_path: Path
    backend: Literal["rest", "sdk"] = "rest"
    timeout_seconds: float = Field(default=60.0, gt=0)
    language_hints: tuple[str, ...] = ()
    pages: tuple[int, ...] = ()

    @field_validator("credentials_path")
    @classmethod
    def _credentials_must_exist(cls, value: Path) -> Path:
        path = value.expanduser().resolve()
        if not path.is_file():
            raise ValueError(f"credentials file not found: {path}")
        return path

    @property
    def processor_name(self) -> str:
        """Fully qualified processor resource name."""
        return (
            f"projects/{self.project_id}/locations/{self.location}"
            f"/processors/{self.processor_id}"
        )

    @property
    def api_endpoint(self) -> str:
        """Regional Document AI API host."""
        return f"{self.location}-documentai.googleapis.com"


class StorageConfig(BaseModel):
    """Filesystem locations used while processing uploads."""

    model_config = ConfigDict(frozen=True)

    upload_dir: Path = Path("uploads")
    artifact_dir: Path = Path("ocr-json")
    models_dir: Path = Path("models")
    static_dir: Path = Path("public")
    max_upload_bytes: int = Field(default=20 * 1024 * 1024, gt=0)


class AppConfig(BaseModel):
    """Top-level application configuration."""

    model_config = ConfigDict(frozen=True)

    server: ServerConfig = Field(default_factory=ServerConfig)
    ocr: DocumentAIConfig
    storage: StorageConfig = Field(default_factory=StorageConfig)
    log_level: str = "INFO"


def _apply_env_overrides(raw: dict[str, Any], environ: dict[str, str]) -> None:
    for var, (section, key) in ENV_OVERRIDES.items():
        value = environ.get(var)
        if not value:
            continue
        if section is None:
            raw[key] = value
        else:
            target = raw.get(section)
            if not isinstance(target, dict):
                target = {}
                raw[section] = target
            target[key] = value
        logger.debug("Using %s from the environment", var)


def load_config(
    path: Path | None = None,
    environ: dict[str, str] | None = None,
) -> AppConfig:
    """Load and validate the application configuration.

    Args:
        path: Path to the YAML configuration file.
            Defaults to configs/config.yaml. A missing file is not an error;
            the values may come from the environment alone.
        environ: Environment mapping used for overrides. Defaults to
            ``os.environ`` after loading a ``.env`` file, if present.

    Returns:
        Validated, immutable application configuration.

    Raises:
        ConfigError: If the file cannot be parsed or a required value is
            missing or invalid.
    """
    if path is None:
        path = DEFAULT_CONFIG_PATH

    if environ is None:
        load_dotenv()
        environ = dict(os.environ)

    raw: dict[str, Any] = {}
    if path.exists():
        logger.info("Loading configuration from %s", path)
        try:
            with open(path) as f:
                raw = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ConfigError(f"Invalid YAML in {path}: {exc}") from exc
        if not isinstance(raw, dict):
            raise ConfigError(f"Configuration root in {path} must be a mapping")
    else:
        logger.info("No config file found at %s, using environment only", path)

    _apply_env_overrides(raw, environ)

    try:
        return AppConfig(**raw)
    except pydantic.ValidationError as exc:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}"
            for err in exc.errors()
        )
        raise ConfigError(f"Invalid configuration: {problems}") from exc
