"""
Centralized settings (env vars / .env / config.properties).

One immutable snapshot is built at startup and handed to components by
reference; `reload_settings()` builds a fresh snapshot instead of mutating
the old one.
"""
# @file purpose: Centralized settings using Pydantic Settings.

from __future__ import annotations

import logging
import os
import threading
from functools import lru_cache
from pathlib import Path
from typing import Annotated, Any, Literal, Optional

from pydantic import Field, field_validator
from pydantic.fields import FieldInfo
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    NoDecode,
    SettingsConfigDict,
)

logger = logging.getLogger(__name__)

DEFAULT_WAIT_TIMEOUT_SECONDS = 20.0
DEFAULT_DOWNLOAD_TIMEOUT_SECONDS = 45.0
DEFAULT_PARTIAL_SUFFIXES = (".crdownload", ".part", ".partial", ".download", ".tmp")

CONFIG_FILE_ENV = "BQA_CONFIG_FILE"


def _read_properties(path: Path) -> dict[str, str]:
    """Parse a Java-style properties file: `key=value`, `#` comments, blank lines ignored."""
    values: dict[str, str] = {}
    for line in path.read_text(encoding="utf-8").splitlines():
        s = line.strip()
        if not s or s.startswith("#"):
            continue
        key, sep, value = s.partition("=")
        if not sep:
            continue
        values[key.strip()] = value.strip()
    return values


def _field_name(key: str) -> str:
    # wait.timeout.seconds -> wait_timeout_seconds
    return key.strip().lower().replace(".", "_").replace("-", "_")


class PropertiesFileSource(PydanticBaseSettingsSource):
    """Lowest-precedence source backed by `config.properties`."""

    def __init__(self, settings_cls: type[BaseSettings], path: Path) -> None:
        super().__init__(settings_cls)
        self.path = path
        self._values: dict[str, str] = {}
        if path.is_file():
            raw = _read_properties(path)
            self._values = {_field_name(k): v for k, v in raw.items()}

    def get_field_value(self, field: FieldInfo, field_name: str) -> tuple[Any, str, bool]:
        return self._values.get(field_name), field_name, False

    def __call__(self) -> dict[str, Any]:
        names = set(self.settings_cls.model_fields)
        return {k: v for k, v in self._values.items() if k in names}


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="BQA_", env_file=".env", extra="ignore", frozen=True
    )

    # browser provisioning
    browser: Literal["chrome", "firefox", "edge"] = "chrome"
    backend: Literal["selenium", "playwright"] = "selenium"
    headless: bool = True
    remote: bool = False
    grid_url: str = "http://localhost:4444/"
    use_proxy: bool = False
    proxy_address: str = ""
    suite_name: str = "SampleSuite"
    base_url: str = "https://demo.guru99.com/test/newtours/"

    # explicit waits
    wait_timeout_seconds: float = DEFAULT_WAIT_TIMEOUT_SECONDS
    wait_poll_seconds: float = Field(default=0.5, gt=0)

    # downloads
    download_timeout_seconds: float = DEFAULT_DOWNLOAD_TIMEOUT_SECONDS
    download_poll_seconds: float = Field(default=0.25, gt=0)
    download_topology: Optional[Literal["local", "remote_managed", "remote_mounted"]] = None
    download_dir: Path = Path("downloads")
    remote_download_dir: Optional[str] = None
    partial_download_suffixes: Annotated[tuple[str, ...], NoDecode] = DEFAULT_PARTIAL_SUFFIXES

    # evidence & logging
    artifacts_dir: Path = Path("artifacts")
    log_level: str = "INFO"

    @field_validator("wait_timeout_seconds", mode="before")
    @classmethod
    def _wait_timeout_or_default(cls, value: Any) -> Any:
        return _positive_or_default("wait_timeout_seconds", value, DEFAULT_WAIT_TIMEOUT_SECONDS)

    @field_validator("download_timeout_seconds", mode="before")
    @classmethod
    def _download_timeout_or_default(cls, value: Any) -> Any:
        return _positive_or_default(
            "download_timeout_seconds", value, DEFAULT_DOWNLOAD_TIMEOUT_SECONDS
        )

    @field_validator("partial_download_suffixes", mode="before")
    @classmethod
    def _split_suffixes(cls, value: Any) -> Any:
        if isinstance(value, str):
            return tuple(s.strip() for s in value.split(",") if s.strip())
        return value

    @property
    def topology(self) -> str:
        """Download topology, derived from `remote` when not set explicitly."""
        if self.download_topology is not None:
            return self.download_topology
        return "remote_managed" if self.remote else "local"

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        path = Path(os.environ.get(CONFIG_FILE_ENV, "config.properties"))
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            PropertiesFileSource(settings_cls, path),
        )

    def get(self, key: str, default: str = "") -> str:
        """
        Key -> string lookup with a call-site default.
        Accepts field names or dotted property keys (`wait.timeout.seconds`).
        """
        name = _field_name(key)
        if name not in type(self).model_fields and name != "topology":
            return default
        value = getattr(self, name)
        if value is None:
            return default
        if isinstance(value, bool):
            return "true" if value else "false"
        if isinstance(value, (tuple, list)):
            return ",".join(str(v) for v in value)
        return str(value)

    def describe(self) -> str:
        """Plain-text dump used as a run attachment."""
        return "\n".join(f"{k}={self.get(k)}" for k in sorted(type(self).model_fields))


def _positive_or_default(name: str, value: Any, default: float) -> Any:
    if value is None or (isinstance(value, str) and not value.strip()):
        return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        logger.warning("Invalid %s=%r in config. Using default: %g", name, value, default)
        return default
    if number <= 0:
        logger.warning("Non-positive %s=%r in config. Using default: %g", name, value, default)
        return default
    return number


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Process-wide snapshot, built on first use."""
    return Settings()


def reload_settings() -> Settings:
    """Discard the cached snapshot and build a new one."""
    get_settings.cache_clear()
    return get_settings()


def default_worker_id() -> str:
    """Worker namespace: the pytest-xdist worker name when present, else the thread id."""
    return os.environ.get("PYTEST_XDIST_WORKER") or str(threading.get_ident())


def resolve_download_dir(settings: Settings, worker_id: str | None = None) -> Path:
    """Absolute per-worker download destination."""
    base = settings.download_dir
    if not base.is_absolute():
        base = Path.cwd() / base
    return base / worker_id if worker_id else base
