"""Plugin settings and the persisted Qodo user configuration."""

from __future__ import annotations

import json
from pathlib import Path

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from pydantic_settings import BaseSettings, SettingsConfigDict

from qodo_bridge.errors import UnknownConfigKeyError

DEFAULT_CONFIG_DIR = Path.home() / ".config" / "opencode"
DEFAULT_CONFIG_FILE = DEFAULT_CONFIG_DIR / "qodo.json"

log = logger.bind(service="qodo-config")


class PluginSettings(BaseSettings):
    """Process-level settings for the bridge itself."""

    model_config = SettingsConfigDict(
        env_prefix="QODO_BRIDGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    executable: str = Field(default="qodo", description="Name or path of the qodo executable")
    config_path: Path = Field(default=DEFAULT_CONFIG_FILE, description="Persisted Qodo user configuration")
    debug: bool = Field(default=False, description="Force debug logging regardless of the user configuration")
    log_level: str | None = Field(default=None, description="Explicit log level, overrides the debug gate")


class QodoConfig(BaseModel):
    """User configuration persisted as JSON.

    Every field is optional on disk; a missing field takes the default below.
    Values are passed through to the executable unchecked.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    api_key: str | None = None
    default_model: str | None = "claude-4.5-sonnet"
    default_agent: str | None = None
    theme: str | None = "dark"
    auto_update: bool | None = True
    debug: bool | None = False
    permissions: str | None = "rw"
    tools: list[str] | None = None
    no_builtin: bool | None = False
    plan: bool | None = False
    act: bool | None = True

    def to_json(self) -> str:
        return json.dumps(self.model_dump(by_alias=True, exclude_none=True), indent=2)


def _field_name(key: str) -> str | None:
    for name, info in QodoConfig.model_fields.items():
        if key in (name, info.alias, to_camel(name)):
            return name
    return None


def _merge_fields(raw: dict[str, object]) -> QodoConfig:
    """Keep every stored field that parses; a bad field falls back to its default alone."""

    accepted: dict[str, object] = {}
    for key, value in raw.items():
        name = _field_name(key)
        if name is None:
            continue
        try:
            QodoConfig.model_validate({**accepted, name: value})
        except ValueError as exc:
            log.warning("config.field_dropped key={} error={}", key, exc)
            continue
        accepted[name] = value
    return QodoConfig.model_validate(accepted)


def coerce_value(raw: str) -> object:
    """Interpret ``"true"``/``"false"`` as booleans, keep everything else as text."""

    if raw == "true":
        return True
    if raw == "false":
        return False
    return raw


class ConfigStore:
    """Reads and writes :class:`QodoConfig` at a fixed path."""

    def __init__(self, path: Path | None = None) -> None:
        self._path = (path or DEFAULT_CONFIG_FILE).expanduser()

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> QodoConfig:
        """Load the configuration; fields that are absent or do not parse take their defaults."""

        if not self._path.is_file():
            return QodoConfig()
        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            log.error("config.load_failed path={} error={}", self._path, exc)
            return QodoConfig()
        if not isinstance(raw, dict):
            log.error("config.load_failed path={} error=expected a JSON object", self._path)
            return QodoConfig()
        return _merge_fields(raw)

    def save(self, config: QodoConfig) -> None:
        """Write the whole configuration, creating the directory if needed."""

        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(config.to_json(), encoding="utf-8")
        except OSError as exc:
            log.error("config.save_failed path={} error={}", self._path, exc)

    def set_value(self, key: str, raw: str) -> QodoConfig:
        """Set one key (camelCase or snake_case) and persist the result."""

        name = _field_name(key)
        if name is None:
            raise UnknownConfigKeyError(key)
        value = coerce_value(raw)
        if name == "tools" and isinstance(value, str):
            value = [item.strip() for item in value.split(",") if item.strip()]
        data = self.load().model_dump()
        data[name] = value
        config = QodoConfig.model_validate(data)
        self.save(config)
        log.debug("config.updated key={} value={}", name, value)
        return config


_default_store = ConfigStore()


def load_config() -> QodoConfig:
    return _default_store.load()


def save_config(config: QodoConfig) -> None:
    _default_store.save(config)


def get_config_path() -> Path:
    return _default_store.path
