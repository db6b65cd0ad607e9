from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path

from braiins_pool_bot.errors import ConfigError

CONFIG_PATH_ENV_VAR = "BRAIINS_BOT_CONFIG"
PASSWORD_ENV_VAR = "MATRIX_PASSWORD"


@dataclass
class RuntimeEnv:
    matrix_password: str


@dataclass
class AppConfig:
    homeserver_url: str
    user_id: str
    matrix_proxy: str | None
    proxy: str | None
    data_dir: str
    db_path: str
    display_name: str
    device_name: str
    forget_session: bool
    log_level: str
    log_consumers: list | None

    def describe(self) -> str:
        return (
            f"homeserver={self.homeserver_url}, user={self.user_id}, db={self.db_path}, "
            f"matrix_proxy={self.matrix_proxy or '-'}, proxy={self.proxy or '-'}"
        )


def default_data_dir() -> Path:
    return Path.home() / ".braiinspool_bot"


def load_json_config(path: str | None = None) -> dict:
    config_path = Path(path or os.environ.get(CONFIG_PATH_ENV_VAR) or Path.cwd() / "config.json")
    if config_path.exists():
        try:
            with open(config_path) as f:
                return json.load(f)
        except (OSError, json.JSONDecodeError) as ex:
            raise ConfigError(f"Impossible to read config file at {config_path}") from ex
    return {}


def _to_bool(value: object, default: bool = False) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"1", "true", "yes", "on"}:
            return True
        if lowered in {"0", "false", "no", "off"}:
            return False
    return bool(value)


def _required(config: dict, key: str) -> str:
    value = str(config.get(key, "")).strip()
    if not value:
        raise ConfigError(f"Missing required config key: {key}")
    return value


def _optional(config: dict, key: str) -> str | None:
    return str(config.get(key, "")).strip() or None


def parse_app_config(config: dict) -> AppConfig:
    data_dir = str(config.get("DataDir") or default_data_dir())
    return AppConfig(
        homeserver_url=_required(config, "HomeserverUrl"),
        user_id=_required(config, "UserId"),
        matrix_proxy=_optional(config, "MatrixProxy"),
        proxy=_optional(config, "Proxy"),
        data_dir=data_dir,
        db_path=str(config.get("DbPath") or Path(data_dir) / "matrix" / "db.sqlite3"),
        display_name=config.get("DisplayName", "BraiinsPool Bot"),
        device_name=config.get("DeviceName", "SlushPool Bot"),
        forget_session=_to_bool(config.get("ForgetSession", False), default=False),
        log_level=config.get("LogLevel", "INFO"),
        log_consumers=config.get("LogConsumers"),
    )


def resolve_runtime_env(config: dict) -> RuntimeEnv:
    password = os.environ.get(PASSWORD_ENV_VAR) or str(config.get("Password", ""))
    return RuntimeEnv(matrix_password=password)
