import json
import os
from pathlib import Path
from typing import Any

from loguru import logger

from hypervault.core.models import GatewaySettings, KeeperSettings, VaultSettings

_CONFIG_ENV_KEYS = ("HYPERVAULT_CONFIG_PATH", "HYPERVAULT_CONFIG")
_DEFAULT_CONFIG_FILENAME = "config.json"
_LOG_LEVEL_ENV_KEY = "HYPERVAULT_LOG_LEVEL"
_DEFAULT_LOG_LEVEL = "INFO"


def _find_project_root(start: Path) -> Path | None:
    cur = start.resolve()
    for parent in [cur, *cur.parents]:
        if (parent / "pyproject.toml").exists():
            return parent
    return None


def _project_root() -> Path | None:
    return _find_project_root(Path.cwd()) or _find_project_root(Path(__file__).parent)


def resolve_config_path(path: str | Path | None = None) -> Path:
    if path is not None:
        return Path(path).expanduser()

    env_path = next(
        (os.getenv(k, "").strip() for k in _CONFIG_ENV_KEYS if os.getenv(k)), ""
    )
    if env_path:
        p = Path(env_path).expanduser()
        if p.is_absolute():
            return p
        root = _project_root()
        return (root / p) if root else p

    root = _project_root()
    return (root / _DEFAULT_CONFIG_FILENAME) if root else Path(_DEFAULT_CONFIG_FILENAME)


def load_config_json(
    path: str | Path | None = None, *, require_exists: bool = False
) -> dict[str, Any]:
    cfg_path = resolve_config_path(path)
    if not cfg_path.exists():
        if require_exists:
            raise FileNotFoundError(f"Config file not found: {cfg_path}")
        return {}
    try:
        data = json.loads(cfg_path.read_text())
    except json.JSONDecodeError as exc:
        logger.warning(f"Ignoring malformed config {cfg_path}: {exc}")
        return {}
    if not isinstance(data, dict):
        logger.warning(f"Ignoring config {cfg_path}: top level is not an object")
        return {}
    return data


def write_config_json(path: str | Path | None, config: dict[str, Any]) -> Path:
    cfg_path = resolve_config_path(path)
    cfg_path.parent.mkdir(parents=True, exist_ok=True)
    cfg_path.write_text(json.dumps(config, indent=2) + "\n")
    return cfg_path


CONFIG: dict[str, Any] = load_config_json()


def set_config(config: dict[str, Any]) -> None:
    """Replace the global CONFIG dict in-place.

    This allows code that imported CONFIG at module import time to see updates.
    """
    CONFIG.clear()
    CONFIG.update(config)


def load_config(
    path: str | Path | None = None, *, require_exists: bool = False
) -> None:
    """Load config from disk into the global CONFIG dict."""
    set_config(load_config_json(path, require_exists=require_exists))


def _section(name: str) -> dict[str, Any]:
    section = CONFIG.get(name, {})
    return section if isinstance(section, dict) else {}


def get_vault_settings() -> VaultSettings:
    return VaultSettings.model_validate(_section("vault"))


def get_gateway_settings() -> GatewaySettings:
    return GatewaySettings.model_validate(_section("gateway"))


def get_keeper_settings() -> KeeperSettings:
    return KeeperSettings.model_validate(_section("keeper"))


def get_log_level() -> str:
    level = _section("system").get("log_level")
    if level:
        return str(level).strip().upper()
    return os.environ.get(_LOG_LEVEL_ENV_KEY, _DEFAULT_LOG_LEVEL).strip().upper()
