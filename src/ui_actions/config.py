"""
Configuration for sessions, waits and default collaborators

Values come from the defaults below, then an optional TOML file
(`[ui_actions]` table), then `UI_ACTIONS_*` environment variables.
"""

import os
import tomllib
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Optional

ENV_PREFIX = "UI_ACTIONS_"
DEFAULT_CONFIG_FILE = Path("ui_actions.toml")

_TRUE_VALUES = {"true", "1", "yes", "on"}


@dataclass
class ActionConfig:
    wait_timeout: float = 10.0
    poll_interval: float = 0.5
    wait_strategy: str = "webDriverWait"
    browser: str = "chromium"
    headless: bool = True
    slow_mo: int = 0
    action_timeout_ms: int = 30000
    screenshot_dir: Path = field(default_factory=lambda: Path("screenshots"))
    download_dir: Path = field(default_factory=lambda: Path("downloads"))

    def __post_init__(self):
        if self.wait_timeout < 0:
            raise ValueError(f"wait_timeout must be >= 0, got {self.wait_timeout}")
        if self.poll_interval <= 0:
            raise ValueError(f"poll_interval must be > 0, got {self.poll_interval}")

    @classmethod
    def from_mapping(cls, mapping: Dict[str, Any]) -> "ActionConfig":
        """Build a config from loosely-typed values (TOML or env strings)"""
        known = {f.name for f in fields(cls)}
        unknown = set(mapping) - known
        if unknown:
            raise ValueError(f"Unknown configuration keys: {sorted(unknown)}")

        data = dict(mapping)
        for key in ("wait_timeout", "poll_interval"):
            if key in data:
                data[key] = float(data[key])
        for key in ("slow_mo", "action_timeout_ms"):
            if key in data:
                data[key] = int(data[key])
        for key in ("screenshot_dir", "download_dir"):
            if key in data:
                data[key] = Path(data[key])
        if "headless" in data and not isinstance(data["headless"], bool):
            data["headless"] = str(data["headless"]).lower() in _TRUE_VALUES
        return cls(**data)


def _load_toml(path: Path) -> Dict[str, Any]:
    with path.open("rb") as fh:
        return tomllib.load(fh).get("ui_actions", {})


def load_config(config_path: Optional[Path] = None) -> ActionConfig:
    """Load configuration from defaults, an optional TOML file and the environment"""
    file_map: Dict[str, Any] = {}
    path = Path(config_path) if config_path else DEFAULT_CONFIG_FILE
    if path.exists():
        file_map = _load_toml(path)
    elif config_path:
        raise FileNotFoundError(f"Config file not found: {path}")

    known = {f.name for f in fields(ActionConfig)}
    env_map: Dict[str, Any] = {}
    for key, value in os.environ.items():
        if key.startswith(ENV_PREFIX):
            name = key[len(ENV_PREFIX):].lower()
            if name in known:
                env_map[name] = value

    return ActionConfig.from_mapping({**file_map, **env_map})
