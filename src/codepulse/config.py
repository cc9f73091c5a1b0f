"""Configuration management for CodePulse."""

import json
import os
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

DEFAULT_API_URL = "https://api.codepulse.dev/api/v1"

DEFAULT_CONFIG = {
    "api_key": "",  # nosec B105 - filled in by the user
    "api_url": DEFAULT_API_URL,
    "transport": "cli",  # "cli" or "http"
    "cli_path": "",
    "log_file": "",
    "config_file_flag": False,  # pass --config/--log-file to the cli
    "debug": False,
    "disabled": False,
    "status_bar_enabled": True,
    "status_bar_coding_activity": True,
    "status_bar_team": True,
    "status_bar_hide_categories": False,
    "debounce_ms": 50,
    "heartbeat_interval": 120,  # 2 minutes
    "dedupe_window": 1800,  # 30 minutes
    "fetch_today_interval": 60,  # 1 minute
    "http_timeout": [5, 15],  # connect, read
}

INT_KEYS = [
    "debounce_ms",
    "heartbeat_interval",
    "dedupe_window",
    "fetch_today_interval",
]

BOOL_KEYS = [
    "config_file_flag",
    "debug",
    "disabled",
    "status_bar_enabled",
    "status_bar_coding_activity",
    "status_bar_team",
    "status_bar_hide_categories",
]


def get_default_config_dir() -> Path:
    """Get the default configuration directory for the current user.

    Returns:
        Path to ~/.codepulse, or $CODEPULSE_CONFIG_DIR when set
    """
    override = os.getenv("CODEPULSE_CONFIG_DIR")
    if override:
        return Path(override)
    return Path.home() / ".codepulse"


class Config:
    """Configuration manager for CodePulse."""

    def __init__(self, config_dir: Optional[str] = None):
        """Initialize configuration manager.

        Args:
            config_dir: Custom configuration directory path
        """
        if config_dir:
            self.config_dir = Path(config_dir)
        else:
            self.config_dir = get_default_config_dir()

        self.config_file = self.config_dir / "settings.json"
        self.config_dir.mkdir(parents=True, exist_ok=True)

        self._config = self._load_config()

    def _load_config(self) -> Dict[str, Any]:
        """Load configuration from file or create default."""
        if self.config_file.exists():
            try:
                with open(self.config_file, "r", encoding="utf-8") as f:
                    config = json.load(f)
                if not isinstance(config, dict):
                    raise ValueError("settings must be a JSON object")
                merged_config = DEFAULT_CONFIG.copy()
                merged_config.update(config)
                return merged_config
            except (json.JSONDecodeError, ValueError, IOError) as e:
                print(f"Warning: Could not load config file: {e}")
                print("Using default configuration.")

        return DEFAULT_CONFIG.copy()

    def save(self) -> None:
        """Save current configuration to file."""
        try:
            with open(self.config_file, "w", encoding="utf-8") as f:
                json.dump(self._config, f, indent=2, ensure_ascii=False)
        except IOError as e:
            print(f"Warning: Could not save config file: {e}")

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value.

        Args:
            key: Configuration key
            default: Default value if key not found

        Returns:
            Configuration value
        """
        return self._config.get(key, default)

    def set(self, key: str, value: Any) -> None:
        self._config[key] = value

    def update(self, config_dict: Dict[str, Any]) -> None:
        self._config.update(config_dict)

    # Convenience properties for common settings
    @property
    def api_key(self) -> str:
        return self.get("api_key", "") or ""

    @api_key.setter
    def api_key(self, value: str) -> None:
        self.set("api_key", value)

    @property
    def api_url(self) -> str:
        return self.get("api_url", DEFAULT_API_URL) or DEFAULT_API_URL

    @property
    def transport(self) -> str:
        """Get the heartbeat transport name ("cli" or "http")."""
        value = str(self.get("transport", "cli")).lower()
        return value if value in ("cli", "http") else "cli"

    @property
    def cli_path(self) -> Path:
        """Get the location of the CodePulse cli binary."""
        cli_path = self.get("cli_path")
        if cli_path:
            return Path(cli_path)
        return self.config_dir / "codepulse-cli"

    @property
    def log_file(self) -> Path:
        log_file = self.get("log_file")
        if log_file:
            return Path(log_file)
        return self.config_dir / "codepulse.log"

    @property
    def debug(self) -> bool:
        return bool(self.get("debug", False))

    @debug.setter
    def debug(self, value: bool) -> None:
        self.set("debug", value)

    @property
    def disabled(self) -> bool:
        return bool(self.get("disabled", False))

    @disabled.setter
    def disabled(self, value: bool) -> None:
        self.set("disabled", value)

    @property
    def status_bar_enabled(self) -> bool:
        return bool(self.get("status_bar_enabled", True))

    @property
    def status_bar_coding_activity(self) -> bool:
        return bool(self.get("status_bar_coding_activity", True))

    @property
    def status_bar_team(self) -> bool:
        return bool(self.get("status_bar_team", True))

    @property
    def status_bar_hide_categories(self) -> bool:
        return bool(self.get("status_bar_hide_categories", False))

    @property
    def http_timeout(self) -> Tuple[float, float]:
        """Get the (connect, read) timeout for HTTP calls."""
        connect, read = self.get("http_timeout", [5, 15])
        return (connect, read)


def load_config_from_env() -> Dict[str, Any]:
    """Load configuration from environment variables.

    Returns:
        Configuration dictionary from environment
    """
    env_config: Dict[str, Any] = {}

    env_mappings = {
        "CODEPULSE_API_KEY": "api_key",  # nosec B105
        "CODEPULSE_API_URL": "api_url",
        "CODEPULSE_TRANSPORT": "transport",
        "CODEPULSE_CLI_PATH": "cli_path",
        "CODEPULSE_DEBUG": "debug",
        "CODEPULSE_DISABLED": "disabled",
        "CODEPULSE_HEARTBEAT_INTERVAL": "heartbeat_interval",
    }

    for env_var, config_key in env_mappings.items():
        value = os.getenv(env_var)
        if value is not None:
            if config_key in INT_KEYS:
                try:
                    env_config[config_key] = int(value)
                except ValueError:
                    print(f"Warning: Invalid integer value for {env_var}: {value}")
            elif config_key in BOOL_KEYS:
                env_config[config_key] = value.lower() in ("true", "1", "yes", "on")
            else:
                env_config[config_key] = value

    return env_config


def get_api_key_from_env() -> str:
    return os.getenv("CODEPULSE_API_KEY", "")


def get_api_url_from_env() -> str:
    return os.getenv("CODEPULSE_API_URL", "")


# Global config instance
_global_config: Optional[Config] = None


def get_config() -> Config:
    """Get global configuration instance.

    Returns:
        Global Config instance
    """
    global _global_config
    if _global_config is None:
        _global_config = Config()
        env_config = load_config_from_env()
        if env_config:
            _global_config.update(env_config)
    return _global_config


def reload_config() -> Config:
    """Reload configuration from file.

    Returns:
        Reloaded Config instance
    """
    global _global_config
    _global_config = None
    return get_config()
