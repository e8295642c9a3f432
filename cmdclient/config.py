"""Configuration management for cmdclient.

Loads YAML settings (settings.yaml) and environment variables (.env)
into a typed Config object. Property getters provide safe access with
sensible defaults for the command client and for logging.

Key classes:
    Config: Central configuration manager.

Key functions:
    get_config: Singleton accessor for the global Config instance.
    is_safe_id: Check a platform snowflake id.
"""

import os
from pathlib import Path
from typing import List, Optional

import structlog
import yaml
from dotenv import load_dotenv

from .exceptions import ConfigurationError

logger = structlog.get_logger("cmdclient.config")

# Sentinel prefix: the bot's own mention acts as the prefix
MENTION_PREFIX = "@mention"

DEFAULT_HELP_WORD = "help"
DEFAULT_LINKED_CACHE_SIZE = 0
DEFAULT_COOLDOWN_SWEEP_INTERVAL = 300

_MAX_ID = 2 ** 63 - 1


def is_safe_id(value) -> bool:
    """Whether ``value`` parses as a non-negative signed 64-bit integer."""
    try:
        parsed = int(str(value).strip())
    except (TypeError, ValueError):
        return False
    return 0 <= parsed <= _MAX_ID


class Config:
    """Central configuration manager for cmdclient.

    Loads settings.yaml and .env from the config directory. The
    ``commands`` section of settings.yaml drives the router; the
    ``logging`` section drives logging_config.setup_logging. Read-only
    after __init__.

    Args:
        config_dir: Path to the config directory. Defaults to
            ``<cwd>/config/``.
    """

    def __init__(self, config_dir: Optional[Path] = None):
        if config_dir is None:
            config_dir = Path.cwd() / "config"
        self.config_dir = Path(config_dir)

        env_file = self.config_dir / ".env"
        if env_file.exists():
            load_dotenv(env_file)

        self.settings = self._load_yaml("settings.yaml")

    def _load_yaml(self, filename: str) -> dict:
        """Load a YAML configuration file."""
        filepath = self.config_dir / filename
        if filepath.exists():
            with open(filepath, "r") as f:
                return yaml.safe_load(f) or {}
        return {}

    @property
    def _commands(self) -> dict:
        section = self.settings.get("commands", {})
        if not isinstance(section, dict):
            logger.error("commands_section_invalid_type", type=type(section).__name__)
            return {}
        return section

    def validate(self):
        """Validate owner ids at startup.

        Logs warnings for ids that are not non-negative 64-bit integers
        but never raises -- the client still starts.
        """
        owner = self.owner_id
        if owner is None:
            logger.warning("owner_id_missing", msg="Owner-only commands will be unusable")
        elif not is_safe_id(owner):
            logger.warning(
                "owner_id_unsafe",
                owner_id=owner,
                msg="Make sure the id is a non-negative long",
            )
        for co_owner in self.co_owner_ids:
            if not is_safe_id(co_owner):
                logger.warning(
                    "co_owner_id_unsafe",
                    co_owner_id=co_owner,
                    msg="Make sure the id is a non-negative long",
                )

        size = self._commands.get("linked_cache_size")
        if size is not None and (not isinstance(size, int) or size < 0):
            logger.error(
                "config_invalid_value",
                key="commands.linked_cache_size",
                value=size,
                valid=">= 0",
            )

    @property
    def owner_id(self) -> Optional[str]:
        """Owner user id. Env var CMDCLIENT_OWNER_ID takes precedence."""
        value = os.environ.get("CMDCLIENT_OWNER_ID") or self._commands.get("owner_id")
        return str(value) if value is not None else None

    @property
    def co_owner_ids(self) -> List[str]:
        """Additional owner ids."""
        ids = self._commands.get("co_owner_ids", [])
        if not isinstance(ids, list):
            logger.error("co_owner_ids_invalid_type", type=type(ids).__name__)
            return []
        return [str(i) for i in ids]

    @property
    def prefix(self) -> str:
        """Default prefix. Env var CMDCLIENT_PREFIX takes precedence.

        Falls back to the mention sentinel when unset or empty.
        """
        value = os.environ.get("CMDCLIENT_PREFIX") or self._commands.get("prefix")
        return value or MENTION_PREFIX

    @property
    def alt_prefix(self) -> Optional[str]:
        """Alternate prefix, or None when unset or empty."""
        return self._commands.get("alt_prefix") or None

    @property
    def prefixes(self) -> List[str]:
        """Additional static prefixes, checked in order."""
        values = self._commands.get("prefixes", [])
        if not isinstance(values, list):
            logger.error("prefixes_invalid_type", type=type(values).__name__)
            return []
        return [str(v) for v in values if v]

    @property
    def help_word(self) -> str:
        """Word that triggers the help consumer (default "help")."""
        return self._commands.get("help_word") or DEFAULT_HELP_WORD

    @property
    def use_help(self) -> bool:
        """Whether the help word is intercepted before registry lookup."""
        return bool(self._commands.get("use_help", True))

    @property
    def linked_cache_size(self) -> int:
        """Capacity of the message link cache. 0 disables linked deletion."""
        val = self._commands.get("linked_cache_size", DEFAULT_LINKED_CACHE_SIZE)
        try:
            return max(0, int(val))
        except (ValueError, TypeError):
            logger.warning("config_invalid_linked_cache_size", value=val)
            return DEFAULT_LINKED_CACHE_SIZE

    @property
    def cooldown_sweep_interval(self) -> float:
        """Seconds between periodic cooldown sweeps (default 5 minutes)."""
        val = self._commands.get("cooldown_sweep_interval", DEFAULT_COOLDOWN_SWEEP_INTERVAL)
        try:
            interval = float(val)
        except (ValueError, TypeError):
            logger.warning("config_invalid_cooldown_sweep_interval", value=val)
            return float(DEFAULT_COOLDOWN_SWEEP_INTERVAL)
        if interval <= 0:
            raise ConfigurationError(
                f"cooldown_sweep_interval must be positive, got {interval}",
                setting_name="commands.cooldown_sweep_interval",
            )
        return interval

    @property
    def log_dir(self) -> Path:
        """Get log directory path."""
        configured = self.settings.get("log_dir")
        if configured:
            return Path(configured).expanduser()
        return self.config_dir.parent / "logs"

    @property
    def logging_level(self) -> str:
        """Global log level (default INFO). Controls console and combined file."""
        log_config = self.settings.get("logging", {})
        return log_config.get("level", "INFO")

    @property
    def logging_subsystem_levels(self) -> dict:
        """Per-subsystem log level overrides. E.g. {"router": "DEBUG"}."""
        log_config = self.settings.get("logging", {})
        return log_config.get("subsystem_levels", {})

    @property
    def logging_max_file_size_mb(self) -> int:
        """Max size per log file in MB before rotation (default 10)."""
        log_config = self.settings.get("logging", {})
        return log_config.get("max_file_size_mb", 10)

    @property
    def logging_backup_count(self) -> int:
        """Number of rotated log files to keep (default 5)."""
        log_config = self.settings.get("logging", {})
        return log_config.get("backup_count", 5)


# Global config instance
_config: Optional[Config] = None


def get_config() -> Config:
    """Get or create the global config instance."""
    global _config
    if _config is None:
        _config = Config()
    return _config
