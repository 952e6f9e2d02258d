"""Layered YAML configuration for the audit front ends.

Configuration layers (later overrides earlier):
1. Built-in defaults: default trust level, no extra or removed commands
2. User config: <user_config_dir("hookaudit")>/config.yaml (optional)
3. Explicit file: --config or $HOOKAUDIT_CONFIG (must exist)

List keys (`trusted_commands`, `untrusted_commands`) accumulate across
layers; `trust_level` is replaced by the latest layer that sets it.
"""

import logging
import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Optional

import yaml
from platformdirs import user_config_dir

from hookaudit.core.trust import TrustLevel, trusted_commands_for
from hookaudit.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "HOOKAUDIT_CONFIG"
CONFIG_FILENAME = "config.yaml"

KNOWN_KEYS = frozenset({"trust_level", "trusted_commands", "untrusted_commands"})


@dataclass(frozen=True)
class AuditConfig:
    """Effective audit configuration.

    Attributes:
        trust_level: Which built-in catalogs to trust
        extra_commands: Names added to the catalog
        removed_commands: Names removed from the catalog (wins over extra)
        sources: Config files that contributed, in load order
    """

    trust_level: TrustLevel = TrustLevel.DEFAULT
    extra_commands: tuple[str, ...] = ()
    removed_commands: tuple[str, ...] = ()
    sources: tuple[str, ...] = field(default=())

    def trusted_commands(self) -> frozenset[str]:
        """Build the trust catalog this configuration describes."""
        return trusted_commands_for(self.trust_level, self.extra_commands, self.removed_commands)

    def with_trust_level(self, level: TrustLevel) -> "AuditConfig":
        return replace(self, trust_level=level)

    def merged(self, data: dict[str, Any], source: str) -> "AuditConfig":
        """Return a new config with one parsed YAML layer applied.

        Raises:
            ConfigurationError: If a value has the wrong type or an unknown trust level
        """
        unknown = set(data) - KNOWN_KEYS
        if unknown:
            logger.warning(f"Ignoring unknown config keys in {source}: {', '.join(sorted(unknown))}")

        level = self.trust_level
        if data.get("trust_level") is not None:
            raw_level = data["trust_level"]
            if not isinstance(raw_level, str):
                raise ConfigurationError("trust_level must be a string", file_path=source)
            try:
                level = TrustLevel.from_name(raw_level)
            except ValueError as e:
                raise ConfigurationError(str(e), file_path=source) from e

        return AuditConfig(
            trust_level=level,
            extra_commands=self.extra_commands + _string_list(data, "trusted_commands", source),
            removed_commands=self.removed_commands + _string_list(data, "untrusted_commands", source),
            sources=self.sources + (source,),
        )


def _string_list(data: dict[str, Any], key: str, source: str) -> tuple[str, ...]:
    value = data.get(key)
    if value is None:
        return ()
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise ConfigurationError(f"{key} must be a list of strings", file_path=source)
    return tuple(value)


def user_config_path() -> Path:
    """Per-user config file location."""
    return Path(user_config_dir("hookaudit")) / CONFIG_FILENAME


def read_config_file(path: Path) -> dict[str, Any]:
    """Parse one YAML config file.

    An empty file is an empty mapping.

    Raises:
        ConfigurationError: If the file cannot be read, is not valid YAML,
            or its root is not a mapping
    """
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        mark = getattr(e, "problem_mark", None)
        line = mark.line + 1 if mark is not None else None
        raise ConfigurationError(f"Invalid YAML syntax: {e}", file_path=str(path), line_number=line) from e
    except OSError as e:
        raise ConfigurationError(f"Failed to read config file: {e}", file_path=str(path)) from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError("YAML root must be a dictionary", file_path=str(path))
    return data


def load_config(config_path: Optional[str] = None, *, include_user: bool = True) -> AuditConfig:
    """Load the effective configuration.

    Args:
        config_path: Explicit config file; falls back to $HOOKAUDIT_CONFIG
        include_user: Whether to read the per-user config file

    Returns:
        Merged AuditConfig

    Raises:
        ConfigurationError: If a config file is invalid, or the explicit
            file does not exist
    """
    config = AuditConfig()

    if include_user:
        user_path = user_config_path()
        if user_path.is_file():
            logger.info(f"Loading user config: {user_path}")
            config = config.merged(read_config_file(user_path), str(user_path))
        else:
            logger.debug(f"No user config at {user_path}")

    explicit = config_path or os.environ.get(CONFIG_ENV_VAR)
    if explicit:
        path = Path(explicit)
        if not path.is_file():
            raise ConfigurationError("Config file not found", file_path=str(path))
        logger.info(f"Loading config: {path}")
        config = config.merged(read_config_file(path), str(path))

    return config
