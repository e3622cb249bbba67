"""Load and validate ``rolecheck.yml`` into a RuleConfiguration."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import yaml

from rolecheck.engine.models import RuleConfiguration

if TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)

SUPPORTED_SCHEMA_VERSIONS: frozenset[int] = frozenset({1})
VALID_CONFIG_KEYS: frozenset[str] = frozenset(
    {"version", "allow_list", "deny_list", "ban_wildcards"}
)

DEFAULT_CONFIG_NAME = "rolecheck.yml"

STARTER_CONFIG = """\
# rolecheck rule configuration
version: 1

# Actions roles may use (IAM "service:operation" format, optional trailing *).
# When set, deny_list is ignored.
# allow_list:
#   - "logs:PutLogEvents"
#   - "s3:Get*"

# Actions roles must never use.
deny_list:
  - "iam:*"

# Report every action ending in "*".
ban_wildcards: false
"""


class ConfigError(ValueError):
    """Raised when a rule configuration is malformed."""


def _parse_pattern_list(data: dict[str, object], key: str) -> list[str] | None:
    """Parse an optional list of non-empty pattern strings."""
    raw = data.get(key)
    if raw is None:
        return None
    if not isinstance(raw, list):
        msg = f"{DEFAULT_CONFIG_NAME}: '{key}' must be a list"
        raise ConfigError(msg)

    patterns: list[str] = []
    for idx, item in enumerate(raw):
        if not isinstance(item, str) or not item.strip():
            msg = f"{DEFAULT_CONFIG_NAME}: '{key}' entry at index {idx} must be a non-empty string"
            raise ConfigError(msg)
        patterns.append(item.strip())
    return patterns


def config_from_dict(data: object) -> RuleConfiguration:
    """Validate an already-parsed configuration mapping.

    Raises ``ConfigError`` on schema errors (missing version, unknown keys,
    empty patterns, etc.).
    """
    if not isinstance(data, dict):
        msg = f"{DEFAULT_CONFIG_NAME} must be a YAML mapping"
        raise ConfigError(msg)

    version = data.get("version")
    if version is None:
        msg = f"{DEFAULT_CONFIG_NAME}: missing required 'version' field"
        raise ConfigError(msg)
    if version not in SUPPORTED_SCHEMA_VERSIONS:
        expected = sorted(SUPPORTED_SCHEMA_VERSIONS)
        msg = f"{DEFAULT_CONFIG_NAME}: unsupported version {version}, expected one of {expected}"
        raise ConfigError(msg)

    unknown = sorted(str(k) for k in data if k not in VALID_CONFIG_KEYS)
    if unknown:
        msg = (
            f"{DEFAULT_CONFIG_NAME}: unknown key(s) {unknown}, "
            f"must be one of {sorted(VALID_CONFIG_KEYS)}"
        )
        raise ConfigError(msg)

    allow_list = _parse_pattern_list(data, "allow_list")
    deny_list = _parse_pattern_list(data, "deny_list")

    ban_wildcards = data.get("ban_wildcards", False)
    if not isinstance(ban_wildcards, bool):
        msg = f"{DEFAULT_CONFIG_NAME}: 'ban_wildcards' must be true or false"
        raise ConfigError(msg)

    config = RuleConfiguration.create(
        allow_list=allow_list, deny_list=deny_list, ban_wildcards=ban_wildcards
    )
    warn_on_ignored_deny_list(config)
    return config


def warn_on_ignored_deny_list(config: RuleConfiguration) -> None:
    """Log a warning when a deny-list is configured but shadowed by an allow-list."""
    if config.allow_list is not None and config.deny_list is not None:
        logger.warning(
            "Both allow_list and deny_list are configured; "
            "allow_list takes precedence and deny_list (%d entries) is ignored",
            len(config.deny_list),
        )


def load_config(config_path: Path) -> RuleConfiguration:
    """Parse a rolecheck.yml file into a RuleConfiguration.

    Raises ``ConfigError`` when the file is unreadable, not valid YAML, or
    fails schema validation.
    """
    try:
        with config_path.open("r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh)
    except OSError as exc:
        msg = f"cannot read {config_path}: {exc}"
        raise ConfigError(msg) from exc
    except yaml.YAMLError as exc:
        msg = f"{config_path}: invalid YAML: {exc}"
        raise ConfigError(msg) from exc

    logger.debug("Loaded rule configuration from %s", config_path)
    return config_from_dict(data)
