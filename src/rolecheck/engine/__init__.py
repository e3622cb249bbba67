"""Engine domain: pattern matching, statement models, rule evaluation, configuration."""

from rolecheck.engine.config import (
    ConfigError,
    config_from_dict,
    load_config,
)
from rolecheck.engine.models import (
    Effect,
    PolicyStatement,
    RuleConfiguration,
    Severity,
    Violation,
    ViolationKind,
)
from rolecheck.engine.patterns import covers, is_malformed_wildcard, is_wildcard, matches
from rolecheck.engine.rule_engine import check, check_all

__all__ = [
    "ConfigError",
    "Effect",
    "PolicyStatement",
    "RuleConfiguration",
    "Severity",
    "Violation",
    "ViolationKind",
    "check",
    "check_all",
    "config_from_dict",
    "covers",
    "is_malformed_wildcard",
    "is_wildcard",
    "load_config",
    "matches",
]
