"""Statement, configuration, and violation types shared by the engine."""

from __future__ import annotations

import enum
import json
import logging
from dataclasses import dataclass
from typing import Any

logger = logging.getLogger(__name__)


class Effect(enum.Enum):
    """Effect of a policy statement."""

    ALLOW = "Allow"
    DENY = "Deny"


class Severity(enum.Enum):
    """Severity level for a violation or diagnostic."""

    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class ViolationKind(enum.Enum):
    """Which rule a statement broke."""

    WILDCARD_BANNED = "wildcard_banned"
    MALFORMED_WILDCARD = "malformed_wildcard"
    ACTION_NOT_ALLOWED = "action_not_allowed"
    WILDCARD_SCOPE_EXCEEDED = "wildcard_scope_exceeded"
    ACTION_DENIED = "action_denied"


def ensure_list(value: Any) -> list[Any]:
    """Return a JSON ``x | list[x] | None`` field as a list."""
    if value is None:
        return []
    return value if isinstance(value, list) else [value]


def _as_strings(value: Any) -> tuple[str, ...]:
    # Intrinsic functions (``{"Fn::GetAtt": ...}``) are kept as compact JSON for display.
    return tuple(
        item if isinstance(item, str) else json.dumps(item, sort_keys=True)
        for item in ensure_list(value)
    )


def _action_strings(value: Any) -> tuple[str, ...]:
    """Return the literal actions of an ``Action`` field.

    Unresolved intrinsics (``{"Fn::Sub": ...}``, ``{"Ref": ...}``) are only
    known at deploy time and are left out.
    """
    actions: list[str] = []
    for item in ensure_list(value):
        if isinstance(item, str):
            actions.append(item)
        else:
            logger.debug("Skipping unresolved action %s", json.dumps(item, sort_keys=True))
    return tuple(actions)


@dataclass(frozen=True)
class PolicyStatement:
    """A single IAM-style policy statement.

    Resources are carried for display only; the engine never inspects them.
    """

    effect: Effect
    actions: tuple[str, ...]
    resources: tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PolicyStatement:
        """Build a statement from its policy-document JSON form.

        ``Effect`` defaults to ``Allow``.  ``Action`` and ``Resource`` may be
        a single string or a list.  A statement using only ``NotAction`` has
        no actions, and non-string ``Action`` entries are dropped.

        Raises ``ValueError`` for an ``Effect`` other than Allow/Deny.
        """
        effect_raw = str(data.get("Effect", Effect.ALLOW.value))
        try:
            effect = Effect(effect_raw)
        except ValueError:
            msg = f"invalid statement Effect '{effect_raw}', must be 'Allow' or 'Deny'"
            raise ValueError(msg) from None

        return cls(
            effect=effect,
            actions=_action_strings(data.get("Action")),
            resources=_as_strings(data.get("Resource")),
        )


@dataclass(frozen=True)
class RuleConfiguration:
    """Immutable rule set applied to every statement a checker sees.

    When ``allow_list`` is set the deny-list is never consulted.
    """

    allow_list: frozenset[str] | None = None
    deny_list: frozenset[str] | None = None
    ban_wildcards: bool = False

    @classmethod
    def create(
        cls,
        *,
        allow_list: list[str] | None = None,
        deny_list: list[str] | None = None,
        ban_wildcards: bool = False,
    ) -> RuleConfiguration:
        """Build a configuration from plain lists."""
        return cls(
            allow_list=frozenset(allow_list) if allow_list is not None else None,
            deny_list=frozenset(deny_list) if deny_list is not None else None,
            ban_wildcards=ban_wildcards,
        )

    @property
    def list_mode(self) -> str:
        """Return which list drives evaluation: ``"allow"``, ``"deny"`` or ``"none"``."""
        if self.allow_list is not None:
            return "allow"
        if self.deny_list is not None:
            return "deny"
        return "none"


@dataclass(frozen=True)
class Violation:
    """A single rule violation found in one statement."""

    kind: ViolationKind
    severity: Severity
    message: str
    actions: tuple[str, ...] = ()
