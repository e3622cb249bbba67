"""Policy rule engine: evaluate one statement against one rule configuration."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rolecheck.engine.models import Effect, Severity, Violation, ViolationKind
from rolecheck.engine.patterns import covers, is_malformed_wildcard, is_wildcard, matches

if TYPE_CHECKING:
    from collections.abc import Iterable

    from rolecheck.engine.models import PolicyStatement, RuleConfiguration


# ---------------------------------------------------------------------------
# Individual passes
# ---------------------------------------------------------------------------


def _wildcard_ban_pass(statement: PolicyStatement) -> list[Violation]:
    """One violation per action ending in ``*``."""
    return [
        Violation(
            kind=ViolationKind.WILDCARD_BANNED,
            severity=Severity.ERROR,
            message=f"Wildcard used: {action}",
            actions=(action,),
        )
        for action in statement.actions
        if is_wildcard(action)
    ]


def _malformed_wildcard_pass(statement: PolicyStatement) -> list[Violation]:
    """At most one warning per statement for wildcards not in trailing position."""
    malformed = tuple(a for a in statement.actions if is_malformed_wildcard(a))
    if not malformed:
        return []
    return [
        Violation(
            kind=ViolationKind.MALFORMED_WILDCARD,
            severity=Severity.WARNING,
            message=(
                "You have described a wildcard with a suffix and prefix "
                f"({', '.join(malformed)}). This is likely not invalid but may "
                "lead to unintended consequences."
            ),
            actions=malformed,
        )
    ]


def _allow_list_pass(
    statement: PolicyStatement, allow_list: frozenset[str], *, ban_wildcards: bool
) -> list[Violation]:
    """Every action must be cleared by the allow-list.

    Literal actions may be cleared by any entry.  Wildcard actions are only
    compared against wildcard entries and must be equal to or covered by one.
    Banned wildcards are already reported and are skipped here.
    """
    violations: list[Violation] = []
    wildcard_entries = sorted(p for p in allow_list if is_wildcard(p))

    for action in statement.actions:
        if not is_wildcard(action):
            if not any(matches(action, pattern) for pattern in allow_list):
                violations.append(
                    Violation(
                        kind=ViolationKind.ACTION_NOT_ALLOWED,
                        severity=Severity.ERROR,
                        message=f"Statement contains non-cleared permission {action}",
                        actions=(action,),
                    )
                )
        elif not ban_wildcards:
            cleared = action in wildcard_entries or any(
                covers(entry, action) for entry in wildcard_entries
            )
            if not cleared:
                violations.append(
                    Violation(
                        kind=ViolationKind.WILDCARD_SCOPE_EXCEEDED,
                        severity=Severity.ERROR,
                        message=(
                            f"Statement contains a wildcard with greater scope than allowed: "
                            f"{action}"
                        ),
                        actions=(action,),
                    )
                )

    return violations


def _deny_list_pass(statement: PolicyStatement, deny_list: frozenset[str]) -> list[Violation]:
    """One violation per deny pattern that hits any action.

    An action is hit when the deny pattern matches it, or when the action is
    a wildcard broad enough to match the deny pattern itself.
    """
    violations: list[Violation] = []
    for denied in sorted(deny_list):
        hit = tuple(
            action
            for action in statement.actions
            if matches(action, denied) or (is_wildcard(action) and matches(denied, action))
        )
        if hit:
            violations.append(
                Violation(
                    kind=ViolationKind.ACTION_DENIED,
                    severity=Severity.ERROR,
                    message=f"Statement contains denied calls: {','.join(hit)}",
                    actions=hit,
                )
            )
    return violations


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def check(statement: PolicyStatement, config: RuleConfiguration) -> list[Violation]:
    """Return every violation *statement* has under *config*, in evaluation order.

    Order: wildcard ban, malformed wildcard, then allow-list or deny-list.
    Deny statements are never flagged.  All patterns in *config* must be
    non-empty strings; this is not checked here.
    """
    if statement.effect is Effect.DENY:
        return []

    violations: list[Violation] = []

    if config.ban_wildcards:
        violations.extend(_wildcard_ban_pass(statement))

    violations.extend(_malformed_wildcard_pass(statement))

    # Allow-list takes precedence; the deny-list is ignored when both are set.
    if config.allow_list is not None:
        violations.extend(
            _allow_list_pass(statement, config.allow_list, ban_wildcards=config.ban_wildcards)
        )
    elif config.deny_list is not None:
        violations.extend(_deny_list_pass(statement, config.deny_list))

    return violations


def check_all(
    statements: Iterable[PolicyStatement], config: RuleConfiguration
) -> list[Violation]:
    """Check *statements* in order and concatenate their violations."""
    violations: list[Violation] = []
    for statement in statements:
        violations.extend(check(statement, config))
    return violations
