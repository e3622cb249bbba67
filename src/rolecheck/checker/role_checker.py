"""Role checker: the per-node visit callback driven by a tree traversal."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol

from rolecheck.checker.resources import OtherResource, PolicyResource, RoleResource, classify
from rolecheck.checker.tracker import VisitationTracker
from rolecheck.engine.models import Severity
from rolecheck.engine.rule_engine import check

if TYPE_CHECKING:
    from collections.abc import Iterable

    from rolecheck.engine.models import PolicyStatement, RuleConfiguration
    from rolecheck.template.tree import ConstructNode

logger = logging.getLogger(__name__)

NON_CONFORMING_NOTICE = "Role does not conform to requirements"


# ---------------------------------------------------------------------------
# Diagnostics
# ---------------------------------------------------------------------------


class DiagnosticSink(Protocol):
    """Receives diagnostics from a checker.

    Implementations decide how diagnostics are stored or displayed.
    """

    def emit(self, node_path: str, severity: Severity, message: str) -> None:
        """Record one diagnostic for the node at *node_path*."""
        ...


@dataclass(frozen=True)
class Diagnostic:
    """A severity-tagged message attached to one tree node."""

    node_path: str
    severity: Severity
    message: str


def filter_by_severity(
    diagnostics: Iterable[Diagnostic], severity: Severity
) -> list[Diagnostic]:
    """Return the diagnostics with the given severity, in order."""
    return [d for d in diagnostics if d.severity is severity]


@dataclass
class DiagnosticCollector:
    """In-memory sink that keeps diagnostics in emission order."""

    diagnostics: list[Diagnostic] = field(default_factory=list)

    def emit(self, node_path: str, severity: Severity, message: str) -> None:
        self.diagnostics.append(Diagnostic(node_path, severity, message))

    @property
    def errors(self) -> list[Diagnostic]:
        return filter_by_severity(self.diagnostics, Severity.ERROR)

    @property
    def warnings(self) -> list[Diagnostic]:
        return filter_by_severity(self.diagnostics, Severity.WARNING)


# ---------------------------------------------------------------------------
# Checker
# ---------------------------------------------------------------------------


class RoleChecker:
    """Check every role and policy node handed to :meth:`visit`.

    One instance serves exactly one traversal: its tracker ensures a node
    reached by several passes is checked and reported once.  Not safe to
    share between concurrent traversals.

    When *summary_notice* is true, every statement that produced violations
    is followed by an INFO diagnostic saying the role does not conform.
    """

    def __init__(
        self,
        config: RuleConfiguration,
        sink: DiagnosticSink,
        *,
        summary_notice: bool = True,
    ) -> None:
        self.config = config
        self.sink = sink
        self.summary_notice = summary_notice
        self.tracker = VisitationTracker()
        self.nodes_checked = 0
        self.statements_checked = 0

    def visit(self, node: ConstructNode) -> None:
        """Check *node* if it is a role or policy that has not been seen yet."""
        resource = classify(node)
        match resource:
            case RoleResource(path=path, statements=statements):
                kind = "role"
            case PolicyResource(path=path, statements=statements):
                kind = "policy"
            case OtherResource():
                return

        if not self.tracker.should_process(path):
            logger.debug("Skipping already checked %s %s", kind, path)
            return

        logger.debug("Checking %s %s (%d statements)", kind, path, len(statements))
        self.nodes_checked += 1
        for statement in statements:
            self._check_statement(path, statement)

    def _check_statement(self, path: str, statement: PolicyStatement) -> None:
        self.statements_checked += 1
        violations = check(statement, self.config)
        for violation in violations:
            self.sink.emit(path, violation.severity, violation.message)
        if violations and self.summary_notice:
            self.sink.emit(path, Severity.INFO, NON_CONFORMING_NOTICE)
