"""Audit orchestrator: load templates, traverse, collect and format diagnostics."""

from __future__ import annotations

import json
import time
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from rolecheck.checker.role_checker import (
    Diagnostic,
    DiagnosticCollector,
    RoleChecker,
    filter_by_severity,
)
from rolecheck.engine.models import Severity
from rolecheck.template.loader import load_template, stack_name_for
from rolecheck.template.traversal import traverse
from rolecheck.template.tree import build_tree

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path

    from rich.console import Console

    from rolecheck.engine.models import RuleConfiguration


# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------


@dataclass
class AuditResult:
    """Result of an audit run over one or more templates."""

    diagnostics: list[Diagnostic] = field(default_factory=list)
    templates_loaded: int = 0
    nodes_visited: int = 0
    nodes_checked: int = 0
    statements_checked: int = 0
    elapsed_ms: float = 0.0

    @property
    def errors(self) -> list[Diagnostic]:
        return filter_by_severity(self.diagnostics, Severity.ERROR)

    @property
    def warnings(self) -> list[Diagnostic]:
        return filter_by_severity(self.diagnostics, Severity.WARNING)


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------


def audit(
    template_paths: Sequence[Path],
    config: RuleConfiguration,
    *,
    summary_notice: bool = True,
) -> AuditResult:
    """Check every role and policy in *template_paths* against *config*.

    Each template is its own traversal with a fresh checker, so node paths
    only need to be unique within one template.

    Raises
    ------
    TemplateError
        When a template cannot be read or parsed.
    """
    start = time.monotonic()
    result = AuditResult()

    for template_path in template_paths:
        template = load_template(template_path)
        root = build_tree(template, stack_name_for(template_path))

        sink = DiagnosticCollector()
        checker = RoleChecker(config, sink, summary_notice=summary_notice)
        result.nodes_visited += traverse(root, checker)
        result.nodes_checked += checker.nodes_checked
        result.statements_checked += checker.statements_checked
        result.diagnostics.extend(sink.diagnostics)
        result.templates_loaded += 1

    result.elapsed_ms = (time.monotonic() - start) * 1000
    return result


# ---------------------------------------------------------------------------
# Formatters
# ---------------------------------------------------------------------------

_MARKERS: dict[Severity, str] = {
    Severity.ERROR: "✗",
    Severity.WARNING: "!",
    Severity.INFO: "i",
}

_STYLES: dict[Severity, str] = {
    Severity.ERROR: "red",
    Severity.WARNING: "yellow",
    Severity.INFO: "dim",
}


def _summary_line(result: AuditResult) -> str:
    elapsed_str = f"{result.elapsed_ms / 1000:.1f}s"
    errors = len(result.errors)
    warnings = len(result.warnings)
    checked = f"{result.nodes_checked} roles/policies checked, {elapsed_str}"
    if not errors and not warnings:
        return f"✓ No violations found ({checked})"
    return f"{errors} errors, {warnings} warnings ({checked})"


def format_text(result: AuditResult) -> str:
    """Format an AuditResult as human-readable plain text.

    Example output::

        Templates: 1 loaded
        Nodes: 12 visited, 2 roles/policies checked, 3 statements

        ✗ MyStack/Role
          Wildcard used: logs:touch*
        i MyStack/Role
          Role does not conform to requirements

        1 errors, 0 warnings (2 roles/policies checked, 0.0s)
    """
    lines: list[str] = [
        f"Templates: {result.templates_loaded} loaded",
        (
            f"Nodes: {result.nodes_visited} visited, "
            f"{result.nodes_checked} roles/policies checked, "
            f"{result.statements_checked} statements"
        ),
        "",
    ]

    for d in result.diagnostics:
        lines.append(f"{_MARKERS[d.severity]} {d.node_path}")
        lines.append(f"  {d.message}")
    if result.diagnostics:
        lines.append("")

    lines.append(_summary_line(result))
    return "\n".join(lines)


def format_json(result: AuditResult) -> str:
    """Format an AuditResult as structured JSON with ``diagnostics`` and ``summary``."""
    output: dict[str, object] = {
        "diagnostics": [
            {
                "node_path": d.node_path,
                "severity": d.severity.value,
                "message": d.message,
            }
            for d in result.diagnostics
        ],
        "summary": {
            "templates_loaded": result.templates_loaded,
            "nodes_visited": result.nodes_visited,
            "nodes_checked": result.nodes_checked,
            "statements_checked": result.statements_checked,
            "errors": len(result.errors),
            "warnings": len(result.warnings),
            "elapsed_ms": result.elapsed_ms,
        },
    }
    return json.dumps(output, indent=2)


def format_porcelain(result: AuditResult) -> str:
    """Format one ``severity:node_path:message`` line per diagnostic.

    Returns an empty string when there are no diagnostics.
    """
    return "\n".join(f"{d.severity.value}:{d.node_path}:{d.message}" for d in result.diagnostics)


def render_report(result: AuditResult, console: Console) -> None:
    """Render an AuditResult to a Rich console, grouped by node."""
    from rich.markup import escape

    console.print(
        f"[bold]Templates:[/bold] {result.templates_loaded} loaded   "
        f"[bold]Checked:[/bold] {result.nodes_checked} roles/policies, "
        f"{result.statements_checked} statements"
    )
    console.print()

    current_path: str | None = None
    for d in result.diagnostics:
        if d.node_path != current_path:
            current_path = d.node_path
            console.print(f"[bold]{escape(current_path)}[/bold]")
        style = _STYLES[d.severity]
        marker = _MARKERS[d.severity]
        console.print(f"  [{style}]{marker} {escape(d.message)}[/{style}]", highlight=False)
    if result.diagnostics:
        console.print()

    console.print(_summary_line(result), highlight=False)
