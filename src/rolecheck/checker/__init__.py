"""Checker domain: visitation tracking, resource classification, diagnostics."""

from rolecheck.checker.resources import (
    OtherResource,
    PolicyResource,
    Resource,
    RoleResource,
    classify,
    statements_from_document,
)
from rolecheck.checker.role_checker import (
    NON_CONFORMING_NOTICE,
    Diagnostic,
    DiagnosticCollector,
    DiagnosticSink,
    RoleChecker,
    filter_by_severity,
)
from rolecheck.checker.tracker import VisitationTracker

__all__ = [
    "NON_CONFORMING_NOTICE",
    "Diagnostic",
    "DiagnosticCollector",
    "DiagnosticSink",
    "OtherResource",
    "PolicyResource",
    "Resource",
    "RoleChecker",
    "RoleResource",
    "VisitationTracker",
    "classify",
    "filter_by_severity",
    "statements_from_document",
]
