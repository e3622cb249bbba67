"""Classify construct nodes into role, policy, or other resources."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from rolecheck.engine.models import PolicyStatement, ensure_list

if TYPE_CHECKING:
    from rolecheck.template.tree import CfnResource, ConstructNode

ROLE_TYPE = "AWS::IAM::Role"
POLICY_TYPES: frozenset[str] = frozenset({"AWS::IAM::Policy", "AWS::IAM::ManagedPolicy"})


@dataclass(frozen=True)
class RoleResource:
    """An IAM role; statements come from its inline policies."""

    path: str
    logical_id: str
    statements: tuple[PolicyStatement, ...]


@dataclass(frozen=True)
class PolicyResource:
    """A standalone or managed IAM policy."""

    path: str
    logical_id: str
    statements: tuple[PolicyStatement, ...]
    attached_roles: tuple[str, ...] = ()  # logical ids from ``Roles: [{Ref: ...}]``


@dataclass(frozen=True)
class OtherResource:
    """Any node that is not an IAM role or policy."""

    path: str


Resource = RoleResource | PolicyResource | OtherResource


def statements_from_document(document: Any) -> tuple[PolicyStatement, ...]:
    """Return every statement in a policy document mapping.

    Anything that is not a mapping (an unresolved intrinsic, for example)
    yields no statements.
    """
    if not isinstance(document, dict):
        return ()
    return tuple(
        PolicyStatement.from_dict(stmt)
        for stmt in ensure_list(document.get("Statement"))
        if isinstance(stmt, dict)
    )


def _role_statements(resource: CfnResource) -> tuple[PolicyStatement, ...]:
    statements: list[PolicyStatement] = []
    for policy in ensure_list(resource.properties.get("Policies")):
        if isinstance(policy, dict):
            statements.extend(statements_from_document(policy.get("PolicyDocument")))
    return tuple(statements)


def _attached_roles(resource: CfnResource) -> tuple[str, ...]:
    refs: list[str] = []
    for role in ensure_list(resource.properties.get("Roles")):
        if isinstance(role, dict) and isinstance(role.get("Ref"), str):
            refs.append(role["Ref"])
    return tuple(refs)


def classify(node: ConstructNode) -> Resource:
    """Return the resource variant for *node*, judged by its default child's type.

    A role without inline policies is still a RoleResource, with no statements.
    """
    resource = node.default_child
    if resource is None:
        return OtherResource(path=node.path)

    if resource.resource_type == ROLE_TYPE:
        return RoleResource(
            path=node.path,
            logical_id=resource.logical_id,
            statements=_role_statements(resource),
        )
    if resource.resource_type in POLICY_TYPES:
        return PolicyResource(
            path=node.path,
            logical_id=resource.logical_id,
            statements=statements_from_document(resource.properties.get("PolicyDocument")),
            attached_roles=_attached_roles(resource),
        )
    return OtherResource(path=node.path)
