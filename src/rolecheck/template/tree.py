"""Construct tree built from a synthesized CloudFormation template."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Iterator

logger = logging.getLogger(__name__)

CDK_PATH_METADATA = "aws:cdk:path"
DEFAULT_CHILD_IDS: tuple[str, ...] = ("Resource", "Default")


@dataclass(frozen=True)
class CfnResource:
    """One entry of a template's ``Resources`` section."""

    logical_id: str
    resource_type: str
    properties: dict[str, Any] = field(default_factory=dict)


@dataclass
class ConstructNode:
    """A node of the construct tree.

    Mirrors the CDK construct model: an L2 construct such as a role is a
    node whose ``Resource`` child carries the CloudFormation resource.
    """

    node_id: str
    path: str
    resource: CfnResource | None = None
    children: dict[str, ConstructNode] = field(default_factory=dict)

    @property
    def default_child(self) -> CfnResource | None:
        """Return the CloudFormation resource of the ``Resource``/``Default`` child."""
        for child_id in DEFAULT_CHILD_IDS:
            child = self.children.get(child_id)
            if child is not None and child.resource is not None:
                return child.resource
        return None

    def child(self, node_id: str) -> ConstructNode:
        """Return the child named *node_id*, creating it if missing."""
        existing = self.children.get(node_id)
        if existing is not None:
            return existing
        created = ConstructNode(node_id=node_id, path=f"{self.path}/{node_id}")
        self.children[node_id] = created
        return created


def _construct_path(logical_id: str, body: dict[str, Any], stack_name: str) -> list[str]:
    """Return the path segments for a resource, below the stack root."""
    metadata = body.get("Metadata")
    cdk_path = metadata.get(CDK_PATH_METADATA) if isinstance(metadata, dict) else None
    if isinstance(cdk_path, str) and cdk_path.strip("/"):
        segments = [s for s in cdk_path.split("/") if s]
        # The stack id leads every CDK path; drop it since the root stands for it.
        if segments[0] == stack_name:
            segments = segments[1:]
        if segments:
            return segments
        logger.debug("Resource %s has a stack-only construct path %s", logical_id, cdk_path)
    return [logical_id, "Resource"]


def build_tree(template: dict[str, Any], stack_name: str) -> ConstructNode:
    """Build a construct tree rooted at *stack_name* from a template mapping.

    Resources without ``aws:cdk:path`` metadata, or whose path names only
    the stack, are placed at ``<stack>/<LogicalId>/Resource``.
    """
    root = ConstructNode(node_id=stack_name, path=stack_name)
    resources = template.get("Resources")
    if resources is None:
        resources = {}
    if not isinstance(resources, dict):
        msg = "template 'Resources' must be a mapping"
        raise ValueError(msg)

    for logical_id, body in resources.items():
        if not isinstance(body, dict):
            msg = f"template resource '{logical_id}' must be a mapping"
            raise ValueError(msg)
        properties = body.get("Properties") or {}
        resource = CfnResource(
            logical_id=str(logical_id),
            resource_type=str(body.get("Type", "")),
            properties=properties if isinstance(properties, dict) else {},
        )

        node = root
        for segment in _construct_path(str(logical_id), body, stack_name):
            node = node.child(segment)
        if node.resource is not None:
            logger.warning(
                "Resource %s shares construct path %s with %s; keeping the first",
                logical_id,
                node.path,
                node.resource.logical_id,
            )
            continue
        node.resource = resource

    return root


def walk(root: ConstructNode) -> Iterator[ConstructNode]:
    """Yield *root* and all descendants depth-first, children in insertion order."""
    stack = [root]
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(list(node.children.values())))


def find_by_logical_id(root: ConstructNode) -> dict[str, ConstructNode]:
    """Map each resource's logical id to the construct that owns it.

    The owner is the parent of a ``Resource``/``Default`` node, otherwise the
    node holding the resource itself.
    """
    owners: dict[str, ConstructNode] = {}
    for node in walk(root):
        for child_id, child in node.children.items():
            if child.resource is None:
                continue
            owner = node if child_id in DEFAULT_CHILD_IDS else child
            owners[child.resource.logical_id] = owner
    return owners
