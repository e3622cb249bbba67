"""Template domain: CloudFormation loading, construct tree, traversal."""

from rolecheck.template.loader import (
    TemplateError,
    load_template,
    parse_template,
    stack_name_for,
)
from rolecheck.template.traversal import traverse
from rolecheck.template.tree import (
    CfnResource,
    ConstructNode,
    build_tree,
    find_by_logical_id,
    walk,
)

__all__ = [
    "CfnResource",
    "ConstructNode",
    "TemplateError",
    "build_tree",
    "find_by_logical_id",
    "load_template",
    "parse_template",
    "stack_name_for",
    "traverse",
    "walk",
]
