"""Drive a RoleChecker over a construct tree."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from rolecheck.checker.resources import PolicyResource, RoleResource, classify
from rolecheck.template.tree import find_by_logical_id, walk

if TYPE_CHECKING:
    from rolecheck.checker.role_checker import RoleChecker
    from rolecheck.template.tree import ConstructNode

logger = logging.getLogger(__name__)


def _attachments(root: ConstructNode) -> dict[str, list[ConstructNode]]:
    """Map role logical ids to the policy constructs attached to them."""
    by_role: dict[str, list[ConstructNode]] = {}
    for node in walk(root):
        match classify(node):
            case PolicyResource(attached_roles=role_ids):
                for role_id in role_ids:
                    by_role.setdefault(role_id, []).append(node)
            case _:
                pass
    return by_role


def traverse(root: ConstructNode, checker: RoleChecker) -> int:
    """Visit every node of *root* with *checker*; return the number of visits.

    Pass 1 visits the whole tree depth-first.  Pass 2 visits, for each role,
    the policies attached to it, so those policies are reached twice and
    rely on the checker's tracker to be reported once.
    """
    visits = 0
    for node in walk(root):
        checker.visit(node)
        visits += 1

    owners = find_by_logical_id(root)
    for role_id, policies in _attachments(root).items():
        owner = owners.get(role_id)
        if owner is None:
            logger.debug("Policy attached to unknown role %s", role_id)
            continue
        match classify(owner):
            case RoleResource():
                pass
            case _:
                logger.debug("Policy attached to %s, which is not a role", owner.path)
                continue
        for policy_node in policies:
            checker.visit(policy_node)
            visits += 1

    logger.debug("Traversal of %s finished after %d visits", root.path, visits)
    return visits
