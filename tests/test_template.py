"""Tests for rolecheck.template: loading templates, building the tree, traversal."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

import pytest

from rolecheck.checker.role_checker import DiagnosticCollector, RoleChecker
from rolecheck.engine.models import RuleConfiguration, Severity
from rolecheck.template.loader import (
    TemplateError,
    load_template,
    parse_template,
    stack_name_for,
)
from rolecheck.template.traversal import traverse
from rolecheck.template.tree import build_tree, find_by_logical_id, walk

if TYPE_CHECKING:
    from pathlib import Path

# ---------------------------------------------------------------------------
# Loader
# ---------------------------------------------------------------------------


class TestParseTemplate:
    """Tests for parse_template() and load_template()."""

    def test_json(self, cdk_template: dict[str, Any]) -> None:
        assert parse_template(json.dumps(cdk_template)) == cdk_template

    def test_yaml_with_short_form_intrinsics(self) -> None:
        text = (
            "Resources:\n"
            "  Policy:\n"
            "    Type: AWS::IAM::Policy\n"
            "    Properties:\n"
            "      PolicyName: !Sub '${AWS::StackName}-policy'\n"
            "      Roles:\n"
            "        - !Ref MyRole\n"
            "      PolicyDocument:\n"
            "        Statement:\n"
            "          - Effect: Allow\n"
            "            Action: s3:GetObject\n"
            "            Resource: !GetAtt Bucket.Arn\n"
            "            Condition: !If [IsProd, {}, !Ref AWS::NoValue]\n"
        )
        data = parse_template(text)
        props = data["Resources"]["Policy"]["Properties"]
        assert props["Roles"] == [{"Ref": "MyRole"}]
        assert props["PolicyName"] == {"Fn::Sub": "${AWS::StackName}-policy"}
        statement = props["PolicyDocument"]["Statement"][0]
        assert statement["Resource"] == {"Fn::GetAtt": ["Bucket", "Arn"]}
        assert statement["Condition"] == {"Fn::If": ["IsProd", {}, {"Ref": "AWS::NoValue"}]}

    def test_not_a_mapping(self) -> None:
        with pytest.raises(TemplateError, match="template must be a mapping"):
            parse_template("[1, 2, 3]")

    def test_resources_not_a_mapping(self) -> None:
        with pytest.raises(TemplateError, match="'Resources' must be a mapping"):
            parse_template('{"Resources": []}')

    def test_null_resources_is_empty(self) -> None:
        data = parse_template("AWSTemplateFormatVersion: '2010-09-09'\nResources:\n")
        assert data["Resources"] is None
        assert [n.path for n in walk(build_tree(data, "stack"))] == ["stack"]

    def test_garbage(self) -> None:
        with pytest.raises(TemplateError, match="not valid JSON or YAML"):
            parse_template("Resources: [unclosed", source="bad.yaml")

    def test_load_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(TemplateError, match="cannot read"):
            load_template(tmp_path / "nope.json")

    def test_load_file(self, template_file: Path) -> None:
        assert "exampleiamrole1A2B3C4D" in load_template(template_file)["Resources"]

    @pytest.mark.parametrize(
        ("name", "expected"),
        [
            ("TestStack.template.json", "TestStack"),
            ("stack.yaml", "stack"),
            ("stack.yml", "stack"),
            ("plain", "plain"),
        ],
    )
    def test_stack_name_for(self, tmp_path: Path, name: str, expected: str) -> None:
        assert stack_name_for(tmp_path / name) == expected


# ---------------------------------------------------------------------------
# Tree
# ---------------------------------------------------------------------------


class TestBuildTree:
    """Tests for build_tree(), walk(), and find_by_logical_id()."""

    def test_cdk_paths(self, cdk_template: dict[str, Any]) -> None:
        root = build_tree(cdk_template, "TestStack")
        paths = [node.path for node in walk(root)]
        assert paths == [
            "TestStack",
            "TestStack/example-iam-role",
            "TestStack/example-iam-role/Resource",
            "TestStack/example-iam-role/DefaultPolicy",
            "TestStack/example-iam-role/DefaultPolicy/Resource",
            "TestStack/Bucket",
            "TestStack/Bucket/Resource",
            "TestStack/CDKMetadata",
            "TestStack/CDKMetadata/Default",
        ]

    def test_default_child(self, cdk_template: dict[str, Any]) -> None:
        root = build_tree(cdk_template, "TestStack")
        role = root.children["example-iam-role"]
        assert role.default_child is not None
        assert role.default_child.resource_type == "AWS::IAM::Role"
        assert root.children["CDKMetadata"].default_child is not None
        assert root.default_child is None

    def test_plain_template_paths(self) -> None:
        template = {"Resources": {"MyRole": {"Type": "AWS::IAM::Role"}}}
        root = build_tree(template, "stack")
        assert [n.path for n in walk(root)] == ["stack", "stack/MyRole", "stack/MyRole/Resource"]

    def test_empty_template(self) -> None:
        root = build_tree({}, "stack")
        assert [n.path for n in walk(root)] == ["stack"]

    def test_stack_only_cdk_path(self) -> None:
        template = {
            "Resources": {
                "MyRole": {"Type": "AWS::IAM::Role", "Metadata": {"aws:cdk:path": "S"}},
            }
        }
        root = build_tree(template, "S")
        assert list(root.children) == ["MyRole"]
        resource = root.children["MyRole"].default_child
        assert resource is not None
        assert resource.logical_id == "MyRole"

    def test_find_by_logical_id(self, cdk_template: dict[str, Any]) -> None:
        owners = find_by_logical_id(build_tree(cdk_template, "TestStack"))
        assert owners["exampleiamrole1A2B3C4D"].path == "TestStack/example-iam-role"
        assert (
            owners["exampleiamroleDefaultPolicy5E6F7A8B"].path
            == "TestStack/example-iam-role/DefaultPolicy"
        )

    def test_resource_must_be_mapping(self) -> None:
        with pytest.raises(ValueError, match="resource 'Bad' must be a mapping"):
            build_tree({"Resources": {"Bad": "AWS::IAM::Role"}}, "stack")

    def test_duplicate_path_keeps_first(self) -> None:
        template = {
            "Resources": {
                "A": {"Type": "AWS::IAM::Role", "Metadata": {"aws:cdk:path": "s/Role/Resource"}},
                "B": {"Type": "AWS::S3::Bucket", "Metadata": {"aws:cdk:path": "s/Role/Resource"}},
            }
        }
        root = build_tree(template, "s")
        resource = root.children["Role"].default_child
        assert resource is not None
        assert resource.logical_id == "A"


# ---------------------------------------------------------------------------
# Traversal
# ---------------------------------------------------------------------------


class TestTraverse:
    """Tests for traverse(): two passes, deduplicated by the checker."""

    def test_attached_policy_visited_twice_checked_once(
        self, cdk_template: dict[str, Any]
    ) -> None:
        root = build_tree(cdk_template, "TestStack")
        collector = DiagnosticCollector()
        checker = RoleChecker(RuleConfiguration.create(deny_list=["s3:*"]), collector)

        visits = traverse(root, checker)

        assert visits == 10
        assert checker.nodes_checked == 2
        assert checker.statements_checked == 3
        errors = [(d.node_path, d.message) for d in collector.errors]
        assert errors == [
            (
                "TestStack/example-iam-role/DefaultPolicy",
                "Statement contains denied calls: s3:GetObject",
            )
        ]

    def test_ban_wildcards_on_cdk_stack(self, cdk_template: dict[str, Any]) -> None:
        root = build_tree(cdk_template, "TestStack")
        collector = DiagnosticCollector()
        traverse(root, RoleChecker(RuleConfiguration.create(ban_wildcards=True), collector))
        assert [(d.node_path, d.severity, d.message) for d in collector.diagnostics] == [
            ("TestStack/example-iam-role", Severity.ERROR, "Wildcard used: logs:touch*"),
            (
                "TestStack/example-iam-role",
                Severity.INFO,
                "Role does not conform to requirements",
            ),
        ]

    def test_policy_attached_to_unknown_role(self) -> None:
        template = {
            "Resources": {
                "P": {
                    "Type": "AWS::IAM::Policy",
                    "Properties": {
                        "PolicyDocument": {"Statement": [{"Action": "s3:*"}]},
                        "Roles": [{"Ref": "Missing"}],
                    },
                }
            }
        }
        collector = DiagnosticCollector()
        checker = RoleChecker(RuleConfiguration.create(ban_wildcards=True), collector)
        assert traverse(build_tree(template, "s"), checker) == 3
        assert len(collector.errors) == 1

    def test_policy_attached_to_non_role(self) -> None:
        template = {
            "Resources": {
                "Bucket": {"Type": "AWS::S3::Bucket"},
                "P": {
                    "Type": "AWS::IAM::Policy",
                    "Properties": {
                        "PolicyDocument": {"Statement": [{"Action": "s3:*"}]},
                        "Roles": [{"Ref": "Bucket"}],
                    },
                },
            }
        }
        checker = RoleChecker(RuleConfiguration(), DiagnosticCollector())
        assert traverse(build_tree(template, "s"), checker) == 5
