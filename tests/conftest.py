"""Shared test fixtures for rolecheck."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

import pytest

if TYPE_CHECKING:
    from pathlib import Path


def _role_with_inline_policy() -> dict[str, Any]:
    return {
        "Type": "AWS::IAM::Role",
        "Properties": {
            "AssumeRolePolicyDocument": {
                "Statement": [
                    {
                        "Action": "sts:AssumeRole",
                        "Effect": "Allow",
                        "Principal": {"Service": "lambda.amazonaws.com"},
                    }
                ],
                "Version": "2012-10-17",
            },
            "Description": "An example IAM role in AWS CDK",
            "Policies": [
                {
                    "PolicyName": "FilterLogEvents",
                    "PolicyDocument": {
                        "Statement": [
                            {
                                "Action": ["logs:FilterLogEvents", "logs:touch*"],
                                "Effect": "Allow",
                                "Resource": "arn:aws:logs:*:*:log-group:/aws/lambda/*",
                            }
                        ],
                        "Version": "2012-10-17",
                    },
                }
            ],
        },
        "Metadata": {"aws:cdk:path": "TestStack/example-iam-role/Resource"},
    }


def _attached_policy() -> dict[str, Any]:
    return {
        "Type": "AWS::IAM::Policy",
        "Properties": {
            "PolicyDocument": {
                "Statement": [
                    {"Action": "s3:GetObject", "Effect": "Allow", "Resource": "*"},
                    {"Action": "iam:PassRole", "Effect": "Deny", "Resource": "*"},
                ],
                "Version": "2012-10-17",
            },
            "PolicyName": "exampleiamroleDefaultPolicy",
            "Roles": [{"Ref": "exampleiamrole1A2B3C4D"}],
        },
        "Metadata": {"aws:cdk:path": "TestStack/example-iam-role/DefaultPolicy/Resource"},
    }


@pytest.fixture()
def cdk_template() -> dict[str, Any]:
    """A synthesized CDK stack: one role with an inline policy and an attached policy."""
    return {
        "Resources": {
            "exampleiamrole1A2B3C4D": _role_with_inline_policy(),
            "exampleiamroleDefaultPolicy5E6F7A8B": _attached_policy(),
            "Bucket83908E77": {
                "Type": "AWS::S3::Bucket",
                "Metadata": {"aws:cdk:path": "TestStack/Bucket/Resource"},
            },
            "CDKMetadata": {
                "Type": "AWS::CDK::Metadata",
                "Properties": {"Analytics": "v2:deflate64:abc"},
                "Metadata": {"aws:cdk:path": "TestStack/CDKMetadata/Default"},
            },
        }
    }


@pytest.fixture()
def template_file(tmp_path: Path, cdk_template: dict[str, Any]) -> Path:
    """Write :func:`cdk_template` as ``TestStack.template.json``."""
    path = tmp_path / "TestStack.template.json"
    path.write_text(json.dumps(cdk_template, indent=1), encoding="utf-8")
    return path
