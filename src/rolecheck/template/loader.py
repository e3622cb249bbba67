"""Read synthesized CloudFormation templates (JSON or YAML)."""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

import yaml

if TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)

_TEMPLATE_SUFFIX = ".template"


class TemplateError(ValueError):
    """Raised when a template cannot be read or is not a CloudFormation mapping."""


class _CfnLoader(yaml.SafeLoader):
    """SafeLoader that understands CloudFormation short-form intrinsics."""


def _construct_intrinsic(loader: yaml.SafeLoader, tag_suffix: str, node: yaml.Node) -> Any:
    # !Ref X -> {"Ref": X}; !GetAtt A.B -> {"Fn::GetAtt": ["A", "B"]}; !Sub ... -> {"Fn::Sub": ...}
    if isinstance(node, yaml.ScalarNode):
        value: Any = loader.construct_scalar(node)
    elif isinstance(node, yaml.SequenceNode):
        value = loader.construct_sequence(node, deep=True)
    else:
        value = loader.construct_mapping(node, deep=True)  # type: ignore[arg-type]

    if tag_suffix == "Ref":
        return {"Ref": value}
    if tag_suffix == "GetAtt" and isinstance(value, str):
        return {"Fn::GetAtt": value.split(".", 1)}
    return {f"Fn::{tag_suffix}": value}


_CfnLoader.add_multi_constructor("!", _construct_intrinsic)


def stack_name_for(template_path: Path) -> str:
    """Derive a stack name from a template file name (``Foo.template.json`` -> ``Foo``)."""
    name = template_path.name
    for suffix in (".json", ".yaml", ".yml"):
        if name.endswith(suffix):
            name = name[: -len(suffix)]
            break
    if name.endswith(_TEMPLATE_SUFFIX):
        name = name[: -len(_TEMPLATE_SUFFIX)]
    return name


def parse_template(text: str, *, source: str = "<string>") -> dict[str, Any]:
    """Parse template text, trying JSON first and falling back to YAML.

    A missing or null ``Resources`` section is an empty template.  Raises
    ``TemplateError`` when neither parses to a mapping.
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        try:
            data = yaml.load(text, Loader=_CfnLoader)  # noqa: S506
        except yaml.YAMLError as exc:
            msg = f"{source}: not valid JSON or YAML: {exc}"
            raise TemplateError(msg) from exc

    if not isinstance(data, dict):
        msg = f"{source}: template must be a mapping"
        raise TemplateError(msg)
    resources = data.get("Resources")
    if resources is not None and not isinstance(resources, dict):
        msg = f"{source}: 'Resources' must be a mapping"
        raise TemplateError(msg)
    return data


def load_template(template_path: Path) -> dict[str, Any]:
    """Read and parse a CloudFormation template file."""
    try:
        text = template_path.read_text(encoding="utf-8")
    except OSError as exc:
        msg = f"cannot read {template_path}: {exc}"
        raise TemplateError(msg) from exc

    data = parse_template(text, source=str(template_path))
    logger.debug(
        "Loaded %s with %d resources", template_path, len(data.get("Resources") or {})
    )
    return data
