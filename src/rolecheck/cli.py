"""rolecheck CLI entry point."""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING

import click

from rolecheck import __version__

if TYPE_CHECKING:
    from rolecheck.engine.models import RuleConfiguration


@click.group()
@click.version_option(version=__version__, prog_name="rolecheck")
@click.option("--verbose", "-v", is_flag=True, help="Verbose output (debug logging).")
@click.pass_context
def main(ctx: click.Context, *, verbose: bool) -> None:
    """rolecheck - audit IAM roles and policies in CloudFormation templates."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    logging.basicConfig(format="%(levelname)s %(name)s: %(message)s")
    logging.getLogger("rolecheck").setLevel(logging.DEBUG if verbose else logging.WARNING)


def _resolve_config(
    config_path: Path | None,
    allow: tuple[str, ...],
    deny: tuple[str, ...],
    *,
    ban_wildcards: bool,
) -> RuleConfiguration:
    """Merge the config file (explicit or ./rolecheck.yml) with command-line overrides."""
    from rolecheck.engine.config import (
        DEFAULT_CONFIG_NAME,
        load_config,
        warn_on_ignored_deny_list,
    )
    from rolecheck.engine.models import RuleConfiguration

    if config_path is None:
        default_path = Path.cwd() / DEFAULT_CONFIG_NAME
        config_path = default_path if default_path.is_file() else None

    base = load_config(config_path) if config_path is not None else RuleConfiguration()

    if not allow and not deny and not ban_wildcards:
        return base

    config = RuleConfiguration(
        allow_list=frozenset(allow) if allow else base.allow_list,
        deny_list=frozenset(deny) if deny else base.deny_list,
        ban_wildcards=ban_wildcards or base.ban_wildcards,
    )
    warn_on_ignored_deny_list(config)
    return config


@main.command()
@click.argument(
    "templates",
    nargs=-1,
    required=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Rule configuration (default: ./rolecheck.yml if present).",
)
@click.option("--allow", multiple=True, help="Allowed action pattern (repeatable).")
@click.option("--deny", multiple=True, help="Denied action pattern (repeatable).")
@click.option("--ban-wildcards", is_flag=True, default=False, help="Report every wildcard action.")
@click.option(
    "--format",
    "fmt",
    type=click.Choice(["rich", "text", "json", "porcelain"]),
    default=None,
    help="Output format (default: rich if TTY, porcelain if piped).",
)
@click.option("--strict", is_flag=True, default=False, help="Exit 1 if errors found.")
@click.option(
    "--fail-on-warn", is_flag=True, default=False, help="Exit 1 if warnings found."
)
@click.option(
    "--no-summary",
    is_flag=True,
    default=False,
    help="Do not add the per-statement 'does not conform' notice.",
)
def check(
    *,
    templates: tuple[Path, ...],
    config_path: Path | None,
    allow: tuple[str, ...],
    deny: tuple[str, ...],
    ban_wildcards: bool,
    fmt: str | None,
    strict: bool,
    fail_on_warn: bool,
    no_summary: bool,
) -> None:
    """Check roles and policies in synthesized CloudFormation TEMPLATES.

    Exit codes: 0 = clean or violations without --strict/--fail-on-warn,
    1 = errors with --strict or warnings with --fail-on-warn,
    2 = configuration or template error.
    """
    from rolecheck.auditor import (
        audit,
        format_json,
        format_porcelain,
        format_text,
        render_report,
    )
    from rolecheck.engine.config import ConfigError
    from rolecheck.template.loader import TemplateError

    if fmt is None:
        fmt = "rich" if sys.stdout.isatty() else "porcelain"

    try:
        config = _resolve_config(config_path, allow, deny, ban_wildcards=ban_wildcards)
        result = audit(list(templates), config, summary_notice=not no_summary)
    except (ConfigError, TemplateError) as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(2)
    except ValueError as exc:
        click.echo(f"Error: invalid template content: {exc}", err=True)
        sys.exit(2)

    if fmt == "rich":
        from rich.console import Console

        render_report(result, Console())
    else:
        formatters = {
            "text": format_text,
            "json": format_json,
            "porcelain": format_porcelain,
        }
        output = formatters[fmt](result)
        if output:
            click.echo(output)

    if strict and result.errors:
        sys.exit(1)
    if fail_on_warn and result.warnings:
        sys.exit(1)


@main.command()
@click.option(
    "--path",
    "target",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Where to write the configuration (default: ./rolecheck.yml).",
)
@click.option("--force", is_flag=True, default=False, help="Overwrite an existing file.")
def init(*, target: Path | None, force: bool) -> None:
    """Write a starter rolecheck.yml."""
    from rolecheck.engine.config import DEFAULT_CONFIG_NAME, STARTER_CONFIG

    target = target or Path.cwd() / DEFAULT_CONFIG_NAME
    if target.exists() and not force:
        click.echo(f"Error: {target} already exists (use --force to overwrite).", err=True)
        sys.exit(1)

    target.write_text(STARTER_CONFIG, encoding="utf-8")
    click.echo(f"Wrote {target}")


if __name__ == "__main__":
    main()
