"""CLI entry point for aip-review."""

import json
import logging
import sys
from pathlib import Path

import click

from aip_reviewer.config import ReviewerConfig, load_config
from aip_reviewer.errors import ConfigError, SpecLoadError
from aip_reviewer.fixes.patcher import SpecPatcher
from aip_reviewer.models import RuleCategory
from aip_reviewer.reviewer import OpenAPIReviewer
from aip_reviewer.rules.registry import default_registry
from aip_reviewer.spec.loader import dump_spec, load_spec

CATEGORY_CHOICES = [c.value for c in RuleCategory]


class CliError(click.ClickException):
    """Input or output failure, kept apart from exit code 1 (findings)."""

    exit_code = 2


def _build_config(
    config_path: Path | None,
    strict: bool,
    categories: tuple[str, ...],
    skip_rules: tuple[str, ...],
) -> ReviewerConfig:
    """Config file values, overridden by command-line flags."""
    try:
        base = load_config(config_path) if config_path else ReviewerConfig()
    except ConfigError as e:
        raise CliError(str(e)) from e

    values = base.model_dump()
    if strict:
        values["strict"] = True
    if categories:
        values["categories"] = list(categories)
    if skip_rules:
        values["skip_rules"] = list(values["skip_rules"]) + list(skip_rules)
    return ReviewerConfig(**values)


def _load(spec_path: Path) -> dict:
    try:
        return load_spec(spec_path)
    except SpecLoadError as e:
        raise CliError(str(e)) from e


def _selection_options(func):
    """Options shared by the commands that run rules."""
    func = click.option("--config", "config_path", default=None, type=click.Path(exists=True, dir_okay=False, path_type=Path), help="YAML reviewer config.")(func)
    func = click.option("--skip-rule", "skip_rules", multiple=True, help="Rule id to disable (repeatable).")(func)
    func = click.option("--category", "categories", multiple=True, type=click.Choice(CATEGORY_CHOICES), help="Only run rules in this category (repeatable).")(func)
    func = click.option("--strict", is_flag=True, help="Treat warnings as errors.")(func)
    return func


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Log debug output to stderr.")
def main(verbose: bool):
    """AIP Reviewer: check OpenAPI specs against Google's API Improvement Proposals."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")


@main.command()
@click.argument("spec_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@_selection_options
@click.option("-o", "--output", default=None, type=click.Path(path_type=Path), help="Also write the JSON result to this file.")
def review(spec_path: Path, strict: bool, categories: tuple[str, ...], skip_rules: tuple[str, ...], config_path: Path | None, output: Path | None):
    """Review an OpenAPI spec and print the findings as JSON."""
    config = _build_config(config_path, strict, categories, skip_rules)
    spec = _load(spec_path)

    result = OpenAPIReviewer(config).review(spec, str(spec_path))
    text = json.dumps(result.to_dict(), indent=2, ensure_ascii=False)

    if output:
        try:
            output.parent.mkdir(parents=True, exist_ok=True)
            output.write_text(text + "\n", encoding="utf-8")
        except OSError as e:
            raise CliError(f"Cannot write {output}: {e}") from e
        click.echo(f"Result saved to {output}", err=True)

    click.echo(text)
    summary = result.summary
    click.echo(
        f"{summary.errors} errors, {summary.warnings} warnings, {summary.suggestions} suggestions",
        err=True,
    )
    if result.has_errors:
        sys.exit(1)


@main.command()
@click.argument("spec_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@_selection_options
@click.option("-o", "--output", default=None, type=click.Path(path_type=Path), help="Where to write the patched spec.")
@click.option("--dry-run", is_flag=True, help="Report the fixes without writing anything.")
@click.option("--max-passes", default=3, show_default=True, type=click.IntRange(min=1), help="Review/patch rounds; later rounds pick up fixes invalidated by earlier renames.")
def fix(spec_path: Path, strict: bool, categories: tuple[str, ...], skip_rules: tuple[str, ...], config_path: Path | None, output: Path | None, dry_run: bool, max_passes: int):
    """Apply the machine-applicable fixes of a review."""
    if output is None and not dry_run:
        raise click.UsageError("Pass -o/--output, or --dry-run to only report fixes.")

    config = _build_config(config_path, strict, categories, skip_rules)
    reviewer = OpenAPIReviewer(config)
    spec = _load(spec_path)

    patcher = SpecPatcher(spec)
    outcomes = []
    for round_no in range(1, max_passes + 1):
        result = reviewer.review(patcher.spec, str(spec_path))
        outcomes = patcher.apply_findings(result.findings)
        applied = [o for o in outcomes if o.applied]
        click.echo(f"Pass {round_no}: {len(applied)}/{len(outcomes)} fixes applied")
        for outcome in outcomes:
            if outcome.applied:
                click.echo(f"  fixed   {outcome.rule_id} ({outcome.fix_type.value})")
            else:
                click.echo(f"  failed  {outcome.rule_id} ({outcome.fix_type.value}): {outcome.error}")
        if dry_run or patcher.spec == spec or not applied:
            break
        spec = patcher.spec

    summary = patcher.summary()
    failed = [o for o in outcomes if not o.applied]
    click.echo(f"{summary.applied} fixes applied, {len(failed)} failed, {summary.changes} changes")

    if not dry_run:
        try:
            dump_spec(patcher.spec, output)
        except OSError as e:
            raise CliError(f"Cannot write {output}: {e}") from e
        click.echo(f"Patched spec saved to {output}")

    if failed:
        sys.exit(1)


@main.command(name="rules")
@click.option("--category", "categories", multiple=True, type=click.Choice(CATEGORY_CHOICES), help="Only list rules in this category (repeatable).")
def list_rules(categories: tuple[str, ...]):
    """List the built-in rules."""
    registry = default_registry()
    wanted = {RuleCategory(c) for c in categories}
    for rule in registry:
        if wanted and rule.category not in wanted:
            continue
        click.echo(f"{rule.id:<32} {rule.severity.value:<10} {rule.category.value:<16} {rule.name}")
