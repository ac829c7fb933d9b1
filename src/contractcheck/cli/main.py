"""CLI entry point for contractcheck."""
from __future__ import annotations

import dataclasses
import fnmatch
import logging
import os
import sys
from typing import List, Optional, Sequence, Tuple

import click

from contractcheck import __version__, bootstrap
from contractcheck.core.models import Category, TestCase
from contractcheck.core.runner import group_by_category, run_all
from contractcheck.registry import DEFAULT_REGISTRY, Registry, lint_registry, load_registry
from contractcheck.registry.lint import DEFAULT_MIN_PER_CATEGORY
from contractcheck.reporting import JsonReporter, Reporter, TerminalReporter

CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}

REGISTRY_ENV = "CONTRACTCHECK_REGISTRY"

_log_handler: Optional[logging.Handler] = None

registry_option = click.option(
    "--registry",
    "registry_path",
    type=click.Path(dir_okay=False),
    envvar=REGISTRY_ENV,
    default=DEFAULT_REGISTRY,
    show_default=True,
    help=f"Contract registry YAML file (or ${REGISTRY_ENV}).",
)


class CliState:
    """Holds global CLI state."""

    def __init__(self, verbose: bool) -> None:
        self.verbose = verbose


def _print_version(_: click.Context, __: click.Parameter, value: bool) -> None:
    if not value or click.get_current_context().resilient_parsing:
        return
    click.echo(f"contractcheck {__version__}")
    raise click.exceptions.Exit()


def _configure_logging(verbose: bool) -> None:
    # Only the package logger is touched; root handlers belong to the caller.
    global _log_handler
    package_logger = logging.getLogger("contractcheck")
    if _log_handler is not None:
        package_logger.removeHandler(_log_handler)
    _log_handler = logging.StreamHandler(sys.stderr)
    _log_handler.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
    package_logger.addHandler(_log_handler)
    package_logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    package_logger.propagate = False


@click.group(context_settings=CONTEXT_SETTINGS, invoke_without_command=True)
@click.option("--verbose", is_flag=True, help="Enable verbose logging output.")
@click.option(
    "--version",
    is_flag=True,
    callback=_print_version,
    expose_value=False,
    is_eager=True,
    help="Show the contractcheck version and exit.",
)
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """Verify a command or function against a registry of contracts.

    Without a sub-command the whole registry is run.
    """

    _configure_logging(verbose)
    bootstrap()
    ctx.obj = CliState(verbose=verbose)
    if ctx.invoked_subcommand is None:
        ctx.invoke(run, registry_path=os.environ.get(REGISTRY_ENV) or DEFAULT_REGISTRY)


@cli.command()
@registry_option
@click.option(
    "--timeout",
    type=click.FloatRange(min=0),
    help="Per-case timeout in seconds (0 disables; overrides the registry).",
)
@click.option(
    "--category",
    "categories",
    type=click.Choice([category.value for category in Category]),
    multiple=True,
    help="Only run cases of this category (repeatable).",
)
@click.option("--cases", "case_filters", type=str, help="Comma-separated case id filters (supports globs).")
@click.option("--tags", "tag_filters", type=str, help="Comma-separated tags to include.")
@click.option("--fail-fast", is_flag=True, help="Stop after the first failing case.")
@click.option(
    "--report",
    "report_format",
    type=click.Choice(["terminal", "json"]),
    default="terminal",
    show_default=True,
    help="Report format (terminal by default).",
)
@click.option("--report-path", type=str, help="When --report json, write to this path.")
@click.option("--no-color", is_flag=True, help="Disable ANSI colors in terminal output.")
def run(
    registry_path: str = DEFAULT_REGISTRY,
    timeout: Optional[float] = None,
    categories: Tuple[str, ...] = (),
    case_filters: Optional[str] = None,
    tag_filters: Optional[str] = None,
    fail_fast: bool = False,
    report_format: str = "terminal",
    report_path: Optional[str] = None,
    no_color: bool = False,
) -> None:
    """Run the registry's contracts; exits 1 if any case fails."""

    registry = _load(registry_path)
    target = registry.target
    if timeout is not None:
        target = dataclasses.replace(target, timeout=timeout or None)
    cases = select_cases(
        registry.cases,
        categories=categories,
        patterns=_split_csv(case_filters),
        tags=_split_csv(tag_filters),
    )
    if not cases:
        raise click.ClickException("No cases matched the provided filters.")
    reporters: List[Reporter]
    if report_format == "json":
        reporters = [JsonReporter(path=report_path)]
    else:
        reporters = [TerminalReporter(use_color=not no_color)]
    summary = run_all(cases, target, reporters=reporters, fail_fast=fail_fast, name=registry.name)
    raise click.exceptions.Exit(summary.exit_code)


@cli.command(name="list")
@registry_option
def list_cases(registry_path: str) -> None:
    """List cases in report order without running them."""

    registry = _load(registry_path)
    for category, members in group_by_category(registry.cases):
        for case in members:
            click.echo(f"{category.value} {case.id}")


@cli.command()
@registry_option
@click.option(
    "--min-per-category",
    type=click.IntRange(min=0),
    default=DEFAULT_MIN_PER_CATEGORY,
    show_default=True,
    help="Minimum number of cases each category must have.",
)
def check(registry_path: str, min_per_category: int) -> None:
    """Check registry coverage and flag placeholder values."""

    registry = _load(registry_path)
    issues = lint_registry(registry, min_per_category=min_per_category)
    for issue in issues:
        click.echo(f"WARN: {issue}")
    click.echo(f"{len(registry.cases)} case(s), {len(issues)} issue(s)")
    raise click.exceptions.Exit(1 if issues else 0)


def select_cases(
    cases: Sequence[TestCase],
    *,
    categories: Sequence[str] = (),
    patterns: Sequence[str] = (),
    tags: Sequence[str] = (),
) -> List[TestCase]:
    selected: List[TestCase] = []
    for case in cases:
        if categories and case.category.value not in categories:
            continue
        if patterns and not any(fnmatch.fnmatchcase(case.id, pattern) for pattern in patterns):
            continue
        if tags and not set(tags) & set(case.tags):
            continue
        selected.append(case)
    return selected


def _load(registry_path: str) -> Registry:
    try:
        return load_registry(registry_path)
    except (OSError, ValueError) as exc:
        raise click.ClickException(str(exc)) from exc


def main(argv: Optional[list[str]] = None) -> int:
    """Program entry point for console_scripts shim."""

    argv = argv if argv is not None else sys.argv[1:]
    try:
        cli.main(args=argv, prog_name="contractcheck", standalone_mode=True)
    except click.ClickException as err:  # pragma: no cover - click handles display
        err.show()
        return err.exit_code
    except SystemExit as exc:  # click may raise exit code
        return int(exc.code or 0)
    return 0


def _split_csv(value: Optional[str]) -> Tuple[str, ...]:
    if not value:
        return tuple()
    parts = [part.strip() for part in value.split(",") if part.strip()]
    return tuple(parts)


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
