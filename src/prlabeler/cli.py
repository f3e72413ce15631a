"""CLI entry point for prlabeler.

This module provides the Typer-based CLI with commands:
- prlabeler run: Evaluate the rules against a pull request and post labels
- prlabeler validate: Validate the rule file

Exit codes:
- 0: Success (including a run that had nothing to post)
- 1: Configuration error
- 2: Authentication error
- 3: GitHub API error
"""

from __future__ import annotations

import asyncio
from enum import IntEnum
from pathlib import Path
from typing import TYPE_CHECKING, Annotated, Any

import typer
import yaml

from prlabeler import __version__
from prlabeler.config import load_rules
from prlabeler.config.loader import ConfigError, discover_config_path
from prlabeler.config.schema import StrategyError
from prlabeler.github import (
    AuthenticationError,
    ContextError,
    DryRunLabelSink,
    GitHubAPIError,
    GitHubClient,
    PullRequestLabelSink,
    resolve_pull_request_ref,
    resolve_workspace,
)
from prlabeler.github.auth import get_github_token
from prlabeler.logging import (
    configure_logging,
    get_logger,
    log_labels_evaluated,
    log_labels_posted,
    log_labels_reconciled,
    log_matchers_initialized,
    log_rules_loaded,
)
from prlabeler.rules import (
    LabelEvaluator,
    LabelReconciler,
    ReconcileResult,
    StrategyResolver,
    build_matchers,
)

if TYPE_CHECKING:
    import httpx
    import structlog

    from prlabeler.config.schema import RuleConfig
    from prlabeler.github.context import PullRequestRef


class ExitCode(IntEnum):
    """CLI exit codes."""

    SUCCESS = 0
    CONFIG_ERROR = 1
    AUTH_ERROR = 2
    API_ERROR = 3


app = typer.Typer(
    name="prlabeler",
    help="Label pull requests from declarative YAML rules.",
    add_completion=False,
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"prlabeler {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
) -> None:
    """prlabeler - label pull requests from declarative YAML rules."""


def _fail(message: str, code: ExitCode) -> typer.Exit:
    typer.echo(typer.style(f"✗ {message}", fg=typer.colors.RED), err=True)
    return typer.Exit(code)


def parse_strategy_option(text: str | None) -> Any:
    """Parse the --strategy option into a strategy input.

    The value is read as YAML, so `append`, `[replace, only]` and
    `{replace: true}` are all accepted. A plain comma-separated list such
    as `replace,create-if-missing` is split into flag names.

    Args:
        text: Raw option value, or None if not given.

    Returns:
        A flag name, list of flag names, flag map, or None.
    """
    if text is None or not text.strip():
        return None
    try:
        value = yaml.safe_load(text)
    except yaml.YAMLError:
        value = text
    if isinstance(value, str) and "," in value:
        return [part.strip() for part in value.split(",") if part.strip()]
    return value


@app.command()
def validate(
    config: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Path to the rule file (default: .github/labeler.yml).",
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Show a summary of the configured labels.",
        ),
    ] = False,
) -> None:
    """Validate the rule file without contacting GitHub.

    Exits with code 0 if valid, or code 1 if there are errors.
    """
    configure_logging(verbose=verbose, json_output=False)

    try:
        rules = load_rules(config)
    except ConfigError as e:
        raise _fail(str(e), ExitCode.CONFIG_ERROR) from e

    typer.echo(typer.style("✓ Rule file is valid", fg=typer.colors.GREEN))

    if verbose:
        typer.echo("\nRule summary:")
        typer.echo(f"  Labels: {len(rules)}")
        typer.echo(f"  Matchers: {', '.join(rules.matcher_kinds()) or '(none)'}")
        for label in rules:
            rule = rules[label]
            kinds = ", ".join(sorted(rule.matcher_kinds())) or "(no clauses)"
            override = f"  strategy={rule.strategy}" if rule.strategy else ""
            typer.echo(f"    - {label}: {kinds}{override}")

    raise typer.Exit(ExitCode.SUCCESS)


@app.command()
def run(
    config: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Path to the rule file (default: .github/labeler.yml).",
        ),
    ] = None,
    token: Annotated[
        str | None,
        typer.Option(
            "--token",
            help="GitHub token (default: $GITHUB_TOKEN).",
        ),
    ] = None,
    strategy: Annotated[
        str | None,
        typer.Option(
            "--strategy",
            "-s",
            help="Common strategy: a flag, a list, or a flag map (YAML).",
            envvar="INPUT_STRATEGY",
        ),
    ] = None,
    repo: Annotated[
        str | None,
        typer.Option(
            "--repo",
            help="Repository as owner/name (default: $GITHUB_REPOSITORY).",
        ),
    ] = None,
    pr: Annotated[
        int | None,
        typer.Option(
            "--pr",
            help="Pull request number (default: from $GITHUB_EVENT_PATH).",
            min=1,
        ),
    ] = None,
    workspace: Annotated[
        Path | None,
        typer.Option(
            "--workspace",
            help="Checkout of the pull request head (default: $GITHUB_WORKSPACE or cwd).",
        ),
    ] = None,
    dry_run: Annotated[
        bool,
        typer.Option(
            "--dry-run",
            help="Compute labels without creating or posting them.",
        ),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Enable debug logging.",
        ),
    ] = False,
) -> None:
    """Evaluate the label rules against a pull request and post labels."""
    configure_logging(verbose=verbose)
    log = get_logger("prlabeler.cli")

    work_dir = resolve_workspace(workspace)

    # Everything that can be wrong locally fails before the first API call
    try:
        config_path = discover_config_path(config, base_dir=work_dir)
        rules = load_rules(config_path)
        strategy_input = parse_strategy_option(strategy)
        ref = resolve_pull_request_ref(repo, pr)
    except (ConfigError, ContextError) as e:
        raise _fail(f"Configuration error: {e}", ExitCode.CONFIG_ERROR) from e

    log_rules_loaded(str(config_path), rules.labels)

    try:
        resolved_token = token or get_github_token()
        result = asyncio.run(
            label_pull_request(
                rules=rules,
                ref=ref,
                token=resolved_token,
                strategy_input=strategy_input,
                workspace=work_dir,
                dry_run=dry_run,
                log=log,
            )
        )
    except StrategyError as e:
        raise _fail(f"Configuration error: {e}", ExitCode.CONFIG_ERROR) from e
    except AuthenticationError as e:
        raise _fail(f"Authentication error: {e}", ExitCode.AUTH_ERROR) from e
    except GitHubAPIError as e:
        log.exception("Labeling run failed", pull_request=str(ref))
        raise _fail(f"GitHub API error: {e}", ExitCode.API_ERROR) from e

    _report(result, dry_run)
    raise typer.Exit(ExitCode.SUCCESS)


async def label_pull_request(
    *,
    rules: RuleConfig,
    ref: PullRequestRef,
    token: str,
    strategy_input: Any,
    workspace: Path,
    dry_run: bool,
    log: structlog.stdlib.BoundLogger,
    transport: httpx.AsyncBaseTransport | None = None,
) -> ReconcileResult:
    """Run one labeling pass over a pull request.

    Args:
        rules: Parsed rule file.
        ref: Pull request to label.
        token: GitHub token.
        strategy_input: Common strategy input (flag, list, map, or None).
        workspace: Checkout directory used to read changed files.
        dry_run: If True, record label changes instead of sending them.
        log: Logger instance.
        transport: Optional httpx transport (for testing).

    Returns:
        ReconcileResult for the run.

    Raises:
        StrategyError: If the strategy input names unknown flags.
        AuthenticationError: If GitHub rejects the token.
        GitHubAPIError: If any API call fails.
    """
    strategy = StrategyResolver().resolve(strategy_input, rules)
    log.debug("Resolved strategy", common=strategy.common, local=strategy.local)

    async with GitHubClient(token, transport=transport) as client:
        context = await client.fetch_context(ref)

        matchers = build_matchers(rules, context, workspace=workspace)
        evaluator = LabelEvaluator(rules, matchers)
        log_matchers_initialized(evaluator.matcher_names)

        evaluation = evaluator.evaluate()
        log_labels_evaluated(str(ref), evaluation.labels_evaluated, evaluation.matched)

        sink = DryRunLabelSink(ref) if dry_run else PullRequestLabelSink(client, ref)
        reconciler = LabelReconciler(sink)
        result = await reconciler.reconcile(
            evaluation.matched,
            context.labels,
            context.repository_labels,
            strategy,
        )
        log_labels_reconciled(
            str(ref),
            old_labels=list(context.labels),
            final_labels=result.labels,
            created=result.created,
            only_label=result.only_label,
            strategy=strategy.common,
        )

        if await reconciler.apply(result):
            log_labels_posted(str(ref), result.labels or [], dry_run=dry_run)

    return result


def _report(result: ReconcileResult, dry_run: bool) -> None:
    """Print a human-readable summary of the run."""
    prefix = "Would post" if dry_run else "Posted"
    typer.echo()
    if result.created:
        verb = "Would create" if dry_run else "Created"
        typer.echo(f"{verb} labels: {', '.join(result.created)}")
    if result.labels is None:
        typer.echo(
            typer.style(
                "⚠ Strategy sets neither 'append' nor 'replace'; no labels posted",
                fg=typer.colors.YELLOW,
            )
        )
        return
    typer.echo(typer.style(f"{prefix} {len(result.labels)} label(s):", bold=True))
    for label in result.labels:
        typer.echo(f"  - {label}")
