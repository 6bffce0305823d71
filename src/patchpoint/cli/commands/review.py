"""``patchpoint review``: review a pull request and post the result."""

from __future__ import annotations

import click
from rich.markup import escape

from patchpoint.cli.common import cli_error_handler
from patchpoint.cli.console import console, err_console
from patchpoint.cli.context import CLIContext, ExitCode, async_command
from patchpoint.cli.output import OutputFormat, format_error, format_json
from patchpoint.exceptions import ConfigError, ReviewRunError
from patchpoint.logging import bind_context
from patchpoint.models.review import ReviewOutcome
from patchpoint.providers.openai_compat import OpenAICompatibleProvider
from patchpoint.review.engine import ReviewEngine
from patchpoint.review.phases import SCAN_TYPES, phases_for
from patchpoint.utils.github_client import GitHubClient


def _outcome_dict(outcome: ReviewOutcome) -> dict[str, object]:
    payload = outcome.payload
    return {
        "kind": "review" if payload.is_inline else "comment",
        "event": payload.event,
        "body": payload.body,
        "comments": [c.to_github() for c in payload.comments],
        "findings_total": outcome.findings_total,
        "dropped": outcome.dropped,
        "tokens_used": outcome.tokens_used,
        "failures": [f.describe() for f in outcome.failures],
    }


def _print_outcome(outcome: ReviewOutcome, output_format: OutputFormat) -> None:
    if output_format is OutputFormat.JSON:
        click.echo(format_json(_outcome_dict(outcome)))
        return
    console.print(outcome.payload.body, markup=False)
    console.print()
    for comment in outcome.comments:
        console.print(
            f"[bold]{escape(comment.path)}[/bold]:{comment.line} "
            f"(position {comment.position}) {comment.severity.value}"
        )
    console.print(
        f"{len(outcome.comments)} comment(s) anchored, {outcome.dropped} dropped, "
        f"{outcome.tokens_used} tokens used"
    )


@click.command()
@click.argument("pr_number", type=int)
@click.option(
    "-r",
    "--repo",
    "repo_name",
    default=None,
    help="Repository as owner/name (defaults to github.repo in config).",
)
@click.option(
    "--scan-type",
    type=click.Choice(sorted(SCAN_TYPES)),
    default="review",
    show_default=True,
    help="Which review phases to run.",
)
@click.option(
    "--dry-run",
    is_flag=True,
    default=False,
    help="Print the review instead of posting it.",
)
@click.option(
    "--format",
    "output_format",
    type=click.Choice([f.value for f in OutputFormat]),
    default=OutputFormat.TEXT.value,
    show_default=True,
)
@click.pass_context
@async_command
async def review(
    ctx: click.Context,
    pr_number: int,
    repo_name: str | None,
    scan_type: str,
    dry_run: bool,
    output_format: str,
) -> None:
    """Review pull request PR_NUMBER with AI and post inline comments."""
    cli_ctx: CLIContext = ctx.obj["cli_ctx"]
    config = cli_ctx.config
    fmt = OutputFormat(output_format)

    with cli_error_handler():
        repo_name = repo_name or config.github.repo
        if not repo_name:
            raise ConfigError(
                "No repository given; pass --repo or set github.repo",
                field="github.repo",
            )
        bind_context(repo=repo_name, pr=pr_number, scan_type=scan_type)

        github = GitHubClient(rate_limit=config.github.rate_limit)
        engine = ReviewEngine(OpenAICompatibleProvider(config.provider), config)

        files = await github.get_pr_files(repo_name, pr_number)
        exit_code = ExitCode.SUCCESS
        try:
            outcome = await engine.review_files(files, phases_for(scan_type))
        except ReviewRunError as e:
            details = [f.describe() for f in e.failures]
            err_console.print(format_error(e.message, details=details), markup=False)
            if e.partial is None:
                raise SystemExit(ExitCode.FAILURE) from e
            outcome = e.partial
            exit_code = ExitCode.PARTIAL

        _print_outcome(outcome, fmt)
        if dry_run:
            err_console.print("Dry run: nothing posted.")
        else:
            posted_id = await engine.publish(outcome, github, repo_name, pr_number)
            kind = "review" if outcome.payload.is_inline else "comment"
            err_console.print(f"Posted {kind} {posted_id} on {repo_name}#{pr_number}")

    if exit_code is not ExitCode.SUCCESS or outcome.is_partial:
        raise SystemExit(ExitCode.PARTIAL)
