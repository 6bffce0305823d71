"""``patchpoint plan``: show how a local diff would be grouped for review."""

from __future__ import annotations

from pathlib import Path

import click
from rich.markdown import Markdown
from rich.markup import escape
from rich.table import Table

from patchpoint.batching.aggregator import describe_group, records_from_diff
from patchpoint.cli.common import cli_error_handler
from patchpoint.cli.console import console
from patchpoint.cli.context import CLIContext
from patchpoint.cli.output import OutputFormat, format_json
from patchpoint.models.files import FileGroup
from patchpoint.review.phases import SCAN_TYPES, phases_for, plan_groups


def _group_dict(group: FileGroup) -> dict[str, object]:
    return {
        "group_id": group.group_id,
        "category": group.category.value,
        "priority": group.priority,
        "total_tokens": group.total_tokens,
        "oversized": group.is_oversized,
        "files": group.paths,
    }


@click.command()
@click.argument(
    "diff_file", type=click.Path(exists=True, dir_okay=False, path_type=Path)
)
@click.option(
    "--scan-type",
    type=click.Choice(sorted(SCAN_TYPES)),
    default="review",
    show_default=True,
)
@click.option(
    "--max-tokens",
    type=click.IntRange(min=1),
    default=None,
    help="Token budget per group (defaults to batching.max_tokens_per_group).",
)
@click.option(
    "--details",
    is_flag=True,
    default=False,
    help="Print a Markdown summary of every group after the table.",
)
@click.option(
    "--format",
    "output_format",
    type=click.Choice([f.value for f in OutputFormat]),
    default=OutputFormat.TEXT.value,
    show_default=True,
)
@click.pass_context
def plan(
    ctx: click.Context,
    diff_file: Path,
    scan_type: str,
    max_tokens: int | None,
    details: bool,
    output_format: str,
) -> None:
    """Group the files of DIFF_FILE (a ``git diff``) without calling the AI."""
    cli_ctx: CLIContext = ctx.obj["cli_ctx"]
    budget = max_tokens or cli_ctx.config.batching.max_tokens_per_group

    with cli_error_handler():
        records = records_from_diff(diff_file.read_text(encoding="utf-8"))
        planned = [
            (phase, plan_groups(phase, records, budget))
            for phase in phases_for(scan_type)
        ]

    if OutputFormat(output_format) is OutputFormat.JSON:
        click.echo(
            format_json(
                {
                    "files": len(records),
                    "max_tokens_per_group": budget,
                    "phases": [
                        {
                            "phase": phase.name,
                            "groups": [_group_dict(g) for g in groups],
                        }
                        for phase, groups in planned
                    ],
                }
            )
        )
        return

    for phase, groups in planned:
        table = Table(title=f"{phase.title} ({len(groups)} group(s))")
        table.add_column("Group")
        table.add_column("Category")
        table.add_column("Priority", justify="right")
        table.add_column("Tokens", justify="right")
        table.add_column("Files")
        for group in groups:
            tokens = str(group.total_tokens)
            if group.is_oversized:
                tokens += " (oversized)"
            table.add_row(
                escape(group.group_id),
                group.category.value,
                str(group.priority),
                tokens,
                escape("\n".join(group.paths)),
            )
        console.print(table)
        if details:
            for group in groups:
                console.print(Markdown(describe_group(group)))
