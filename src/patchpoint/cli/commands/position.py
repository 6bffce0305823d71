"""``patchpoint position``: look up the diff position of a new-file line."""

from __future__ import annotations

from pathlib import Path

import click

from patchpoint.cli.common import cli_error_handler
from patchpoint.cli.context import ExitCode
from patchpoint.cli.output import OutputFormat, format_error, format_json
from patchpoint.diff.parser import extract_line, parse_patch
from patchpoint.diff.position import context_around, resolve_position


@click.command()
@click.argument(
    "patch_file", type=click.Path(exists=True, dir_okay=False, path_type=Path)
)
@click.argument("line", type=click.IntRange(min=1))
@click.option(
    "--context",
    "radius",
    type=click.IntRange(min=0),
    default=0,
    help="Also print this many diff lines around LINE.",
)
@click.option(
    "--format",
    "output_format",
    type=click.Choice([f.value for f in OutputFormat]),
    default=OutputFormat.TEXT.value,
    show_default=True,
)
def position(patch_file: Path, line: int, radius: int, output_format: str) -> None:
    """Print the diff position of LINE in the single-file patch PATCH_FILE."""
    with cli_error_handler():
        parsed = parse_patch(patch_file.name, patch_file.read_text(encoding="utf-8"))

    found = resolve_position(parsed, line)
    if found is None:
        click.echo(
            format_error(
                f"Line {line} is not visible in the diff",
                suggestion="Only added and context lines can carry comments",
            ),
            err=True,
        )
        raise SystemExit(ExitCode.FAILURE)

    content = extract_line(parsed, line) or ""
    context = context_around(parsed, line, radius) if radius else []
    if OutputFormat(output_format) is OutputFormat.JSON:
        result = {"line": line, "position": found, "content": content}
        click.echo(format_json({**result, "context": context}))
        return

    click.echo(f"{found}\t{content}")
    for text in context:
        click.echo(f"  {text}")
