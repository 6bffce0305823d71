from __future__ import annotations

import contextlib
from collections.abc import Generator

import click

from patchpoint.cli.context import ExitCode
from patchpoint.cli.output import format_error
from patchpoint.exceptions import ConfigError, GitHubError, PatchpointError
from patchpoint.logging import get_logger


@contextlib.contextmanager
def cli_error_handler() -> Generator[None, None, None]:
    """Map errors raised inside a command to messages and exit codes.

    - KeyboardInterrupt: exit 130
    - ConfigError: message plus the offending field
    - GitHubError: message plus the HTTP status
    - PatchpointError: message
    - anything else: logged with traceback, exit 1

    Example:
        >>> with cli_error_handler():
        >>>     run_review()
    """
    logger = get_logger(__name__)

    try:
        yield
    except KeyboardInterrupt:
        click.echo("\n\nInterrupted by user.", err=True)
        raise SystemExit(ExitCode.INTERRUPTED) from None
    except ConfigError as e:
        details = [f"Field: {e.field}"] if e.field else None
        click.echo(format_error(e.message, details=details), err=True)
        raise SystemExit(ExitCode.FAILURE) from e
    except GitHubError as e:
        details = [f"HTTP status: {e.status_code}"] if e.status_code else None
        click.echo(format_error(e.message, details=details), err=True)
        raise SystemExit(ExitCode.FAILURE) from e
    except PatchpointError as e:
        click.echo(format_error(e.message), err=True)
        raise SystemExit(ExitCode.FAILURE) from e
    except Exception as e:
        logger.exception("unexpected_command_error")
        click.echo(f"Error: {e!s}", err=True)
        raise SystemExit(ExitCode.FAILURE) from e
