"""
CLI Run State.

One CLIState lives on the Click context object for the whole run. It
loads Settings once, configures logging once, and hands out NSX clients
built from those settings. Tests pass a ready CLIState as `obj` to
inject settings and a fake transport.
"""

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from pathlib import Path

import httpx
import typer
from rich.console import Console
from rich.markup import escape

from nsx_edge.core.config import Settings, load_settings
from nsx_edge.core.exceptions import ApplicationError
from nsx_edge.core.logging import get_logger, log_with_source, setup_logging
from nsx_edge.policy.client import NSXClient

logger = get_logger(__name__)

console = Console(soft_wrap=True, highlight=False, emoji=False)

DEFAULT_PROG_NAME = "nsx-t1-edge"


@dataclass
class CLIState:
    """Options and settings shared by every command of a run."""

    settings: Settings | None = None
    transport: httpx.AsyncBaseTransport | None = None
    debug: bool = False
    verbose: bool = False
    env_file: Path | None = None
    retry_wait: float = 1.0
    _logging_ready: bool = field(default=False, repr=False)

    def resolve_settings(self) -> Settings:
        """
        Load settings on first use and configure logging for the run.

        The --debug flag turns diagnostics on and truncates the diagnostic
        log. NSX_DEBUG alone appends to it.
        """
        if self.settings is None:
            self.settings = load_settings(self.env_file)
        if self.debug and not self.settings.debug:
            self.settings = self.settings.model_copy(update={"debug": True})

        if not self._logging_ready:
            setup_logging(
                level="INFO" if self.verbose else "WARNING",
                debug_log=self.settings.debug_log if self.settings.debug else None,
                truncate=self.debug,
            )
            self._logging_ready = True

        return self.settings

    def client(self) -> NSXClient:
        """New NSX client for this run's settings."""
        return NSXClient(
            self.resolve_settings(),
            transport=self.transport,
            retry_wait=self.retry_wait,
        )


def prog_name(ctx: typer.Context) -> str:
    return ctx.find_root().info_name or DEFAULT_PROG_NAME


def run(ctx: typer.Context, operation: Callable[[CLIState], Awaitable[None]]) -> None:
    """
    Run an async command body and turn application errors into exit code 1.

    Args:
        ctx: Typer context carrying the CLIState
        operation: Coroutine function receiving the CLIState
    """
    state = ctx.ensure_object(CLIState)
    try:
        asyncio.run(operation(state))
    except ApplicationError as e:
        log_with_source(logger, "cli", "info", "Command failed", code=e.code, error=e.message)
        console.print(f"[red]ERROR: {escape(e.message)}[/red]")
        raise typer.Exit(1)
