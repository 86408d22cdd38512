"""In-process entry point for Vim.

Vim has no msgpack-RPC socket to attach to, so plugin/claudecode.vim
imports this module into Vim's :python3 interpreter and its user commands
call run_action(). The PluginContext is built on first use and lives as
long as Vim does, so the session survives between commands.

Key function: run_action().
"""

from __future__ import annotations

import asyncio
import logging

from . import commands
from .config import settings
from .context import PluginContext, init_plugin
from .errors import ClaudeCodeError
from .host import EditorHost, VimHost

logger = logging.getLogger(__name__)

_ctx: PluginContext | None = None


def _make_host() -> EditorHost:
    import vim  # only importable inside Vim

    return VimHost(vim)


def _configure_logging() -> None:
    package_logger = logging.getLogger("claudecode")
    package_logger.setLevel(getattr(logging, settings.log_level, logging.INFO))
    # stderr shows up as error messages in Vim; users are told via :echo
    if not package_logger.handlers:
        package_logger.addHandler(logging.NullHandler())


async def _context() -> PluginContext:
    global _ctx
    if _ctx is None:
        _configure_logging()
        _ctx = await init_plugin(_make_host())
    return _ctx


async def _run(action: str, text: str) -> None:
    ctx = await _context()
    try:
        status = await commands.dispatch(ctx, action, text)
    except ClaudeCodeError as e:
        await commands.report_error(ctx, e)
        return
    if status is not None:
        await commands.echo(ctx, f"claudecode: {status}")


def run_action(action: str, text: str = "") -> None:
    """Run one session action from a Vim command."""
    asyncio.run(_run(action, text))


def reset() -> None:
    """Forget the plugin context (the next action builds a new one)."""
    global _ctx
    _ctx = None
