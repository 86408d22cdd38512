"""Editor-facing session actions.

Thin callers between the editor commands and the SessionManager: they
resolve the layout, prepare the window a new terminal will occupy, and
recover a session left running by an earlier plugin instance before
deciding whether one exists. They never touch adapters or tmux directly
except for that window preparation.

Key functions: open_buffer, send_prompt, exit_buffer, hide_buffer,
  show_buffer, session_status, report_error, dispatch.
"""

from __future__ import annotations

import logging

from .backend import BackendKind, select_backend_kind
from .backend.terminal_backend import open_floating_window
from .config import Layout, load_layout, load_session_config
from .context import PluginContext
from .errors import ClaudeCodeError

logger = logging.getLogger(__name__)


def _vim_string(text: str) -> str:
    return "'" + text.replace("'", "''") + "'"


async def echo(ctx: PluginContext, message: str, error: bool = False) -> None:
    """Show a message in the editor's command line."""
    if error:
        await ctx.host.command(f"echohl ErrorMsg | echomsg {_vim_string(message)} | echohl None")
    else:
        await ctx.host.command(f"echomsg {_vim_string(message)}")


async def report_error(ctx: PluginContext, error: ClaudeCodeError) -> None:
    logger.warning("%s: %s", type(error).__name__, error)
    await echo(ctx, f"claudecode: {error}", error=True)


async def _has_session(ctx: PluginContext) -> bool:
    return await ctx.session.is_active() or await ctx.session.attach_existing()


async def _prepare_terminal_window(ctx: PluginContext, layout: Layout) -> None:
    """Give :terminal a window to take over."""
    if layout in ("split", "vsplit"):
        await ctx.host.command(layout)
        return

    config = await load_session_config(ctx.host)
    bufnr = await ctx.adapter.create_buffer(False, True)
    await open_floating_window(ctx.host, ctx.adapter, config, bufnr)


async def open_buffer(ctx: PluginContext, layout: Layout | None = None) -> None:
    """Open the assistant, reusing a running session when there is one."""
    if await _has_session(ctx):
        await ctx.session.show()
        return

    layout = layout or await load_layout(ctx.host)
    in_tmux = bool(await ctx.host.getenv("TMUX"))
    if select_backend_kind(in_tmux, layout) is BackendKind.TERMINAL:
        await _prepare_terminal_window(ctx, layout)

    await ctx.session.start(layout=layout)


async def send_prompt(ctx: PluginContext, text: str, open_buf: bool = True) -> None:
    """Send text to the running assistant.

    With no session, tells the user and (when open_buf) starts one; the
    prompt is not sent to a process that is still starting up.
    """
    if not await _has_session(ctx):
        await echo(ctx, "Claude Code is not running")
        if open_buf:
            await open_buffer(ctx)
        return

    backend = ctx.session.backend
    if open_buf and backend is not None and backend.config.layout == "floating":
        await ctx.session.show()

    await ctx.session.send_prompt(text)


async def exit_buffer(ctx: PluginContext) -> None:
    if not await _has_session(ctx):
        return
    await ctx.session.exit()


async def hide_buffer(ctx: PluginContext) -> None:
    if await _has_session(ctx):
        await ctx.session.hide()


async def show_buffer(ctx: PluginContext) -> None:
    if await _has_session(ctx):
        await ctx.session.show()
    else:
        await open_buffer(ctx)


async def session_status(ctx: PluginContext) -> str:
    """One-line description of the current session."""
    if not await _has_session(ctx):
        return "inactive"
    backend = ctx.session.backend
    assert backend is not None
    return f"active ({backend.kind.value}, handle={backend.identifier})"


ACTIONS = ("open", "send", "silent-send", "exit", "hide", "show", "status")


async def dispatch(ctx: PluginContext, action: str, text: str = "") -> str | None:
    """Run one named action; "status" returns its description.

    Raises:
        ValueError: unknown action.
    """
    if action == "open":
        await open_buffer(ctx)
    elif action in ("send", "silent-send"):
        await send_prompt(ctx, text, open_buf=action == "send")
    elif action == "exit":
        await exit_buffer(ctx)
    elif action == "hide":
        await hide_buffer(ctx)
    elif action == "show":
        await show_buffer(ctx)
    elif action == "status":
        return await session_status(ctx)
    else:
        raise ValueError(f"Unknown action: {action}")
    return None
