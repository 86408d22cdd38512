"""Session backend package — where the assistant process runs.

Re-exports the core types and provides the factory:
  - SessionBackend: ABC for both backends.
  - BackendKind / SessionHandle: backend tag and handle type.
  - select_backend_kind(): the environment/layout selection rule.
  - create_backend(): builds the backend for the current editor environment.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from ..config import Layout, SessionConfig
from ..editor import EditorAdapter
from ..host import EditorHost
from ..tmux import TmuxClient
from .base import OPEN_EVENT, BackendKind, SessionBackend, SessionHandle

__all__ = [
    "OPEN_EVENT",
    "BackendKind",
    "SessionBackend",
    "SessionHandle",
    "TmuxFactory",
    "create_backend",
    "select_backend_kind",
]

logger = logging.getLogger(__name__)

TmuxFactory = Callable[[str], TmuxClient]


def select_backend_kind(in_tmux: bool, layout: Layout) -> BackendKind:
    """tmux panes only make sense for split layouts inside tmux."""
    if in_tmux and layout in ("split", "vsplit"):
        return BackendKind.TMUX
    return BackendKind.TERMINAL


async def create_backend(
    host: EditorHost,
    config: SessionConfig,
    adapter: EditorAdapter,
    tmux_factory: TmuxFactory = TmuxClient.from_env,
) -> SessionBackend:
    """Build an idle backend for the editor's environment and config."""
    tmux_env = await host.getenv("TMUX")
    kind = select_backend_kind(bool(tmux_env), config.layout)
    logger.debug("Selected %s backend (layout=%s, tmux=%s)", kind.value, config.layout, bool(tmux_env))

    if kind is BackendKind.TMUX:
        from .tmux_backend import TmuxBackend

        return TmuxBackend(host, config, tmux_factory(tmux_env))

    from .terminal_backend import TerminalBackend

    return TerminalBackend(host, config, adapter)
