"""Configuration — process settings from env vars and per-session editor config.

Two layers:
  - Settings: process-wide values from environment variables (with .env
    support): fallback launch command, log level, editor socket address.
    The module-level `settings` instance is imported where needed.
  - SessionConfig: the layout/command/floating-window values read from the
    editor's g: variables when a backend is created. Frozen, so later
    changes to the globals never affect a live session.

Key classes: Settings (singleton instantiated as `settings`), SessionConfig.
Key function: load_session_config().
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Any, Literal

from dotenv import load_dotenv

from .host import EditorHost

logger = logging.getLogger(__name__)

Layout = Literal["split", "vsplit", "floating"]
LAYOUTS: tuple[Layout, ...] = ("split", "vsplit", "floating")

_BORDER_NAMES = ("single", "double", "rounded", "solid", "shadow", "none")

# Editor global holding the tmux pane of the running assistant
PANE_ID_VAR = "claude_tmux_pane_id"


class Settings:
    """Process settings loaded from environment variables."""

    def __init__(self) -> None:
        load_dotenv()

        # Launch command used when g:claude_command is not set
        self.claude_command: str = os.getenv("CLAUDE_COMMAND", "claude")

        self.log_level: str = os.getenv("CLAUDECODE_LOG_LEVEL", "INFO").upper()

        # Editor RPC address for the CLI (Neovim exports $NVIM to its terminals)
        self.nvim_address: str = os.getenv("NVIM", "")

        logger.debug(
            "Settings initialized: command=%s, log_level=%s, nvim=%s",
            self.claude_command,
            self.log_level,
            self.nvim_address or "<unset>",
        )


settings = Settings()


@dataclass(frozen=True)
class SessionConfig:
    """Session settings captured once per backend."""

    layout: Layout = "floating"
    command: str = "claude"
    width: int = 100
    height: int = 20
    style: str | None = None
    border: str | tuple[str, ...] = "double"
    blend: int = 0

    @property
    def is_split(self) -> bool:
        return self.layout in ("split", "vsplit")


def _as_int(value: Any, default: int) -> int:
    # bool is an int subclass but never a valid size
    if isinstance(value, int) and not isinstance(value, bool) and value > 0:
        return value
    return default


def _as_border(value: Any) -> str | tuple[str, ...]:
    if isinstance(value, str) and value in _BORDER_NAMES:
        return value
    if (
        isinstance(value, (list, tuple))
        and len(value) in (1, 2, 4, 8)
        and all(isinstance(v, str) for v in value)
    ):
        return tuple(value)
    return "double"


async def load_layout(host: EditorHost) -> Layout:
    """Read g:claude_buffer_open_type, defaulting to floating."""
    layout = await host.get_var("claude_buffer_open_type")
    if layout in LAYOUTS:
        return layout
    if layout is not None:
        logger.warning("Ignoring invalid claude_buffer_open_type: %r", layout)
    return "floating"


async def load_session_config(host: EditorHost) -> SessionConfig:
    """Read the session configuration from the editor's globals."""
    layout = await load_layout(host)

    command = await host.get_var("claude_command")
    if not isinstance(command, str) or not command.strip():
        command = settings.claude_command

    width = _as_int(await host.get_var("claude_floatwin_width"), 100)
    height = _as_int(await host.get_var("claude_floatwin_height"), 20)

    style = await host.get_var("claude_floatwin_style")
    if style != "minimal":
        style = None

    border = _as_border(await host.get_var("claude_floatwin_border"))

    blend = await host.get_var("claude_floatwin_blend")
    if not isinstance(blend, int) or isinstance(blend, bool) or not 0 <= blend <= 100:
        blend = 0

    config = SessionConfig(
        layout=layout,
        command=command,
        width=width,
        height=height,
        style=style,
        border=border,
        blend=blend,
    )
    logger.debug("Session config: %s", config)
    return config
