"""Abstract base class for host editor adapters.

Defines the EditorAdapter ABC that both editor families (Neovim, Vim)
implement. The ABC provides a unified interface for:
  - Buffers and windows: create_buffer, open_window, close_window,
    set_buffer_lines, set_buffer_keymap, set_window_option
  - Terminals: open_terminal, get_terminal_job_id, send_to_terminal
  - Static capability flags: is_floating_window_supported,
    is_terminal_supported

Callers never branch on the variant; every divergence is absorbed here.

Key classes: EditorAdapter (ABC), WindowSpec, KeymapOptions (dataclasses).
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Literal

from ..host import EditorHost


# Every assistant terminal buffer name carries this tag
ASSISTANT_BUFFER_TAG = "claude"


@dataclass
class WindowSpec:
    """Placement of an overlay window, in editor cells."""

    width: int
    height: int
    row: int
    col: int
    relative: Literal["editor", "win", "cursor"] = "editor"
    style: str | None = None
    border: str | list[str] | None = None


@dataclass
class KeymapOptions:
    noremap: bool = True
    silent: bool = True
    expr: bool = False


def is_assistant_buffer_name(name: str) -> bool:
    """Whether a buffer name belongs to an assistant terminal.

    Neovim names terminal buffers `term://{cwd}//{pid}:{cmd}`, Vim uses
    `!{cmd}`.
    """
    if ASSISTANT_BUFFER_TAG not in name:
        return False
    return name.startswith("term://") or name.startswith("!")


class EditorAdapter(ABC):
    """Editor-specific primitives behind one async contract."""

    def __init__(self, host: EditorHost) -> None:
        self.host = host

    @abstractmethod
    async def create_buffer(self, listed: bool, scratch: bool) -> int:
        """Create a buffer and return its number."""

    @abstractmethod
    async def open_window(self, bufnr: int, enter: bool, spec: WindowSpec) -> int:
        """Show a buffer in an overlay window and return the window id."""

    @abstractmethod
    async def close_window(self, winid: int, force: bool) -> None:
        """Close a window opened by open_window()."""

    @abstractmethod
    async def set_buffer_lines(
        self, bufnr: int, start: int, end: int, lines: list[str],
    ) -> None:
        """Replace lines [start, end) of a buffer; end == -1 means to the end."""

    @abstractmethod
    async def set_buffer_keymap(
        self, bufnr: int, mode: str, lhs: str, rhs: str, opts: KeymapOptions,
    ) -> None:
        """Define a buffer-local mapping."""

    @abstractmethod
    async def set_window_option(self, winid: int, name: str, value: Any) -> None:
        """Set a window-local option."""

    @abstractmethod
    async def get_terminal_job_id(self, bufnr: int) -> int:
        """Return the job/channel id of a terminal buffer.

        Raises:
            TerminalNotFoundError: the buffer has no associated process.
        """

    @abstractmethod
    async def send_to_terminal(self, handle: int, data: str) -> None:
        """Write raw text to the terminal identified by handle."""

    @abstractmethod
    async def open_terminal(self, command: str) -> int:
        """Start command in a new terminal buffer and return its handle."""

    @abstractmethod
    def is_floating_window_supported(self) -> bool:
        """Whether open_window() produces a true overlay."""

    @abstractmethod
    def is_terminal_supported(self) -> bool:
        """Whether open_terminal() can work at all."""
