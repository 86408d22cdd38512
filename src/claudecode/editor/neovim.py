"""Neovim adapter — native floating windows and channel-based terminals.

Terminal handles are Neovim channel ids: open_terminal() reads the new
buffer's terminal_job_id and send_to_terminal() writes with chansend().

Key class: NeovimAdapter(EditorAdapter).
"""

from __future__ import annotations

import logging
from typing import Any

from ..errors import HostError, TerminalNotFoundError
from .base import EditorAdapter, KeymapOptions, WindowSpec

logger = logging.getLogger(__name__)


class NeovimAdapter(EditorAdapter):
    """EditorAdapter over the nvim_* API."""

    async def create_buffer(self, listed: bool, scratch: bool) -> int:
        return int(await self.host.call("nvim_create_buf", listed, scratch))

    async def open_window(self, bufnr: int, enter: bool, spec: WindowSpec) -> int:
        win_config: dict[str, Any] = {
            "relative": spec.relative,
            "width": spec.width,
            "height": spec.height,
            "row": spec.row,
            "col": spec.col,
        }
        if spec.style:
            win_config["style"] = spec.style
        if spec.border:
            win_config["border"] = spec.border
        return int(await self.host.call("nvim_open_win", bufnr, enter, win_config))

    async def close_window(self, winid: int, force: bool) -> None:
        try:
            await self.host.call("nvim_win_close", winid, force)
        except HostError as e:
            # Window might already be closed
            logger.debug("Failed to close window %s: %s", winid, e)

    async def set_buffer_lines(
        self, bufnr: int, start: int, end: int, lines: list[str],
    ) -> None:
        await self.host.call("nvim_buf_set_lines", bufnr, start, end, False, lines)

    async def set_buffer_keymap(
        self, bufnr: int, mode: str, lhs: str, rhs: str, opts: KeymapOptions,
    ) -> None:
        await self.host.call(
            "nvim_buf_set_keymap", bufnr, mode, lhs, rhs,
            {"noremap": opts.noremap, "silent": opts.silent, "expr": opts.expr},
        )

    async def set_window_option(self, winid: int, name: str, value: Any) -> None:
        await self.host.call("nvim_set_option_value", name, value, {"win": winid})

    async def get_terminal_job_id(self, bufnr: int) -> int:
        job_id = await self.host.call("getbufvar", bufnr, "terminal_job_id", 0)
        if not isinstance(job_id, int) or job_id <= 0:
            raise TerminalNotFoundError(f"Buffer {bufnr} has no terminal job")
        return job_id

    async def send_to_terminal(self, handle: int, data: str) -> None:
        await self.host.call("chansend", handle, data)

    async def open_terminal(self, command: str) -> int:
        await self.host.command(f"terminal {command}")
        bufnr = int(await self.host.call("bufnr", "%"))
        job_id = await self.get_terminal_job_id(bufnr)
        logger.debug("Opened terminal buffer %d (job %d): %s", bufnr, job_id, command)
        return job_id

    def is_floating_window_supported(self) -> bool:
        return True

    def is_terminal_supported(self) -> bool:
        return True
