"""Vim adapter — popup or split windows and term_* terminals.

Vim has no buffer/window handle API, so most operations temporarily switch
the current buffer or window with Ex commands and switch back afterwards.
Floating windows are popups when Vim is built with +popupwin and plain
splits otherwise; the capability flags are checked once in create().

Terminal input goes through term_sendkeys(), which is addressed by buffer,
not by channel: the assistant buffer is looked up by its name tag on every
send.

Key class: VimAdapter(EditorAdapter).
"""

from __future__ import annotations

import logging
from typing import Any

from ..errors import HostError, TerminalNotFoundError, UnsupportedFeatureError
from ..host import EditorHost
from .base import ASSISTANT_BUFFER_TAG, EditorAdapter, KeymapOptions, WindowSpec

logger = logging.getLogger(__name__)


def _setlocal(name: str, value: Any) -> str:
    if value is True:
        return f"setlocal {name}"
    if value is False:
        return f"setlocal no{name}"
    return f"setlocal {name}={value}"


class VimAdapter(EditorAdapter):
    """EditorAdapter over Vim script functions and Ex commands."""

    def __init__(self, host: EditorHost, has_popup: bool, has_terminal: bool) -> None:
        super().__init__(host)
        self.has_popup = has_popup
        self.has_terminal = has_terminal

    @classmethod
    async def create(cls, host: EditorHost) -> "VimAdapter":
        """Check +popupwin and +terminal once and build the adapter."""
        has_popup = await host.call("has", "popupwin") == 1
        has_terminal = await host.call("has", "terminal") == 1
        logger.debug("Vim features: popupwin=%s terminal=%s", has_popup, has_terminal)
        return cls(host, has_popup=has_popup, has_terminal=has_terminal)

    async def create_buffer(self, listed: bool, scratch: bool) -> int:
        await self.host.command("enew")
        bufnr = int(await self.host.call("bufnr", "%"))

        if not listed:
            await self.host.command("setlocal nobuflisted")

        if scratch:
            await self.host.command("setlocal buftype=nofile")
            await self.host.command("setlocal bufhidden=hide")
            await self.host.command("setlocal noswapfile")

        return bufnr

    async def open_window(self, bufnr: int, enter: bool, spec: WindowSpec) -> int:
        if self.has_popup:
            # Popup positions are 1-based
            popup_id = await self.host.call("popup_create", bufnr, {
                "line": spec.row + 1,
                "col": spec.col + 1,
                "minwidth": spec.width,
                "maxwidth": spec.width,
                "minheight": spec.height,
                "maxheight": spec.height,
                "border": [1, 1, 1, 1] if spec.border else [0, 0, 0, 0],
                "scrollbar": 0,
                "zindex": 50,
                "mapping": 0,
            })
            return int(popup_id)

        split_cmd = "split" if spec.height > spec.width else "vsplit"
        await self.host.command(f"{split_cmd} | buffer {bufnr}")
        winnr = int(await self.host.call("winnr"))
        if not enter:
            await self.host.command("wincmd p")
        return winnr

    async def close_window(self, winid: int, force: bool) -> None:
        if self.has_popup:
            try:
                await self.host.call("popup_close", winid)
            except HostError as e:
                # Popup might already be closed
                logger.debug("Failed to close popup %s: %s", winid, e)
            return

        current = await self.host.call("winnr")
        await self.host.command(f"{winid}wincmd w")
        await self.host.command("close!" if force else "close")
        await self.host.command(f"{current}wincmd w")

    async def set_buffer_lines(
        self, bufnr: int, start: int, end: int, lines: list[str],
    ) -> None:
        current = await self.host.call("bufnr", "%")
        await self.host.command(f"buffer {bufnr}")
        try:
            if end == -1:
                await self.host.command(f"silent! {start + 1},$delete _")
            elif end > start:
                await self.host.command(f"silent! {start + 1},{end}delete _")

            if lines:
                await self.host.call("append", start, lines)
        finally:
            await self.host.command(f"buffer {current}")

    async def set_buffer_keymap(
        self, bufnr: int, mode: str, lhs: str, rhs: str, opts: KeymapOptions,
    ) -> None:
        map_cmd = f"{mode}noremap" if opts.noremap else f"{mode}map"
        parts = [map_cmd, "<buffer>"]
        if opts.silent:
            parts.append("<silent>")
        if opts.expr:
            parts.append("<expr>")
        parts.extend([lhs, rhs])

        current = await self.host.call("bufnr", "%")
        await self.host.command(f"buffer {bufnr}")
        try:
            await self.host.command(" ".join(parts))
        finally:
            await self.host.command(f"buffer {current}")

    async def set_window_option(self, winid: int, name: str, value: Any) -> None:
        # Neovim-only options (winblend, winhighlight) do not exist here
        if not await self.host.call("exists", f"+{name}"):
            logger.debug("Skipping option %s unknown to Vim", name)
            return

        if self.has_popup:
            await self.host.call("win_execute", winid, _setlocal(name, value))
            return

        current = await self.host.call("winnr")
        await self.host.command(f"{winid}wincmd w")
        await self.host.command(_setlocal(name, value))
        await self.host.command(f"{current}wincmd w")

    async def get_terminal_job_id(self, bufnr: int) -> int:
        job = await self.host.call("term_getjob", bufnr)
        if not job:
            raise TerminalNotFoundError(f"Buffer {bufnr} has no terminal job")

        # Jobs and channels are opaque over RPC; resolve the numeric channel id
        info = await self.host.eval(f"ch_info(job_getchannel(term_getjob({bufnr})))")
        if not isinstance(info, dict) or "id" not in info:
            raise TerminalNotFoundError(f"Buffer {bufnr} has no terminal channel")
        return int(info["id"])

    async def send_to_terminal(self, handle: int, data: str) -> None:
        bufnr = await self.host.call("bufnr", ASSISTANT_BUFFER_TAG)
        if bufnr == -1:
            raise TerminalNotFoundError(
                f"No terminal buffer named {ASSISTANT_BUFFER_TAG!r}"
            )
        await self.host.call("term_sendkeys", bufnr, data)

    async def open_terminal(self, command: str) -> int:
        if not self.has_terminal:
            raise UnsupportedFeatureError(
                "Terminal feature is not available in this Vim version"
            )

        await self.host.command(f"terminal ++curwin {command}")
        bufnr = int(await self.host.call("bufnr", "%"))
        job_id = await self.get_terminal_job_id(bufnr)
        logger.debug("Opened terminal buffer %d (channel %d): %s", bufnr, job_id, command)
        return job_id

    def is_floating_window_supported(self) -> bool:
        return self.has_popup

    def is_terminal_supported(self) -> bool:
        return self.has_terminal
