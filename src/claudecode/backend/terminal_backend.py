"""Embedded terminal backend — the assistant runs in an editor terminal buffer.

The handle is the terminal's job/channel id; the backend also caches the
number of the buffer hosting the terminal so it can hide, re-display and
delete it. Liveness is always re-checked against the editor's buffer list.

Key class: TerminalBackend(SessionBackend).
"""

from __future__ import annotations

import logging

from ..config import SessionConfig
from ..editor import EditorAdapter, WindowSpec, is_assistant_buffer_name
from ..errors import (
    HostError,
    NotActiveError,
    TerminalNotFoundError,
    UnsupportedFeatureError,
)
from ..host import EditorHost
from .base import BackendKind, SessionBackend

logger = logging.getLogger(__name__)

# Ctrl-C
INTERRUPT = "\x03"

_FLOAT_HIGHLIGHT = "Normal:Normal,NormalFloat:Normal,FloatBorder:Normal"


async def open_floating_window(
    host: EditorHost, adapter: EditorAdapter, config: SessionConfig, bufnr: int,
) -> int:
    """Show bufnr in an overlay centered on the editor and enter it."""
    columns = int(await host.eval("&columns"))
    lines = int(await host.eval("&lines"))
    border = list(config.border) if isinstance(config.border, tuple) else config.border
    spec = WindowSpec(
        width=config.width,
        height=config.height,
        row=max((lines - config.height) // 2, 0),
        col=max((columns - config.width) // 2, 0),
        relative="editor",
        style=config.style,
        border=border,
    )
    winid = await adapter.open_window(bufnr, True, spec)
    await adapter.set_window_option(winid, "winblend", config.blend)
    # Keep the terminal's own background inside the float
    await adapter.set_window_option(winid, "winhighlight", _FLOAT_HIGHLIGHT)
    return winid


class TerminalBackend(SessionBackend):
    """Runs the assistant in a terminal buffer of the host editor."""

    kind = BackendKind.TERMINAL

    def __init__(self, host: EditorHost, config: SessionConfig, adapter: EditorAdapter) -> None:
        super().__init__(host, config)
        self.adapter = adapter
        self.job_id: int | None = None
        self.bufnr: int | None = None

    @property
    def identifier(self) -> int | None:
        return self.job_id

    async def run(self, command: str) -> int:
        if await self.is_active():
            assert self.job_id is not None
            logger.debug("Terminal session already active (job %d)", self.job_id)
            return self.job_id

        if not self.adapter.is_terminal_supported():
            raise UnsupportedFeatureError("Terminal feature is not supported in this editor")

        job_id = await self.adapter.open_terminal(command)
        self.job_id = job_id
        self.bufnr = await self._find_terminal_buffer()

        await self._notify_opened()
        return job_id

    async def _find_terminal_buffer(self) -> int:
        """Locate the buffer that open_terminal() just created.

        Prefers the current buffer when it carries the assistant name, then
        any assistant buffer, then the current buffer for commands whose
        name lacks the tag.
        """
        current = int(await self.host.call("bufnr", "%"))
        matches = [
            buf.bufnr for buf in await self.host.list_buffers()
            if is_assistant_buffer_name(buf.name)
        ]
        if current in matches or not matches:
            return current
        return matches[0]

    async def send_prompt(self, text: str) -> None:
        if self.job_id is None:
            raise NotActiveError("Terminal session is not active")

        await self.adapter.send_to_terminal(self.job_id, text)
        await self.adapter.send_to_terminal(self.job_id, "\n")

    async def exit(self) -> None:
        if not await self.is_active():
            # Buffer already wiped by the user; only local state is left
            self.job_id = None
            self.bufnr = None
            return

        assert self.job_id is not None and self.bufnr is not None
        job_id, bufnr = self.job_id, self.bufnr
        try:
            if job_id != 0:
                try:
                    await self.adapter.send_to_terminal(job_id, INTERRUPT)
                except (TerminalNotFoundError, HostError) as e:
                    # The process may have exited and left a [Process exited] buffer
                    logger.debug("Interrupt skipped, terminal already gone: %s", e)

            await self.host.command(f"bdelete! {bufnr}")
            logger.info("Closed terminal session (job %d, buffer %d)", job_id, bufnr)
        finally:
            self.job_id = None
            self.bufnr = None

    async def hide(self) -> None:
        if self.bufnr is None:
            return

        # Close every window showing the buffer; the buffer itself stays
        infos = await self.host.list_buffers(self.bufnr)
        if not infos:
            return
        for winid in infos[0].windows:
            try:
                await self.host.call("win_execute", winid, "close")
            except HostError as e:
                logger.warning("Failed to close window %s: %s", winid, e)

    async def show(self) -> None:
        if self.bufnr is None:
            return

        layout = self.config.layout
        if layout in ("split", "vsplit"):
            await self.host.command(f"{layout} | buffer {self.bufnr}")
            return

        await open_floating_window(self.host, self.adapter, self.config, self.bufnr)

    async def is_active(self) -> bool:
        if self.job_id is None or self.bufnr is None:
            return False

        try:
            return len(await self.host.list_buffers(self.bufnr)) > 0
        except HostError as e:
            logger.debug("Buffer liveness check failed: %s", e)
            return False

    async def find_existing_session(self) -> bool:
        """Adopt an assistant terminal buffer that is still running.

        Used after the plugin host restarts: the editor keeps the terminal
        buffer and its process, only this object's state was lost.
        """
        for buf in await self.host.list_buffers():
            if not is_assistant_buffer_name(buf.name):
                continue

            job_id = buf.variables.get("terminal_job_id")
            if not isinstance(job_id, int) or job_id <= 0:
                try:
                    job_id = await self.adapter.get_terminal_job_id(buf.bufnr)
                except TerminalNotFoundError:
                    logger.debug("Buffer %d has no running terminal, skipping", buf.bufnr)
                    continue

            self.bufnr = buf.bufnr
            self.job_id = job_id
            logger.info("Recovered terminal session (job %d, buffer %d)", job_id, buf.bufnr)
            return True

        return False

    async def attach_existing(self) -> bool:
        return await self.find_existing_session()
