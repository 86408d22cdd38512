"""tmux pane backend — the assistant runs in a pane next to the editor.

The handle is the tmux pane id (e.g. "%12"). It is persisted in the editor
global g:claude_tmux_pane_id so a restarted plugin can find the pane
again, but a stored id is only trusted after the live pane list confirms
it: the user can kill the pane or the tmux window at any time.

Prompts are pasted through a temporary file and a tmux paste buffer.
Typing them with send-keys would submit at every embedded newline.

Key class: TmuxBackend(SessionBackend).
"""

from __future__ import annotations

import logging
import os
import tempfile

import aiofiles

from ..config import PANE_ID_VAR, SessionConfig
from ..errors import MultiplexerError, NotActiveError, PaneCreationFailedError
from ..host import EditorHost
from ..tmux import TmuxClient
from .base import BackendKind, SessionBackend

logger = logging.getLogger(__name__)

PASTE_BUFFER = "claude_prompt"
DEFAULT_SHELL = "/bin/sh"


class TmuxBackend(SessionBackend):
    """Runs the assistant in a tmux pane split from the editor's pane."""

    kind = BackendKind.TMUX

    def __init__(self, host: EditorHost, config: SessionConfig, tmux: TmuxClient) -> None:
        super().__init__(host, config)
        self.tmux = tmux
        self.pane_id: str | None = None

    @property
    def identifier(self) -> str | None:
        return self.pane_id

    @property
    def _horizontal(self) -> bool:
        # vsplit puts the pane beside the editor (tmux -h)
        return self.config.layout == "vsplit"

    async def _editor_pane(self) -> str | None:
        return await self.host.getenv("TMUX_PANE") or None

    async def _registered_pane_id(self) -> str | None:
        pane_id = await self.host.get_var(PANE_ID_VAR)
        if isinstance(pane_id, str) and pane_id:
            return pane_id
        return None

    async def run(self, command: str) -> str:
        existing = await self._registered_pane_id()
        if existing and await self.tmux.pane_exists(existing):
            await self._reattach(existing)
            self.pane_id = existing
            logger.info("Reattached tmux pane %s", existing)
            await self._notify_opened()
            return existing

        if existing:
            logger.info("Persisted tmux pane %s is gone, creating a new one", existing)

        pane_id = await self._create_pane(command)
        if not pane_id:
            raise PaneCreationFailedError("Failed to create tmux pane")

        self.pane_id = pane_id
        await self.host.set_var(PANE_ID_VAR, pane_id)
        logger.info("Created tmux pane %s running %r", pane_id, command)
        await self._notify_opened()
        return pane_id

    async def _create_pane(self, command: str) -> str | None:
        shell = await self.host.getenv("SHELL") or DEFAULT_SHELL
        return await self.tmux.split_window(
            shell,
            command,
            horizontal=self._horizontal,
            target=await self._editor_pane(),
        )

    async def _reattach(self, pane_id: str) -> None:
        await self.tmux.join_pane(
            pane_id, horizontal=self._horizontal, target=await self._editor_pane(),
        )

    async def send_prompt(self, text: str) -> None:
        if not self.pane_id:
            raise NotActiveError("Tmux pane is not active")

        fd, path = tempfile.mkstemp(prefix="claude_prompt_")
        os.close(fd)
        try:
            async with aiofiles.open(path, "w", encoding="utf-8", newline="") as f:
                await f.write(text)
            delivered = await self.tmux.paste_file(self.pane_id, path, PASTE_BUFFER)
        finally:
            try:
                os.unlink(path)
            except OSError:
                pass

        if not delivered:
            raise MultiplexerError(f"Failed to send prompt to tmux pane {self.pane_id}")

    async def exit(self) -> None:
        if not self.pane_id:
            return

        await self.tmux.send_keys(self.pane_id, "C-c")
        await self.tmux.kill_pane(self.pane_id)
        await self.host.set_var(PANE_ID_VAR, "")
        logger.info("Closed tmux session (pane %s)", self.pane_id)

        self.pane_id = None

    async def hide(self) -> None:
        if not self.pane_id:
            return
        await self.tmux.break_pane(self.pane_id)

    async def show(self) -> None:
        if not self.pane_id:
            return
        await self._reattach(self.pane_id)

    async def is_active(self) -> bool:
        if not self.pane_id:
            return False
        return await self.tmux.pane_exists(self.pane_id)

    async def attach_existing(self) -> bool:
        existing = await self._registered_pane_id()
        if existing and await self.tmux.pane_exists(existing):
            self.pane_id = existing
            logger.info("Recovered tmux session (pane %s)", existing)
            return True
        return False
