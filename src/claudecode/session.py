"""Assistant session management — the single "current session" of a plugin.

SessionManager holds at most one SessionBackend. It picks the backend
kind from the editor environment when a session starts, reuses a live
backend instead of launching a second process, and is the only object the
command layer talks to.

reset() and exit() differ on purpose: exit() interrupts and tears down the
process/pane, reset() only forgets the backend and leaves the process
running, so a later attach_existing() or start() can pick it up again.

Key class: SessionManager.
"""

from __future__ import annotations

import logging
from dataclasses import replace

from .backend import SessionBackend, TmuxFactory, create_backend
from .config import Layout, load_session_config
from .editor import EditorAdapter
from .errors import NoActiveSessionError
from .host import EditorHost
from .tmux import TmuxClient

logger = logging.getLogger(__name__)


class SessionManager:
    """Owns the current assistant backend of one plugin context."""

    def __init__(
        self,
        host: EditorHost,
        adapter: EditorAdapter,
        tmux_factory: TmuxFactory = TmuxClient.from_env,
    ) -> None:
        self.host = host
        self.adapter = adapter
        self.tmux_factory = tmux_factory
        self._backend: SessionBackend | None = None

    @property
    def backend(self) -> SessionBackend | None:
        return self._backend

    async def _new_backend(self, layout: Layout | None = None) -> SessionBackend:
        config = await load_session_config(self.host)
        if layout is not None:
            config = replace(config, layout=layout)
        return await create_backend(self.host, config, self.adapter, self.tmux_factory)

    async def start(self, command: str | None = None, layout: Layout | None = None) -> None:
        """Start a session, or re-display the live one.

        layout overrides g:claude_buffer_open_type for a new backend.
        """
        if self._backend is not None and await self._backend.is_active():
            logger.debug("Reusing live %s session", self._backend.kind.value)
            await self._backend.show()
            return

        backend = await self._new_backend(layout)
        await backend.run(command or backend.config.command)
        self._backend = backend

    async def send_prompt(self, text: str) -> None:
        if self._backend is None:
            raise NoActiveSessionError()
        await self._backend.send_prompt(text)

    async def exit(self) -> None:
        if self._backend is None:
            return
        backend, self._backend = self._backend, None
        await backend.exit()

    async def hide(self) -> None:
        if self._backend is None:
            return
        await self._backend.hide()

    async def show(self) -> None:
        if self._backend is None:
            await self.start()
            return
        await self._backend.show()

    async def is_active(self) -> bool:
        if self._backend is None:
            return False
        return await self._backend.is_active()

    async def attach_existing(self) -> bool:
        """Adopt a session that is still running without spawning a new one.

        Returns True when a live backend is held afterwards.
        """
        if self._backend is not None and await self._backend.is_active():
            return True

        backend = await self._new_backend()
        if not await backend.attach_existing():
            return False
        self._backend = backend
        return True

    def reset(self) -> None:
        """Forget the backend without stopping its process."""
        if self._backend is not None:
            logger.debug("Dropping %s backend without exit", self._backend.kind.value)
        self._backend = None
