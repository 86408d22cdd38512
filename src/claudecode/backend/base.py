"""Abstract base class for assistant session backends.

Defines the SessionBackend ABC that both backends (embedded terminal, tmux
pane) implement. The ABC provides a unified interface for:
  - Lifecycle: run, exit, is_active
  - Visibility: hide, show
  - Input: send_prompt
  - Recovery: attach_existing (adopt a still-running session)

Each backend owns exactly one SessionHandle while active: a terminal
channel id (int) or a tmux pane id (str).

Key classes: SessionBackend (ABC), BackendKind (enum).
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from enum import Enum
from typing import Union

from ..config import SessionConfig
from ..host import EditorHost

logger = logging.getLogger(__name__)

SessionHandle = Union[int, str]

# Fired after every successful run()
OPEN_EVENT = "ClaudeOpen"


class BackendKind(str, Enum):
    TERMINAL = "terminal"
    TMUX = "tmux"


class SessionBackend(ABC):
    """Abstract base for assistant session backends."""

    kind: BackendKind

    def __init__(self, host: EditorHost, config: SessionConfig) -> None:
        self.host = host
        self.config = config

    @property
    @abstractmethod
    def identifier(self) -> SessionHandle | None:
        """The handle of the running session, or None when idle."""

    @abstractmethod
    async def run(self, command: str) -> SessionHandle:
        """Start (or reattach to) the assistant process and return its handle."""

    @abstractmethod
    async def send_prompt(self, text: str) -> None:
        """Deliver text to the assistant and submit it.

        Raises:
            NotActiveError: run() has not attached a handle.
        """

    @abstractmethod
    async def exit(self) -> None:
        """Interrupt and tear down the session. No-op when idle."""

    @abstractmethod
    async def hide(self) -> None:
        """Take the session out of view without stopping it."""

    @abstractmethod
    async def show(self) -> None:
        """Bring a hidden session back into view."""

    @abstractmethod
    async def is_active(self) -> bool:
        """Whether the handle still refers to a live session. Never raises."""

    @abstractmethod
    async def attach_existing(self) -> bool:
        """Adopt a session left running by an earlier plugin instance."""

    async def _notify_opened(self) -> None:
        logger.info("Claude session opened (%s, handle=%s)", self.kind.value, self.identifier)
        await self.host.emit_user_event(OPEN_EVENT)
