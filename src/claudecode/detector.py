"""Host editor detection.

EditorDetector asks the host once whether it is Neovim and caches the
answer; every later detect() returns the cached kind until reset().

Key classes: EditorKind (enum), EditorDetector.
"""

from __future__ import annotations

import logging
from enum import Enum

from .errors import HostError
from .host import EditorHost

logger = logging.getLogger(__name__)


class EditorKind(str, Enum):
    NEOVIM = "neovim"
    VIM = "vim"


class EditorDetector:
    """Memoized classification of the host editor."""

    def __init__(self, host: EditorHost) -> None:
        self.host = host
        self._kind: EditorKind | None = None

    async def detect(self) -> EditorKind:
        if self._kind is not None:
            return self._kind

        try:
            has_nvim = await self.host.call("has", "nvim")
        except HostError as e:
            logger.warning("Editor detection failed, assuming Vim: %s", e)
            has_nvim = 0

        # has() answers 1/0; anything else counts as "not Neovim"
        self._kind = EditorKind.NEOVIM if has_nvim == 1 else EditorKind.VIM
        logger.debug("Detected host editor: %s", self._kind.value)
        return self._kind

    def reset(self) -> None:
        self._kind = None
