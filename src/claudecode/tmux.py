"""Async tmux command client.

Wraps libtmux.Server.cmd to issue the pane primitives the tmux backend
needs, parsing stdout as plain text:
  - list_pane_ids / pane_exists: live pane discovery across all sessions.
  - split_window / join_pane / break_pane / kill_pane: pane lifecycle.
  - send_keys: keystroke injection.
  - paste_file: load a file into a paste buffer and paste it into a pane.

All blocking libtmux calls are wrapped in asyncio.to_thread(). Failures
(non-zero exit, missing tmux binary) are logged and reported through the
return value; nothing here raises.

Key class: TmuxClient.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field

import libtmux
from libtmux.exc import LibTmuxException

logger = logging.getLogger(__name__)


@dataclass
class TmuxResult:
    """Outcome of one tmux invocation."""

    returncode: int
    stdout: list[str] = field(default_factory=list)
    stderr: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.returncode == 0


class TmuxClient:
    """Issues tmux commands against one tmux server."""

    def __init__(self, socket_path: str | None = None) -> None:
        self.socket_path = socket_path
        self._server: libtmux.Server | None = None

    @classmethod
    def from_env(cls, tmux_env: str) -> "TmuxClient":
        """Build a client for the server named by a $TMUX value.

        $TMUX is "socket_path,server_pid,session_index".
        """
        socket_path = tmux_env.split(",", 1)[0] if tmux_env else ""
        return cls(socket_path or None)

    @property
    def server(self) -> libtmux.Server:
        """Get or create tmux server connection."""
        if self._server is None:
            self._server = libtmux.Server(socket_path=self.socket_path)
        return self._server

    def _cmd(self, *args: str) -> TmuxResult:
        try:
            proc = self.server.cmd(*args)
        except LibTmuxException as e:
            logger.error("tmux %s failed: %s", args[0], e)
            return TmuxResult(returncode=-1, stderr=[str(e)])

        result = TmuxResult(
            returncode=proc.returncode or 0,
            stdout=list(proc.stdout or []),
            stderr=list(proc.stderr or []),
        )
        if not result.ok:
            logger.debug("tmux %s failed (rc=%d): %s", args, result.returncode, result.stderr)
        return result

    async def run(self, *args: str) -> TmuxResult:
        """Run one tmux command and capture its output."""
        return await asyncio.to_thread(self._cmd, *args)

    async def list_pane_ids(self) -> list[str]:
        """Ids of every live pane on the server ([] when the query fails)."""
        result = await self.run("list-panes", "-a", "-F", "#{pane_id}")
        if not result.ok:
            return []
        return [line.strip() for line in result.stdout if line.strip()]

    async def pane_exists(self, pane_id: str) -> bool:
        if not pane_id:
            return False
        return pane_id in await self.list_pane_ids()

    async def split_window(
        self,
        shell: str,
        command: str,
        horizontal: bool = False,
        target: str | None = None,
    ) -> str | None:
        """Split a new pane running `shell -lc command` and return its id.

        horizontal=True places the pane beside the target (-h), otherwise
        below it (-v).
        """
        args = ["split-window", "-P", "-F", "#{pane_id}", "-h" if horizontal else "-v"]
        if target:
            args.extend(["-t", target])
        args.extend([shell, "-lc", command])

        result = await self.run(*args)
        if not result.ok or not result.stdout:
            logger.error("Failed to split tmux window: %s", result.stderr)
            return None
        pane_id = result.stdout[0].strip()
        return pane_id or None

    async def join_pane(
        self, pane_id: str, horizontal: bool = False, target: str | None = None,
    ) -> bool:
        """Move a pane into the target's window."""
        args = ["join-pane", "-h" if horizontal else "-v", "-s", pane_id]
        if target:
            args.extend(["-t", target])
        result = await self.run(*args)
        if not result.ok:
            logger.warning("Failed to join pane %s: %s", pane_id, result.stderr)
        return result.ok

    async def break_pane(self, pane_id: str) -> bool:
        """Move a pane into its own detached window."""
        result = await self.run("break-pane", "-d", "-s", pane_id)
        if not result.ok:
            logger.warning("Failed to break pane %s: %s", pane_id, result.stderr)
        return result.ok

    async def send_keys(self, pane_id: str, *keys: str) -> bool:
        result = await self.run("send-keys", "-t", pane_id, *keys)
        if not result.ok:
            logger.error("Failed to send keys to pane %s: %s", pane_id, result.stderr)
        return result.ok

    async def kill_pane(self, pane_id: str) -> bool:
        result = await self.run("kill-pane", "-t", pane_id)
        if result.ok:
            logger.info("Killed pane %s", pane_id)
        else:
            logger.error("Failed to kill pane %s: %s", pane_id, result.stderr)
        return result.ok

    async def paste_file(self, pane_id: str, path: str, buffer_name: str) -> bool:
        """Paste a file's content into a pane and press Enter.

        load-buffer, paste-buffer, delete-buffer and send-keys C-m run in
        order on one worker thread; the sequence stops at the first failure,
        except that a loaded buffer is always deleted again.
        paste-buffer -p uses bracketed paste so embedded newlines stay text.
        """

        def _step(*args: str) -> bool:
            result = self._cmd(*args)
            if not result.ok:
                logger.error("tmux %s for pane %s failed: %s", args[0], pane_id, result.stderr)
            return result.ok

        def _sync_paste() -> bool:
            if not _step("load-buffer", "-b", buffer_name, path):
                return False
            try:
                pasted = _step("paste-buffer", "-t", pane_id, "-b", buffer_name, "-p")
            finally:
                deleted = _step("delete-buffer", "-b", buffer_name)
            return pasted and deleted and _step("send-keys", "-t", pane_id, "C-m")

        return await asyncio.to_thread(_sync_paste)
