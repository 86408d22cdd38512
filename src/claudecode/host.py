"""Async seam to the running host editor.

Every component talks to Neovim/Vim through EditorHost only:
  - call / command / eval: raw RPC primitives (function call, Ex command,
    expression evaluation).
  - get_var / set_var: g: variables used for configuration and the
    persisted tmux pane id.
  - getenv, emit_user_event, list_buffers: small helpers built on the
    primitives and shared by every host.

NvimHost implements the primitives over pynvim. pynvim sessions are not
thread-safe, so all blocking RPCs go through one dedicated worker thread.

VimHost implements them over the `vim` module of Vim's embedded :python3
interpreter. That API only works on Vim's main thread, which is also the
thread running the event loop, so its calls are made inline.

Key classes: EditorHost (ABC), NvimHost, VimHost, BufferInfo (dataclass).
"""

from __future__ import annotations

import asyncio
import functools
import logging
import os
from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any

import pynvim
from pynvim.api import NvimError

from .errors import HostError

logger = logging.getLogger(__name__)


@dataclass
class BufferInfo:
    """One entry of the editor's getbufinfo() list."""

    bufnr: int
    name: str
    windows: list[int] = field(default_factory=list)
    variables: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "BufferInfo":
        return cls(
            bufnr=int(data.get("bufnr", -1)),
            name=data.get("name", "") or "",
            windows=list(data.get("windows", []) or []),
            variables=dict(data.get("variables", {}) or {}),
        )


class EditorHost(ABC):
    """RPC primitives of a host editor session."""

    @abstractmethod
    async def call(self, fn: str, *args: Any) -> Any:
        """Call a Vim script / API function and return its result."""

    @abstractmethod
    async def command(self, cmd: str) -> None:
        """Execute an Ex command."""

    @abstractmethod
    async def eval(self, expr: str) -> Any:
        """Evaluate a Vim script expression."""

    @abstractmethod
    async def get_var(self, name: str, default: Any = None) -> Any:
        """Read g:{name}, returning default when it is not set."""

    @abstractmethod
    async def set_var(self, name: str, value: Any) -> None:
        """Write g:{name}."""

    async def getenv(self, name: str) -> str:
        """Return an environment variable as the editor sees it ("" if unset).

        expand() hands back the literal "$NAME" for unknown variables on
        some builds, which is treated as unset.
        """
        value = await self.call("expand", f"${name}")
        if not isinstance(value, str) or value == f"${name}":
            return ""
        return value

    async def emit_user_event(self, name: str) -> None:
        """Fire `User {name}` autocommands, if any are defined."""
        await self.command(
            f"if exists('#User#{name}') | doautocmd <nomodeline> User {name} | endif"
        )

    async def list_buffers(self, bufnr: int | None = None) -> list[BufferInfo]:
        """Return getbufinfo() entries, optionally for a single buffer."""
        if bufnr is None:
            raw = await self.call("getbufinfo")
        else:
            raw = await self.call("getbufinfo", bufnr)
        return [BufferInfo.from_dict(entry) for entry in raw or []]


def _connect(address: str) -> pynvim.Nvim:
    if os.path.exists(address) or ":" not in address:
        return pynvim.attach("socket", path=address)
    host, _, port = address.rpartition(":")
    return pynvim.attach("tcp", address=host, port=int(port))


class NvimHost(EditorHost):
    """EditorHost backed by a pynvim session.

    The session must only be used from the thread that created it, so
    attach() connects on the worker thread that later serves every RPC.
    """

    def __init__(self, nvim: pynvim.Nvim, executor: ThreadPoolExecutor | None = None) -> None:
        self._nvim = nvim
        self._executor = executor or ThreadPoolExecutor(
            max_workers=1, thread_name_prefix="claudecode-rpc"
        )

    @classmethod
    def attach(cls, address: str) -> "NvimHost":
        """Attach to a running editor by socket path or host:port."""
        executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="claudecode-rpc")
        nvim = executor.submit(_connect, address).result()
        logger.debug("Attached to editor at %s", address)
        return cls(nvim, executor)

    async def _rpc(self, fn: Any, *args: Any) -> Any:
        def _guarded() -> Any:
            try:
                return fn(*args)
            except NvimError as e:
                raise HostError(str(e)) from e

        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self._executor, _guarded)

    async def call(self, fn: str, *args: Any) -> Any:
        return await self._rpc(functools.partial(self._nvim.call, fn), *args)

    async def command(self, cmd: str) -> None:
        await self._rpc(self._nvim.command, cmd)

    async def eval(self, expr: str) -> Any:
        return await self._rpc(self._nvim.eval, expr)

    async def get_var(self, name: str, default: Any = None) -> Any:
        return await self._rpc(self._nvim.vars.get, name, default)

    async def set_var(self, name: str, value: Any) -> None:
        await self._rpc(self._nvim.vars.__setitem__, name, value)

    def close(self) -> None:
        """Close the RPC session and stop the worker thread."""
        self._executor.submit(self._nvim.close).result()
        self._executor.shutdown(wait=False)


class VimHost(EditorHost):
    """EditorHost backed by Vim's :python3 `vim` module."""

    def __init__(self, vim: Any) -> None:
        self._vim = vim

    def _to_python(self, value: Any) -> Any:
        # Vim hands strings back as bytes and containers as vim.List/Dictionary
        if isinstance(value, bytes):
            return value.decode("utf-8", errors="replace")
        if isinstance(value, (dict, self._vim.Dictionary)):
            return {self._to_python(k): self._to_python(value[k]) for k in value.keys()}
        if isinstance(value, (list, self._vim.List)):
            return [self._to_python(v) for v in value]
        return value

    def _guarded(self, fn: Any, *args: Any) -> Any:
        try:
            return self._to_python(fn(*args))
        except self._vim.error as e:
            raise HostError(str(e)) from e

    async def call(self, fn: str, *args: Any) -> Any:
        return self._guarded(self._vim.Function(fn), *args)

    async def command(self, cmd: str) -> None:
        self._guarded(self._vim.command, cmd)

    async def eval(self, expr: str) -> Any:
        # vim.eval() stringifies numbers; eval() through Function keeps types
        return self._guarded(self._vim.Function("eval"), expr)

    async def get_var(self, name: str, default: Any = None) -> Any:
        return self._guarded(self._vim.vars.get, name, default)

    async def set_var(self, name: str, value: Any) -> None:
        self._guarded(self._vim.vars.__setitem__, name, value)

    def close(self) -> None:
        """Nothing to release; the interpreter belongs to Vim."""
