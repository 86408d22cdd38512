"""Shared test fixtures and fakes for the claudecode test suite.

Provides FakeHost, a scripted stand-in for a running editor that keeps a
small buffer/window model (terminal buffers appear on :terminal and vanish
on :bdelete!), and FakeTmux, an in-memory pane table with the TmuxClient
interface.
"""

import os
import re

# Settings isolation: keep the developer's environment out of the tests.
os.environ.pop("CLAUDE_COMMAND", None)
os.environ.pop("NVIM", None)

from pathlib import Path
from typing import Any, Callable

import pytest

from claudecode.errors import HostError
from claudecode.host import EditorHost
from claudecode.tmux import TmuxClient

_CH_INFO_RE = re.compile(r"ch_info\(job_getchannel\(term_getjob\((\d+)\)\)\)")

# ── Fake editor ──────────────────────────────────────────────────────────


class FakeHost(EditorHost):
    """In-memory editor answering the RPCs the plugin issues."""

    def __init__(
        self,
        *,
        nvim: bool = True,
        features: dict[str, int] | None = None,
        env: dict[str, str] | None = None,
        variables: dict[str, Any] | None = None,
        options: dict[str, Any] | None = None,
    ) -> None:
        self.nvim = nvim
        self.features = {"nvim": 1 if nvim else 0, "popupwin": 1, "terminal": 1}
        self.features.update(features or {})
        self.env = dict(env or {})
        self.vars: dict[str, Any] = dict(variables or {})
        self.options: dict[str, Any] = {"&columns": 200, "&lines": 50}
        self.options.update(options or {})
        self.overrides: dict[str, Callable[..., Any]] = {}

        self.calls: list[tuple[Any, ...]] = []
        self.commands: list[str] = []
        self.evals: list[str] = []
        self.sent: list[tuple[Any, str]] = []
        # Jobs whose process exited; Neovim keeps their buffers
        self.dead_jobs: set[int] = set()

        self.buffers: dict[int, dict[str, Any]] = {
            1: {"bufnr": 1, "name": "/tmp/project/main.py", "windows": [1000], "variables": {}},
        }
        self.current_buf = 1
        self._next_bufnr = 2
        self._next_job = 10
        self._next_winid = 1001
        self.closed = False

    def close(self) -> None:
        self.closed = True

    # -- helpers for tests --

    def add_buffer(self, name: str, job_id: int | None = None, windows: list[int] | None = None) -> int:
        bufnr = self._next_bufnr
        self._next_bufnr += 1
        variables = {"terminal_job_id": job_id} if job_id is not None else {}
        self.buffers[bufnr] = {
            "bufnr": bufnr, "name": name, "windows": list(windows or []), "variables": variables,
        }
        return bufnr

    def terminal_buffers(self) -> list[int]:
        return [
            b["bufnr"] for b in self.buffers.values()
            if b["name"].startswith(("term://", "!"))
        ]

    def calls_to(self, fn: str) -> list[tuple[Any, ...]]:
        return [c[1:] for c in self.calls if c[0] == fn]

    # -- EditorHost --

    async def call(self, fn: str, *args: Any) -> Any:
        self.calls.append((fn, *args))
        if fn in self.overrides:
            return self.overrides[fn](*args)

        if fn == "has":
            return self.features.get(args[0], 0)
        if fn == "exists":
            return 0 if args[0] in ("+winblend", "+winhighlight") and not self.nvim else 1
        if fn == "expand":
            return self.env.get(args[0].lstrip("$"), "")
        if fn == "bufnr":
            return self._bufnr(*args)
        if fn == "getbufinfo":
            if args:
                buf = self.buffers.get(args[0])
                return [dict(buf)] if buf else []
            return [dict(b) for b in self.buffers.values()]
        if fn == "getbufvar":
            buf = self.buffers.get(args[0])
            default = args[2] if len(args) > 2 else ""
            if buf is None:
                return default
            return buf["variables"].get(args[1], default)
        if fn == "term_getjob":
            job_id = self._job_of(args[0])
            return f"process {4000 + job_id} run" if job_id else None
        if fn == "chansend" and args[0] in self.dead_jobs:
            raise HostError("Vim:E900: Invalid channel id")
        if fn in ("chansend", "term_sendkeys"):
            self.sent.append((args[0], args[1]))
            return 1
        if fn == "win_execute":
            if args[1] == "close":
                for buf in self.buffers.values():
                    if args[0] in buf["windows"]:
                        buf["windows"].remove(args[0])
            return ""
        if fn in ("nvim_open_win", "popup_create"):
            winid = self._next_winid
            self._next_winid += 1
            self.buffers[args[0]]["windows"].append(winid)
            return winid
        if fn == "nvim_create_buf":
            return self.add_buffer("")
        if fn == "winnr":
            return 1
        return None

    def _job_of(self, bufnr: int) -> int | None:
        buf = self.buffers.get(bufnr)
        if buf is None:
            return None
        return buf["variables"].get("terminal_job_id")

    def _bufnr(self, *args: Any) -> int:
        if not args or args[0] == "%":
            return self.current_buf
        if isinstance(args[0], int):
            return args[0] if args[0] in self.buffers else -1
        for buf in self.buffers.values():
            if args[0] in buf["name"]:
                return buf["bufnr"]
        return -1

    async def command(self, cmd: str) -> None:
        self.commands.append(cmd)
        if cmd.startswith("terminal "):
            program = cmd.removeprefix("terminal ").removeprefix("++curwin ")
            job_id = self._next_job
            self._next_job += 1
            name = f"term:///tmp/project//{4000 + job_id}:{program}" if self.nvim else f"!{program}"
            self.current_buf = self.add_buffer(name, job_id=job_id, windows=[1000])
        elif cmd.startswith("bdelete! "):
            bufnr = int(cmd.split()[1])
            if bufnr not in self.buffers:
                raise HostError("Vim(bdelete):E516: No buffers were deleted")
            self.buffers.pop(bufnr)
        elif " | buffer " in cmd:
            bufnr = int(cmd.rsplit(" ", 1)[1])
            winid = self._next_winid
            self._next_winid += 1
            self.buffers[bufnr]["windows"].append(winid)

    async def eval(self, expr: str) -> Any:
        self.evals.append(expr)
        if expr in self.overrides:
            return self.overrides[expr]()
        match = _CH_INFO_RE.match(expr)
        if match:
            job_id = self._job_of(int(match.group(1)))
            return {"id": job_id, "status": "open"} if job_id else None
        return self.options.get(expr)

    async def get_var(self, name: str, default: Any = None) -> Any:
        return self.vars.get(name, default)

    async def set_var(self, name: str, value: Any) -> None:
        self.vars[name] = value


# ── Fake tmux ────────────────────────────────────────────────────────────


class FakeTmux(TmuxClient):
    """TmuxClient over an in-memory pane table."""

    def __init__(self, panes: list[str] | None = None, next_pane: str | None = "%2") -> None:
        super().__init__(socket_path=None)
        self.panes: set[str] = set(panes or [])
        self.next_pane = next_pane
        self.paste_ok = True
        self.calls: list[tuple[Any, ...]] = []
        self.pasted: list[str] = []
        self.paste_paths: list[str] = []

    async def list_pane_ids(self) -> list[str]:
        self.calls.append(("list_pane_ids",))
        return sorted(self.panes)

    async def split_window(
        self, shell: str, command: str, horizontal: bool = False, target: str | None = None,
    ) -> str | None:
        self.calls.append(("split_window", shell, command, horizontal, target))
        if self.next_pane is None:
            return None
        pane_id = self.next_pane
        self.panes.add(pane_id)
        # Next split gets a fresh id
        self.next_pane = f"%{int(pane_id[1:]) + 1}"
        return pane_id

    async def join_pane(self, pane_id: str, horizontal: bool = False, target: str | None = None) -> bool:
        self.calls.append(("join_pane", pane_id, horizontal, target))
        return pane_id in self.panes

    async def break_pane(self, pane_id: str) -> bool:
        self.calls.append(("break_pane", pane_id))
        return pane_id in self.panes

    async def send_keys(self, pane_id: str, *keys: str) -> bool:
        self.calls.append(("send_keys", pane_id, *keys))
        return pane_id in self.panes

    async def kill_pane(self, pane_id: str) -> bool:
        self.calls.append(("kill_pane", pane_id))
        self.panes.discard(pane_id)
        return True

    async def paste_file(self, pane_id: str, path: str, buffer_name: str) -> bool:
        self.calls.append(("paste_file", pane_id, buffer_name))
        self.paste_paths.append(path)
        self.pasted.append(Path(path).read_text(encoding="utf-8"))
        return self.paste_ok

    def called(self, name: str) -> list[tuple[Any, ...]]:
        return [c[1:] for c in self.calls if c[0] == name]


# ── Fixtures ─────────────────────────────────────────────────────────────


@pytest.fixture
def host() -> FakeHost:
    return FakeHost()


@pytest.fixture
def vim_host() -> FakeHost:
    return FakeHost(nvim=False)


@pytest.fixture
def tmux() -> FakeTmux:
    return FakeTmux()
