"""Tests for VimAdapter — popups, split fallbacks and term_* terminals."""

import pytest

from claudecode.detector import EditorKind
from claudecode.editor import KeymapOptions, WindowSpec, create_adapter
from claudecode.editor.vim import VimAdapter
from claudecode.errors import HostError, TerminalNotFoundError, UnsupportedFeatureError

from conftest import FakeHost

SPEC = WindowSpec(width=100, height=20, row=15, col=50, border="double")


@pytest.fixture
def adapter(vim_host: FakeHost) -> VimAdapter:
    return VimAdapter(vim_host, has_popup=True, has_terminal=True)


@pytest.fixture
def plain_adapter(vim_host: FakeHost) -> VimAdapter:
    """Vim built without +popupwin."""
    return VimAdapter(vim_host, has_popup=False, has_terminal=True)


# ── Capability probing ───────────────────────────────────────────────────


class TestCreate:
    @pytest.mark.asyncio
    async def test_checks_features(self):
        host = FakeHost(nvim=False, features={"popupwin": 0, "terminal": 1})
        adapter = await create_adapter(host, EditorKind.VIM)

        assert isinstance(adapter, VimAdapter)
        assert adapter.is_floating_window_supported() is False
        assert adapter.is_terminal_supported() is True
        assert ("has", "popupwin") in host.calls
        assert ("has", "terminal") in host.calls


# ── Windows and buffers ──────────────────────────────────────────────────


class TestWindows:
    @pytest.mark.asyncio
    async def test_create_scratch_buffer(self, vim_host: FakeHost, adapter: VimAdapter):
        bufnr = await adapter.create_buffer(False, True)

        assert bufnr == vim_host.current_buf
        assert vim_host.commands == [
            "enew",
            "setlocal nobuflisted",
            "setlocal buftype=nofile",
            "setlocal bufhidden=hide",
            "setlocal noswapfile",
        ]

    @pytest.mark.asyncio
    async def test_create_listed_buffer(self, vim_host: FakeHost, adapter: VimAdapter):
        await adapter.create_buffer(True, False)
        assert vim_host.commands == ["enew"]

    @pytest.mark.asyncio
    async def test_popup_is_one_based(self, vim_host: FakeHost, adapter: VimAdapter):
        await adapter.open_window(1, True, SPEC)

        (bufnr, options), = vim_host.calls_to("popup_create")
        assert bufnr == 1
        assert options["line"] == 16
        assert options["col"] == 51
        assert options["minwidth"] == options["maxwidth"] == 100
        assert options["minheight"] == options["maxheight"] == 20
        assert options["border"] == [1, 1, 1, 1]

    @pytest.mark.asyncio
    async def test_split_fallback(self, vim_host: FakeHost, plain_adapter: VimAdapter):
        await plain_adapter.open_window(1, False, SPEC)
        assert vim_host.commands == ["vsplit | buffer 1", "wincmd p"]

    @pytest.mark.asyncio
    async def test_split_fallback_tall(self, vim_host: FakeHost, plain_adapter: VimAdapter):
        tall = WindowSpec(width=40, height=60, row=0, col=0)
        await plain_adapter.open_window(1, True, tall)
        assert vim_host.commands == ["split | buffer 1"]

    @pytest.mark.asyncio
    async def test_close_popup_tolerates_closed(self, vim_host: FakeHost, adapter: VimAdapter):
        def _closed(*args):
            raise HostError("E993: window 1001 is not a popup window")

        vim_host.overrides["popup_close"] = _closed
        await adapter.close_window(1001, False)
        assert vim_host.calls_to("popup_close") == [(1001,)]

    @pytest.mark.asyncio
    async def test_close_split(self, vim_host: FakeHost, plain_adapter: VimAdapter):
        await plain_adapter.close_window(2, True)
        assert vim_host.commands == ["2wincmd w", "close!", "1wincmd w"]

    @pytest.mark.asyncio
    async def test_set_buffer_lines_to_end(self, vim_host: FakeHost, adapter: VimAdapter):
        bufnr = vim_host.add_buffer("scratch")
        await adapter.set_buffer_lines(bufnr, 0, -1, ["one", "two"])

        assert vim_host.commands == [f"buffer {bufnr}", "silent! 1,$delete _", "buffer 1"]
        assert vim_host.calls_to("append") == [(0, ["one", "two"])]

    @pytest.mark.asyncio
    async def test_set_buffer_lines_range(self, vim_host: FakeHost, adapter: VimAdapter):
        bufnr = vim_host.add_buffer("scratch")
        await adapter.set_buffer_lines(bufnr, 2, 5, [])

        assert vim_host.commands == [f"buffer {bufnr}", "silent! 3,5delete _", "buffer 1"]
        assert vim_host.calls_to("append") == []

    @pytest.mark.asyncio
    async def test_set_buffer_lines_restores_on_error(self, vim_host: FakeHost, adapter: VimAdapter):
        def _fail(*args):
            raise HostError("E21: Cannot make changes")

        vim_host.overrides["append"] = _fail
        with pytest.raises(HostError):
            await adapter.set_buffer_lines(1, 0, 0, ["x"])
        assert vim_host.commands[-1] == "buffer 1"

    @pytest.mark.asyncio
    async def test_set_buffer_keymap(self, vim_host: FakeHost, adapter: VimAdapter):
        bufnr = vim_host.add_buffer("scratch")
        await adapter.set_buffer_keymap(bufnr, "n", "q", ":close<CR>", KeymapOptions(expr=True))

        assert vim_host.commands == [
            f"buffer {bufnr}",
            "nnoremap <buffer> <silent> <expr> q :close<CR>",
            "buffer 1",
        ]

    @pytest.mark.asyncio
    async def test_set_buffer_keymap_recursive(self, vim_host: FakeHost, adapter: VimAdapter):
        opts = KeymapOptions(noremap=False, silent=False)
        await adapter.set_buffer_keymap(1, "t", "<Esc>", "<C-\\><C-n>", opts)
        assert "tmap <buffer> <Esc> <C-\\><C-n>" in vim_host.commands

    @pytest.mark.asyncio
    async def test_window_option_popup(self, vim_host: FakeHost, adapter: VimAdapter):
        await adapter.set_window_option(1001, "number", False)
        await adapter.set_window_option(1001, "signcolumn", "no")

        assert vim_host.calls_to("win_execute") == [
            (1001, "setlocal nonumber"),
            (1001, "setlocal signcolumn=no"),
        ]

    @pytest.mark.asyncio
    async def test_window_option_unknown_skipped(self, vim_host: FakeHost, adapter: VimAdapter):
        await adapter.set_window_option(1001, "winblend", 10)
        await adapter.set_window_option(1001, "winhighlight", "Normal:Normal")
        assert vim_host.calls_to("win_execute") == []

    @pytest.mark.asyncio
    async def test_window_option_split(self, vim_host: FakeHost, plain_adapter: VimAdapter):
        await plain_adapter.set_window_option(2, "wrap", True)
        assert vim_host.commands == ["2wincmd w", "setlocal wrap", "1wincmd w"]


# ── Terminals ────────────────────────────────────────────────────────────


class TestTerminal:
    @pytest.mark.asyncio
    async def test_open_terminal(self, vim_host: FakeHost, adapter: VimAdapter):
        handle = await adapter.open_terminal("claude")

        assert vim_host.commands == ["terminal ++curwin claude"]
        assert handle == 10
        assert vim_host.buffers[vim_host.current_buf]["name"] == "!claude"

    @pytest.mark.asyncio
    async def test_open_terminal_unsupported(self, vim_host: FakeHost):
        adapter = VimAdapter(vim_host, has_popup=True, has_terminal=False)
        with pytest.raises(UnsupportedFeatureError):
            await adapter.open_terminal("claude")
        assert vim_host.commands == []

    @pytest.mark.asyncio
    async def test_job_id_missing(self, vim_host: FakeHost, adapter: VimAdapter):
        with pytest.raises(TerminalNotFoundError):
            await adapter.get_terminal_job_id(1)

    @pytest.mark.asyncio
    async def test_send_to_terminal_by_name(self, vim_host: FakeHost, adapter: VimAdapter):
        bufnr = vim_host.add_buffer("!claude", job_id=3)
        await adapter.send_to_terminal(999, "fix it\n")
        assert vim_host.sent == [(bufnr, "fix it\n")]

    @pytest.mark.asyncio
    async def test_send_to_terminal_without_buffer(self, vim_host: FakeHost, adapter: VimAdapter):
        with pytest.raises(TerminalNotFoundError):
            await adapter.send_to_terminal(3, "hello")
        assert vim_host.sent == []
