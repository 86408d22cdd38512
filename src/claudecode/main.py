"""Application entry point — one session action per invocation.

`claudecode ACTION [TEXT...]` attaches to the editor named by $NVIM (set
automatically inside Neovim terminals), builds a plugin context and runs
one action:
  open | send TEXT | silent-send TEXT | exit | hide | show | status

TEXT "-" reads the prompt from stdin, keeping its newlines. Each
invocation is a new process, so actions recover the running session from
the editor (terminal buffer or persisted tmux pane id) first.

Vim cannot be driven over $NVIM; it runs the same actions in-process
through claudecode.vim_plugin.
"""

import argparse
import asyncio
import logging
import sys

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    from .commands import ACTIONS

    parser = argparse.ArgumentParser(
        prog="claudecode",
        description="Run Claude Code beside Neovim and send it prompts",
    )
    parser.add_argument("action", choices=ACTIONS, help="Session action to run")
    parser.add_argument(
        "text",
        nargs="*",
        help='Prompt for send/silent-send ("-" reads it from stdin)',
    )
    return parser


def _prompt_text(rest: list[str]) -> str:
    if rest == ["-"]:
        return sys.stdin.read()
    return " ".join(rest)


async def _run(action: str, rest: list[str], address: str) -> int:
    from . import commands
    from .context import init_plugin
    from .errors import ClaudeCodeError
    from .host import NvimHost

    host = NvimHost.attach(address)
    try:
        ctx = await init_plugin(host)
        text = _prompt_text(rest) if action in ("send", "silent-send") else ""
        try:
            status = await commands.dispatch(ctx, action, text)
        except ClaudeCodeError as e:
            await commands.report_error(ctx, e)
            print(f"claudecode: {e}", file=sys.stderr)
            return 1
        if status is not None:
            print(status)
    finally:
        host.close()
    return 0


def main() -> None:
    """Main entry point."""
    logging.basicConfig(
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        level=logging.WARNING,
    )

    # Import after logging is configured so Settings can log
    from .config import settings

    logging.getLogger("claudecode").setLevel(
        getattr(logging, settings.log_level, logging.INFO)
    )

    parser = _build_parser()
    args = parser.parse_args(sys.argv[1:])
    if args.action in ("send", "silent-send") and not args.text:
        parser.error(f"{args.action} needs a prompt (or - to read stdin)")

    if not settings.nvim_address:
        parser.error("$NVIM is not set; run inside a Neovim terminal or export NVIM")

    logger.debug("Running %s against %s", args.action, settings.nvim_address)
    sys.exit(asyncio.run(_run(args.action, args.text, settings.nvim_address)))


if __name__ == "__main__":
    main()
