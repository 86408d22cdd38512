"""claudecode — run the Claude Code CLI beside Neovim/Vim and send it prompts."""

__version__ = "0.1.0"
