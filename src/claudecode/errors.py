"""Exception taxonomy for session and editor operations.

Every failure surfaced to the user derives from ClaudeCodeError so the
command layer can catch one type, log it and echo it in the editor.
Liveness checks never raise; they fold failures into "not active".
"""


class ClaudeCodeError(Exception):
    """Base class for all claudecode errors."""


class HostError(ClaudeCodeError):
    """An RPC to the host editor failed."""


class UnsupportedFeatureError(ClaudeCodeError):
    """The host editor lacks a feature the operation needs (terminal, popups)."""


class NotActiveError(ClaudeCodeError):
    """A backend operation was attempted before run() attached a handle."""


class NoActiveSessionError(ClaudeCodeError):
    """The session manager has no backend; start a session first."""

    def __init__(self, message: str = "No active Claude session. Run :ClaudeRun first.") -> None:
        super().__init__(message)


class TerminalNotFoundError(ClaudeCodeError):
    """No terminal process is associated with the given buffer."""


class PaneCreationFailedError(ClaudeCodeError):
    """tmux did not report a pane id for a newly split pane."""


class MultiplexerError(ClaudeCodeError):
    """A tmux command needed to deliver a prompt failed."""
