"""Editor adapter package — one async contract over Neovim and Vim.

Re-exports the core types and provides the factory:
  - EditorAdapter: ABC for both editor families.
  - WindowSpec / KeymapOptions: value types of the contract.
  - create_adapter(): builds the adapter for a detected EditorKind.
"""

from ..detector import EditorKind
from ..host import EditorHost
from .base import (
    ASSISTANT_BUFFER_TAG,
    EditorAdapter,
    KeymapOptions,
    WindowSpec,
    is_assistant_buffer_name,
)

__all__ = [
    "ASSISTANT_BUFFER_TAG",
    "EditorAdapter",
    "KeymapOptions",
    "WindowSpec",
    "create_adapter",
    "is_assistant_buffer_name",
]


async def create_adapter(host: EditorHost, kind: EditorKind) -> EditorAdapter:
    """Return the adapter for the given editor kind."""
    if kind is EditorKind.NEOVIM:
        from .neovim import NeovimAdapter

        return NeovimAdapter(host)

    from .vim import VimAdapter

    return await VimAdapter.create(host)
