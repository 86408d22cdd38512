"""Plugin context — everything that lives as long as one plugin instance.

init_plugin() detects the editor once, builds the matching adapter once
and hands both to a fresh SessionManager. Entry points receive the
context explicitly; tests build their own instead of resetting globals.

Key class: PluginContext. Key function: init_plugin().
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from .backend import TmuxFactory
from .detector import EditorDetector, EditorKind
from .editor import EditorAdapter, create_adapter
from .host import EditorHost
from .session import SessionManager
from .tmux import TmuxClient

logger = logging.getLogger(__name__)


@dataclass
class PluginContext:
    host: EditorHost
    detector: EditorDetector
    kind: EditorKind
    adapter: EditorAdapter
    session: SessionManager


async def init_plugin(
    host: EditorHost, tmux_factory: TmuxFactory = TmuxClient.from_env,
) -> PluginContext:
    """Build the context for a freshly attached editor."""
    detector = EditorDetector(host)
    kind = await detector.detect()
    adapter = await create_adapter(host, kind)
    session = SessionManager(host, adapter, tmux_factory)
    logger.info("Plugin initialized for %s", kind.value)
    return PluginContext(
        host=host, detector=detector, kind=kind, adapter=adapter, session=session,
    )
