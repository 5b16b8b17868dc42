"""Pluggy hook namespace and host lifecycle hook specifications."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import pluggy

if TYPE_CHECKING:
    from qodo_bridge.host import HostContext

QODO_HOOK_NAMESPACE = "qodo_bridge"
hookspec = pluggy.HookspecMarker(QODO_HOOK_NAMESPACE)
hookimpl = pluggy.HookimplMarker(QODO_HOOK_NAMESPACE)


class QodoHostSpecs:
    """Hook contract the host runtime fires into plugins."""

    @hookspec
    def register_tools(self, host: HostContext) -> None:
        """Register named callable tools through the host."""

    @hookspec
    def on_session_created(self, session_id: str) -> None:
        """Observe a new host session."""

    @hookspec
    def on_session_error(self, message: str) -> None:
        """Observe a host session error."""

    @hookspec
    def before_tool_execute(self, tool: str, arguments: dict[str, Any]) -> None:
        """Run before any registered tool executes."""

    @hookspec
    def after_tool_execute(self, tool: str, output: str) -> None:
        """Run after any registered tool returns."""

    @hookspec
    def on_session_compacting(self, context: list[str]) -> None:
        """Append text blocks that must survive context compaction."""

    @hookspec
    def suggest_completions(self, prefix: str) -> list[str] | None:
        """Return editor autocomplete suggestions for a prefix."""
