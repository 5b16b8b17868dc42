"""Qodo hook implementations for the host runtime."""

from __future__ import annotations

import asyncio
from dataclasses import replace
from typing import TYPE_CHECKING, Any

from loguru import logger

from qodo_bridge.auth import is_authenticated
from qodo_bridge.cli_runner import DEFAULT_EXECUTABLE, QodoCli
from qodo_bridge.config import ConfigStore
from qodo_bridge.errors import InitializationError
from qodo_bridge.hookspecs import hookimpl
from qodo_bridge.host import HostContext
from qodo_bridge.lazy import SharedCell
from qodo_bridge.models import QODO_MODELS
from qodo_bridge.tools import (
    ToolDescriptor,
    create_agent_tool,
    create_chain_tool,
    create_chat_tool,
    create_config_tool,
    create_generate_tool,
    create_models_tool,
    create_review_tool,
    create_status_tool,
)

if TYPE_CHECKING:
    from qodo_bridge.bootstrap import SharedInvoker

log = logger.bind(service="qodo-plugin")

NOT_INSTALLED_MESSAGE = "Error: Qodo CLI not installed"
INSTALL_HINT = "Qodo CLI not found. Please install it: npm install -g qodo"
LOGIN_HINT = "Qodo not authenticated. Run 'qodo login' to authenticate."
RATE_LIMIT_NOTICE = "Qodo rate limit hit. Retrying with backoff..."
MODEL_SUMMARY = "Claude 4.5, GPT 5.1/5.2, Gemini 2.5 Pro, Grok 4"


class QodoPlugin:
    """Registers the Qodo tools and reacts to host lifecycle events.

    The shared invoker cell is injected so tests can observe construction
    without a real host.
    """

    def __init__(
        self,
        cell: SharedCell[SharedInvoker],
        host: HostContext,
        *,
        store: ConfigStore | None = None,
        executable: str = DEFAULT_EXECUTABLE,
    ) -> None:
        self._cell = cell
        self._host = host
        self._store = store or ConfigStore()
        self._executable = executable
        self._tool_names: list[str] = []

    @hookimpl
    def register_tools(self, host: HostContext) -> None:
        descriptors = [
            self._guarded(factory(self._provide_cli))
            for factory in (
                create_generate_tool,
                create_chat_tool,
                create_review_tool,
                create_agent_tool,
                create_chain_tool,
            )
        ]
        descriptors.append(create_models_tool())
        descriptors.append(create_status_tool(self._executable))
        descriptors.append(create_config_tool(self._store))
        for descriptor in descriptors:
            host.register_tool(descriptor)
        self._tool_names = [descriptor.name for descriptor in descriptors]

    @hookimpl
    async def on_session_created(self, session_id: str) -> None:
        self._host.log("info", "Session created", session_id=session_id)
        # Warm the invoker without blocking the session.
        self._cell.start()

    @hookimpl
    async def on_session_error(self, message: str) -> None:
        self._host.log("error", "Session error", error=message)
        if "rate limit" in message:
            await self._host.notify(RATE_LIMIT_NOTICE, "warning")

    @hookimpl
    def before_tool_execute(self, tool: str, arguments: dict[str, Any]) -> None:
        log.debug("tool.execute.before tool={} args={}", tool, sorted(arguments))

    @hookimpl
    def after_tool_execute(self, tool: str, output: str) -> None:
        log.debug("tool.execute.after tool={} output_length={}", tool, len(output))

    @hookimpl
    async def on_session_compacting(self, context: list[str]) -> None:
        shared = self._cell.peek()
        config = shared.config if shared is not None else self._store.load()
        authenticated = await asyncio.to_thread(is_authenticated, self._executable)
        context.append(
            "\n".join(
                [
                    "## Qodo Plugin Context",
                    "This session is using the Qodo plugin.",
                    f"Available models: {MODEL_SUMMARY}",
                    f"Default model: {config.default_model or 'claude-4.5-sonnet'}",
                    f"Authentication: {'active' if authenticated else 'not authenticated'}",
                ]
            )
        )

    @hookimpl
    def suggest_completions(self, prefix: str) -> list[str]:
        candidates = [*self._tool_names, *(model.id for model in QODO_MODELS)]
        return [candidate for candidate in candidates if candidate.startswith(prefix)]

    async def _provide_cli(self) -> QodoCli:
        shared = await self._cell.get()
        return shared.cli

    def _guarded(self, descriptor: ToolDescriptor) -> ToolDescriptor:
        """Check installation and authentication before a CLI-backed tool runs."""

        inner = descriptor.handler

        async def _handler(params: Any) -> str:
            try:
                cli = await self._provide_cli()
            except InitializationError as exc:
                log.error("plugin.unavailable tool={} error={}", descriptor.name, exc)
                return f"Error: {exc}"

            if not await asyncio.to_thread(cli.is_installed):
                log.error("plugin.not_installed executable={}", cli.executable)
                await self._host.notify(INSTALL_HINT, "error")
                return NOT_INSTALLED_MESSAGE

            if not await asyncio.to_thread(cli.is_authenticated):
                log.warning("plugin.not_authenticated executable={}", cli.executable)
                await self._host.notify(LOGIN_HINT, "warning")

            return await inner(params)

        return replace(descriptor, handler=_handler)
