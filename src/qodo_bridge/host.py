"""Narrow host boundary and a minimal in-process host runtime."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal, Protocol, TypeAlias

import pluggy
from loguru import logger
from pydantic import ValidationError

from qodo_bridge.errors import ToolNotFoundError
from qodo_bridge.hook_runtime import HookRuntime
from qodo_bridge.hookspecs import QODO_HOOK_NAMESPACE, QodoHostSpecs
from qodo_bridge.tools.registry import ToolDescriptor, ToolRegistry

NoticeKind: TypeAlias = Literal["info", "warning", "error"]

_LOG_LEVELS = {"debug": "DEBUG", "info": "INFO", "warn": "WARNING", "warning": "WARNING", "error": "ERROR"}


class HostContext(Protocol):
    """Everything a plugin may ask of its host."""

    def log(self, level: str, message: str, **extra: Any) -> None: ...

    async def notify(self, message: str, kind: NoticeKind = "info") -> None: ...

    def register_tool(self, descriptor: ToolDescriptor) -> None: ...


@dataclass(frozen=True)
class Notice:
    message: str
    kind: NoticeKind


class PluginHost:
    """Loads plugins, owns the tool registry and fires lifecycle hooks."""

    def __init__(self) -> None:
        self._plugin_manager = pluggy.PluginManager(QODO_HOOK_NAMESPACE)
        self._plugin_manager.add_hookspecs(QodoHostSpecs)
        self._hook_runtime = HookRuntime(self._plugin_manager)
        self._registry = ToolRegistry()
        self._notices: list[Notice] = []

    @property
    def registry(self) -> ToolRegistry:
        return self._registry

    @property
    def notices(self) -> list[Notice]:
        return list(self._notices)

    def register(self, plugin: object, *, name: str | None = None) -> None:
        self._plugin_manager.register(plugin, name=name)

    def load_tools(self) -> None:
        """Ask every registered plugin to contribute its tools."""

        self._registry = ToolRegistry()
        self._hook_runtime.call_many_sync("register_tools", host=self)

    def log(self, level: str, message: str, **extra: Any) -> None:
        bound = logger.bind(service="host")
        if extra:
            bound.log(_LOG_LEVELS.get(level, "INFO"), "{} {}", message, extra)
        else:
            bound.log(_LOG_LEVELS.get(level, "INFO"), "{}", message)

    async def notify(self, message: str, kind: NoticeKind = "info") -> None:
        self._notices.append(Notice(message=message, kind=kind))
        self.log("warning" if kind != "info" else "info", f"notice.{kind} {message}")

    def register_tool(self, descriptor: ToolDescriptor) -> None:
        self._registry.register(descriptor)

    async def call_tool(self, name: str, **kwargs: Any) -> str:
        if not self._registry.has(name):
            raise ToolNotFoundError(name)
        await self._hook_runtime.call_many("before_tool_execute", tool=name, arguments=kwargs)
        try:
            output = await self._registry.execute(name, kwargs=kwargs)
        except ValidationError as exc:
            logger.warning("tool.invalid_arguments name={} errors={}", name, exc.error_count())
            output = f"Error: invalid arguments for {name}:\n{exc}"
        await self._hook_runtime.call_many("after_tool_execute", tool=name, output=output)
        return output

    async def session_created(self, session_id: str) -> None:
        await self._hook_runtime.call_many("on_session_created", session_id=session_id)

    async def session_error(self, message: str) -> None:
        await self._hook_runtime.call_many("on_session_error", message=message)

    async def compact_context(self) -> list[str]:
        context: list[str] = []
        await self._hook_runtime.call_many("on_session_compacting", context=context)
        return context

    async def complete(self, prefix: str) -> list[str]:
        batches = await self._hook_runtime.call_many("suggest_completions", prefix=prefix)
        suggestions: list[str] = []
        for batch in batches:
            for item in batch or []:
                if item not in suggestions:
                    suggestions.append(item)
        return suggestions

    def hook_report(self) -> dict[str, list[str]]:
        return self._hook_runtime.hook_report()
