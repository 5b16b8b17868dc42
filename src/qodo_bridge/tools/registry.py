"""Registry of host-callable tools."""

from __future__ import annotations

import builtins
import json
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, TypeAlias

from loguru import logger
from pydantic import BaseModel

from qodo_bridge.errors import ToolNotFoundError

ToolHandler: TypeAlias = Callable[[Any], Awaitable[str]]


def _shorten_text(text: str, width: int = 30, placeholder: str = "...") -> str:
    """Shorten text to width characters, cutting in the middle of words if needed."""
    if len(text) <= width:
        return text

    available = width - len(placeholder)
    if available <= 0:
        return placeholder

    return text[:available] + placeholder


@dataclass(frozen=True)
class ToolDescriptor:
    """Tool metadata and runtime handle."""

    name: str
    description: str
    input_model: type[BaseModel]
    handler: ToolHandler
    source: str = "qodo"

    def schema(self) -> dict[str, Any]:
        return self.input_model.model_json_schema(by_alias=True)


class ToolRegistry:
    """Registry for tools contributed by plugins."""

    def __init__(self) -> None:
        self._tools: dict[str, ToolDescriptor] = {}

    def register(self, descriptor: ToolDescriptor) -> None:
        if descriptor.name in self._tools:
            logger.warning("tool.replaced name={}", descriptor.name)
        self._tools[descriptor.name] = descriptor

    def has(self, name: str) -> bool:
        return name in self._tools

    def get(self, name: str) -> ToolDescriptor | None:
        return self._tools.get(name)

    def names(self) -> builtins.list[str]:
        return sorted(self._tools)

    def descriptors(self) -> builtins.list[ToolDescriptor]:
        return sorted(self._tools.values(), key=lambda item: item.name)

    def compact_rows(self) -> builtins.list[str]:
        return [f"{descriptor.name}: {descriptor.description}" for descriptor in self.descriptors()]

    def detail(self, name: str) -> str:
        descriptor = self.get(name)
        if descriptor is None:
            raise ToolNotFoundError(name)

        return (
            f"name: {descriptor.name}\n"
            f"source: {descriptor.source}\n"
            f"description: {descriptor.description}\n"
            f"schema: {json.dumps(descriptor.schema(), ensure_ascii=False)}"
        )

    async def execute(self, name: str, *, kwargs: dict[str, Any]) -> str:
        """Validate arguments against the tool's input model and run it."""

        descriptor = self.get(name)
        if descriptor is None:
            raise ToolNotFoundError(name)

        params = descriptor.input_model.model_validate(kwargs)
        self._log_tool_call(name, kwargs)
        start = time.monotonic()
        try:
            return await descriptor.handler(params)
        except Exception:
            logger.exception("tool.call.error name={}", name)
            raise
        finally:
            duration = time.monotonic() - start
            logger.info("tool.call.end name={} duration={:.3f}ms", name, duration * 1000)

    @staticmethod
    def _log_tool_call(name: str, kwargs: dict[str, Any]) -> None:
        params: list[str] = []
        for key, value in kwargs.items():
            try:
                rendered = json.dumps(value, ensure_ascii=False)
            except TypeError:
                rendered = repr(value)
            params.append(f"{key}={_shorten_text(rendered)}")
        logger.info("tool.call.start name={} {{ {} }}", name, ", ".join(params))
