"""Catalog, status and configuration tools. None of these need the shared invoker."""

from __future__ import annotations

import asyncio
import json

from loguru import logger

from qodo_bridge.auth import is_authenticated, list_api_keys
from qodo_bridge.config import ConfigStore
from qodo_bridge.errors import UnknownConfigKeyError
from qodo_bridge.models import QODO_MODELS, format_model, list_providers
from qodo_bridge.tools.inputs import ConfigInput, ModelsInput, StatusInput
from qodo_bridge.tools.registry import ToolDescriptor

log = logger.bind(service="qodo-info")


def create_models_tool() -> ToolDescriptor:
    async def _handler(params: ModelsInput) -> str:
        log.info("models.list provider={}", params.provider)
        models = QODO_MODELS
        if params.provider:
            provider = params.provider.lower()
            models = tuple(model for model in models if model.provider == provider)
        return json.dumps([format_model(model) for model in models], indent=2)

    return ToolDescriptor(
        name="qodo_models",
        description="List available Qodo models with their capabilities, context windows, and supported features.",
        input_model=ModelsInput,
        handler=_handler,
    )


def create_status_tool(executable: str) -> ToolDescriptor:
    async def _handler(params: StatusInput) -> str:
        _ = params
        log.info("status.check executable={}", executable)
        authenticated = await asyncio.to_thread(is_authenticated, executable)
        keys = await asyncio.to_thread(list_api_keys, executable)
        status = {
            "authenticated": authenticated,
            "apiKeys": [key.name for key in keys],
            "modelsAvailable": len(QODO_MODELS),
            "providers": list_providers(),
        }
        return json.dumps(status, indent=2)

    return ToolDescriptor(
        name="qodo_status",
        description="Check Qodo CLI authentication state, available API keys and the model catalog size.",
        input_model=StatusInput,
        handler=_handler,
    )


def create_config_tool(store: ConfigStore) -> ToolDescriptor:
    async def _handler(params: ConfigInput) -> str:
        if params.action == "view":
            return store.load().to_json()

        if not params.key or params.value is None:
            return "Invalid action or missing parameters"
        try:
            store.set_value(params.key, params.value)
        except UnknownConfigKeyError:
            return f"Unknown configuration key: {params.key}"
        except ValueError as exc:
            log.error("config.set_failed key={} error={}", params.key, exc)
            return f"Error managing config: {exc}"
        return f"Configuration updated: {params.key} = {params.value}"

    return ToolDescriptor(
        name="qodo_config",
        description="View or update Qodo plugin configuration settings.",
        input_model=ConfigInput,
        handler=_handler,
    )
