"""Wiring: settings, logging, the shared invoker cell and the plugin host."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass

from loguru import logger

from qodo_bridge.auth import is_authenticated
from qodo_bridge.cli_runner import QodoCli
from qodo_bridge.config import ConfigStore, PluginSettings, QodoConfig
from qodo_bridge.host import PluginHost
from qodo_bridge.lazy import SharedCell
from qodo_bridge.logging_utils import configure_logging
from qodo_bridge.plugin import QodoPlugin

log = logger.bind(service="qodo-plugin")


@dataclass(frozen=True)
class SharedInvoker:
    """The invoker and the configuration snapshot it was built from."""

    cli: QodoCli
    config: QodoConfig


async def build_shared_invoker(store: ConfigStore, settings: PluginSettings) -> SharedInvoker:
    log.info("bootstrap.initializing executable={}", settings.executable)
    config = store.load()
    cli = QodoCli(config, executable=settings.executable)
    version = await asyncio.to_thread(cli.get_version)
    authenticated = await asyncio.to_thread(is_authenticated, settings.executable)
    log.info(
        "bootstrap.initialized version={} authenticated={} default_model={}",
        version,
        authenticated,
        config.default_model,
    )
    return SharedInvoker(cli=cli, config=config)


def create_shared_cell(store: ConfigStore, settings: PluginSettings) -> SharedCell[SharedInvoker]:
    return SharedCell(lambda: build_shared_invoker(store, settings), name="qodo-cli")


def create_plugin_host(settings: PluginSettings | None = None) -> PluginHost:
    """Build a host with the Qodo plugin registered and its tools loaded."""

    settings = settings or PluginSettings()
    store = ConfigStore(settings.config_path)
    configure_logging(debug=settings.debug or bool(store.load().debug), level=settings.log_level)

    host = PluginHost()
    plugin = QodoPlugin(create_shared_cell(store, settings), host, store=store, executable=settings.executable)
    host.register(plugin, name="qodo")
    host.load_tools()
    log.info("bootstrap.registered tools={}", host.registry.names())
    return host
