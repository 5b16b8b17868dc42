"""Hook dispatch that keeps one failing plugin from breaking the others."""

from __future__ import annotations

import inspect
from typing import Any

import pluggy
from loguru import logger

log = logger.bind(service="qodo-hooks")

_FAILED = object()


class HookRuntime:
    """Calls every implementation of a hook in registration order, isolating failures."""

    def __init__(self, plugin_manager: pluggy.PluginManager) -> None:
        self._plugin_manager = plugin_manager

    async def call_many(self, hook_name: str, **kwargs: Any) -> list[Any]:
        """Await each implementation; values from failing plugins are left out."""

        values: list[Any] = []
        for impl in self._implementations(hook_name):
            value = self._invoke(hook_name, impl, kwargs)
            if inspect.isawaitable(value):
                try:
                    value = await value
                except Exception:
                    self._report_failure(hook_name, impl)
                    continue
            if value is not _FAILED:
                values.append(value)
        return values

    def call_many_sync(self, hook_name: str, **kwargs: Any) -> list[Any]:
        """Used for registration, which must finish before any tool call."""

        values: list[Any] = []
        for impl in self._implementations(hook_name):
            value = self._invoke(hook_name, impl, kwargs)
            if value is _FAILED:
                continue
            if inspect.iscoroutine(value):
                value.close()
                log.warning("hook.sync_only hook={} plugin={}", hook_name, impl.plugin_name)
                continue
            values.append(value)
        return values

    def hook_report(self) -> dict[str, list[str]]:
        """Map each implemented hook name to the plugins that implement it."""

        report: dict[str, list[str]] = {}
        for name in sorted(vars(self._plugin_manager.hook)):
            caller = getattr(self._plugin_manager.hook, name)
            if name.startswith("_") or not isinstance(caller, pluggy.HookCaller):
                continue
            owners = [impl.plugin_name for impl in caller.get_hookimpls()]
            if owners:
                report[name] = owners
        return report

    def _implementations(self, hook_name: str) -> list[pluggy.HookImpl]:
        caller = getattr(self._plugin_manager.hook, hook_name, None)
        if not isinstance(caller, pluggy.HookCaller):
            return []
        # Most recently registered first, the order pluggy itself calls them.
        return caller.get_hookimpls()[::-1]

    def _invoke(self, hook_name: str, impl: pluggy.HookImpl, kwargs: dict[str, Any]) -> Any:
        accepted = {key: kwargs[key] for key in impl.argnames if key in kwargs}
        try:
            return impl.function(**accepted)
        except Exception:
            self._report_failure(hook_name, impl)
            return _FAILED

    @staticmethod
    def _report_failure(hook_name: str, impl: pluggy.HookImpl) -> None:
        log.opt(exception=True).warning("hook.failed hook={} plugin={}", hook_name, impl.plugin_name)
