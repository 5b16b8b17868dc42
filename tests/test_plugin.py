from __future__ import annotations

import json
from pathlib import Path

import pytest

from qodo_bridge.bootstrap import SharedInvoker, create_plugin_host, create_shared_cell
from qodo_bridge.cli_runner import QodoCli
from qodo_bridge.config import ConfigStore, PluginSettings, QodoConfig
from qodo_bridge.errors import ToolNotFoundError
from qodo_bridge.hookspecs import hookimpl
from qodo_bridge.host import PluginHost
from qodo_bridge.lazy import SharedCell
from qodo_bridge.plugin import NOT_INSTALLED_MESSAGE, RATE_LIMIT_NOTICE, QodoPlugin

TOOL_NAMES = [
    "qodo",
    "qodo_agent",
    "qodo_chain",
    "qodo_chat",
    "qodo_config",
    "qodo_models",
    "qodo_review",
    "qodo_status",
]


def test_plugin_registers_all_tools(settings: PluginSettings) -> None:
    host = create_plugin_host(settings)

    assert host.registry.names() == TOOL_NAMES
    assert host.hook_report()["register_tools"] == ["qodo"]


@pytest.mark.asyncio
async def test_generate_tool_decorates_prompt_and_forces_act(settings: PluginSettings) -> None:
    host = create_plugin_host(settings)

    output = await host.call_tool(
        "qodo",
        prompt="write a parser",
        language="python",
        framework="lark",
        outputFile="parser.py",
    )

    lines = output.splitlines()
    assert lines[:5] == ["-m", "claude-4.5-sonnet", "--permissions", "rw", "--act"]
    assert "[Framework: lark] [Language: python] write a parser" in output
    assert lines[-1] == "Please save the output to: parser.py"


@pytest.mark.asyncio
async def test_agent_tool_heads_output(settings: PluginSettings) -> None:
    host = create_plugin_host(settings)

    output = await host.call_tool(
        "qodo_agent",
        agent="qodo-cover",
        prompt="cover utils",
        model="gpt-5.1",
        keyValuePairs={"target": "80"},
    )

    header, _, body = output.partition("\n\n")
    assert header == "**[Qodo Agent: qodo-cover (Model: gpt-5.1)]**"
    assert body.splitlines()[:5] == ["run", "qodo-cover", "cover utils", "-m", "gpt-5.1"]
    assert "target=80" in body


@pytest.mark.asyncio
async def test_chain_tool_requires_two_agents(settings: PluginSettings) -> None:
    host = create_plugin_host(settings)

    assert await host.call_tool("qodo_chain", agents=["solo"], initialPrompt="x") == (
        "Error: Chain requires at least 2 agents"
    )

    output = await host.call_tool("qodo_chain", agents=["analyze", "test"], initialPrompt="start here")
    assert output.startswith("**[Qodo Chain: analyze > test]**")
    assert "analyze > test" in output.splitlines()[3]
    assert "prompt=start here" in output


@pytest.mark.asyncio
async def test_review_tool_uses_headless_review(settings: PluginSettings) -> None:
    host = create_plugin_host(settings)

    output = await host.call_tool("qodo_review", scope="staged", focus="security")

    assert output.splitlines()[:2] == ["self-review", "--ci"]


@pytest.mark.asyncio
async def test_failed_run_becomes_error_text(monkeypatch: pytest.MonkeyPatch, settings: PluginSettings) -> None:
    monkeypatch.setenv("FAKE_QODO_FAIL", "1")
    host = create_plugin_host(settings)

    output = await host.call_tool("qodo_chat", initialMessage="hi")

    assert output.startswith("Error starting Qodo chat: Qodo CLI exited with code 3")
    assert "boom" in output


@pytest.mark.asyncio
async def test_missing_cli_reports_not_installed(tmp_path: Path, missing_qodo: Path) -> None:
    host = create_plugin_host(PluginSettings(executable=str(missing_qodo), config_path=tmp_path / "qodo.json"))

    output = await host.call_tool("qodo", prompt="anything")

    assert output == NOT_INSTALLED_MESSAGE
    assert [notice.kind for notice in host.notices] == ["error"]


@pytest.mark.asyncio
async def test_unauthenticated_cli_warns_and_still_runs(
    monkeypatch: pytest.MonkeyPatch, settings: PluginSettings
) -> None:
    monkeypatch.setenv("FAKE_QODO_UNAUTHENTICATED", "1")
    host = create_plugin_host(settings)

    output = await host.call_tool("qodo_chat")

    assert output.splitlines()[0] == "chat"
    assert [notice.kind for notice in host.notices] == ["warning"]


@pytest.mark.asyncio
async def test_tools_share_one_invoker(settings: PluginSettings) -> None:
    store = ConfigStore(settings.config_path)
    cell = create_shared_cell(store, settings)
    host = PluginHost()
    host.register(QodoPlugin(cell, host, store=store, executable=settings.executable), name="qodo")
    host.load_tools()

    await host.call_tool("qodo_chat")
    first = cell.peek()
    await host.call_tool("qodo_review")

    assert cell.build_count == 1
    assert first is not None
    assert cell.peek() is first


@pytest.mark.asyncio
async def test_invoker_keeps_config_snapshot(settings: PluginSettings) -> None:
    store = ConfigStore(settings.config_path)
    host = create_plugin_host(settings)
    await host.call_tool("qodo_chat")

    store.save(QodoConfig(default_model="grok-4"))
    output = await host.call_tool("qodo_chat")

    assert "claude-4.5-sonnet" in output.splitlines()


@pytest.mark.asyncio
async def test_failed_initialization_is_reported(tmp_path: Path) -> None:
    async def _factory() -> SharedInvoker:
        raise RuntimeError("config exploded")

    host = PluginHost()
    host.register(QodoPlugin(SharedCell(_factory, name="qodo-cli"), host, store=ConfigStore(tmp_path / "q.json")))
    host.load_tools()

    output = await host.call_tool("qodo", prompt="x")

    assert output.startswith("Error: qodo-cli initialization failed")
    assert "config exploded" in output


@pytest.mark.asyncio
async def test_models_tool_filters_by_lowercased_provider(settings: PluginSettings) -> None:
    host = create_plugin_host(settings)

    models = json.loads(await host.call_tool("qodo_models", provider="Google"))

    assert [model["id"] for model in models] == ["gemini-2.5-pro"]
    assert models[0]["features"] == ["images", "pdf", "thinking"]


@pytest.mark.asyncio
async def test_status_tool_reports_keys(settings: PluginSettings) -> None:
    host = create_plugin_host(settings)

    status = json.loads(await host.call_tool("qodo_status"))

    assert status == {
        "authenticated": True,
        "apiKeys": ["laptop", "ci"],
        "modelsAvailable": 8,
        "providers": ["anthropic", "google", "xai", "openai"],
    }


@pytest.mark.asyncio
async def test_config_tool_views_and_sets(settings: PluginSettings) -> None:
    host = create_plugin_host(settings)

    assert json.loads(await host.call_tool("qodo_config", action="view"))["defaultModel"] == "claude-4.5-sonnet"
    assert await host.call_tool("qodo_config", action="set", key="plan", value="true") == (
        "Configuration updated: plan = true"
    )
    assert await host.call_tool("qodo_config", action="set", key="plan") == "Invalid action or missing parameters"
    assert await host.call_tool("qodo_config", action="set", key="colour", value="x") == (
        "Unknown configuration key: colour"
    )
    assert ConfigStore(settings.config_path).load().plan is True


@pytest.mark.asyncio
async def test_unknown_tool_raises(settings: PluginSettings) -> None:
    host = create_plugin_host(settings)

    with pytest.raises(ToolNotFoundError):
        await host.call_tool("qodo_missing")


@pytest.mark.asyncio
async def test_invalid_arguments_return_error_text(settings: PluginSettings) -> None:
    host = create_plugin_host(settings)

    output = await host.call_tool("qodo_agent", agent="qodo-cover")

    assert output.startswith("Error: invalid arguments for qodo_agent:")
    assert "prompt" in output


@pytest.mark.asyncio
async def test_rate_limit_error_notifies(settings: PluginSettings) -> None:
    host = create_plugin_host(settings)

    await host.session_error("upstream said: rate limit exceeded")
    await host.session_error("something else")

    assert [notice.message for notice in host.notices] == [RATE_LIMIT_NOTICE]


@pytest.mark.asyncio
async def test_session_created_warms_invoker(settings: PluginSettings) -> None:
    store = ConfigStore(settings.config_path)
    cell = create_shared_cell(store, settings)
    host = PluginHost()
    host.register(QodoPlugin(cell, host, store=store, executable=settings.executable))

    await host.session_created("s1")
    shared = await cell.get()

    assert isinstance(shared.cli, QodoCli)
    assert cell.build_count == 1


@pytest.mark.asyncio
async def test_compaction_adds_context_without_building(settings: PluginSettings) -> None:
    store = ConfigStore(settings.config_path)
    store.save(QodoConfig(default_model="gpt-5.2"))
    cell = create_shared_cell(store, settings)
    host = PluginHost()
    host.register(QodoPlugin(cell, host, store=store, executable=settings.executable))

    context = await host.compact_context()

    assert len(context) == 1
    assert context[0].startswith("## Qodo Plugin Context")
    assert "Default model: gpt-5.2" in context[0]
    assert "Authentication: active" in context[0]
    assert cell.build_count == 0


@pytest.mark.asyncio
async def test_completions_suggest_tools_and_models(settings: PluginSettings) -> None:
    host = create_plugin_host(settings)

    assert await host.complete("qodo_c") == ["qodo_chat", "qodo_chain", "qodo_config"]
    assert await host.complete("gpt-5.1") == ["gpt-5.1-codex", "gpt-5.1"]


class BrokenPlugin:
    @hookimpl
    def register_tools(self, host: object) -> None:
        raise RuntimeError("broken on purpose")

    @hookimpl
    async def on_session_compacting(self, context: list[str]) -> None:
        raise RuntimeError("broken on purpose")


@pytest.mark.asyncio
async def test_broken_plugin_is_isolated(settings: PluginSettings) -> None:
    host = create_plugin_host(settings)
    host.register(BrokenPlugin(), name="broken")
    host.load_tools()

    assert host.registry.names() == TOOL_NAMES
    context = await host.compact_context()
    assert len(context) == 1


class AsyncRegistrationPlugin:
    def __init__(self) -> None:
        self.called = False

    @hookimpl
    async def register_tools(self, host: object) -> None:
        self.called = True

    @hookimpl
    def suggest_completions(self, prefix: str) -> list[str]:
        raise RuntimeError("broken on purpose")


@pytest.mark.asyncio
async def test_async_registration_is_skipped(settings: PluginSettings) -> None:
    host = create_plugin_host(settings)
    plugin = AsyncRegistrationPlugin()
    host.register(plugin, name="async-registration")
    host.load_tools()

    assert plugin.called is False
    assert host.registry.names() == TOOL_NAMES
    assert "qodo_agent" in await host.complete("qodo_a")


def test_hook_report_lists_plugins_per_hook(settings: PluginSettings) -> None:
    host = create_plugin_host(settings)
    host.register(BrokenPlugin(), name="broken")

    report = host.hook_report()

    assert report["register_tools"] == ["qodo", "broken"]
    assert report["on_session_compacting"] == ["qodo", "broken"]
