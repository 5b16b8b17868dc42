"""Named agent and agent chain tools."""

from __future__ import annotations

from loguru import logger

from qodo_bridge.cli_runner import CHAIN_SEPARATOR, InvocationOptions
from qodo_bridge.tools.generation import CliProvider
from qodo_bridge.tools.inputs import AgentInput, ChainInput
from qodo_bridge.tools.registry import ToolDescriptor

log = logger.bind(service="qodo-agents")

MIN_CHAIN_LENGTH = 2


def _model_suffix(model: str | None) -> str:
    return f" (Model: {model})" if model else ""


def create_agent_tool(provide_cli: CliProvider) -> ToolDescriptor:
    async def _handler(params: AgentInput) -> str:
        log.info(
            "agent.start agent={} model={} has_agent_file={}",
            params.agent,
            params.model,
            params.agent_file is not None,
        )
        cli = await provide_cli()
        options = InvocationOptions(
            model=params.model,
            agent_file=params.agent_file,
            set_values=dict(params.key_value_pairs or {}),
        )
        result = await cli.run_agent(params.agent, params.prompt, options)
        if not result.ok:
            log.error("agent.failed agent={} error={}", params.agent, result.error)
            return f"Error executing Qodo agent '{params.agent}': {result.error}"
        log.info("agent.done agent={}", params.agent)
        return f"**[Qodo Agent: {params.agent}{_model_suffix(params.model)}]**\n\n{result.stdout}"

    return ToolDescriptor(
        name="qodo_agent",
        description=(
            "Execute Qodo agents for specialized tasks. Agents are pre-configured AI workflows "
            "for purposes like test generation, documentation, or refactoring."
        ),
        input_model=AgentInput,
        handler=_handler,
    )


def create_chain_tool(provide_cli: CliProvider) -> ToolDescriptor:
    async def _handler(params: ChainInput) -> str:
        label = CHAIN_SEPARATOR.join(params.agents)
        log.info("chain.start agents={} model={}", label, params.model)
        if len(params.agents) < MIN_CHAIN_LENGTH:
            return f"Error: Chain requires at least {MIN_CHAIN_LENGTH} agents"

        cli = await provide_cli()
        options = InvocationOptions(model=params.model, set_values={"prompt": params.initial_prompt})
        result = await cli.chain(params.agents, options)
        if not result.ok:
            log.error("chain.failed error={}", result.error)
            return f"Error executing agent chain: {result.error}"
        log.info("chain.done")
        return f"**[Qodo Chain: {label}{_model_suffix(params.model)}]**\n\n{result.stdout}"

    return ToolDescriptor(
        name="qodo_chain",
        description=(
            "Chain multiple Qodo agents together for complex workflows. Agents run in order, "
            "with output from one feeding into the next."
        ),
        input_model=ChainInput,
        handler=_handler,
    )
