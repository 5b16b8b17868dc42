"""Tool input models. Field aliases follow the host's camelCase argument names."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ToolInput(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class GenerateInput(ToolInput):
    """Generate code, tests or documentation."""

    prompt: str = Field(..., description="The generation prompt or instruction")
    model: str | None = Field(default=None, description="Specific model to use (e.g. 'claude-4.5-sonnet')")
    file: str | None = Field(default=None, description="Path to a file to use as context")
    output_file: str | None = Field(default=None, description="Path where the generated content should be saved")
    language: str | None = Field(default=None, description="Target programming language")
    framework: str | None = Field(default=None, description="Framework or library context")


class ChatInput(ToolInput):
    """Start a chat session."""

    initial_message: str | None = Field(default=None, description="Optional initial message")
    model: str | None = Field(default=None, description="Specific model to use for the chat session")
    context: str | None = Field(default=None, description="Additional context or background information")


class ReviewInput(ToolInput):
    """Review local git changes."""

    scope: Literal["staged", "unstaged", "all"] = Field(default="all", description="Which changes to review")
    focus: str | None = Field(default=None, description="Focus areas, e.g. 'security' or 'performance'")
    model: str | None = Field(default=None, description="Specific model to use for the review")


class AgentInput(ToolInput):
    """Run one named agent."""

    agent: str = Field(..., description="Agent name to execute")
    prompt: str = Field(..., description="The task or instruction for the agent")
    model: str | None = Field(default=None, description="Specific model to use")
    agent_file: str | None = Field(default=None, description="Path to custom agent configuration file")
    key_value_pairs: dict[str, str] | None = Field(default=None, description="Values passed as --set key=value")


class ChainInput(ToolInput):
    """Run several agents in sequence."""

    agents: list[str] = Field(..., description="Agent names to chain, in order")
    initial_prompt: str = Field(..., description="Initial input for the first agent")
    model: str | None = Field(default=None, description="Model used for every agent in the chain")


class ModelsInput(ToolInput):
    provider: str | None = Field(default=None, description="Filter by provider (e.g. 'anthropic', 'openai')")


class StatusInput(ToolInput):
    pass


class ConfigInput(ToolInput):
    action: Literal["view", "set"] = Field(..., description="View the configuration or set one value")
    key: str | None = Field(default=None, description="Configuration key (required for 'set')")
    value: str | None = Field(default=None, description="Value to set (required for 'set')")
