"""Generation, chat and review tools backed by the qodo executable."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import TypeAlias

from loguru import logger

from qodo_bridge.cli_runner import InvocationOptions, QodoCli
from qodo_bridge.tools.inputs import ChatInput, GenerateInput, ReviewInput
from qodo_bridge.tools.registry import ToolDescriptor

CliProvider: TypeAlias = Callable[[], Awaitable[QodoCli]]

REVIEW_CHECKLIST = (
    "Summary of changes",
    "Code quality assessment",
    "Potential issues or bugs",
    "Suggestions for improvement",
    "Best practices recommendations",
)


def build_generation_prompt(params: GenerateInput) -> str:
    prompt = params.prompt
    if params.language:
        prompt = f"[Language: {params.language}] {prompt}"
    if params.framework:
        prompt = f"[Framework: {params.framework}] {prompt}"
    if params.file:
        prompt = f"Using the following file as context:\n\nFile: {params.file}\n\n{prompt}"
    if params.output_file:
        prompt += f"\n\nPlease save the output to: {params.output_file}"
    return prompt


def build_review_prompt(params: ReviewInput) -> str:
    prompt = "Review the following code changes"
    if params.scope in ("staged", "unstaged"):
        prompt += f" ({params.scope} changes only)"
    if params.focus:
        prompt += f" with focus on: {params.focus}"
    checklist = "\n".join(f"{index}. {item}" for index, item in enumerate(REVIEW_CHECKLIST, start=1))
    return f"{prompt}. Provide detailed feedback including:\n{checklist}"


def create_generate_tool(provide_cli: CliProvider) -> ToolDescriptor:
    log = logger.bind(service="qodo-gen")

    async def _handler(params: GenerateInput) -> str:
        log.info(
            "gen.start model={} has_file={} language={} framework={}",
            params.model,
            params.file is not None,
            params.language,
            params.framework,
        )
        cli = await provide_cli()
        result = await cli.execute(build_generation_prompt(params), InvocationOptions(model=params.model, act=True))
        if not result.ok:
            log.error("gen.failed error={}", result.error)
            return f"Error generating with Qodo: {result.error}"
        log.info("gen.done output_length={}", len(result.stdout))
        return result.stdout

    return ToolDescriptor(
        name="qodo",
        description=(
            "Generate code, tests, documentation, or any other content using Qodo's AI. "
            "Supports tasks like creating functions, classes, tests, or documentation."
        ),
        input_model=GenerateInput,
        handler=_handler,
    )


def create_chat_tool(provide_cli: CliProvider) -> ToolDescriptor:
    log = logger.bind(service="qodo-chat")

    async def _handler(params: ChatInput) -> str:
        log.info("chat.start model={} has_context={}", params.model, params.context is not None)
        cli = await provide_cli()
        result = await cli.chat(InvocationOptions(model=params.model))
        if not result.ok:
            log.error("chat.failed error={}", result.error)
            return f"Error starting Qodo chat: {result.error}"
        log.info("chat.done")
        return result.stdout

    return ToolDescriptor(
        name="qodo_chat",
        description=(
            "Start a chat session with Qodo AI. Useful for ongoing conversations, "
            "brainstorming, or iterative development."
        ),
        input_model=ChatInput,
        handler=_handler,
    )


def create_review_tool(provide_cli: CliProvider) -> ToolDescriptor:
    log = logger.bind(service="qodo-review")

    async def _handler(params: ReviewInput) -> str:
        log.info("review.start scope={} focus={} model={}", params.scope, params.focus, params.model)
        # self-review reads the git state itself; the prompt is only recorded.
        log.debug("review.prompt text={}", build_review_prompt(params))
        cli = await provide_cli()
        result = await cli.self_review(InvocationOptions(model=params.model))
        if not result.ok:
            log.error("review.failed error={}", result.error)
            return f"Error performing code review: {result.error}"
        log.info("review.done")
        return result.stdout

    return ToolDescriptor(
        name="qodo_review",
        description=(
            "Perform AI-powered code review on git changes. Groups staged and unstaged "
            "changes into logical change groups and reports feedback and suggestions."
        ),
        input_model=ReviewInput,
        handler=_handler,
    )
