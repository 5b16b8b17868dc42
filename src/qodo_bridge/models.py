"""Static catalog of models the qodo executable can target."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any


@dataclass(frozen=True)
class ModelVariant:
    description: str
    options: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))


@dataclass(frozen=True)
class ModelInfo:
    """Declared metadata for one backend identifier."""

    id: str
    name: str
    provider: str
    description: str
    context_window: int
    output_limit: int
    supports_images: bool
    supports_pdf: bool
    supports_thinking: bool
    variants: Mapping[str, ModelVariant] = field(default_factory=lambda: MappingProxyType({}))


_THINKING_VARIANTS = MappingProxyType(
    {
        "default": ModelVariant("Standard mode"),
        "thinking": ModelVariant("Extended thinking mode", MappingProxyType({"thinking": True})),
    }
)

_REASONING_VARIANTS = MappingProxyType(
    {
        "default": ModelVariant("Standard mode"),
        "high": ModelVariant("High reasoning effort", MappingProxyType({"reasoningEffort": "high"})),
        "max": ModelVariant("Maximum reasoning effort", MappingProxyType({"reasoningEffort": "max"})),
    }
)

QODO_MODELS: tuple[ModelInfo, ...] = (
    ModelInfo(
        id="claude-4.5-sonnet",
        name="Claude 4.5 Sonnet",
        provider="anthropic",
        description="Claude Sonnet 4.5 - balanced performance and capability",
        context_window=200_000,
        output_limit=64_000,
        supports_images=True,
        supports_pdf=True,
        supports_thinking=True,
        variants=_THINKING_VARIANTS,
    ),
    ModelInfo(
        id="claude-4.5-haiku",
        name="Claude 4.5 Haiku",
        provider="anthropic",
        description="Claude Haiku 4.5 - fast and efficient",
        context_window=200_000,
        output_limit=64_000,
        supports_images=True,
        supports_pdf=True,
        supports_thinking=False,
    ),
    ModelInfo(
        id="claude-4.5-opus",
        name="Claude 4.5 Opus",
        provider="anthropic",
        description="Claude Opus 4.5 - most capable model",
        context_window=200_000,
        output_limit=64_000,
        supports_images=True,
        supports_pdf=True,
        supports_thinking=True,
        variants=_THINKING_VARIANTS,
    ),
    ModelInfo(
        id="gemini-2.5-pro",
        name="Gemini 2.5 Pro",
        provider="google",
        description="Gemini 2.5 Pro - Google's advanced model",
        context_window=1_048_576,
        output_limit=65_536,
        supports_images=True,
        supports_pdf=True,
        supports_thinking=True,
    ),
    ModelInfo(
        id="grok-4",
        name="Grok 4",
        provider="xai",
        description="Grok 4 - xAI's model",
        context_window=128_000,
        output_limit=32_000,
        supports_images=True,
        supports_pdf=False,
        supports_thinking=False,
    ),
    ModelInfo(
        id="gpt-5.1-codex",
        name="GPT 5.1 Codex",
        provider="openai",
        description="GPT 5.1 Codex - optimized for coding",
        context_window=128_000,
        output_limit=32_000,
        supports_images=True,
        supports_pdf=True,
        supports_thinking=True,
        variants=_REASONING_VARIANTS,
    ),
    ModelInfo(
        id="gpt-5.1",
        name="GPT 5.1",
        provider="openai",
        description="GPT 5.1 - general purpose",
        context_window=128_000,
        output_limit=32_000,
        supports_images=True,
        supports_pdf=True,
        supports_thinking=True,
    ),
    ModelInfo(
        id="gpt-5.2",
        name="GPT 5.2",
        provider="openai",
        description="GPT 5.2 - latest general model",
        context_window=128_000,
        output_limit=32_000,
        supports_images=True,
        supports_pdf=True,
        supports_thinking=True,
        variants=_REASONING_VARIANTS,
    ),
)

_BY_ID = MappingProxyType({model.id: model for model in QODO_MODELS})


def get_model_by_id(model_id: str) -> ModelInfo | None:
    return _BY_ID.get(model_id)


def get_all_models() -> list[ModelInfo]:
    return list(QODO_MODELS)


def get_models_by_provider(provider: str) -> list[ModelInfo]:
    """Exact, case-sensitive match on the provider tag."""

    return [model for model in QODO_MODELS if model.provider == provider]


def list_providers() -> list[str]:
    return list(dict.fromkeys(model.provider for model in QODO_MODELS))


def _kilo_tokens(count: int) -> str:
    return f"{count / 1000:.0f}k tokens"


def format_model(model: ModelInfo) -> dict[str, Any]:
    """Summary row used by the model listing tool."""

    features = [
        name
        for name, enabled in (
            ("images", model.supports_images),
            ("pdf", model.supports_pdf),
            ("thinking", model.supports_thinking),
        )
        if enabled
    ]
    return {
        "id": model.id,
        "name": model.name,
        "provider": model.provider,
        "description": model.description,
        "contextWindow": _kilo_tokens(model.context_window),
        "outputLimit": _kilo_tokens(model.output_limit),
        "features": features,
        "variants": list(model.variants) or ["default"],
    }
