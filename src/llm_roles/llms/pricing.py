# src/llm_roles/llms/pricing.py

"""Static per-model pricing tables (cost per 1000 tokens).

Unknown models fall back to the provider's default entry. Local models
are free.
"""

from .base import PricingInfo, Provider

OPENAI_PRICING: dict[str, PricingInfo] = {
    "gpt-4o": PricingInfo(input=0.0025, output=0.01),
    "gpt-4o-mini": PricingInfo(input=0.00015, output=0.0006),
    "gpt-4-turbo-preview": PricingInfo(input=0.01, output=0.03),
    "gpt-4-turbo": PricingInfo(input=0.01, output=0.03),
    "gpt-4": PricingInfo(input=0.03, output=0.06),
    "gpt-4-32k": PricingInfo(input=0.06, output=0.12),
    "gpt-3.5-turbo": PricingInfo(input=0.0005, output=0.0015),
    "gpt-3.5-turbo-16k": PricingInfo(input=0.001, output=0.002),
}

ANTHROPIC_PRICING: dict[str, PricingInfo] = {
    "claude-sonnet-4-20250514": PricingInfo(input=0.003, output=0.015),
    "claude-3-5-sonnet-20241022": PricingInfo(input=0.003, output=0.015),
    "claude-3-5-haiku-20241022": PricingInfo(input=0.0008, output=0.004),
    "claude-3-opus-20240229": PricingInfo(input=0.015, output=0.075),
    "claude-3-sonnet-20240229": PricingInfo(input=0.003, output=0.015),
    "claude-3-haiku-20240307": PricingInfo(input=0.00025, output=0.00125),
    "claude-2.1": PricingInfo(input=0.008, output=0.024),
    "claude-2.0": PricingInfo(input=0.008, output=0.024),
}

OPENAI_DEFAULT_MODEL = "gpt-3.5-turbo"
ANTHROPIC_DEFAULT_MODEL = "claude-3-sonnet-20240229"

FREE = PricingInfo(input=0.0, output=0.0)

_TABLES: dict[Provider, tuple[dict[str, PricingInfo], str]] = {
    Provider.OPENAI: (OPENAI_PRICING, OPENAI_DEFAULT_MODEL),
    Provider.ANTHROPIC: (ANTHROPIC_PRICING, ANTHROPIC_DEFAULT_MODEL),
}


def get_pricing(provider: Provider, model: str) -> PricingInfo:
    if provider not in _TABLES:
        return FREE
    table, default_model = _TABLES[provider]
    return table.get(model, table[default_model])
