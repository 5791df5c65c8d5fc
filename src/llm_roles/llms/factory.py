# src/llm_roles/llms/factory.py

import os
from collections.abc import Mapping

from llm_roles.observability.base import MetricsHook, NoOpMetricsHook

from .base import Provider, ProviderAdapter
from .client import LLMClient
from .config import API_KEY_ENV_VARS, LLMConfig, resolve_credential
from .errors import ConfigurationError
from .retry import RetryPolicy

SUPPORTED_PROVIDERS: tuple[str, ...] = tuple(p.value for p in Provider)


def is_provider_supported(provider: str) -> bool:
    return provider in SUPPORTED_PROVIDERS


def supported_providers() -> list[str]:
    return list(SUPPORTED_PROVIDERS)


def validate_config(config: LLMConfig, env: Mapping[str, str]) -> Provider:
    """Check a config before anything is built.

    Returns:
        The parsed provider.

    Raises:
        ConfigurationError: Describing the first violation found.
    """
    if not config.provider:
        raise ConfigurationError("LLM provider is required")

    if not is_provider_supported(config.provider):
        raise ConfigurationError(
            f"Unsupported LLM provider: {config.provider}",
            {"provider": config.provider, "supported": supported_providers()},
        )
    provider = Provider(config.provider)

    if not config.model:
        raise ConfigurationError("LLM model is required")

    env_var = API_KEY_ENV_VARS.get(provider)
    if env_var is not None and not resolve_credential(config, env):
        raise ConfigurationError(
            f"{provider.value} API key is required. "
            f"Set it in config or the {env_var} environment variable.",
            {"provider": provider.value},
        )

    if config.temperature is not None and not 0 <= config.temperature <= 2:
        raise ConfigurationError(
            "Temperature must be between 0 and 2", {"temperature": config.temperature}
        )

    if config.max_tokens is not None and config.max_tokens < 1:
        raise ConfigurationError(
            "max_tokens must be positive", {"max_tokens": config.max_tokens}
        )

    if config.timeout is not None and config.timeout < 1000:
        raise ConfigurationError(
            "Timeout must be at least 1000ms", {"timeout": config.timeout}
        )

    if config.top_p is not None and not 0 <= config.top_p <= 1:
        raise ConfigurationError("top_p must be between 0 and 1", {"top_p": config.top_p})

    if config.max_attempts < 1:
        raise ConfigurationError(
            "max_attempts must be at least 1", {"max_attempts": config.max_attempts}
        )

    return provider


def _create_adapter(
    provider: Provider, config: LLMConfig, api_key: str | None
) -> ProviderAdapter:
    if provider == Provider.OPENAI:
        from .openai import OpenAIAdapter

        return OpenAIAdapter(
            api_key=api_key,
            model=config.model,
            base_url=config.base_url,
            timeout=config.timeout_seconds,
        )

    if provider == Provider.ANTHROPIC:
        from .anthropic import AnthropicAdapter

        return AnthropicAdapter(
            api_key=api_key,
            model=config.model,
            base_url=config.base_url,
            timeout=config.timeout_seconds,
        )

    from .local import LocalAdapter

    return LocalAdapter(
        model=config.model,
        base_url=config.base_url,
        api_key=api_key,
        timeout=config.timeout_seconds,
    )


def create_llm_client(
    config: LLMConfig,
    *,
    env: Mapping[str, str] | None = None,
    metrics_hook: MetricsHook = NoOpMetricsHook(),
    retry_policy: RetryPolicy | None = None,
) -> LLMClient:
    """Create an LLM client from config.

    Args:
        config: LLM configuration specifying provider, model, etc.
        env: Environment consulted for credential fallbacks.
            Defaults to ``os.environ``.
        metrics_hook: Optional metrics hook for observability.
        retry_policy: Override the default policy built from
            ``config.max_attempts``.

    Returns:
        Configured LLMClient.

    Raises:
        ConfigurationError: If the config is invalid or the provider unknown.

    Example:
        >>> config = LLMConfig(provider="openai", model="gpt-4o")
        >>> client = create_llm_client(config)
        >>> response = await client.chat(ChatRequest(messages=[...]))
    """
    env = os.environ if env is None else env
    provider = validate_config(config, env)
    adapter = _create_adapter(provider, config, resolve_credential(config, env))
    return LLMClient(
        config, adapter, retry_policy=retry_policy, metrics_hook=metrics_hook
    )
