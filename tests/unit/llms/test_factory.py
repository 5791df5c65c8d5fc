# tests/unit/llms/test_factory.py

from unittest.mock import patch

import pytest

from llm_roles.llms import LLMClient, LLMConfig, create_llm_client
from llm_roles.llms.anthropic import AnthropicAdapter
from llm_roles.llms.errors import ConfigurationError
from llm_roles.llms.factory import (
    is_provider_supported,
    supported_providers,
    validate_config,
)
from llm_roles.llms.local import LocalAdapter
from llm_roles.llms.openai import OpenAIAdapter


class TestFactory:
    def test_create_openai_client(self) -> None:
        """Test creating OpenAI client."""
        with patch("llm_roles.llms.openai.AsyncOpenAI"):
            config = LLMConfig(provider="openai", model="gpt-4o", api_key="test")
            client = create_llm_client(config, env={})

            assert isinstance(client, LLMClient)
            assert isinstance(client._adapter, OpenAIAdapter)
            assert client.provider == "openai"
            assert client.model == "gpt-4o"

    def test_create_anthropic_client(self) -> None:
        """Test creating Anthropic client."""
        with patch("llm_roles.llms.anthropic.AsyncAnthropic"):
            config = LLMConfig(
                provider="anthropic", model="claude-sonnet-4-20250514", api_key="test"
            )
            client = create_llm_client(config, env={})

            assert isinstance(client._adapter, AnthropicAdapter)
            assert client.provider == "anthropic"

    def test_create_local_client_without_key(self) -> None:
        config = LLMConfig(provider="ollama", model="llama3")
        client = create_llm_client(config, env={})

        assert isinstance(client._adapter, LocalAdapter)
        assert client._adapter.base_url == "http://localhost:11434"
        assert client.provider == "ollama"

    def test_unknown_provider_raises(self) -> None:
        """Test that unknown provider raises ConfigurationError."""
        config = LLMConfig(provider="unknown", model="model", api_key="k")

        with pytest.raises(ConfigurationError, match="Unsupported") as exc_info:
            create_llm_client(config, env={})

        assert exc_info.value.details["supported"] == ["openai", "anthropic", "ollama"]

    def test_config_values_passed_through(self) -> None:
        """Test that config values are passed to the SDK client."""
        with patch("llm_roles.llms.openai.AsyncOpenAI") as mock_openai:
            config = LLMConfig(
                provider="openai",
                model="gpt-4-turbo",
                api_key="my-key",
                timeout=90_000,
                max_attempts=5,
            )
            client = create_llm_client(config, env={})

            assert client.model == "gpt-4-turbo"
            assert client._retry_policy.max_attempts == 5
            mock_openai.assert_called_once_with(
                api_key="my-key", base_url=None, timeout=90.0, max_retries=0
            )

    def test_anthropic_default_timeout(self) -> None:
        with patch("llm_roles.llms.anthropic.AsyncAnthropic") as mock_anthropic:
            config = LLMConfig(provider="anthropic", model="claude-3-opus-20240229")
            create_llm_client(config, env={"ANTHROPIC_API_KEY": "env-key"})

            mock_anthropic.assert_called_once_with(
                api_key="env-key", base_url=None, timeout=60.0, max_retries=0
            )


class TestCredentials:
    def test_missing_key_raises(self) -> None:
        config = LLMConfig(provider="openai", model="gpt-4")

        with pytest.raises(ConfigurationError, match="OPENAI_API_KEY"):
            create_llm_client(config, env={})

    def test_empty_env_var_counts_as_missing(self) -> None:
        config = LLMConfig(provider="anthropic", model="claude-3-haiku-20240307")

        with pytest.raises(ConfigurationError, match="ANTHROPIC_API_KEY"):
            create_llm_client(config, env={"ANTHROPIC_API_KEY": ""})

    def test_env_fallback(self) -> None:
        with patch("llm_roles.llms.openai.AsyncOpenAI") as mock_openai:
            config = LLMConfig(provider="openai", model="gpt-4")
            create_llm_client(config, env={"OPENAI_API_KEY": "from-env"})

            assert mock_openai.call_args.kwargs["api_key"] == "from-env"

    def test_explicit_key_wins_over_env(self) -> None:
        with patch("llm_roles.llms.openai.AsyncOpenAI") as mock_openai:
            config = LLMConfig(provider="openai", model="gpt-4", api_key="explicit")
            create_llm_client(config, env={"OPENAI_API_KEY": "from-env"})

            assert mock_openai.call_args.kwargs["api_key"] == "explicit"


class TestValidateConfig:
    @pytest.mark.parametrize(
        ("overrides", "match"),
        [
            ({"provider": ""}, "provider is required"),
            ({"model": ""}, "model is required"),
            ({"temperature": 2.1}, "Temperature"),
            ({"temperature": -1}, "Temperature"),
            ({"max_tokens": 0}, "max_tokens"),
            ({"timeout": 999}, "1000ms"),
            ({"top_p": 1.5}, "top_p"),
            ({"max_attempts": 0}, "max_attempts"),
        ],
    )
    def test_invalid_values_rejected(self, overrides: dict, match: str) -> None:
        values = {"provider": "openai", "model": "gpt-4", "api_key": "k"}
        values.update(overrides)

        with pytest.raises(ConfigurationError, match=match):
            validate_config(LLMConfig(**values), env={})

    def test_boundaries_accepted(self) -> None:
        config = LLMConfig(
            provider="openai",
            model="gpt-4",
            api_key="k",
            temperature=2,
            max_tokens=1,
            timeout=1000,
            top_p=0,
        )

        assert validate_config(config, env={}) == "openai"

    def test_error_message_prefixed(self) -> None:
        config = LLMConfig(provider="openai", model="", api_key="k")

        with pytest.raises(ConfigurationError) as exc_info:
            validate_config(config, env={})

        assert str(exc_info.value).startswith("Configuration error: ")
        assert exc_info.value.recoverable is False


class TestProviderRegistry:
    def test_supported_providers(self) -> None:
        assert supported_providers() == ["openai", "anthropic", "ollama"]

    @pytest.mark.parametrize("provider", ["openai", "anthropic", "ollama"])
    def test_known_providers_supported(self, provider: str) -> None:
        assert is_provider_supported(provider)

    @pytest.mark.parametrize("provider", ["OpenAI", "gemini", ""])
    def test_unknown_providers_not_supported(self, provider: str) -> None:
        assert not is_provider_supported(provider)

    def test_supported_providers_returns_copy(self) -> None:
        supported_providers().append("gemini")

        assert not is_provider_supported("gemini")
