# src/llm_roles/llms/config.py

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from .base import ClientRole, Provider
from .errors import ConfigurationError

DEFAULT_TEMPERATURE = 0.7
DEFAULT_MAX_TOKENS = 4096
DEFAULT_TIMEOUT_MS = 60_000
DEFAULT_OLLAMA_BASE_URL = "http://localhost:11434"

# Providers that need a credential, and where to look when config has none
API_KEY_ENV_VARS: dict[Provider, str] = {
    Provider.OPENAI: "OPENAI_API_KEY",
    Provider.ANTHROPIC: "ANTHROPIC_API_KEY",
}

# Keys used by the external configuration layer -> field names
_KEY_ALIASES = {
    "apiKey": "api_key",
    "baseURL": "base_url",
    "baseUrl": "base_url",
    "maxTokens": "max_tokens",
    "topP": "top_p",
    "maxAttempts": "max_attempts",
}


@dataclass(frozen=True)
class LLMConfig:
    """Configuration for one LLM client.

    Immutable. Explicit. No magic defaults from environment: the only
    environment lookup is the credential fallback in ``resolve_credential``.
    """

    provider: Provider | str
    model: str
    api_key: str | None = None  # Falls back to provider's env var
    base_url: str | None = None
    temperature: float | None = None
    max_tokens: int | None = None
    timeout: int | None = None  # Milliseconds
    top_p: float | None = None
    max_attempts: int = 3

    @property
    def timeout_seconds(self) -> float:
        return (self.timeout or DEFAULT_TIMEOUT_MS) / 1000

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "LLMConfig":
        """Build a config from a merged configuration mapping.

        Accepts both camelCase (``apiKey``, ``baseURL``) and snake_case keys.
        Unknown keys are ignored.
        """
        fields = set(cls.__dataclass_fields__)
        values: dict[str, Any] = {}
        for key, value in data.items():
            name = _KEY_ALIASES.get(key, key)
            if name in fields and value is not None:
                values[name] = value
        return cls(**values)


def resolve_credential(config: LLMConfig, env: Mapping[str, str]) -> str | None:
    """Return the API key for a config: explicit value first, then env var.

    Providers without a registered env var (local endpoints) only use the
    explicit value.
    """
    if config.api_key:
        return config.api_key
    try:
        env_var = API_KEY_ENV_VARS.get(Provider(config.provider))
    except ValueError:
        return None
    if env_var is None:
        return None
    return env.get(env_var) or None


@dataclass(frozen=True)
class RoleConfigs:
    """One LLMConfig per client role."""

    planner: LLMConfig
    executor: LLMConfig
    reflector: LLMConfig

    def for_role(self, role: ClientRole | str) -> LLMConfig:
        return getattr(self, ClientRole(role).value)

    @classmethod
    def from_dict(cls, data: Mapping[str, Mapping[str, Any]]) -> "RoleConfigs":
        missing = [role.value for role in ClientRole if role.value not in data]
        if missing:
            raise ConfigurationError(
                f"Missing LLM configuration for roles: {', '.join(missing)}",
                {"missing": missing},
            )
        return cls(
            planner=LLMConfig.from_dict(data[ClientRole.PLANNER.value]),
            executor=LLMConfig.from_dict(data[ClientRole.EXECUTOR.value]),
            reflector=LLMConfig.from_dict(data[ClientRole.REFLECTOR.value]),
        )


DEFAULT_ROLE_CONFIGS = RoleConfigs(
    planner=LLMConfig(
        provider=Provider.OPENAI,
        model="gpt-4-turbo-preview",
        temperature=0.7,
        max_tokens=4096,
        timeout=60_000,
    ),
    executor=LLMConfig(
        provider=Provider.OPENAI,
        model="gpt-4-turbo-preview",
        temperature=0.3,
        max_tokens=4096,
        timeout=120_000,
    ),
    reflector=LLMConfig(
        provider=Provider.OPENAI,
        model="gpt-3.5-turbo",
        temperature=0.5,
        max_tokens=2048,
        timeout=60_000,
    ),
)
