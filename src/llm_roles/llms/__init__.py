# src/llm_roles/llms/__init__.py

"""LLM client layer for llm-roles.

One request/response contract over OpenAI, Anthropic and local
OpenAI-compatible endpoints, with one client per agent role.

Design principles:
- Stateless clients: Every call receives full message list
- Transport only: Retries only on network/rate-limit errors
- No leakage: Provider objects never escape the adapter
- Usage is the manager's business: Clients never track it

Example:
    >>> from llm_roles.llms import LLMManager, DEFAULT_ROLE_CONFIGS
    >>> from llm_roles.llms import ChatRequest, Message, Role
    >>>
    >>> manager = LLMManager(DEFAULT_ROLE_CONFIGS)
    >>> response = await manager.chat(
    ...     "planner",
    ...     ChatRequest(messages=[Message(role=Role.USER, content="Hello!")]),
    ... )
    >>> print(response.content, manager.get_usage_stats("planner"))
"""

from .base import (
    ChatRequest,
    ClientRole,
    LLMResponse,
    Message,
    PricingInfo,
    Provider,
    ProviderAdapter,
    Role,
    SamplingParams,
    ToolCall,
    ToolDefinition,
    ToolParameter,
    Usage,
    UsageStats,
)
from .client import LLMClient, validate_request
from .config import (
    DEFAULT_ROLE_CONFIGS,
    LLMConfig,
    RoleConfigs,
    resolve_credential,
)
from .errors import (
    ConfigurationError,
    LLMRequestError,
    LLMRolesError,
    RequestValidationError,
    RetryExhaustedError,
)
from .factory import (
    create_llm_client,
    is_provider_supported,
    supported_providers,
    validate_config,
)
from .manager import LLMManager, RoleClients
from .retry import RetryPolicy, is_retryable_error
from .streaming import SSEDecoder, StreamStats, TextStream

__all__ = [
    # Factory
    "create_llm_client",
    "is_provider_supported",
    "supported_providers",
    "validate_config",
    # Client
    "LLMClient",
    "ProviderAdapter",
    "validate_request",
    # Roles
    "LLMManager",
    "RoleClients",
    # Config
    "DEFAULT_ROLE_CONFIGS",
    "LLMConfig",
    "RoleConfigs",
    "resolve_credential",
    # Retry
    "RetryPolicy",
    "is_retryable_error",
    # Streaming
    "SSEDecoder",
    "StreamStats",
    "TextStream",
    # Errors
    "ConfigurationError",
    "LLMRequestError",
    "LLMRolesError",
    "RequestValidationError",
    "RetryExhaustedError",
    # Types
    "ChatRequest",
    "ClientRole",
    "LLMResponse",
    "Message",
    "PricingInfo",
    "Provider",
    "Role",
    "SamplingParams",
    "ToolCall",
    "ToolDefinition",
    "ToolParameter",
    "Usage",
    "UsageStats",
]
