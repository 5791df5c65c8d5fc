# Clients
from .llms import (
    ChatRequest,
    LLMClient,
    LLMConfig,
    LLMResponse,
    Message,
    Role,
    ToolCall,
    ToolDefinition,
    create_llm_client,
)

# Errors
from .llms import (
    ConfigurationError,
    LLMRequestError,
    LLMRolesError,
    RequestValidationError,
    RetryExhaustedError,
)

# Roles
from .llms import DEFAULT_ROLE_CONFIGS, ClientRole, LLMManager, RoleConfigs, UsageStats

# Observability
from .observability import InMemoryMetricsHook, MetricsHook, NoOpMetricsHook

__all__ = [
    # Clients
    "ChatRequest",
    "LLMClient",
    "LLMConfig",
    "LLMResponse",
    "Message",
    "Role",
    "ToolCall",
    "ToolDefinition",
    "create_llm_client",
    # Errors
    "ConfigurationError",
    "LLMRequestError",
    "LLMRolesError",
    "RequestValidationError",
    "RetryExhaustedError",
    # Roles
    "DEFAULT_ROLE_CONFIGS",
    "ClientRole",
    "LLMManager",
    "RoleConfigs",
    "UsageStats",
    # Observability
    "InMemoryMetricsHook",
    "MetricsHook",
    "NoOpMetricsHook",
]
