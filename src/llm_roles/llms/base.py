# src/llm_roles/llms/base.py

from collections.abc import AsyncGenerator
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Literal, Protocol

from pydantic import BaseModel

if TYPE_CHECKING:
    from .streaming import StreamStats

FinishReason = Literal["stop", "tool_calls", "length", "error"]


class Role(str, Enum):
    """Message role in a conversation."""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"
    TOOL = "tool"


class Provider(str, Enum):
    """Supported backend providers. Closed set."""

    OPENAI = "openai"
    ANTHROPIC = "anthropic"
    OLLAMA = "ollama"


class ClientRole(str, Enum):
    """Logical consumers of an LLM client, each configured and tracked separately."""

    PLANNER = "planner"
    EXECUTOR = "executor"
    REFLECTOR = "reflector"


@dataclass(frozen=True)
class ToolCall:
    """Normalized tool call from LLM response.

    Provider-agnostic representation. Never exposes raw provider objects.
    """

    id: str
    name: str
    arguments: dict[str, Any]


@dataclass(frozen=True)
class Message:
    """A single message in the conversation.

    Immutable. Stateless. Provider-agnostic.
    """

    role: Role
    content: str
    tool_call_id: str | None = None  # Required when role=TOOL
    tool_calls: tuple[ToolCall, ...] = ()  # Only meaningful when role=ASSISTANT


@dataclass(frozen=True)
class ToolParameter:
    name: str
    type: str
    description: str
    required: bool = False
    enum: list[str] | None = None
    items: dict[str, Any] | None = None  # Item schema for array parameters


@dataclass(frozen=True)
class ToolDefinition:
    """A function the model may call."""

    name: str
    description: str
    parameters: list[ToolParameter] = field(default_factory=list)

    @classmethod
    def from_model(
        cls, name: str, description: str, model: type[BaseModel]
    ) -> "ToolDefinition":
        """Build a tool definition from a pydantic input model.

        Only top-level fields are mapped. Fields without a plain JSON type
        (unions, nested models) are described as strings.
        """
        schema = model.model_json_schema()
        required = set(schema.get("required", []))
        parameters = []
        for prop_name, prop in schema.get("properties", {}).items():
            parameters.append(
                ToolParameter(
                    name=prop_name,
                    type=prop.get("type", "string"),
                    description=prop.get("description", prop.get("title", "")),
                    required=prop_name in required,
                    enum=prop.get("enum"),
                    items=prop.get("items"),
                )
            )
        return cls(name=name, description=description, parameters=parameters)


@dataclass(frozen=True)
class ChatRequest:
    """A single chat call. Validated by the client, not on construction."""

    messages: list[Message]
    tools: list[ToolDefinition] | None = None
    temperature: float | None = None
    max_tokens: int | None = None


@dataclass(frozen=True)
class Usage:
    """Token usage for a completion."""

    prompt_tokens: int
    completion_tokens: int
    total_tokens: int


@dataclass(frozen=True)
class LLMResponse:
    """Normalized LLM response.

    Provider details never leak outside the adapter.
    This is the only type callers ever see.
    """

    content: str
    tool_calls: list[ToolCall]
    finish_reason: FinishReason
    usage: Usage
    latency_ms: float = 0.0


@dataclass(frozen=True)
class PricingInfo:
    """Cost in currency units per 1000 tokens."""

    input: float
    output: float


@dataclass(frozen=True)
class UsageStats:
    """Accumulated usage for one role. Immutable; ``add`` returns a new value."""

    total_tokens: int = 0
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_cost: float = 0.0
    request_count: int = 0

    def add(self, prompt_tokens: int, completion_tokens: int, cost: float) -> "UsageStats":
        return UsageStats(
            total_tokens=self.total_tokens + prompt_tokens + completion_tokens,
            prompt_tokens=self.prompt_tokens + prompt_tokens,
            completion_tokens=self.completion_tokens + completion_tokens,
            total_cost=self.total_cost + cost,
            request_count=self.request_count + 1,
        )

    def __add__(self, other: "UsageStats") -> "UsageStats":
        return UsageStats(
            total_tokens=self.total_tokens + other.total_tokens,
            prompt_tokens=self.prompt_tokens + other.prompt_tokens,
            completion_tokens=self.completion_tokens + other.completion_tokens,
            total_cost=self.total_cost + other.total_cost,
            request_count=self.request_count + other.request_count,
        )


@dataclass(frozen=True)
class SamplingParams:
    """Effective sampling parameters, resolved by the client."""

    temperature: float
    max_tokens: int
    top_p: float | None = None


class ProviderAdapter(Protocol):
    """Wire-format translation for one provider.

    Design principles:
    - One network attempt per call: retries belong to the client
    - No leakage: Provider objects never escape the adapter
    - Streams are lazy: nothing is sent until the first fragment is pulled
    """

    provider: Provider
    model: str

    async def complete(self, request: ChatRequest, params: SamplingParams) -> LLMResponse:
        """Single completion, one network call.

        Raises:
            Provider or transport errors, unwrapped. The client classifies them.
        """
        ...

    def stream(
        self, request: ChatRequest, params: SamplingParams, stats: "StreamStats"
    ) -> AsyncGenerator[str, None]:
        """Lazy sequence of text fragments from one streaming network call."""
        ...

    def pricing(self) -> PricingInfo: ...

    async def aclose(self) -> None: ...
