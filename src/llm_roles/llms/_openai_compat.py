# src/llm_roles/llms/_openai_compat.py

"""Chat-completions wire format shared by the OpenAI and local adapters.

Internal only. Works on plain dicts so both the SDK response (after
``model_dump``) and raw HTTP JSON go through the same parser.
"""

import json
import logging
from typing import Any

from .base import FinishReason, LLMResponse, Message, Role, ToolCall, Usage

logger = logging.getLogger(__name__)

FINISH_REASONS: dict[str, FinishReason] = {
    "stop": "stop",
    "length": "length",
    "tool_calls": "tool_calls",
    "function_call": "tool_calls",
    "content_filter": "error",
}


def map_finish_reason(signal: str | None) -> FinishReason:
    if signal in FINISH_REASONS:
        return FINISH_REASONS[signal]
    logger.debug("Unknown finish reason %r, treating as stop", signal)
    return "stop"


def convert_messages(messages: list[Message]) -> list[dict[str, Any]]:
    """Convert Message objects to chat-completions format.

    Internal only. Provider format never leaks outside.
    """
    result = []
    for m in messages:
        if m.role == Role.TOOL:
            result.append(
                {"role": "tool", "tool_call_id": m.tool_call_id, "content": m.content}
            )
        elif m.role == Role.ASSISTANT and m.tool_calls:
            result.append(
                {
                    "role": "assistant",
                    "content": m.content or None,
                    "tool_calls": [
                        {
                            "id": tc.id,
                            "type": "function",
                            "function": {
                                "name": tc.name,
                                "arguments": json.dumps(tc.arguments),
                            },
                        }
                        for tc in m.tool_calls
                    ],
                }
            )
        else:
            result.append({"role": m.role.value, "content": m.content})
    return result


def decode_arguments(raw: Any) -> dict[str, Any]:
    """Decode string-encoded tool arguments. Malformed JSON yields {}."""
    if isinstance(raw, dict):
        return raw
    if not raw:
        return {}
    try:
        decoded = json.loads(raw)
    except json.JSONDecodeError:
        logger.warning("Failed to parse tool call arguments: %s", raw)
        return {}
    return decoded if isinstance(decoded, dict) else {}


def parse_chat_completion(payload: dict[str, Any], latency_ms: float) -> LLMResponse:
    """Normalize a chat-completions response body to LLMResponse.

    This is the boundary. Raw provider payloads stop here.
    """
    choices = payload.get("choices") or []
    if not choices:
        raise ValueError("chat completion response has no choices")
    choice = choices[0]
    message = choice.get("message") or {}

    tool_calls = [
        ToolCall(
            id=tc.get("id", ""),
            name=tc["function"]["name"],
            arguments=decode_arguments(tc["function"].get("arguments")),
        )
        for tc in message.get("tool_calls") or []
    ]

    finish_reason = map_finish_reason(choice.get("finish_reason"))
    if tool_calls:
        finish_reason = "tool_calls"

    usage = payload.get("usage") or {}
    prompt_tokens = usage.get("prompt_tokens") or 0
    completion_tokens = usage.get("completion_tokens") or 0

    return LLMResponse(
        content=message.get("content") or "",
        tool_calls=tool_calls,
        finish_reason=finish_reason,
        usage=Usage(
            prompt_tokens=prompt_tokens,
            completion_tokens=completion_tokens,
            total_tokens=usage.get("total_tokens") or prompt_tokens + completion_tokens,
        ),
        latency_ms=latency_ms,
    )


def delta_text(chunk: dict[str, Any]) -> str | None:
    """Text fragment of a streaming chunk, if any.

    Raises:
        ValueError: If the chunk is not shaped like a chat-completions delta.
    """
    choices = chunk.get("choices")
    if not choices:
        return None
    if not isinstance(choices, list) or not isinstance(choices[0], dict):
        raise ValueError("stream chunk choices are malformed")
    delta = choices[0].get("delta")
    if not delta:
        return None
    if not isinstance(delta, dict):
        raise ValueError("stream chunk delta is not an object")
    content = delta.get("content")
    if content is not None and not isinstance(content, str):
        raise ValueError("stream chunk content is not a string")
    return content or None
