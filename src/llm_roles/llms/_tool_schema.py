# src/llm_roles/llms/_tool_schema.py

"""Internal module for converting ToolDefinitions to provider-specific schemas.

This is infrastructure, not behavior. Pure data transformation.
"""

from typing import Any

from .base import ToolDefinition, ToolParameter


def _parameter_schema(param: ToolParameter) -> dict[str, Any]:
    schema: dict[str, Any] = {"type": param.type, "description": param.description}
    if param.enum:
        schema["enum"] = list(param.enum)
    if param.type == "array":
        schema["items"] = dict(param.items) if param.items else {"type": "string"}
    return schema


def parameters_to_json_schema(tool: ToolDefinition) -> dict[str, Any]:
    """Build the JSON-schema object describing a tool's arguments."""
    return {
        "type": "object",
        "properties": {p.name: _parameter_schema(p) for p in tool.parameters},
        "required": [p.name for p in tool.parameters if p.required],
    }


def tools_to_openai_schema(tools: list[ToolDefinition]) -> list[dict]:
    """Convert ToolDefinitions to OpenAI function calling format.

    Also used for OpenAI-compatible local endpoints.

    Args:
        tools: List of ToolDefinition objects.

    Returns:
        List of dicts in OpenAI's tool format.
    """
    return [
        {
            "type": "function",
            "function": {
                "name": tool.name,
                "description": tool.description,
                "parameters": parameters_to_json_schema(tool),
            },
        }
        for tool in tools
    ]


def tools_to_anthropic_schema(tools: list[ToolDefinition]) -> list[dict]:
    """Convert ToolDefinitions to Anthropic tool use format.

    Args:
        tools: List of ToolDefinition objects.

    Returns:
        List of dicts in Anthropic's tool format.
    """
    return [
        {
            "name": tool.name,
            "description": tool.description,
            "input_schema": parameters_to_json_schema(tool),
        }
        for tool in tools
    ]
