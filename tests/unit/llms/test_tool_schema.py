# tests/unit/llms/test_tool_schema.py

from typing import Literal

import pytest
from pydantic import BaseModel, Field

from llm_roles.llms._tool_schema import (
    parameters_to_json_schema,
    tools_to_anthropic_schema,
    tools_to_openai_schema,
)
from llm_roles.llms.base import ToolDefinition, ToolParameter


class SearchInput(BaseModel):
    """Search for documents."""

    query: str = Field(description="The search query")
    limit: int = Field(default=10, description="Max results")


class WeatherInput(BaseModel):
    city: str
    unit: Literal["celsius", "fahrenheit"] = "celsius"
    tags: list[str] = Field(default_factory=list)


@pytest.fixture
def sample_tools() -> list[ToolDefinition]:
    return [
        ToolDefinition.from_model("search", "Search the knowledge base", SearchInput),
        ToolDefinition(
            name="get_weather",
            description="Get current weather",
            parameters=[
                ToolParameter(
                    name="city", type="string", description="City name", required=True
                ),
                ToolParameter(
                    name="unit",
                    type="string",
                    description="Temperature unit",
                    enum=["celsius", "fahrenheit"],
                ),
            ],
        ),
    ]


class TestToolSchemaConversion:
    def test_tools_to_openai_schema(self, sample_tools: list[ToolDefinition]) -> None:
        """Test conversion to OpenAI format."""
        schema = tools_to_openai_schema(sample_tools)

        assert len(schema) == 2

        # Check first tool
        assert schema[0]["type"] == "function"
        assert schema[0]["function"]["name"] == "search"
        assert schema[0]["function"]["description"] == "Search the knowledge base"
        assert "properties" in schema[0]["function"]["parameters"]
        assert "query" in schema[0]["function"]["parameters"]["properties"]

        # Check second tool
        assert schema[1]["function"]["name"] == "get_weather"

    def test_tools_to_anthropic_schema(self, sample_tools: list[ToolDefinition]) -> None:
        """Test conversion to Anthropic format."""
        schema = tools_to_anthropic_schema(sample_tools)

        assert len(schema) == 2

        # Check first tool (Anthropic format is flatter)
        assert schema[0]["name"] == "search"
        assert schema[0]["description"] == "Search the knowledge base"
        assert "properties" in schema[0]["input_schema"]

        # Check second tool
        assert schema[1]["name"] == "get_weather"

    def test_empty_tools_list(self) -> None:
        """Test empty tools list."""
        assert tools_to_openai_schema([]) == []
        assert tools_to_anthropic_schema([]) == []

    def test_schema_includes_field_descriptions(
        self, sample_tools: list[ToolDefinition]
    ) -> None:
        """Test that field descriptions are included in schema."""
        schema = tools_to_openai_schema(sample_tools)

        query_prop = schema[0]["function"]["parameters"]["properties"]["query"]
        assert query_prop.get("description") == "The search query"

    def test_required_and_enum(self, sample_tools: list[ToolDefinition]) -> None:
        schema = parameters_to_json_schema(sample_tools[1])

        assert schema["type"] == "object"
        assert schema["required"] == ["city"]
        assert schema["properties"]["unit"] == {
            "type": "string",
            "description": "Temperature unit",
            "enum": ["celsius", "fahrenheit"],
        }

    def test_array_items_default_to_string(self) -> None:
        tool = ToolDefinition(
            name="tag",
            description="Tag a document",
            parameters=[ToolParameter(name="tags", type="array", description="Tags")],
        )

        schema = parameters_to_json_schema(tool)

        assert schema["properties"]["tags"]["items"] == {"type": "string"}
        assert schema["required"] == []

    def test_array_items_kept_when_given(self) -> None:
        tool = ToolDefinition(
            name="score",
            description="Score documents",
            parameters=[
                ToolParameter(
                    name="ids",
                    type="array",
                    description="Document ids",
                    items={"type": "integer"},
                )
            ],
        )

        schema = parameters_to_json_schema(tool)

        assert schema["properties"]["ids"]["items"] == {"type": "integer"}

    def test_both_formats_share_parameter_schema(
        self, sample_tools: list[ToolDefinition]
    ) -> None:
        openai_schema = tools_to_openai_schema(sample_tools)
        anthropic_schema = tools_to_anthropic_schema(sample_tools)

        for openai_tool, anthropic_tool in zip(openai_schema, anthropic_schema):
            assert openai_tool["function"]["parameters"] == anthropic_tool["input_schema"]


class TestToolDefinitionFromModel:
    def test_fields_mapped(self) -> None:
        tool = ToolDefinition.from_model("search", "Search", SearchInput)

        by_name = {p.name: p for p in tool.parameters}
        assert by_name["query"].type == "string"
        assert by_name["query"].required is True
        assert by_name["query"].description == "The search query"
        assert by_name["limit"].type == "integer"
        assert by_name["limit"].required is False

    def test_literal_becomes_enum(self) -> None:
        tool = ToolDefinition.from_model("get_weather", "Weather", WeatherInput)

        unit = next(p for p in tool.parameters if p.name == "unit")
        assert unit.enum == ["celsius", "fahrenheit"]
        assert unit.type == "string"

    def test_list_field_keeps_item_schema(self) -> None:
        tool = ToolDefinition.from_model("get_weather", "Weather", WeatherInput)

        tags = next(p for p in tool.parameters if p.name == "tags")
        assert tags.type == "array"
        assert tags.items == {"type": "string"}
