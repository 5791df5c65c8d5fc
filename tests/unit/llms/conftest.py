# tests/unit/llms/conftest.py

import pytest
from fakes import RecordingSleep

from llm_roles.llms.base import ChatRequest, Message, Provider, Role
from llm_roles.llms.config import LLMConfig


@pytest.fixture
def fake_sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def user_request() -> ChatRequest:
    return ChatRequest(messages=[Message(role=Role.USER, content="Hello!")])


@pytest.fixture
def openai_config() -> LLMConfig:
    return LLMConfig(provider=Provider.OPENAI, model="gpt-4", api_key="test-key")
