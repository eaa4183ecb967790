import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from search_backend.errors import CompletionError
from search_backend.llm.config import LLMConfig
from search_backend.llm.groq_client import complete

ENABLED_CONFIG = LLMConfig(api_key="test-key")
MISSING_KEY_CONFIG = LLMConfig(api_key="")


def _groq_client(mock_groq_cls):
    client = mock_groq_cls.return_value
    client.__aenter__.return_value = client
    client.__aexit__.return_value = False
    return client


def _mock_groq_response(content):
    message = MagicMock()
    message.content = content
    choice = MagicMock()
    choice.message = message
    response = MagicMock()
    response.choices = [choice]
    return response


@patch("search_backend.llm.groq_client.AsyncGroq")
def test_complete_returns_message_text(mock_groq_cls):
    create = AsyncMock(return_value=_mock_groq_response('{"place": "kilimani"}'))
    _groq_client(mock_groq_cls).chat.completions.create = create

    result = asyncio.run(complete("extract this", config=ENABLED_CONFIG))

    assert result == '{"place": "kilimani"}'
    kwargs = create.call_args.kwargs
    assert kwargs["model"] == ENABLED_CONFIG.model
    assert kwargs["messages"] == [{"role": "user", "content": "extract this"}]


@patch("search_backend.llm.groq_client.AsyncGroq")
def test_complete_empty_content_is_empty_string(mock_groq_cls):
    _groq_client(mock_groq_cls).chat.completions.create = AsyncMock(
        return_value=_mock_groq_response(None)
    )
    assert asyncio.run(complete("q", config=ENABLED_CONFIG)) == ""


@patch("search_backend.llm.groq_client.AsyncGroq")
def test_complete_wraps_api_errors(mock_groq_cls):
    _groq_client(mock_groq_cls).chat.completions.create = AsyncMock(side_effect=Exception("API timeout"))

    with pytest.raises(CompletionError):
        asyncio.run(complete("q", config=ENABLED_CONFIG))


@patch("search_backend.llm.groq_client.AsyncGroq")
def test_complete_without_choices(mock_groq_cls):
    response = MagicMock()
    response.choices = []
    _groq_client(mock_groq_cls).chat.completions.create = AsyncMock(return_value=response)

    with pytest.raises(CompletionError):
        asyncio.run(complete("q", config=ENABLED_CONFIG))


def test_complete_requires_api_key():
    with pytest.raises(CompletionError):
        asyncio.run(complete("q", config=MISSING_KEY_CONFIG))


@patch("search_backend.llm.groq_client.AsyncGroq")
def test_complete_closes_client(mock_groq_cls):
    client = _groq_client(mock_groq_cls)
    client.chat.completions.create = AsyncMock(return_value=_mock_groq_response("{}"))

    asyncio.run(complete("q", config=ENABLED_CONFIG))

    client.__aexit__.assert_awaited_once()


@patch("search_backend.llm.groq_client.AsyncGroq")
def test_complete_closes_client_on_error(mock_groq_cls):
    client = _groq_client(mock_groq_cls)
    client.chat.completions.create = AsyncMock(side_effect=Exception("API timeout"))

    with pytest.raises(CompletionError):
        asyncio.run(complete("q", config=ENABLED_CONFIG))
    client.__aexit__.assert_awaited_once()
