import logging

import pytest
from unittest.mock import AsyncMock, MagicMock

from app.core.assistant import GeminiAssistant


class FakeClient:
    """Steht für AsyncOpenAI als Context Manager und merkt sich, ob er
    geschlossen wurde."""

    def __init__(self, completion=None, error=None, **kwargs):
        self.kwargs = kwargs
        self.closed = False
        self.chat = MagicMock()
        self.chat.completions.create = AsyncMock(return_value=completion, side_effect=error)

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        self.closed = True
        return False


def _choice(content):
    choice = MagicMock()
    choice.message.content = content
    return choice


def _factory(completion=None, error=None):
    created = []

    def factory(**kwargs):
        client = FakeClient(completion=completion, error=error, **kwargs)
        created.append(client)
        return client

    return factory, created


@pytest.mark.asyncio
async def test_ask_sends_fragments_as_one_message(test_settings):
    completion = MagicMock(choices=[_choice("Sure")])
    factory, created = _factory(completion=completion)
    assistant = GeminiAssistant(test_settings, client_factory=factory)

    reply = await assistant.ask(["persona", "Hello"])

    assert reply == "Sure"
    client = created[0]
    assert client.kwargs == {"api_key": "test_key", "base_url": test_settings.gemini_base_url}
    client.chat.completions.create.assert_awaited_once_with(
        model="gemini-test",
        messages=[
            {
                "role": "user",
                "content": [
                    {"type": "text", "text": "persona"},
                    {"type": "text", "text": "Hello"},
                ],
            }
        ],
        n=1,
    )
    assert client.closed


@pytest.mark.asyncio
async def test_all_candidates_are_concatenated_and_trimmed(test_settings):
    completion = MagicMock(choices=[_choice("  Morning"), _choice(None), _choice(" meeting at 10\n")])
    factory, _ = _factory(completion=completion)

    reply = await GeminiAssistant(test_settings, client_factory=factory).ask(["q"])

    assert reply == "Morning meeting at 10"


@pytest.mark.asyncio
async def test_failure_text_becomes_the_reply(test_settings, caplog):
    factory, created = _factory(error=RuntimeError("E"))

    with caplog.at_level(logging.WARNING):
        reply = await GeminiAssistant(test_settings, client_factory=factory).ask(["q"])

    assert reply == "E"
    assert created[0].closed
    assert "Gemini request failed" in caplog.text


@pytest.mark.asyncio
async def test_each_call_uses_a_fresh_client(test_settings):
    completion = MagicMock(choices=[_choice("ok")])
    factory, created = _factory(completion=completion)
    assistant = GeminiAssistant(test_settings, client_factory=factory)

    await assistant.ask(["a"])
    await assistant.ask(["b"])

    assert len(created) == 2
    assert all(c.closed for c in created)


@pytest.mark.asyncio
async def test_latency_is_logged(test_settings, caplog):
    completion = MagicMock(choices=[_choice("ok")])
    factory, _ = _factory(completion=completion)

    with caplog.at_level(logging.INFO):
        await GeminiAssistant(test_settings, client_factory=factory).ask(["a", "b", "c"])

    assert "context length 3" in caplog.text
