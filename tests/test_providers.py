"""
Tests for completion providers, using stand-in SDK clients.
"""

import asyncio
from types import SimpleNamespace

import pytest

from mentor_assistant.config import ConfigError, Settings
from mentor_assistant.errors import ProviderError
from mentor_assistant.formats import PATTERNS
from mentor_assistant.mock_router import MockProvider
from mentor_assistant.providers import FoundryProvider, GeminiProvider, build_provider


class _GeminiModels:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.requests = []

    async def generate_content(self, model, contents, config):
        self.requests.append((model, contents, config))
        if self.error is not None:
            raise self.error
        return self.response


class _GeminiClient:
    """Sync client with its ``aio`` counterpart; records closes."""

    def __init__(self, models):
        self.closed = []
        self.aio = SimpleNamespace(models=models, aclose=self._aclose)

    async def _aclose(self):
        self.closed.append("aio")

    def close(self):
        self.closed.append("sync")


def _gemini_client(models):
    return _GeminiClient(models)


def _gemini_response(text):
    usage = SimpleNamespace(prompt_token_count=12, candidates_token_count=34)
    return SimpleNamespace(text=text, usage_metadata=usage, model_version="gemini-2.5-flash-001")


class TestGeminiProvider:
    def test_requests_json_with_schema_hint(self):
        models = _GeminiModels(response=_gemini_response('{"summary": "ok"}'))
        provider = GeminiProvider("", client=_gemini_client(models))
        result = asyncio.run(provider.complete("the prompt", PATTERNS.provider_schema))

        assert result.text == '{"summary": "ok"}'
        assert result.model == "gemini-2.5-flash-001"
        assert (result.prompt_tokens, result.completion_tokens) == (12, 34)

        model, contents, config = models.requests[0]
        assert model == "gemini-2.5-flash"
        assert contents[0].parts[0].text == "the prompt"
        assert config.response_mime_type == "application/json"
        assert config.response_schema is not None

    def test_empty_text_is_provider_error(self):
        provider = GeminiProvider("", client=_gemini_client(_GeminiModels(response=_gemini_response(None))))
        with pytest.raises(ProviderError):
            asyncio.run(provider.complete("p"))

    def test_sdk_error_is_provider_error(self):
        models = _GeminiModels(error=RuntimeError("503 UNAVAILABLE"))
        provider = GeminiProvider("", client=_gemini_client(models))
        with pytest.raises(ProviderError):
            asyncio.run(provider.complete("p"))

    def test_api_key_required_without_client(self):
        with pytest.raises(ConfigError):
            GeminiProvider("")

    def test_aclose_releases_both_clients(self):
        client = _gemini_client(_GeminiModels())
        asyncio.run(GeminiProvider("", client=client).aclose())
        assert client.closed == ["aio", "sync"]


class _ChatCompletions:
    def __init__(self, content):
        self.content = content
        self.kwargs = None

    def create(self, **kwargs):
        self.kwargs = kwargs
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(
            choices=[SimpleNamespace(message=message)],
            usage=SimpleNamespace(prompt_tokens=5, completion_tokens=7),
            model="gpt-4o-mini",
        )


class _Project:
    def __init__(self, completions):
        self.completions = completions
        self.closed = False
        self.openai_closed = False

    def get_openai_client(self):
        return SimpleNamespace(chat=SimpleNamespace(completions=self.completions), close=self._close_openai)

    def _close_openai(self):
        self.openai_closed = True

    def close(self):
        self.closed = True


class TestFoundryProvider:
    def test_json_mode_chat_completion(self):
        completions = _ChatCompletions('{"summary": "ok"}')
        provider = FoundryProvider("", deployment="model-router", project=_Project(completions))
        result = asyncio.run(provider.complete("the prompt", PATTERNS.provider_schema))

        assert result.text == '{"summary": "ok"}'
        assert result.model == "gpt-4o-mini"
        assert completions.kwargs["model"] == "model-router"
        assert completions.kwargs["response_format"] == {"type": "json_object"}
        assert completions.kwargs["messages"] == [{"role": "user", "content": "the prompt"}]

    def test_empty_content_is_provider_error(self):
        provider = FoundryProvider("", project=_Project(_ChatCompletions(None)))
        with pytest.raises(ProviderError):
            asyncio.run(provider.complete("p"))

    def test_aclose_before_first_call(self):
        project = _Project(_ChatCompletions("{}"))
        asyncio.run(FoundryProvider("", project=project).aclose())
        assert project.closed
        assert not project.openai_closed

    def test_aclose_after_a_call_closes_openai_client(self):
        project = _Project(_ChatCompletions("{}"))
        provider = FoundryProvider("", project=project)
        asyncio.run(provider.complete("p"))
        asyncio.run(provider.aclose())
        assert project.closed
        assert project.openai_closed

    def test_endpoint_required_without_project(self):
        with pytest.raises(ConfigError):
            FoundryProvider("")


class TestBuildProvider:
    def test_mock_mode(self):
        assert isinstance(build_provider(Settings(mock_mode=True)), MockProvider)

    def test_gemini_requires_key(self):
        with pytest.raises(ConfigError):
            build_provider(Settings(ai_provider="gemini"))

    def test_foundry_requires_endpoint(self):
        with pytest.raises(ConfigError):
            build_provider(Settings(ai_provider="foundry"))
