"""
Completion providers.

  - GeminiProvider  – Google Gemini via google-genai (default)
  - FoundryProvider – Azure AI Foundry deployment via azure-ai-projects
  - MockProvider    – golden outputs, see mock_router

Every provider takes the prompt plus an optional response-schema hint and
returns a CompletionResult whose text is expected to contain a JSON object.
Providers raise ProviderError when the call fails or yields no text.
"""

from __future__ import annotations

import logging
from typing import Protocol

from azure.ai.projects import AIProjectClient
from azure.identity import DefaultAzureCredential
from google import genai
from google.genai import types
from starlette.concurrency import run_in_threadpool

from mentor_assistant.config import ConfigError, Settings
from mentor_assistant.errors import CompletionResult, ProviderError
from mentor_assistant.mock_router import MockProvider

logger = logging.getLogger("mentor-assistant.providers")


class CompletionProvider(Protocol):
    model: str

    async def complete(self, prompt: str, response_schema: dict | None = None) -> CompletionResult:
        ...


class GeminiProvider:
    """Constrained JSON completions from Gemini."""

    def __init__(self, api_key: str, model: str = "gemini-2.5-flash", client: genai.Client | None = None):
        if client is None:
            if not api_key:
                raise ConfigError("GEMINI_API_KEY env var is required when AI_PROVIDER=gemini.")
            client = genai.Client(api_key=api_key)
        self._client = client
        self.model = model

    async def complete(self, prompt: str, response_schema: dict | None = None) -> CompletionResult:
        config = types.GenerateContentConfig(
            response_mime_type="application/json",
            response_schema=response_schema,
        )
        try:
            response = await self._client.aio.models.generate_content(
                model=self.model,
                contents=[types.Content(role="user", parts=[types.Part(text=prompt)])],
                config=config,
            )
        except Exception as exc:
            raise ProviderError(f"Gemini call failed: {exc}") from exc

        text = response.text
        if not text:
            raise ProviderError("No text response from AI.")

        usage = response.usage_metadata
        return CompletionResult(
            text=text,
            model=getattr(response, "model_version", None) or self.model,
            prompt_tokens=getattr(usage, "prompt_token_count", None) if usage else None,
            completion_tokens=getattr(usage, "candidates_token_count", None) if usage else None,
        )

    async def aclose(self) -> None:
        """Release the HTTP connections held by the genai client."""
        await self._client.aio.aclose()
        self._client.close()


class FoundryProvider:
    """Chat completions against an Azure AI Foundry model deployment.

    JSON mode is requested with ``response_format={"type": "json_object"}``;
    the schema itself travels in the prompt.
    """

    def __init__(self, endpoint: str, deployment: str = "model-router", project: AIProjectClient | None = None):
        if project is None:
            if not endpoint:
                raise ConfigError(
                    "AZURE_AI_PROJECT_ENDPOINT env var is required when AI_PROVIDER=foundry. "
                    "Set it to your Foundry project endpoint URL."
                )
            project = AIProjectClient(endpoint=endpoint, credential=DefaultAzureCredential())
        self._project = project
        self._chat = None
        self.model = deployment

    def _complete_sync(self, prompt: str) -> CompletionResult:
        if self._chat is None:
            self._chat = self._project.get_openai_client()
        response = self._chat.chat.completions.create(
            model=self.model,
            messages=[{"role": "user", "content": prompt}],
            response_format={"type": "json_object"},
        )
        text = response.choices[0].message.content if response.choices else None
        if not text:
            raise ProviderError("No text response from AI.")

        prompt_tokens = completion_tokens = None
        if getattr(response, "usage", None):
            prompt_tokens = getattr(response.usage, "prompt_tokens", None)
            completion_tokens = getattr(response.usage, "completion_tokens", None)
        return CompletionResult(
            text=text,
            model=getattr(response, "model", None) or self.model,
            prompt_tokens=prompt_tokens,
            completion_tokens=completion_tokens,
        )

    async def complete(self, prompt: str, response_schema: dict | None = None) -> CompletionResult:
        try:
            return await run_in_threadpool(self._complete_sync, prompt)
        except ProviderError:
            raise
        except Exception as exc:
            raise ProviderError(f"Foundry call failed: {exc}") from exc

    async def aclose(self) -> None:
        if self._chat is not None:
            self._chat.close()
        self._project.close()


def build_provider(settings: Settings) -> CompletionProvider:
    """Pick the provider for the configured mode."""
    if settings.mock_mode:
        return MockProvider()
    if settings.ai_provider == "foundry":
        return FoundryProvider(settings.azure_ai_project_endpoint, settings.model_router_deployment)
    return GeminiProvider(settings.gemini_api_key, settings.gemini_model)
