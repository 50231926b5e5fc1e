import os
import httpx
import json

from config.models import ModelConfig
from core.llm.registry import provider_registry
from utils.errors import ProviderError
from utils.logger import logger

DEFAULT_BASE_URL = "https://api.openai.com/v1"


@provider_registry.register("openai")
class OpenAIProvider:
    """
    A provider for OpenAI's chat completions API and compatible servers
    (set ``base_url`` for Ollama, DeepSeek, vLLM and the like).
    """

    def __init__(self, config: ModelConfig):
        self.config = config
        self._api_key = config.api_key or os.getenv("OPENAI_API_KEY")
        if not self._api_key:
            raise ProviderError("OpenAI API key not found. Please set it in the config or as an environment variable OPENAI_API_KEY.")
        self._base_url = config.base_url or DEFAULT_BASE_URL

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self._base_url,
            headers={
                "Authorization": f"Bearer {self._api_key}",
                "Content-Type": "application/json",
            },
            timeout=self.config.timeout_sec,
        )

    async def _request(self, payload: dict) -> httpx.Response:
        try:
            async with self._client() as client:
                response = await client.post("/chat/completions", json=payload)
                response.raise_for_status()
                return response
        except httpx.TimeoutException as e:
            raise ProviderError(f"Request to OpenAI timed out: {e}") from e
        except httpx.HTTPStatusError as e:
            try:
                error_details = e.response.json()
                error_message = error_details.get("error", {}).get("message", e.response.text)
            except (json.JSONDecodeError, AttributeError):
                error_message = e.response.text
            raise ProviderError(f"OpenAI API error ({e.response.status_code}): {error_message}") from e
        except httpx.RequestError as e:
            raise ProviderError(f"An unexpected network error occurred: {e}") from e

    def _build_payload(self, prompt: str, n: int) -> dict:
        return {
            **self.config.parameters,
            "model": self.config.name,
            "messages": [{"role": "user", "content": prompt}],
            "n": n,
            "stream": False,
        }

    async def generate(self, prompt: str, *, n: int = 1) -> str:
        """
        Requests ``n`` completions and returns the first one verbatim.
        """
        payload = self._build_payload(prompt, n)
        logger.debug(f"Requesting {n} completion(s) from {self._base_url} with model {self.config.name}")
        response = await self._request(payload)

        try:
            content = response.json()["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError, ValueError) as e:
            raise ProviderError(f"Malformed response from OpenAI: {e}") from e
        if content is None:
            raise ProviderError("OpenAI returned an empty completion.")
        return content
