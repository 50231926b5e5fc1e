import asyncio

from config.models import ModelConfig
from core.llm.registry import provider_registry


@provider_registry.register("dummy")
class DummyProvider:
    """An offline provider returning a fixed message. Useful for trying the CLI without an API key."""

    def __init__(self, config: ModelConfig, response: str = "Update staged files"):
        self.config = config
        self._response = config.parameters.get("response", response)

    async def generate(self, prompt: str, *, n: int = 1) -> str:
        await asyncio.sleep(0) # Yield like a real request would
        return self._response
