from typing import Protocol


class LLMProvider(Protocol):
    """A protocol for LLM providers."""

    async def generate(self, prompt: str, *, n: int = 1) -> str:
        """
        Generates a completion from the LLM.

        Args:
            prompt: The prompt to send to the LLM.
            n: The number of candidate completions to request.

        Returns:
            The text of the first candidate.

        Raises:
            ProviderError: If the request fails. The message may be empty.
        """
        ...
