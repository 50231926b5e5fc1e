import functools
from typing import Any, Optional

import tiktoken

from utils.logger import logger


@functools.lru_cache(maxsize=None)
def get_encoding(name: str) -> tiktoken.Encoding:
    """Loads a tiktoken encoding once per process. Encodings are safe to share."""
    logger.debug(f"Loading tiktoken encoding '{name}'")
    return tiktoken.get_encoding(name)


class TokenBudget:
    """
    Rejects prompts the backend cannot accept.

    Args:
        max_tokens: The largest accepted token count.
        encoding: The tiktoken encoding matching the backend.
        encoder: An object with tiktoken's ``encode`` signature. Defaults to
            the cached encoding named by ``encoding``.
    """

    def __init__(self, max_tokens: int = 4000, encoding: str = "cl100k_base", encoder: Optional[Any] = None):
        self.max_tokens = max_tokens
        self.encoding = encoding
        self._encoder = encoder

    @property
    def encoder(self) -> Any:
        if self._encoder is None:
            self._encoder = get_encoding(self.encoding)
        return self._encoder

    def count(self, text: str) -> int:
        # Diffs may legitimately contain "<|endoftext|>"; count it as plain text.
        return len(self.encoder.encode(text, disallowed_special=()))

    def exceeds(self, text: str) -> bool:
        return self.count(text) > self.max_tokens
