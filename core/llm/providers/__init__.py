from core.llm.providers import dummy_provider, openai  # noqa: F401
