from config.models import ModelConfig
from core.contracts.provider import LLMProvider
from core.llm.registry import provider_registry
from utils.errors import ProviderError

def get_provider(config: ModelConfig) -> LLMProvider:
    """
    Factory function to get an LLM provider instance based on the config.

    Args:
        config: The model configuration.

    Returns:
        An instance of a class that implements the LLMProvider protocol.

    Raises:
        ProviderError: If the provider is not found or fails to be created.
    """
    # Importing the package registers the built-in providers.
    import core.llm.providers  # noqa: F401

    try:
        return provider_registry.create(config.provider, config=config)
    except KeyError:
        raise ProviderError(
            f"Unknown provider '{config.provider}'. "
            f"Available providers: {provider_registry.names()}"
        )
    except ProviderError:
        raise
    except Exception as e:
        raise ProviderError(f"Failed to create provider '{config.provider}': {e}") from e
