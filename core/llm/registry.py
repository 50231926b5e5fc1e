from typing import Any, Callable, Dict, List, Type, TypeVar

from config.models import ModelConfig

T = TypeVar("T")


class ProviderRegistry:
    """Maps provider names (as used in ``model.provider``) to provider classes."""

    def __init__(self):
        self._providers: Dict[str, Type[Any]] = {}

    def register(self, name: str) -> Callable[[Type[T]], Type[T]]:
        """
        Class decorator registering a provider under ``name``.

        Raises:
            ValueError: If the name is already taken.
        """
        def decorator(cls: Type[T]) -> Type[T]:
            if name in self._providers:
                raise ValueError(f"Provider '{name}' is already registered.")
            self._providers[name] = cls
            return cls
        return decorator

    def get(self, name: str) -> Type[Any]:
        if name not in self._providers:
            raise KeyError(f"Provider '{name}' not found in registry.")
        return self._providers[name]

    def create(self, name: str, config: ModelConfig, **kwargs: Any) -> Any:
        return self.get(name)(config=config, **kwargs)

    def names(self) -> List[str]:
        return sorted(self._providers)

    def __contains__(self, name: str) -> bool:
        return name in self._providers


provider_registry = ProviderRegistry()
