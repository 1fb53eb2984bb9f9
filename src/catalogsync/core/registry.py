from typing import Type, Dict
from .base import BaseComponent


class BackendRegistry:

    def __init__(self, kind: str):
        self.kind = kind
        self._registry: Dict[str, Type[BaseComponent]] = {}

    def register(self, name: str):
        def decorator(cls: Type[BaseComponent]):
            self._registry[name] = cls
            return cls
        return decorator

    def get(self, name: str) -> Type[BaseComponent]:
        if name not in self._registry:
            raise KeyError(
                f"{self.kind} backend '{name}' not found. "
                f"Available: {list(self._registry.keys())}"
            )
        return self._registry[name]

    def list_available(self) -> list[str]:
        return list(self._registry.keys())


record_store_registry = BackendRegistry("Record store")
cache_store_registry = BackendRegistry("Cache store")
search_index_registry = BackendRegistry("Search index")
