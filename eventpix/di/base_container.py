from typing import Any, Callable, Dict, Hashable


class BaseContainer:
    """
    Minimal dependency injection container.
    
    Keys are domain interfaces, concrete classes or plain names. Singletons
    are shared instances; factories build a fresh object on every get().
    """
    
    def __init__(self) -> None:
        self._singletons: Dict[Hashable, Any] = {}
        self._factories: Dict[Hashable, Callable[[], Any]] = {}
    
    def register_singleton(self, key: Hashable, instance: Any) -> None:
        self._factories.pop(key, None)
        self._singletons[key] = instance
    
    def register_factory(self, key: Hashable, factory: Callable[[], Any]) -> None:
        self._singletons.pop(key, None)
        self._factories[key] = factory
    
    def has(self, key: Hashable) -> bool:
        return key in self._singletons or key in self._factories
    
    def get(self, key: Hashable) -> Any:
        """
        Resolve a dependency
        
        Raises:
            ValueError: nothing is registered under key
        """
        if key in self._singletons:
            return self._singletons[key]
        if key in self._factories:
            return self._factories[key]()
        name = getattr(key, "__name__", key)
        raise ValueError(f"Dependency not registered: {name}")
