"""Priority registry shared by casters, transformers, validators and input normalizers.

Strategies are registered with an integer priority. Lookup walks them in
descending priority; equal priorities keep registration order. The sorted
view is cached until the next registration.
"""
from __future__ import annotations

import inspect
from types import ModuleType
from typing import Any, Callable, Generic, Iterator, TypeVar

S = TypeVar("S")


class PriorityRegistry(Generic[S]):
    """Ordered strategy chain with first-match dispatch."""
    
    def __init__(self) -> None:
        self._entries: list[tuple[S, int]] = []
        self._sorted: list[S] | None = None
    
    def register(self, strategy: S, priority: int = 0) -> None:
        """Register a strategy. Higher priority strategies are consulted first."""
        self._entries.append((strategy, priority))
        self._sorted = None
    
    def strategies(self) -> list[S]:
        """Strategies in dispatch order."""
        if self._sorted is None:
            # sorted() is stable, so ties keep registration order
            self._sorted = [s for s, _ in sorted(self._entries, key=lambda entry: -entry[1])]
        return self._sorted
    
    def first(self, predicate: Callable[[S], bool]) -> S | None:
        """Return the first strategy, in priority order, accepted by predicate."""
        return next((s for s in self.strategies() if predicate(s)), None)
    
    def matching(self, predicate: Callable[[S], bool]) -> list[S]:
        return [s for s in self.strategies() if predicate(s)]
    
    def discover(self, module: ModuleType, base: type, factory: Callable[[type], S] | None = None) -> int:
        """Register every concrete subclass of ``base`` defined in ``module``.
        
        Each class must expose a ``priority`` attribute. ``factory`` builds the
        instance (defaults to calling the class with no arguments). Returns the
        number of strategies registered.
        """
        build = factory or (lambda cls: cls())
        found = [
            obj for _, obj in inspect.getmembers(module, inspect.isclass)
            if issubclass(obj, base) and obj is not base and not inspect.isabstract(obj)
            and obj.__module__ == module.__name__
        ]
        for cls in found:
            self.register(build(cls), getattr(cls, "priority", 0))
        return len(found)
    
    def clear(self) -> None:
        self._entries.clear()
        self._sorted = None
    
    def __len__(self) -> int: return len(self._entries)
    
    def __iter__(self) -> Iterator[S]: return iter(self.strategies())
    
    def __contains__(self, strategy: Any) -> bool: return any(s is strategy for s, _ in self._entries)
