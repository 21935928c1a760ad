from abc import ABC, abstractmethod
from types import ModuleType

from bindery.core.registry import PriorityRegistry


class Strategy(ABC):
    priority = 0

    @abstractmethod
    def run(self) -> str:
        """Name of the strategy."""


class Elsewhere(Strategy):
    priority = 99

    def run(self) -> str: return "elsewhere"


def plugin_module() -> ModuleType:
    module = ModuleType("plugins")

    class Partial(Strategy):
        pass

    class Fast(Strategy):
        priority = 20

        def run(self) -> str: return "fast"

    class Slow(Strategy):
        priority = 5

        def run(self) -> str: return "slow"

    for cls in (Partial, Fast, Slow):
        cls.__module__ = module.__name__
        setattr(module, cls.__name__, cls)
    # imported names are not registered
    module.Strategy = Strategy
    module.Elsewhere = Elsewhere
    return module


class TestPriorityRegistry:

    def test_descending_priority(self):
        registry = PriorityRegistry()
        registry.register("low", 1)
        registry.register("high", 10)
        registry.register("mid", 5)
        assert registry.strategies() == ["high", "mid", "low"]

    def test_ties_keep_registration_order(self):
        registry = PriorityRegistry()
        for name in ("a", "b", "c"):
            registry.register(name, 5)
        assert list(registry) == ["a", "b", "c"]

    def test_registration_invalidates_the_sorted_view(self):
        registry = PriorityRegistry()
        registry.register("first", 1)
        assert registry.first(lambda s: True) == "first"
        registry.register("second", 2)
        assert registry.first(lambda s: True) == "second"

    def test_first_and_matching(self):
        registry = PriorityRegistry()
        registry.register("apple", 1)
        registry.register("avocado", 3)
        registry.register("banana", 2)
        assert registry.first(lambda s: s.startswith("a")) == "avocado"
        assert registry.matching(lambda s: s.startswith("a")) == ["avocado", "apple"]
        assert registry.first(lambda s: s.startswith("z")) is None

    def test_contains_by_identity(self):
        registry = PriorityRegistry()
        strategy = Elsewhere()
        registry.register(strategy)
        assert strategy in registry
        assert Elsewhere() not in registry

    def test_clear(self):
        registry = PriorityRegistry()
        registry.register("a")
        registry.clear()
        assert len(registry) == 0
        assert registry.strategies() == []


class TestDiscover:

    def test_registers_concrete_subclasses_defined_in_the_module(self):
        registry = PriorityRegistry()
        assert registry.discover(plugin_module(), Strategy) == 2
        assert [s.run() for s in registry] == ["fast", "slow"]

    def test_custom_factory(self):
        registry = PriorityRegistry()
        built = []
        registry.discover(plugin_module(), Strategy, factory=lambda cls: built.append(cls.__name__) or cls())
        assert sorted(built) == ["Fast", "Slow"]
