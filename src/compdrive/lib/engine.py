"""Compiler engine registry backed by installed entry points."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from importlib.metadata import entry_points

import structlog

from compdrive.lib.performance import Performance
from compdrive.lib.ports import CompilerEngine, System
from compdrive.lib.types import EngineName

logger = structlog.get_logger(__name__)

ENGINE_ENTRY_POINT_GROUP = "compdrive.engines"

EngineFactory = Callable[[System, Performance], CompilerEngine]


def _empty_factories() -> dict[EngineName, EngineFactory]:
    return {}


@dataclass(slots=True)
class EngineRegistry:
    """Engine factories keyed by EngineName."""

    _factories: dict[EngineName, EngineFactory] = field(default_factory=_empty_factories)

    @classmethod
    def from_entry_points(cls, group: str = ENGINE_ENTRY_POINT_GROUP) -> EngineRegistry:
        registry = cls()
        for entry_point in entry_points(group=group):
            try:
                factory = entry_point.load()
            except (ImportError, AttributeError):
                logger.warning(
                    "failed to load compiler engine", engine=entry_point.name, exc_info=True
                )
                continue
            registry.register(EngineName(entry_point.name), factory)
        return registry

    def register(self, name: EngineName, factory: EngineFactory) -> None:
        self._factories[name] = factory

    def names(self) -> tuple[EngineName, ...]:
        return tuple(sorted(self._factories))

    def get(self, name: str = "") -> EngineFactory:
        """Return the named factory, or the first registered one when `name` is empty."""

        if not self._factories:
            raise KeyError(
                "No compiler engine is installed. Install a package that provides a "
                f"'{ENGINE_ENTRY_POINT_GROUP}' entry point."
            )
        if not name:
            return self._factories[self.names()[0]]
        if name not in self._factories:
            raise KeyError(
                f"Unknown compiler engine '{name}'. Available: {', '.join(self.names())}."
            )
        return self._factories[EngineName(name)]

    def create(self, host: System, performance: Performance, name: str = "") -> CompilerEngine:
        factory = self.get(name)
        logger.debug("creating compiler engine", engine=name or self.names()[0])
        return factory(host, performance)
