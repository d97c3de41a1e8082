"""Compiler engine registry tests."""

from __future__ import annotations

from pathlib import Path

import pytest
from fakes import FakeEngine, RecordingHost

from compdrive.lib.config.settings import DriverSettings
from compdrive.lib.engine import EngineRegistry
from compdrive.lib.performance import Performance
from compdrive.lib.runtime import build_runtime
from compdrive.lib.types import EngineName


def _factory(host: object, performance: Performance) -> FakeEngine:
    del host
    return FakeEngine(performance)


def test_empty_registry_raises_key_error() -> None:
    with pytest.raises(KeyError, match="No compiler engine is installed"):
        EngineRegistry().get()


def test_unknown_engine_lists_available() -> None:
    registry = EngineRegistry()
    registry.register(EngineName("reference"), _factory)

    with pytest.raises(KeyError, match="Available: reference"):
        registry.get("missing")


def test_default_engine_is_first_by_name(tmp_path: Path) -> None:
    registry = EngineRegistry()
    registry.register(EngineName("zeta"), _factory)
    registry.register(EngineName("alpha"), _factory)
    performance = Performance()

    engine = registry.create(RecordingHost(tmp_path), performance)

    assert registry.names() == ("alpha", "zeta")
    assert isinstance(engine, FakeEngine)
    assert engine.performance is performance
    assert registry.get() is registry.get("alpha")


def test_from_entry_points_with_unused_group_is_empty() -> None:
    registry = EngineRegistry.from_entry_points("compdrive.tests.no-such-group")

    assert registry.names() == ()


def test_runtime_creates_engine_lazily(tmp_path: Path) -> None:
    registry = EngineRegistry()
    runtime = build_runtime(DriverSettings(), host=RecordingHost(tmp_path), registry=registry)

    with pytest.raises(KeyError):
        runtime.create_engine()

    registry.register(EngineName("reference"), _factory)
    engine = runtime.create_engine()

    assert isinstance(engine, FakeEngine)
    assert engine.performance is runtime.stats.performance
