from __future__ import annotations

from pathlib import Path

import pytest

from tml import Engine, EngineConfig

VIEWS_DIR = Path(__file__).resolve().parent / "views"


@pytest.fixture(scope="session")
def cached_engine() -> Engine:
    engine = Engine(EngineConfig(views_dir=VIEWS_DIR, cache=True))
    engine.preload()
    return engine


@pytest.fixture(scope="session")
def uncached_engine() -> Engine:
    return Engine(EngineConfig(views_dir=VIEWS_DIR))


@pytest.fixture(scope="session")
def small_context() -> dict[str, object]:
    return {"title": "Small", "items": [{"name": f"Item {i}", "price": i} for i in range(5)]}


@pytest.fixture(scope="session")
def large_context() -> dict[str, object]:
    return {"title": "Large", "items": [{"name": f"Item <{i}>", "price": i * 1.5} for i in range(500)]}
