"""Shared fixtures for feature migration tests."""

import pytest

from feature_migration.registry import FeatureRegistry


@pytest.fixture
def registry():
    """Fresh registry with the packaged template library."""
    return FeatureRegistry()


@pytest.fixture
def write_source(tmp_path):
    """Write a source file under tmp_path and return its path as a string."""

    def _write(relative_path: str, content: str) -> str:
        path = tmp_path / relative_path
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        return str(path)

    return _write


@pytest.fixture
def feature_data():
    """Build a registration payload with sensible defaults."""

    def _build(name="Task.create", usage=None, **overrides):
        data = {
            "name": name,
            "description": f"Test feature {name}",
            "base44_usage": usage if usage is not None else [f"base44Entities.{name}("],
            "rest_endpoints": [],
            "dependencies": [],
            "priority": "medium",
            "status": "detected",
        }
        data.update(overrides)
        return data

    return _build
