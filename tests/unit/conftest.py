"""Conftest for unit tests - mark everything collected under tests/unit."""

import pytest


def pytest_collection_modifyitems(config, items):
    """Apply the ``unit`` marker to tests living in the unit directory."""
    for item in items:
        if "unit" in item.path.parts:
            item.add_marker(pytest.mark.unit)
