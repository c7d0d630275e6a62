"""Global pytest configuration.

Registers the shared fixture plugin `tests.lib.algorithms.sample_graphs`
without importing it here, so pytest applies assertion rewriting to it.
"""

from __future__ import annotations

from importlib.util import find_spec

pytest_plugins: list[str] = []
if find_spec("tests.lib.algorithms.sample_graphs") is not None:
    pytest_plugins = ["tests.lib.algorithms.sample_graphs"]
