"""Shared pytest fixtures for the seqflow test suite."""

from __future__ import annotations

from pathlib import Path
from typing import Generator

import pytest

import seqflow.config as cfg_module
from seqflow.config import Settings, override_settings


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------


@pytest.fixture
def test_settings(tmp_path: Path) -> Generator[Settings, None, None]:
    original = cfg_module._settings
    settings = Settings(
        logging={"level": "debug", "format": "console", "file": None},
    )
    override_settings(settings)
    yield settings
    override_settings(original)


# ---------------------------------------------------------------------------
# Dependency fixtures
# ---------------------------------------------------------------------------


class Node:
    """Element with an explicit dependency list, compared by identity."""

    def __init__(self, name: str, *requires: "Node") -> None:
        self.name = name
        self.requires: list[Node] = list(requires)

    def __repr__(self) -> str:
        return f"Node({self.name})"


@pytest.fixture
def diamond() -> dict[str, Node]:
    """root <- left, right <- merge."""
    root = Node("root")
    left = Node("left", root)
    right = Node("right", root)
    merge = Node("merge", left, right)
    return {"root": root, "left": left, "right": right, "merge": merge}
