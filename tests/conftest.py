"""Shared test fixtures."""

from __future__ import annotations

import textwrap
from collections.abc import Callable
from pathlib import Path

import pytest


@pytest.fixture()
def write_script(tmp_path: Path) -> Callable[..., Path]:
    """Write a script body into the test directory and return its path."""

    def _write(body: str, name: str = "script.py") -> Path:
        path = tmp_path / "scripts" / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(textwrap.dedent(body), "utf-8")
        return path

    return _write


@pytest.fixture()
def input_dir(tmp_path: Path) -> Path:
    """Five text files, two of them in a nested directory."""

    root = tmp_path / "input"
    nested = root / "nested"
    nested.mkdir(parents=True)
    for index in range(3):
        (root / f"item-{index}.txt").write_text(f"payload {index}", "utf-8")
    for index in range(3, 5):
        (nested / f"item-{index}.txt").write_text(f"payload {index}", "utf-8")
    return root


@pytest.fixture()
def route_all_to_success(write_script: Callable[..., Path]) -> Path:
    """Python script that sends every work item it takes to success."""

    return write_script(
        """\
        flow_file = session.get()
        if flow_file is not None:
            session.transfer(flow_file, REL_SUCCESS)
        """,
        name="route_all.py",
    )
