"""In-process backend for Python scripts."""

from __future__ import annotations

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from types import CodeType
from typing import Any

from script_runner.runner.errors import InvalidConfigurationError, ScriptExecutionError
from script_runner.runner.models import Relationship, RunConfiguration
from script_runner.runner.session import ProcessSession

logger = logging.getLogger(__name__)

SCRIPT_LOGGER_NAME = "script_runner.script"


class PythonScriptBackend:
    """Execute a Python script with ``session``, ``log`` and relationship bindings.

    The script is compiled once during validation and then executed with fresh
    globals on every pass. Configured properties are bound as plain string
    variables; the reserved bindings win on a name clash.
    """

    def __init__(self) -> None:
        self._code: CodeType | None = None

    def validate(self, configuration: RunConfiguration) -> None:
        script_path = configuration.script_path
        try:
            source = script_path.read_bytes()
            self._code = compile(source, str(script_path), "exec")
        except (OSError, SyntaxError, ValueError) as error:
            raise InvalidConfigurationError(
                f"Script could not be compiled: {script_path}: {error}",
            ) from error

    def run_pass(self, session: ProcessSession, configuration: RunConfiguration) -> None:
        if self._code is None:
            self.validate(configuration)
        namespace = _script_bindings(session=session, configuration=configuration)
        with _module_search_path(configuration.module_paths):
            try:
                exec(self._code, namespace)  # noqa: S102
            except (Exception, SystemExit) as error:
                raise ScriptExecutionError(f"{type(error).__name__}: {error}") from error


def _script_bindings(
    *,
    session: ProcessSession,
    configuration: RunConfiguration,
) -> dict[str, Any]:
    namespace: dict[str, Any] = dict(configuration.properties)
    namespace.update(
        {
            "__name__": "__main__",
            "__file__": str(configuration.script_path),
            "session": session,
            "log": logging.getLogger(SCRIPT_LOGGER_NAME),
            "REL_SUCCESS": Relationship.SUCCESS,
            "REL_FAILURE": Relationship.FAILURE,
        },
    )
    return namespace


@contextmanager
def _module_search_path(module_paths: tuple[Path, ...]) -> Iterator[None]:
    saved = list(sys.path)
    sys.path[:0] = [str(path) for path in module_paths]
    try:
        yield
    finally:
        sys.path[:] = saved
