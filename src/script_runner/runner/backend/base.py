"""Backend interface for script execution."""

from __future__ import annotations

from typing import Protocol

from script_runner.runner.models import RunConfiguration
from script_runner.runner.session import ProcessSession


class ScriptBackend(Protocol):
    """Protocol implemented by script runners."""

    def validate(self, configuration: RunConfiguration) -> None:
        """Raise InvalidConfigurationError when the script cannot be run."""

    def run_pass(self, session: ProcessSession, configuration: RunConfiguration) -> None:
        """Run the script once against the session.

        Raise ScriptExecutionError when the script fails; the executor then
        rolls the session back and routes its input to failure.
        """
