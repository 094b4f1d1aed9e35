"""Error taxonomy for script runs."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum


class ExitCode(IntEnum):
    """Process exit codes, one per fatal configuration case."""

    OK = 0
    USAGE = 1
    SCRIPT_NOT_FOUND = 2
    INPUT_DIRECTORY_NOT_FOUND = 3
    INPUT_NOT_A_DIRECTORY = 4
    ATTRIBUTE_FILE = 5
    INVALID_CONFIGURATION = 6


@dataclass(slots=True)
class RunConfigurationError(Exception):
    """Fatal configuration error that stops the run before any report is printed."""

    message: str
    exit_code: ExitCode = ExitCode.INVALID_CONFIGURATION

    def __str__(self) -> str:
        return self.message


@dataclass(slots=True)
class ScriptNotFoundError(RunConfigurationError):
    exit_code: ExitCode = ExitCode.SCRIPT_NOT_FOUND


@dataclass(slots=True)
class InputDirectoryNotFoundError(RunConfigurationError):
    exit_code: ExitCode = ExitCode.INPUT_DIRECTORY_NOT_FOUND


@dataclass(slots=True)
class InputNotADirectoryError(RunConfigurationError):
    exit_code: ExitCode = ExitCode.INPUT_NOT_A_DIRECTORY


@dataclass(slots=True)
class AttributeFileError(RunConfigurationError):
    """Attribute file is missing or could not be read."""

    exit_code: ExitCode = ExitCode.ATTRIBUTE_FILE


@dataclass(slots=True)
class InvalidConfigurationError(RunConfigurationError):
    """Configured run failed fail-fast validation."""

    exit_code: ExitCode = ExitCode.INVALID_CONFIGURATION


class ScriptExecutionError(RuntimeError):
    """The script failed while processing one pass."""


class SessionError(RuntimeError):
    """The script broke the session contract (unknown item, missing transfer, ...)."""
