"""Script backends that give "run this script against this pass" a concrete shape."""

from script_runner.runner.backend.base import ScriptBackend
from script_runner.runner.backend.cli_backend import CliScriptBackend, build_run_args
from script_runner.runner.backend.python_backend import PythonScriptBackend

__all__ = [
    "CliScriptBackend",
    "PythonScriptBackend",
    "ScriptBackend",
    "build_run_args",
]
