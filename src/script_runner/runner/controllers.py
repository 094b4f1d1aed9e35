"""Controller that wires one script-runner invocation end to end."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from pathlib import Path
from types import MappingProxyType
from typing import BinaryIO

from script_runner.config import Settings
from script_runner.runner.attributes import load_attribute_file
from script_runner.runner.backend import CliScriptBackend, PythonScriptBackend, ScriptBackend
from script_runner.runner.engines import ScriptEngine, engine_for_script
from script_runner.runner.errors import InvalidConfigurationError, ScriptNotFoundError
from script_runner.runner.executor import RunContext, ScriptExecutor
from script_runner.runner.ingestion import ingest_directory, ingest_stdin
from script_runner.runner.models import OutputOptions, RunConfiguration, RunResults
from script_runner.runner.reporter import render_report_lines
from script_runner.runner.store import WorkItemStore

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ScriptRunCommand:
    """CLI input for one script run."""

    script_path: Path
    options: OutputOptions
    attr_file: str = ""
    module_paths: str = ""
    input_dir: str = ""
    properties: tuple[str, ...] = ()


@dataclass(slots=True)
class ScriptRunReport:
    """Report lines to render in CLI plus the raw results."""

    lines: list[str]
    results: RunResults


class ScriptRunnerController:
    """Runs ingestion, execution, and reporting strictly in sequence."""

    def __init__(self, settings: Settings | None = None) -> None:
        self.settings = settings

    def run(self, command: ScriptRunCommand, *, stdin: BinaryIO) -> ScriptRunReport:
        settings = self.settings or Settings.from_env()

        script_path = command.script_path
        if not script_path.exists():
            raise ScriptNotFoundError(f"Script file not found: {script_path}")

        engine = engine_for_script(script_path)
        configuration = RunConfiguration(
            script_path=script_path,
            engine=engine,
            module_paths=parse_module_paths(command.module_paths),
            properties=MappingProxyType(parse_property_assignments(command.properties)),
        )
        executor = ScriptExecutor(backend=build_backend(engine, settings))
        executor.validate(configuration)

        base_attributes = load_attribute_file(command.attr_file)
        configuration = replace(configuration, base_attributes=MappingProxyType(base_attributes))
        context = RunContext(
            configuration=configuration,
            store=WorkItemStore(configuration.base_attributes),
        )

        if command.input_dir:
            ingest_directory(context.store, command.input_dir)
        else:
            ingest_stdin(context.store, stdin)
        logger.info("Admitted %d work items for %s", context.store.admitted, script_path)

        results = executor.run(context)
        return ScriptRunReport(
            lines=render_report_lines(results, command.options),
            results=results,
        )


def build_backend(engine: ScriptEngine, settings: Settings) -> ScriptBackend:
    """Python runs in process; every other engine runs as an interpreter subprocess."""

    if engine == ScriptEngine.PYTHON:
        return PythonScriptBackend()
    return CliScriptBackend(command_template=settings.engines.template_for(engine))


def parse_module_paths(raw: str) -> tuple[Path, ...]:
    """Split the comma-separated module path list, ignoring blank entries."""

    return tuple(Path(part.strip()) for part in raw.split(",") if part.strip())


def parse_property_assignments(assignments: tuple[str, ...]) -> dict[str, str]:
    properties: dict[str, str] = {}
    for assignment in assignments:
        name, separator, value = assignment.partition("=")
        name = name.strip()
        if not separator or not name:
            raise InvalidConfigurationError(
                f"Invalid script property {assignment!r}. Expected format 'name=value'.",
            )
        properties[name] = value
    return properties
