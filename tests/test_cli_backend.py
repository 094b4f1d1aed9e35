from __future__ import annotations

import sys
from collections.abc import Callable
from pathlib import Path
from types import MappingProxyType

import allure
import pytest

from script_runner.runner.backend import CliScriptBackend, build_run_args
from script_runner.runner.engines import ScriptEngine
from script_runner.runner.errors import InvalidConfigurationError
from script_runner.runner.executor import RunContext, ScriptExecutor
from script_runner.runner.models import Relationship, RunConfiguration
from script_runner.runner.store import WorkItemStore

pytestmark = [
    allure.epic("Script Execution"),
    allure.feature("Interpreter Subprocess Backend"),
]

# Python stands in for the external interpreter.
_INTERPRETER_TEMPLATE = f"{sys.executable} {{script}}"

_UPPERCASE_SCRIPT = """\
import json
import os
import sys

attributes = json.loads(os.environ["SCRIPT_RUNNER_ATTRIBUTES"])
properties = json.loads(os.environ["SCRIPT_RUNNER_PROPERTIES"])
data = sys.stdin.buffer.read()
if data == b"fail":
    sys.stderr.write("refusing payload")
    sys.exit(3)
sys.stdout.buffer.write(data.upper())
with open(os.environ["SCRIPT_RUNNER_ATTRIBUTES_OUT"], "w", encoding="utf-8") as handle:
    json.dump(
        {"seen.filename": attributes["filename"], "suffix": properties.get("suffix", "")},
        handle,
    )
"""


def test_build_run_args_quotes_script_path() -> None:
    run_args = build_run_args(
        command_template="groovy -cp lib {script}",
        script_path=Path("my scripts/route.groovy"),
    )

    assert run_args == ["groovy", "-cp", "lib", "my scripts/route.groovy"]


@pytest.mark.parametrize(
    ("template", "message"),
    [
        ("", "empty"),
        ("groovy", "must include {script}"),
        ("groovy {script} {model}", "Unsupported command template placeholder"),
    ],
)
def test_build_run_args_rejects_unusable_templates(template: str, message: str) -> None:
    with pytest.raises(ValueError, match=message):
        build_run_args(command_template=template, script_path=Path("route.groovy"))


def test_validate_rejects_missing_interpreter(write_script: Callable[..., Path]) -> None:
    script = write_script("println 'hi'\n", name="route.groovy")
    backend = CliScriptBackend(command_template="definitely-not-an-interpreter-xyz {script}")

    with pytest.raises(InvalidConfigurationError, match="command not found"):
        backend.validate(RunConfiguration(script_path=script, engine=ScriptEngine.GROOVY))


def test_interpreter_output_replaces_content_and_routes_by_exit_code(
    write_script: Callable[..., Path],
) -> None:
    script = write_script(_UPPERCASE_SCRIPT, name="uppercase.groovy")
    configuration = RunConfiguration(
        script_path=script,
        engine=ScriptEngine.GROOVY,
        properties=MappingProxyType({"suffix": "-x"}),
    )
    store = WorkItemStore()
    store.admit(b"abc", {"filename": "a.txt"})
    store.admit(b"fail", {"filename": "b.txt"})
    executor = ScriptExecutor(backend=CliScriptBackend(command_template=_INTERPRETER_TEMPLATE))
    executor.validate(configuration)

    results = executor.run(RunContext(configuration=configuration, store=store))

    success = results.items_for(Relationship.SUCCESS)
    failure = results.items_for(Relationship.FAILURE)
    assert [item.content for item in success] == [b"ABC"]
    assert success[0].attributes["seen.filename"] == "a.txt"
    assert success[0].attributes["suffix"] == "-x"
    assert [item.content for item in failure] == [b"fail"]
    assert "seen.filename" not in failure[0].attributes
    assert results.failed_passes == 1


def test_empty_queue_runs_no_interpreter(write_script: Callable[..., Path]) -> None:
    script = write_script("this would not even parse {\n", name="never.groovy")
    configuration = RunConfiguration(script_path=script, engine=ScriptEngine.GROOVY)
    executor = ScriptExecutor(backend=CliScriptBackend(command_template=_INTERPRETER_TEMPLATE))

    results = executor.run(RunContext(configuration=configuration, store=WorkItemStore()))

    assert results.passes == 1
    assert results.failed_passes == 0
    assert results.items_for(Relationship.SUCCESS) == []
