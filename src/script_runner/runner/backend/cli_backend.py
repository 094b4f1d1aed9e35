"""Subprocess-based backend for scripts run by an external interpreter."""

from __future__ import annotations

import json
import logging
import os
import shlex
import shutil
import subprocess
import tempfile
from pathlib import Path

from script_runner.runner.engines import module_path_environment
from script_runner.runner.errors import InvalidConfigurationError, ScriptExecutionError
from script_runner.runner.models import Relationship, RunConfiguration
from script_runner.runner.session import ProcessSession

logger = logging.getLogger(__name__)

_STDERR_TAIL_CHARS = 2_000


class CliScriptBackend:
    """Run the script once per work item through an interpreter command template.

    The payload goes to the interpreter's stdin and its stdout becomes the new
    payload. Attributes arrive as JSON in ``SCRIPT_RUNNER_ATTRIBUTES``; the
    script may write a JSON object of attributes to set into the file named by
    ``SCRIPT_RUNNER_ATTRIBUTES_OUT``. Exit code 0 routes the item to success,
    anything else fails the pass.
    """

    def __init__(self, *, command_template: str) -> None:
        self.command_template = command_template

    def validate(self, configuration: RunConfiguration) -> None:
        try:
            run_args = build_run_args(
                command_template=self.command_template,
                script_path=configuration.script_path,
            )
        except ValueError as error:
            raise InvalidConfigurationError(str(error)) from error
        if shutil.which(run_args[0]) is None:
            raise InvalidConfigurationError(
                f"Script engine command not found: {run_args[0]} "
                f"(engine={configuration.engine.value})",
            )

    def run_pass(self, session: ProcessSession, configuration: RunConfiguration) -> None:
        item = session.get()
        if item is None:
            logger.debug("Queue is empty; nothing for %s to run", configuration.engine.value)
            return

        run_args = build_run_args(
            command_template=self.command_template,
            script_path=configuration.script_path,
        )
        with tempfile.TemporaryDirectory(prefix="script-runner-") as scratch_dir:
            attributes_out = Path(scratch_dir) / "attributes.json"
            env = os.environ.copy()
            env.update(module_path_environment(configuration.engine, configuration.module_paths))
            env["SCRIPT_RUNNER_ATTRIBUTES"] = json.dumps(
                item.attributes,
                ensure_ascii=False,
                sort_keys=True,
            )
            env["SCRIPT_RUNNER_PROPERTIES"] = json.dumps(
                dict(configuration.properties),
                ensure_ascii=False,
                sort_keys=True,
            )
            env["SCRIPT_RUNNER_ATTRIBUTES_OUT"] = str(attributes_out)

            try:
                completed = subprocess.run(  # noqa: S603
                    run_args,
                    input=session.read(item),
                    capture_output=True,
                    env=env,
                    check=False,
                )
            except OSError as error:
                raise ScriptExecutionError(f"Script engine failed to start: {error}") from error

            stderr_tail = _tail(completed.stderr)
            if completed.returncode != 0:
                raise ScriptExecutionError(
                    f"Script exited with code {completed.returncode}: {stderr_tail}",
                )
            if stderr_tail:
                logger.info("Script stderr for %s: %s", item, stderr_tail)
            updates = _read_attribute_updates(attributes_out)

        session.write(item, completed.stdout)
        session.put_all_attributes(item, updates)
        session.transfer(item, Relationship.SUCCESS)


def build_run_args(*, command_template: str, script_path: Path) -> list[str]:
    """Render an interpreter command template into argv."""

    stripped = command_template.strip()
    if not stripped:
        raise ValueError("Script engine command template is empty.")
    if "{script}" not in stripped:
        raise ValueError("Script engine command template must include {script}.")
    try:
        rendered = stripped.format(script=shlex.quote(str(script_path)))
    except (KeyError, IndexError) as error:
        raise ValueError(f"Unsupported command template placeholder: {error}") from error

    argv = shlex.split(rendered)
    if not argv:
        raise ValueError("Script engine command template rendered empty command.")
    return argv


def _read_attribute_updates(path: Path) -> dict[str, str]:
    if not path.exists():
        return {}
    try:
        payload = json.loads(path.read_text("utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as error:
        raise ScriptExecutionError(f"Invalid attribute output from script: {error}") from error
    if not isinstance(payload, dict):
        raise ScriptExecutionError("Attribute output from script must be a JSON object.")
    return {str(key): str(value) for key, value in payload.items()}


def _tail(stream: bytes) -> str:
    return stream.decode("utf-8", errors="replace").strip()[-_STDERR_TAIL_CHARS:]
