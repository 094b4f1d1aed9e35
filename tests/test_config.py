from __future__ import annotations

import allure
import pytest

from script_runner.config import EngineCommandSettings, Settings
from script_runner.runner.engines import ScriptEngine
from script_runner.runner.models import OutputOptions

pytestmark = [
    allure.epic("Configuration"),
    allure.feature("Settings & Output Flags"),
]

_COMMAND_VARIABLES = (
    "SCRIPT_RUNNER_NODE_COMMAND",
    "SCRIPT_RUNNER_RUBY_COMMAND",
    "SCRIPT_RUNNER_LUA_COMMAND",
    "SCRIPT_RUNNER_GROOVY_COMMAND",
)


def test_from_env_uses_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("SCRIPT_RUNNER_LOG_LEVEL", raising=False)
    for name in _COMMAND_VARIABLES:
        monkeypatch.delenv(name, raising=False)

    settings = Settings.from_env()

    assert settings.log_level == "WARNING"
    assert settings.engines == EngineCommandSettings()
    settings.validate()


def test_from_env_reads_level_and_command_templates(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SCRIPT_RUNNER_LOG_LEVEL", " debug ")
    monkeypatch.setenv("SCRIPT_RUNNER_GROOVY_COMMAND", "/opt/groovy/bin/groovy {script}")
    monkeypatch.setenv("SCRIPT_RUNNER_NODE_COMMAND", "nodejs --no-warnings {script}")

    settings = Settings.from_env()

    assert settings.log_level == "DEBUG"
    assert settings.engines.template_for(ScriptEngine.GROOVY) == "/opt/groovy/bin/groovy {script}"
    assert settings.engines.template_for(ScriptEngine.ECMASCRIPT) == "nodejs --no-warnings {script}"


def test_validate_rejects_unknown_log_level() -> None:
    with pytest.raises(ValueError, match="Invalid SCRIPT_RUNNER_LOG_LEVEL"):
        Settings(log_level="CHATTY").validate()


def test_validate_rejects_template_without_script_placeholder() -> None:
    settings = Settings(engines=EngineCommandSettings(ruby_command="ruby"))

    with pytest.raises(ValueError, match="SCRIPT_RUNNER_RUBY_COMMAND must include"):
        settings.validate()


def test_python_has_no_command_template() -> None:
    with pytest.raises(ValueError, match="does not run out of process"):
        EngineCommandSettings().template_for(ScriptEngine.PYTHON)


@pytest.mark.parametrize(
    ("flags", "expected"),
    [
        ({}, OutputOptions(success=True)),
        ({"failure": True}, OutputOptions(success=True, failure=True)),
        ({"no_success": True}, OutputOptions(success=False)),
        ({"all_relationships": True}, OutputOptions(success=True, failure=True)),
        (
            {"all_output": True},
            OutputOptions(attributes=True, content=True, success=True, failure=True),
        ),
        (
            {"all_output": True, "no_success": True},
            OutputOptions(attributes=True, content=True, success=False, failure=True),
        ),
        (
            {"all_relationships": True, "no_success": True, "content": True},
            OutputOptions(content=True, success=False, failure=True),
        ),
    ],
)
def test_output_flags_resolve_in_order(flags: dict[str, bool], expected: OutputOptions) -> None:
    assert OutputOptions.resolve(**flags) == expected
