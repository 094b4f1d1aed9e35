"""Runtime configuration for script runs."""

from __future__ import annotations

import os
from dataclasses import dataclass, field

from script_runner.runner.engines import ScriptEngine

_LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


@dataclass(slots=True)
class EngineCommandSettings:
    """Interpreter command templates for engines run out of process."""

    node_command: str = "node {script}"
    ruby_command: str = "ruby {script}"
    lua_command: str = "lua {script}"
    groovy_command: str = "groovy {script}"

    def template_for(self, engine: ScriptEngine) -> str:
        """Return the command template for an out-of-process engine."""

        templates = {
            ScriptEngine.ECMASCRIPT: self.node_command,
            ScriptEngine.RUBY: self.ruby_command,
            ScriptEngine.LUA: self.lua_command,
            ScriptEngine.GROOVY: self.groovy_command,
        }
        try:
            return templates[engine]
        except KeyError as error:
            raise ValueError(f"Engine {engine.value!r} does not run out of process.") from error


@dataclass(slots=True)
class Settings:
    """Application settings loaded from ``SCRIPT_RUNNER_*`` environment variables."""

    log_level: str = "WARNING"
    engines: EngineCommandSettings = field(default_factory=EngineCommandSettings)

    @classmethod
    def from_env(cls) -> Settings:
        """Load settings from environment with defaults for local use."""

        return cls(
            log_level=os.getenv("SCRIPT_RUNNER_LOG_LEVEL", "WARNING").strip().upper(),
            engines=EngineCommandSettings(
                node_command=os.getenv("SCRIPT_RUNNER_NODE_COMMAND", "node {script}"),
                ruby_command=os.getenv("SCRIPT_RUNNER_RUBY_COMMAND", "ruby {script}"),
                lua_command=os.getenv("SCRIPT_RUNNER_LUA_COMMAND", "lua {script}"),
                groovy_command=os.getenv("SCRIPT_RUNNER_GROOVY_COMMAND", "groovy {script}"),
            ),
        )

    def validate(self) -> None:
        """Raise configuration error for unknown log levels or unusable templates."""

        if self.log_level not in _LOG_LEVELS:
            raise ValueError(
                f"Invalid SCRIPT_RUNNER_LOG_LEVEL: {self.log_level!r}. Use one of {_LOG_LEVELS}.",
            )
        for name, template in (
            ("SCRIPT_RUNNER_NODE_COMMAND", self.engines.node_command),
            ("SCRIPT_RUNNER_RUBY_COMMAND", self.engines.ruby_command),
            ("SCRIPT_RUNNER_LUA_COMMAND", self.engines.lua_command),
            ("SCRIPT_RUNNER_GROOVY_COMMAND", self.engines.groovy_command),
        ):
            if "{script}" not in template:
                raise ValueError(f"{name} must include the {{script}} placeholder.")
