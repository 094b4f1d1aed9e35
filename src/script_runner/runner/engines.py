"""Script engine selection by file extension."""

from __future__ import annotations

import os
from enum import Enum
from pathlib import Path


class ScriptEngine(str, Enum):
    """Supported script engine families."""

    ECMASCRIPT = "ECMAScript"
    PYTHON = "python"
    RUBY = "ruby"
    LUA = "lua"
    GROOVY = "Groovy"


DEFAULT_ENGINE = ScriptEngine.GROOVY

_ENGINES_BY_EXTENSION: dict[str, ScriptEngine] = {
    "js": ScriptEngine.ECMASCRIPT,
    "py": ScriptEngine.PYTHON,
    "rb": ScriptEngine.RUBY,
    "lua": ScriptEngine.LUA,
}

# Environment variable each interpreter reads its module search path from.
_MODULE_PATH_VARIABLES: dict[ScriptEngine, str] = {
    ScriptEngine.ECMASCRIPT: "NODE_PATH",
    ScriptEngine.RUBY: "RUBYLIB",
    ScriptEngine.LUA: "LUA_PATH",
    ScriptEngine.GROOVY: "CLASSPATH",
}


def engine_for_script(script_path: str | Path) -> ScriptEngine:
    """Return the engine for a script path; unknown extensions map to Groovy."""

    extension = Path(script_path).suffix.removeprefix(".").lower()
    return _ENGINES_BY_EXTENSION.get(extension, DEFAULT_ENGINE)


def module_path_environment(
    engine: ScriptEngine,
    module_paths: tuple[Path, ...],
) -> dict[str, str]:
    """Build the env entries that expose module paths to an external interpreter."""

    variable = _MODULE_PATH_VARIABLES.get(engine)
    if variable is None or not module_paths:
        return {}
    if engine == ScriptEngine.LUA:
        patterns = [str(path / "?.lua") if path.is_dir() else str(path) for path in module_paths]
        # Trailing ";;" keeps Lua's default search path.
        return {variable: ";".join(patterns) + ";;"}
    return {variable: os.pathsep.join(str(path) for path in module_paths)}
