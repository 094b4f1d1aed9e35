"""Script execution engine: validates a configured run and drives its passes."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from script_runner.runner.backend import ScriptBackend
from script_runner.runner.errors import (
    InvalidConfigurationError,
    ScriptExecutionError,
    SessionError,
)
from script_runner.runner.models import Relationship, RunConfiguration, RunResults
from script_runner.runner.session import ProcessSession
from script_runner.runner.store import WorkItemStore

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class RunContext:
    """All mutable state of one invocation, passed explicitly between components."""

    configuration: RunConfiguration
    store: WorkItemStore
    results: RunResults = field(default_factory=RunResults)


def pass_count(admitted: int) -> int:
    """One pass per admitted item; a single pass covers zero or one items."""

    return admitted if admitted > 1 else 1


class ScriptExecutor:
    """Runs the configured script over queued work items, one pass at a time."""

    def __init__(self, *, backend: ScriptBackend) -> None:
        self.backend = backend
        self._validated = False

    def validate(self, configuration: RunConfiguration) -> None:
        """Fail fast on a configuration that cannot run."""

        script_path = configuration.script_path
        if not script_path.is_file():
            raise InvalidConfigurationError(f"Script path is not a regular file: {script_path}")
        for module_path in configuration.module_paths:
            if not module_path.exists():
                raise InvalidConfigurationError(f"Module path does not exist: {module_path}")
        self.backend.validate(configuration)
        self._validated = True
        logger.debug(
            "Validated run: script=%s engine=%s modules=%d",
            script_path,
            configuration.engine.value,
            len(configuration.module_paths),
        )

    def run(self, context: RunContext, passes: int | None = None) -> RunResults:
        """Execute the passes in FIFO order and return the partitioned results."""

        if not self._validated:
            self.validate(context.configuration)
        total = passes if passes is not None else pass_count(context.store.admitted)
        for pass_no in range(1, total + 1):
            self._run_pass(context, pass_no)

        if len(context.store):
            logger.warning(
                "%d work items were never taken from the queue by the script",
                len(context.store),
            )
        logger.info(
            "Run finished: passes=%d failed_passes=%d success=%d failure=%d",
            context.results.passes,
            context.results.failed_passes,
            len(context.results.items_for(Relationship.SUCCESS)),
            len(context.results.items_for(Relationship.FAILURE)),
        )
        return context.results

    def _run_pass(self, context: RunContext, pass_no: int) -> None:
        results = context.results
        results.passes += 1
        session = ProcessSession(store=context.store)
        try:
            self.backend.run_pass(session, context.configuration)
            committed = session.commit()
        except (ScriptExecutionError, SessionError):
            logger.exception(
                "Script pass %d failed; routing its input to %s",
                pass_no,
                Relationship.FAILURE.value,
            )
            results.failed_passes += 1
            for item in session.rollback():
                results.record(item, Relationship.FAILURE)
            return

        for item, relationship in committed:
            results.record(item, relationship)
