"""Domain models for work items, relationships, and run configuration."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from pathlib import Path
from types import MappingProxyType

from script_runner.runner.engines import ScriptEngine


def utc_now() -> datetime:
    """Current UTC timestamp."""

    return datetime.now(tz=UTC)


class Relationship(str, Enum):
    """Outcome categories a script can route work items to."""

    SUCCESS = "success"
    FAILURE = "failure"


@dataclass(slots=True, eq=False)
class WorkItem:
    """One flow file: a byte payload plus string attributes."""

    id: int
    content: bytes
    attributes: dict[str, str]
    entry_date: datetime
    lineage_start_date: datetime

    @property
    def size(self) -> int:
        return len(self.content)

    def __str__(self) -> str:
        return f"FlowFile[{self.id},{self.attributes.get('filename')},{self.size}B]"


@dataclass(slots=True)
class RunResults:
    """Work items partitioned by relationship, in transfer order."""

    transfers: dict[Relationship, list[WorkItem]] = field(
        default_factory=lambda: {relationship: [] for relationship in Relationship},
    )
    passes: int = 0
    failed_passes: int = 0

    def record(self, item: WorkItem, relationship: Relationship) -> None:
        self.transfers.setdefault(relationship, []).append(item)

    def items_for(self, relationship: Relationship) -> list[WorkItem]:
        return self.transfers.get(relationship, [])


@dataclass(frozen=True, slots=True)
class RunConfiguration:
    """Immutable parameters of one script run."""

    script_path: Path
    engine: ScriptEngine
    module_paths: tuple[Path, ...] = ()
    base_attributes: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    properties: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))


@dataclass(frozen=True, slots=True)
class OutputOptions:
    """Which relationships and item details the reporter renders."""

    attributes: bool = False
    content: bool = False
    success: bool = True
    failure: bool = False

    @classmethod
    def resolve(  # noqa: PLR0913
        cls,
        *,
        attributes: bool = False,
        content: bool = False,
        success: bool = True,
        failure: bool = False,
        all_output: bool = False,
        all_relationships: bool = False,
        no_success: bool = False,
    ) -> OutputOptions:
        """Apply the shorthand flags in order: all, all-rels, then no-success."""

        if all_output:
            attributes = content = success = failure = True
        if all_relationships:
            success = failure = True
        if no_success:
            success = False
        return cls(attributes=attributes, content=content, success=success, failure=failure)
