"""Render work items per relationship as report lines."""

from __future__ import annotations

from datetime import datetime

from script_runner.runner.models import OutputOptions, Relationship, RunResults, WorkItem

DASHED_LINE = "-" * 57
DATE_FORMAT = "%a %b %d %H:%M:%S %Z %Y"


def selected_relationships(options: OutputOptions) -> list[Relationship]:
    """Relationships to report, success first."""

    selected: list[Relationship] = []
    if options.success:
        selected.append(Relationship.SUCCESS)
    if options.failure:
        selected.append(Relationship.FAILURE)
    return selected


def render_report_lines(results: RunResults, options: OutputOptions) -> list[str]:
    lines: list[str] = []
    for relationship in selected_relationships(options):
        lines.extend(
            render_relationship_lines(relationship, results.items_for(relationship), options),
        )
    return lines


def render_relationship_lines(
    relationship: Relationship,
    items: list[WorkItem],
    options: OutputOptions,
) -> list[str]:
    """Render each item of one relationship followed by the count summary."""

    lines: list[str] = []
    for item in items:
        if options.attributes:
            lines.extend(render_attribute_block(item))
        if options.content:
            lines.append(item.content.decode("utf-8", errors="replace"))
        lines.append("")
    lines.append(f"Flow Files transferred to {relationship.value}: {len(items)}")
    lines.append("")
    return lines


def render_attribute_block(item: WorkItem) -> list[str]:
    lines = [
        f"Flow file {item}",
        DASHED_LINE,
        "FlowFile Attributes",
        *_key_value("entryDate", _format_date(item.entry_date)),
        *_key_value("lineageStartDate", _format_date(item.lineage_start_date)),
        *_key_value("fileSize", str(item.size)),
        "FlowFile Attribute Map Content",
    ]
    for key, value in item.attributes.items():
        lines.extend(_key_value(key, value))
    lines.append(DASHED_LINE)
    return lines


def _key_value(key: str, value: str) -> tuple[str, str]:
    return f"Key: '{key}'", f"\tValue: '{value}'"


def _format_date(value: datetime) -> str:
    return value.strftime(DATE_FORMAT)
