"""FIFO work-item queue with admission bookkeeping."""

from __future__ import annotations

import itertools
import uuid
from collections import deque
from collections.abc import Mapping

from script_runner.runner.attributes import seed_attributes
from script_runner.runner.models import WorkItem, utc_now


class WorkItemStore:
    """Ordered queue of work items waiting for the script.

    Every admitted item is seeded with core attributes, then the base
    attributes, then its own item-derived attributes (highest precedence).
    """

    def __init__(self, base_attributes: Mapping[str, str] | None = None) -> None:
        self.base_attributes = dict(base_attributes or {})
        self.admitted = 0
        self._queue: deque[WorkItem] = deque()
        self._ids = itertools.count(1)

    def __len__(self) -> int:
        return len(self._queue)

    def next_id(self) -> int:
        return next(self._ids)

    def admit(self, content: bytes, attributes: Mapping[str, str] | None = None) -> WorkItem:
        """Create a work item from ingested bytes and append it to the queue."""

        item_id = self.next_id()
        now = utc_now()
        item = WorkItem(
            id=item_id,
            content=bytes(content),
            attributes=seed_attributes(
                core=core_attributes(item_id),
                base=self.base_attributes,
                derived=attributes or {},
            ),
            entry_date=now,
            lineage_start_date=now,
        )
        self._queue.append(item)
        self.admitted += 1
        return item

    def poll(self) -> WorkItem | None:
        """Remove and return the front item, or None when the queue is empty."""

        if not self._queue:
            return None
        return self._queue.popleft()


def core_attributes(item_id: int) -> dict[str, str]:
    """Attributes every flow file carries before any caller-supplied ones."""

    return {
        "filename": f"{item_id}.flowfile",
        "path": "./",
        "uuid": str(uuid.uuid4()),
    }
