"""Per-pass session through which a script takes, changes, and routes work items."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass

from script_runner.runner.errors import SessionError
from script_runner.runner.models import Relationship, WorkItem, utc_now
from script_runner.runner.store import WorkItemStore, core_attributes


@dataclass(slots=True)
class _Snapshot:
    item: WorkItem
    content: bytes
    attributes: dict[str, str]


class ProcessSession:
    """Transactional view of the queue for one script pass.

    Items taken with ``get`` or made with ``create``/``clone`` must each be
    transferred or removed before ``commit``. ``rollback`` restores taken items
    to their state at ``get`` time and discards created ones.
    """

    def __init__(
        self,
        *,
        store: WorkItemStore,
        relationships: tuple[Relationship, ...] = tuple(Relationship),
    ) -> None:
        self._store = store
        self._relationships = relationships
        self._acquired: dict[int, _Snapshot] = {}
        self._created: dict[int, WorkItem] = {}
        self._transfers: dict[int, tuple[WorkItem, Relationship]] = {}
        self._removed: set[int] = set()
        self._closed = False

    def get(self) -> WorkItem | None:
        """Take the front item off the queue, or return None when it is empty."""

        self._ensure_open()
        item = self._store.poll()
        if item is None:
            return None
        self._acquired[item.id] = _Snapshot(
            item=item,
            content=item.content,
            attributes=dict(item.attributes),
        )
        return item

    def create(self, parent: WorkItem | None = None) -> WorkItem:
        """Create an empty item; a child inherits its parent's attributes and lineage."""

        self._ensure_open()
        if parent is not None:
            self._ensure_owned(parent)
        item_id = self._store.next_id()
        core = core_attributes(item_id)
        attributes = dict(core)
        if parent is not None:
            attributes.update(parent.attributes)
            attributes["uuid"] = core["uuid"]
        now = utc_now()
        item = WorkItem(
            id=item_id,
            content=b"",
            attributes=attributes,
            entry_date=now,
            lineage_start_date=parent.lineage_start_date if parent is not None else now,
        )
        self._created[item.id] = item
        return item

    def clone(self, item: WorkItem) -> WorkItem:
        """Create a child of ``item`` carrying a copy of its content."""

        child = self.create(item)
        child.content = item.content
        return child

    def read(self, item: WorkItem) -> bytes:
        self._ensure_owned(item)
        return item.content

    def read_text(self, item: WorkItem, encoding: str = "utf-8") -> str:
        return self.read(item).decode(encoding)

    def write(self, item: WorkItem, data: bytes | str, encoding: str = "utf-8") -> WorkItem:
        """Replace the item's content."""

        self._ensure_owned(item)
        item.content = data.encode(encoding) if isinstance(data, str) else bytes(data)
        return item

    def put_attribute(self, item: WorkItem, key: str, value: object) -> WorkItem:
        self._ensure_owned(item)
        if not isinstance(key, str) or not key:
            raise SessionError(f"Attribute key must be a non-empty string, got {key!r}")
        item.attributes[key] = str(value)
        return item

    def put_all_attributes(self, item: WorkItem, attributes: Mapping[str, object]) -> WorkItem:
        for key, value in attributes.items():
            self.put_attribute(item, key, value)
        return item

    def remove_attribute(self, item: WorkItem, key: str) -> WorkItem:
        self._ensure_owned(item)
        item.attributes.pop(key, None)
        return item

    def transfer(self, item: WorkItem, relationship: Relationship | str) -> None:
        """Route the item; a later transfer of the same item replaces the earlier one."""

        self._ensure_owned(item)
        resolved = self._resolve_relationship(relationship)
        self._transfers.pop(item.id, None)
        self._transfers[item.id] = (item, resolved)

    def remove(self, item: WorkItem) -> None:
        """Drop the item; it will not appear under any relationship."""

        self._ensure_owned(item)
        self._transfers.pop(item.id, None)
        self._removed.add(item.id)

    def commit(self) -> list[tuple[WorkItem, Relationship]]:
        """Close the session and return transfers in the order they were made."""

        self._ensure_open()
        for item in self._owned_items():
            if item.id not in self._transfers and item.id not in self._removed:
                raise SessionError(f"{item} was neither transferred nor removed")
        self._closed = True
        return list(self._transfers.values())

    def rollback(self) -> list[WorkItem]:
        """Close the session, restoring and returning the items taken from the queue."""

        self._closed = True
        restored: list[WorkItem] = []
        for snapshot in self._acquired.values():
            snapshot.item.content = snapshot.content
            snapshot.item.attributes = dict(snapshot.attributes)
            restored.append(snapshot.item)
        return restored

    def _owned_items(self) -> list[WorkItem]:
        return [snapshot.item for snapshot in self._acquired.values()] + list(
            self._created.values(),
        )

    def _resolve_relationship(self, relationship: Relationship | str) -> Relationship:
        try:
            resolved = Relationship(relationship)
        except ValueError as error:
            raise SessionError(f"Unknown relationship: {relationship!r}") from error
        if resolved not in self._relationships:
            raise SessionError(f"Relationship not available in this session: {resolved.value}")
        return resolved

    def _ensure_open(self) -> None:
        if self._closed:
            raise SessionError("Session is already committed or rolled back")

    def _ensure_owned(self, item: WorkItem) -> None:
        self._ensure_open()
        owned = self._acquired.get(item.id)
        if (owned is None or owned.item is not item) and self._created.get(item.id) is not item:
            raise SessionError(f"{item} does not belong to this session")
        if item.id in self._removed:
            raise SessionError(f"{item} was already removed")
