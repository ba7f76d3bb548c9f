from __future__ import annotations

from concurrent.futures import Executor, Future
from dataclasses import dataclass, field, replace
from enum import Enum
from functools import partial
import logging
import threading
import time
from typing import Any, Dict, Iterable, List, Optional, Set, Tuple

from .airtable import AirtableClient
from .notify import Notifier
from .records import RecordCodec

logger = logging.getLogger(__name__)

_id_lock = threading.Lock()
_last_ns = 0


def temp_id(prefix: str) -> str:
    """Process-unique temporary id from a strictly increasing nanosecond clock."""
    global _last_ns
    with _id_lock:
        ns = max(time.time_ns(), _last_ns + 1)
        _last_ns = ns
    return f"{prefix}{ns}"


class MutationState(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    UNCONFIRMED = "unconfirmed"


@dataclass
class Mutation:
    kind: str                        # "create" / "update" / "delete"
    entity_id: str                   # id at submit time
    state: MutationState = MutationState.PENDING
    remote_id: Optional[str] = None
    error: Optional[str] = None
    future: Optional[Future] = field(default=None, repr=False, compare=False)

    def _confirm(self, remote_id: Optional[str]) -> None:
        self.state = MutationState.CONFIRMED
        self.remote_id = remote_id

    def _fail(self, error: str) -> None:
        self.state = MutationState.UNCONFIRMED
        self.error = error


@dataclass
class _PendingCreate:
    mutation: Mutation
    sent: Any                                       # entity as submitted
    latest: Any = None                              # local edits made while pending
    updates: List[Mutation] = field(default_factory=list)
    delete: Optional[Mutation] = None


class OptimisticCollection:
    """In-memory entity collection with optimistic writes reconciled against Airtable.

    With no client the collection runs in demo mode: writes are local only and
    complete immediately.
    """

    def __init__(
        self,
        codec: RecordCodec,
        table: str,
        client: Optional[AirtableClient] = None,
        executor: Optional[Executor] = None,
        notifier: Optional[Notifier] = None,
        seed: Iterable[Any] = (),
    ) -> None:
        if client is not None and executor is None:
            raise ValueError("An executor is required when a remote client is configured.")
        self.codec = codec
        self.table = table
        self._client = client
        self._executor = executor
        self._notifier = notifier or Notifier()
        self._seed = tuple(seed)
        self._items: Tuple[Any, ...] = self._seed
        self._lock = threading.RLock()
        self._pending: Dict[str, _PendingCreate] = {}
        self._temp_ids: Set[str] = set()
        self._aliases: Dict[str, str] = {}
        self._tombstones: Set[str] = set()

    @property
    def demo_mode(self) -> bool:
        return self._client is None

    @property
    def items(self) -> Tuple[Any, ...]:
        with self._lock:
            return self._items

    def resolve_id(self, entity_id: str) -> str:
        with self._lock:
            return self._aliases.get(entity_id, entity_id)

    def get(self, entity_id: str) -> Optional[Any]:
        rid = self.resolve_id(entity_id)
        for item in self.items:
            if item.id == rid:
                return item
        return None

    def is_temporary(self, entity_id: str) -> bool:
        with self._lock:
            return entity_id in self._temp_ids and entity_id not in self._aliases

    def load(self, **params: Any) -> bool:
        """Replace the collection with a fresh snapshot. Returns False on remote failure."""
        if self._client is None:
            with self._lock:
                self._items = self._seed
            return True
        try:
            records = self._client.list_records(self.table, **params)
        except Exception as exc:  # noqa: BLE001
            self._notifier.error(f"Could not load {self.table}: {exc}")
            return False
        entities = self.codec.from_records(records)
        with self._lock:
            # Records whose delete is still in flight stay hidden.
            entities = [e for e in entities if e.id not in self._tombstones]
            self._items = tuple(entities)
        logger.info("Loaded %d records from %s", len(entities), self.table)
        return True

    # create

    def create(self, entity: Any) -> Mutation:
        self.codec.validate(entity)
        tid = temp_id(self.codec.id_prefix)
        local = replace(entity, id=tid)
        mutation = Mutation(kind="create", entity_id=tid)
        with self._lock:
            self._temp_ids.add(tid)
            self._items = self._items + (local,)
            if self._client is not None:
                self._pending[tid] = _PendingCreate(mutation=mutation, sent=local)

        if self._client is None:
            mutation._confirm(tid)
            return mutation

        fields = {k: v for k, v in self.codec.encode(local).items() if v is not None}
        mutation.future = self._executor.submit(self._client.create_record, self.table, fields)
        mutation.future.add_done_callback(partial(self._on_created, tid))
        return mutation

    def _on_created(self, tid: str, future: Future) -> None:
        try:
            record = future.result()
            remote_id = str((record or {}).get("id") or "")
            if not remote_id:
                raise ValueError("response carried no record id")
        except Exception as exc:  # noqa: BLE001
            with self._lock:
                pending = self._pending.pop(tid)
                pending.mutation._fail(str(exc))
                for m in pending.updates:
                    m._fail("create was not saved")
                if pending.delete is not None:
                    pending.delete._confirm(None)
                    self._tombstones.discard(tid)
            self._notifier.error(f"Could not save to {self.table}: {exc}")
            return

        with self._lock:
            pending = self._pending.pop(tid)
            pending.mutation._confirm(remote_id)
            self._aliases[tid] = remote_id
            orphaned = tid in self._tombstones
            if orphaned:
                self._tombstones.add(remote_id)
            else:
                self._items = tuple(replace(i, id=remote_id) if i.id == tid else i for i in self._items)

        if orphaned:
            # Deleted locally before the create landed; remove the remote copy.
            for m in pending.updates:
                m._fail("record deleted before the change was sent")
            self._submit_delete(pending.delete or Mutation(kind="delete", entity_id=tid), remote_id)
            return

        if pending.latest is not None:
            fields = self.codec.changed_fields(pending.sent, pending.latest)
            self._submit_update(pending.updates, remote_id, fields)

    # update

    def update(self, entity_id: str, **changes: Any) -> Mutation:
        with self._lock:
            rid = self._aliases.get(entity_id, entity_id)
            current = next((i for i in self._items if i.id == rid), None)
            if current is None:
                raise KeyError(f"{self.table} record {entity_id} not found")
            updated = replace(current, **changes)
            self.codec.validate(updated)
            self._items = tuple(updated if i.id == rid else i for i in self._items)
            mutation = Mutation(kind="update", entity_id=rid)

            if self._client is None:
                mutation._confirm(rid)
                return mutation

            pending = self._pending.get(rid)
            if pending is not None:
                # Sent against the durable id once the create confirms.
                pending.latest = updated
                pending.updates.append(mutation)
                return mutation

            unsaved = rid in self._temp_ids and rid not in self._aliases

        if unsaved:
            mutation._fail("record was never saved remotely")
            self._notifier.warning(f"Change kept locally only; {self.table} record was not saved.")
            return mutation

        fields = self.codec.changed_fields(current, updated)
        if not fields:
            mutation._confirm(rid)
            return mutation
        self._submit_update([mutation], rid, fields)
        return mutation

    def _submit_update(self, mutations: List[Mutation], remote_id: str, fields: Dict[str, Any]) -> None:
        if not fields:
            for m in mutations:
                m._confirm(remote_id)
            return
        future = self._executor.submit(self._client.update_record, self.table, remote_id, fields)
        for m in mutations:
            m.future = future
        future.add_done_callback(partial(self._on_remote_done, mutations, remote_id, "update"))

    # delete

    def delete(self, entity_id: str) -> Mutation:
        with self._lock:
            rid = self._aliases.get(entity_id, entity_id)
            self._items = tuple(i for i in self._items if i.id != rid)
            mutation = Mutation(kind="delete", entity_id=rid)

            if self._client is None:
                mutation._confirm(rid)
                return mutation

            pending = self._pending.get(rid)
            if pending is not None:
                self._tombstones.add(rid)
                pending.delete = mutation
                return mutation

            if rid in self._temp_ids and rid not in self._aliases:
                # Never reached the remote store; nothing to delete there.
                mutation._confirm(None)
                return mutation

            self._tombstones.add(rid)

        self._submit_delete(mutation, rid)
        return mutation

    def _submit_delete(self, mutation: Mutation, remote_id: str) -> None:
        future = self._executor.submit(self._client.delete_record, self.table, remote_id)
        mutation.future = future
        future.add_done_callback(partial(self._on_remote_done, [mutation], remote_id, "delete"))

    def _on_remote_done(self, mutations: List[Mutation], remote_id: str, kind: str, future: Future) -> None:
        if kind == "delete":
            with self._lock:
                # Resolved either way; the next snapshot is authoritative again.
                self._tombstones.discard(remote_id)
                self._tombstones.difference_update(m.entity_id for m in mutations)
        try:
            future.result()
        except Exception as exc:  # noqa: BLE001
            with self._lock:
                for m in mutations:
                    m._fail(str(exc))
            self._notifier.warning(f"Remote {kind} in {self.table} failed; local change kept. {exc}")
            return
        with self._lock:
            for m in mutations:
                m._confirm(remote_id)
