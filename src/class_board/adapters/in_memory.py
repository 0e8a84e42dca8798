"""
In-memory document store and identity provider.

Both behave like a remote backend as seen from a single client: watch
callbacks are never invoked inline but scheduled on the running event loop,
in the order the changes happened, and a cancelled watch receives nothing
further. Server timestamps are delivered as pending (None) first and
resolved on a later loop turn.

Several controllers sharing one 'InMemoryDocumentStore' behave like several
sessions talking to the same backend, which is how the check-then-act races
of the board are reproduced in tests.

Failure injection:
    'fail_next_write(error, applied=False)' makes the next write raise.
        With 'applied=True' the write lands before the error is raised,
        modelling an ambiguous network failure.
    'break_subscriptions(path, error)' stops every watch on 'path' and
        reports 'error' to its error callback.
"""

import asyncio
import copy
from collections import deque
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from typing import Any

from loguru import logger

from class_board.adapters.document_store import (
    SERVER_TIMESTAMP,
    AddToSet,
    AppendToList,
    CollectionCallback,
    CollectionSnapshot,
    DocumentCallback,
    DocumentSnapshot,
    DocumentStore,
    ErrorCallback,
    Mutation,
    RemoveFromSet,
    Subscription,
)
from class_board.adapters.identity import IdentityCallback, IdentityProvider, TransportIdentity
from class_board.utils.database import generate_uid
from class_board.utils.time import get_current_time


def _split(path: str) -> tuple[str, str]:
    collection, _, doc_id = path.rpartition("/")
    if not collection or not doc_id:
        raise ValueError(f"{path!r} is not a document path")
    return collection, doc_id


@dataclass
class _Watch:
    path: str
    on_snapshot: Callable[[Any], None]
    on_error: ErrorCallback
    subscription: Subscription | None = None


@dataclass
class _WriteFailure:
    error: Exception
    applied: bool


@dataclass
class _Scheduler:
    """Counts callbacks queued on the loop so tests can wait for quiescence."""

    scheduled: int = 0

    def call_soon(self, callback: Callable[[], None]) -> None:
        self.scheduled += 1
        asyncio.get_running_loop().call_soon(self._run, callback)

    def _run(self, callback: Callable[[], None]) -> None:
        self.scheduled -= 1
        try:
            callback()
        except Exception:
            logger.exception("Snapshot listener raised")

    async def flush(self) -> None:
        while self.scheduled:
            await asyncio.sleep(0)


class InMemoryDocumentStore(DocumentStore):
    """
    A process-local 'DocumentStore'.

    Attributes:
        resolve_server_timestamps: When False, 'SERVER_TIMESTAMP' fields stay
            pending until 'resolve_pending_timestamps()' is called.
    """

    def __init__(self, resolve_server_timestamps: bool = True) -> None:
        self.resolve_server_timestamps = resolve_server_timestamps
        self._collections: dict[str, dict[str, dict[str, Any]]] = {}
        self._collection_watches: dict[str, list[_Watch]] = {}
        self._document_watches: dict[str, list[_Watch]] = {}
        self._pending_timestamps: list[tuple[str, str, str]] = []
        self._write_failures: deque[_WriteFailure] = deque()
        self._scheduler = _Scheduler()

    # Watches

    def subscribe_collection(
        self, path: str, on_snapshot: CollectionCallback, on_error: ErrorCallback
    ) -> Subscription:
        watch = _Watch(path=path, on_snapshot=on_snapshot, on_error=on_error)
        self._register(self._collection_watches, watch)
        self._schedule_snapshot(watch, self._collection_snapshot(path))
        return watch.subscription  # type: ignore[return-value]

    def subscribe_document(self, path: str, on_snapshot: DocumentCallback, on_error: ErrorCallback) -> Subscription:
        watch = _Watch(path=path, on_snapshot=on_snapshot, on_error=on_error)
        self._register(self._document_watches, watch)
        self._schedule_snapshot(watch, self._document_snapshot(path))
        return watch.subscription  # type: ignore[return-value]

    def _register(self, registry: dict[str, list[_Watch]], watch: _Watch) -> None:
        def unregister() -> None:
            watches = registry.get(watch.path, [])
            if watch in watches:
                watches.remove(watch)

        watch.subscription = Subscription(watch.path, unregister)
        registry.setdefault(watch.path, []).append(watch)

    def _schedule_snapshot(self, watch: _Watch, snapshot: CollectionSnapshot | DocumentSnapshot) -> None:
        def deliver() -> None:
            if watch.subscription is not None and watch.subscription.active:
                watch.on_snapshot(snapshot)

        self._scheduler.call_soon(deliver)

    def _collection_snapshot(self, path: str) -> CollectionSnapshot:
        documents = self._collections.get(path, {})
        return CollectionSnapshot(
            path=path,
            documents=[DocumentSnapshot(id=doc_id, data=copy.deepcopy(data)) for doc_id, data in documents.items()],
        )

    def _document_snapshot(self, path: str) -> DocumentSnapshot:
        collection, doc_id = _split(path)
        data = self._collections.get(collection, {}).get(doc_id)
        return DocumentSnapshot(id=doc_id, data=copy.deepcopy(data) if data is not None else None)

    def _notify(self, collection: str, doc_id: str) -> None:
        for watch in list(self._collection_watches.get(collection, [])):
            self._schedule_snapshot(watch, self._collection_snapshot(collection))
        document_path = f"{collection}/{doc_id}"
        for watch in list(self._document_watches.get(document_path, [])):
            self._schedule_snapshot(watch, self._document_snapshot(document_path))

    def break_subscriptions(self, path: str, error: Exception) -> None:
        """Terminate every watch on 'path' and report 'error' to each of them."""
        watches = self._collection_watches.pop(path, []) + self._document_watches.pop(path, [])
        for watch in watches:
            assert watch.subscription is not None
            watch.subscription.cancel()
            self._scheduler.call_soon(lambda watch=watch: watch.on_error(error))

    # Writes

    def fail_next_write(self, error: Exception | None = None, applied: bool = False) -> None:
        self._write_failures.append(_WriteFailure(error or ConnectionError("network unavailable"), applied))

    async def _begin_write(self) -> _WriteFailure | None:
        await asyncio.sleep(0)
        failure = self._write_failures.popleft() if self._write_failures else None
        if failure is not None and not failure.applied:
            raise failure.error
        return failure

    async def create(self, path: str, fields: dict[str, Any]) -> str:
        failure = await self._begin_write()
        doc_id = generate_uid()
        self._collections.setdefault(path, {})[doc_id] = self._stamp(path, doc_id, fields)
        self._committed(path, doc_id, failure)
        return doc_id

    async def upsert(self, path: str, fields: dict[str, Any], merge: bool = True) -> None:
        failure = await self._begin_write()
        collection, doc_id = _split(path)
        documents = self._collections.setdefault(collection, {})
        stamped = self._stamp(collection, doc_id, fields)
        if merge and doc_id in documents:
            documents[doc_id].update(stamped)
        else:
            documents[doc_id] = stamped
        self._committed(collection, doc_id, failure)

    async def mutate(self, path: str, mutations: Sequence[Mutation]) -> None:
        failure = await self._begin_write()
        collection, doc_id = _split(path)
        document = self._collections.get(collection, {}).get(doc_id)
        if document is None:
            raise LookupError(f"No document at {path}")
        for mutation in mutations:
            values = list(document.get(mutation.field) or [])
            value = copy.deepcopy(mutation.value)
            match mutation:
                case AddToSet():
                    if value not in values:
                        values.append(value)
                case RemoveFromSet():
                    values = [existing for existing in values if existing != value]
                case AppendToList():
                    values.append(value)
            document[mutation.field] = values
        self._committed(collection, doc_id, failure)

    def _stamp(self, collection: str, doc_id: str, fields: dict[str, Any]) -> dict[str, Any]:
        data = copy.deepcopy({key: value for key, value in fields.items() if value is not SERVER_TIMESTAMP})
        for key, value in fields.items():
            if value is SERVER_TIMESTAMP:
                data[key] = None
                self._pending_timestamps.append((collection, doc_id, key))
        return data

    def _committed(self, collection: str, doc_id: str, failure: _WriteFailure | None) -> None:
        self._notify(collection, doc_id)
        if self.resolve_server_timestamps and self._pending_timestamps:
            self._scheduler.call_soon(self.resolve_pending_timestamps)
        if failure is not None:
            raise failure.error

    def resolve_pending_timestamps(self) -> None:
        """Assign the current time to every pending server timestamp and notify watchers."""
        pending, self._pending_timestamps = self._pending_timestamps, []
        now = get_current_time()
        for collection, doc_id, key in pending:
            document = self._collections.get(collection, {}).get(doc_id)
            if document is not None and document.get(key) is None:
                document[key] = now
                self._notify(collection, doc_id)

    # Inspection

    def documents(self, path: str) -> dict[str, dict[str, Any]]:
        """Return a copy of every document stored in the collection at 'path'."""
        return copy.deepcopy(self._collections.get(path, {}))

    def watch_count(self, path: str) -> int:
        return len(self._collection_watches.get(path, [])) + len(self._document_watches.get(path, []))

    async def flush(self) -> None:
        """Wait until every scheduled snapshot has been delivered."""
        await self._scheduler.flush()


class InMemoryIdentityProvider(IdentityProvider):
    """
    A process-local 'IdentityProvider'.

    Tokens listed in 'valid_tokens' sign in as non-anonymous identities; any
    other token is rejected. 'fail_anonymous' makes anonymous sign-in fail
    too, leaving the client without a transport identity.
    """

    def __init__(self, valid_tokens: Iterable[str] = (), fail_anonymous: bool = False) -> None:
        self.valid_tokens = set(valid_tokens)
        self.fail_anonymous = fail_anonymous
        self.current: TransportIdentity | None = None
        self._listeners: list[IdentityCallback] = []
        self._scheduler = _Scheduler()

    async def sign_in_anonymous(self) -> TransportIdentity:
        await asyncio.sleep(0)
        if self.fail_anonymous:
            raise ConnectionError("anonymous sign-in is unavailable")
        return self._set(TransportIdentity(uid=generate_uid(), is_anonymous=True))

    async def sign_in_with_token(self, token: str) -> TransportIdentity:
        await asyncio.sleep(0)
        if token not in self.valid_tokens:
            raise PermissionError("invalid custom token")
        return self._set(TransportIdentity(uid=f"token-{generate_uid()}", is_anonymous=False))

    def on_identity_change(self, callback: IdentityCallback) -> Callable[[], None]:
        self._listeners.append(callback)
        self._schedule(callback, self.current)

        def detach() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return detach

    def _set(self, identity: TransportIdentity) -> TransportIdentity:
        self.current = identity
        for listener in list(self._listeners):
            self._schedule(listener, identity)
        return identity

    def _schedule(self, listener: IdentityCallback, identity: TransportIdentity | None) -> None:
        def deliver() -> None:
            if listener in self._listeners:
                listener(identity)

        self._scheduler.call_soon(deliver)

    async def flush(self) -> None:
        await self._scheduler.flush()
