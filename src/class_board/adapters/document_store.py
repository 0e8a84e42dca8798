"""
Document store abstractions.

'DocumentStore' is the pluggable remote backend. Watches deliver the full
current contents of a collection or document on every change, never deltas,
and hand back a 'Subscription' whose 'cancel()' takes effect synchronously:
once it returns, no further callback for that watch may run.

Writes are coroutines. A field whose value is 'SERVER_TIMESTAMP' is assigned
by the store; until it is resolved, watchers see it as None. Field-level
mutations ('AddToSet', 'RemoveFromSet', 'AppendToList') are applied
atomically by the store, so concurrent writers touching disjoint elements
never conflict.

Concrete implementations: 'InMemoryDocumentStore'.
"""

from abc import ABC, abstractmethod
from collections.abc import Callable, Sequence
from typing import Any, Literal, Union

from pydantic import BaseModel


class _ServerTimestamp:
    def __repr__(self) -> str:
        return "SERVER_TIMESTAMP"


SERVER_TIMESTAMP: Any = _ServerTimestamp()


class DocumentSnapshot(BaseModel):
    """A document as seen by a watch. 'data' is None when the document does not exist."""

    id: str
    data: dict[str, Any] | None = None

    @property
    def exists(self) -> bool:
        return self.data is not None


class CollectionSnapshot(BaseModel):
    """The full contents of a watched collection at one point in time."""

    path: str
    documents: list[DocumentSnapshot]


class AddToSet(BaseModel):
    op: Literal["add_to_set"] = "add_to_set"
    field: str
    value: Any


class RemoveFromSet(BaseModel):
    op: Literal["remove_from_set"] = "remove_from_set"
    field: str
    value: Any


class AppendToList(BaseModel):
    op: Literal["append_to_list"] = "append_to_list"
    field: str
    value: Any


Mutation = Union[AddToSet, RemoveFromSet, AppendToList]

CollectionCallback = Callable[[CollectionSnapshot], None]
DocumentCallback = Callable[[DocumentSnapshot], None]
ErrorCallback = Callable[[Exception], None]


class Subscription:
    """
    Handle for one active watch.

    'cancel()' is idempotent. 'active' turns False either after 'cancel()' or
    after the store reported an error and stopped the watch.
    """

    def __init__(self, key: str, on_cancel: Callable[[], None]) -> None:
        self.key = key
        self._on_cancel = on_cancel
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def cancel(self) -> None:
        if not self._active:
            return
        self._active = False
        self._on_cancel()

    def __repr__(self) -> str:
        state = "active" if self._active else "cancelled"
        return f"Subscription({self.key!r}, {state})"


class DocumentStore(ABC):
    """Abstract remote document store with live watches."""

    @abstractmethod
    def subscribe_collection(
        self, path: str, on_snapshot: CollectionCallback, on_error: ErrorCallback
    ) -> Subscription:
        """Watch every document of the collection at 'path'."""
        pass

    @abstractmethod
    def subscribe_document(self, path: str, on_snapshot: DocumentCallback, on_error: ErrorCallback) -> Subscription:
        """Watch the single document at 'path'; absent documents are delivered too."""
        pass

    @abstractmethod
    async def create(self, path: str, fields: dict[str, Any]) -> str:
        """Create a document with a generated id in the collection at 'path' and return the id."""
        pass

    @abstractmethod
    async def upsert(self, path: str, fields: dict[str, Any], merge: bool = True) -> None:
        """Write the document at 'path', merging into existing fields when 'merge' is set."""
        pass

    @abstractmethod
    async def mutate(self, path: str, mutations: Sequence[Mutation]) -> None:
        """Apply field-level mutations to the existing document at 'path'."""
        pass
