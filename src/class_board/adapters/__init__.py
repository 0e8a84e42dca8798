from class_board.adapters.document_store import (
    SERVER_TIMESTAMP,
    AddToSet,
    AppendToList,
    CollectionSnapshot,
    DocumentSnapshot,
    DocumentStore,
    Mutation,
    RemoveFromSet,
    Subscription,
)
from class_board.adapters.identity import IdentityProvider, TransportIdentity
from class_board.adapters.in_memory import InMemoryDocumentStore, InMemoryIdentityProvider

__all__ = [
    "SERVER_TIMESTAMP",
    "AddToSet",
    "AppendToList",
    "CollectionSnapshot",
    "DocumentSnapshot",
    "DocumentStore",
    "IdentityProvider",
    "InMemoryDocumentStore",
    "InMemoryIdentityProvider",
    "Mutation",
    "RemoveFromSet",
    "Subscription",
    "TransportIdentity",
]
