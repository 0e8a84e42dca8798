"""
Feed store: the sorted mirror of the currently watched feed collection.

The chat stream reads oldest first; every other feed reads newest first. A
post whose server timestamp is still pending counts as time zero, so in a
newest-first feed a freshly created post first shows up at the bottom and
jumps to the top once the store resolves its timestamp.
"""

from collections.abc import Iterable, Sequence

from loguru import logger
from pydantic import ValidationError as PydanticValidationError

from class_board.adapters.document_store import DocumentSnapshot
from class_board.boards import CHAT_COLLECTION
from class_board.data_models.post import AnyPost, parse_post
from class_board.stores.base import ReactiveStore


def sort_posts(posts: Iterable[AnyPost], ascending: bool) -> list[AnyPost]:
    """Order posts by creation time. Stable, so posts with equal times keep the snapshot order."""
    return sorted(posts, key=lambda post: post.timestamp, reverse=not ascending)


def parse_documents(documents: Sequence[DocumentSnapshot]) -> list[AnyPost]:
    posts: list[AnyPost] = []
    for document in documents:
        if document.data is None:
            continue
        try:
            posts.append(parse_post(document.id, document.data))
        except PydanticValidationError as exc:
            logger.warning(f"Skipping malformed post {document.id!r}: {exc.error_count()} validation errors")
    return posts


class FeedStore(ReactiveStore[list[AnyPost]]):
    """
    Latest sorted snapshot of one feed collection.

    'collection_key' names the collection the current value belongs to.
    Snapshots for any other collection are ignored.
    """

    def __init__(self) -> None:
        super().__init__([])
        self.collection_key: str | None = None

    def reset(self, collection_key: str | None) -> None:
        self.collection_key = collection_key
        self.set([])

    def apply_snapshot(self, collection_key: str, documents: Sequence[DocumentSnapshot]) -> None:
        if collection_key != self.collection_key:
            logger.debug(f"Ignoring snapshot for {collection_key!r}, watching {self.collection_key!r}")
            return
        ascending = collection_key == CHAT_COLLECTION
        posts = sort_posts(parse_documents(documents), ascending=ascending)
        logger.debug(f"Feed {collection_key!r}: {len(posts)} posts")
        self.set(posts)

    def get(self, post_id: str) -> AnyPost | None:
        return next((post for post in self.value if post.id == post_id), None)
