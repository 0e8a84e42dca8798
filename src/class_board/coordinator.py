"""
Subscription coordinator.

Maps (readiness, active board) to the collection that must be watched and
owns every live watch of the session:

    - at most one feed watch, for the active board's collection;
    - the directory and settings watches, opened once when the session
      becomes ready and kept until 'close()'.

Switching boards cancels the previous feed watch before the next one is
opened, inside the same synchronous call. Each feed watch also carries a
generation number and callbacks from a superseded generation are dropped, so
a late snapshot from the old board can never overwrite the new board's
feed. Snapshots are full contents and simply replace the store value.
"""

from loguru import logger

from class_board.adapters.document_store import CollectionSnapshot, DocumentSnapshot, Subscription
from class_board.boards import Board, collection_for
from class_board.context import BoardContext
from class_board.errors import SubscriptionError
from class_board.session import SessionManager
from class_board.stores.base import ReactiveStore
from class_board.stores.directory import DirectorySettingsCache
from class_board.stores.feed import FeedStore
from class_board.stores.notices import NoticeBoard, NoticeKind


class SubscriptionCoordinator:
    def __init__(
        self,
        context: BoardContext,
        session: SessionManager,
        feed: FeedStore,
        directory: DirectorySettingsCache,
        notices: NoticeBoard,
    ) -> None:
        self.context = context
        self.session = session
        self.feed = feed
        self.directory = directory
        self.notices = notices
        self.active_board = Board.LOGIN
        self.feed_subscription: Subscription | None = None
        self.directory_subscription: Subscription | None = None
        self.settings_subscription: Subscription | None = None
        self._generation = 0
        self._closed = False

    def start(self) -> None:
        self.session.on_ready(self._on_ready)

    def _on_ready(self) -> None:
        if self._closed:
            return
        self._open_auxiliary()
        self._open_feed()

    def _open_auxiliary(self) -> None:
        if self.directory_subscription is not None:
            return
        paths = self.context.paths
        self.directory_subscription = self.context.store.subscribe_collection(
            paths.users,
            lambda snapshot: self.directory.apply_directory_snapshot(snapshot.documents),
            lambda error: self._subscription_failed(paths.users, error, self.directory.users),
        )
        self.settings_subscription = self.context.store.subscribe_document(
            paths.settings,
            self.directory.apply_settings_snapshot,
            lambda error: self._subscription_failed(paths.settings, error, self.directory.settings),
        )
        logger.info("Directory and settings subscriptions opened")

    def set_active_board(self, board: Board) -> None:
        """
        Make 'board' the active board.

        Returns only after the previous feed watch is cancelled and, if the
        session is ready and the board has a feed, the new watch is open.
        Reselecting the watched board is a no-op unless its watch has failed.
        """
        if self._closed:
            return
        if board == self.active_board and (self.live_feed_subscriptions or not self.session.ready):
            return
        self.active_board = board
        self._cancel_feed()
        if self.session.ready:
            self._open_feed()

    def _cancel_feed(self) -> None:
        self._generation += 1
        if self.feed_subscription is not None:
            logger.info(f"Feed subscription cancelled: {self.feed_subscription.key}")
            self.feed_subscription.cancel()
            self.feed_subscription = None

    def _open_feed(self) -> None:
        collection_key = collection_for(self.active_board)
        if collection_key is None or self.feed_subscription is not None:
            return
        generation = self._generation
        path = self.context.paths.collection(collection_key)
        self.feed.reset(collection_key)

        def on_snapshot(snapshot: CollectionSnapshot) -> None:
            if generation != self._generation:
                logger.debug(f"Dropping stale snapshot for {collection_key!r}")
                return
            self.feed.apply_snapshot(collection_key, snapshot.documents)

        def on_error(error: Exception) -> None:
            if generation != self._generation:
                return
            self._subscription_failed(path, error, self.feed)

        self.feed_subscription = self.context.store.subscribe_collection(path, on_snapshot, on_error)
        logger.info(f"Feed subscription opened: {path}")

    def _subscription_failed(self, path: str, error: Exception, store: ReactiveStore) -> None:
        failure = SubscriptionError(path, str(error))
        logger.error(f"Subscription error: {failure}")
        store.freeze(failure)
        self.notices.post(NoticeKind.SUBSCRIPTION, f"Live updates stopped for {path}: {error}")

    def close(self) -> None:
        """Cancel every watch. Used at session teardown."""
        if self._closed:
            return
        self._closed = True
        self._cancel_feed()
        for subscription in (self.directory_subscription, self.settings_subscription):
            if subscription is not None:
                subscription.cancel()
        self.directory_subscription = None
        self.settings_subscription = None
        logger.info("All subscriptions closed")

    @property
    def live_feed_subscriptions(self) -> int:
        return int(self.feed_subscription is not None and self.feed_subscription.active)
