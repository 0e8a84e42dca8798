from class_board.stores.base import ReactiveStore
from class_board.stores.directory import DirectorySettingsCache
from class_board.stores.feed import FeedStore, sort_posts
from class_board.stores.notices import Notice, NoticeBoard, NoticeKind

__all__ = [
    "DirectorySettingsCache",
    "FeedStore",
    "Notice",
    "NoticeBoard",
    "NoticeKind",
    "ReactiveStore",
    "sort_posts",
]
