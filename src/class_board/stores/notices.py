"""
User-facing notices.

Broken subscriptions, failed writes and a sign-in that failed even
anonymously are posted as dismissible notices. A configuration failure is
posted as a persistent notice that cannot be dismissed.
"""

from enum import StrEnum

from pydantic import BaseModel

from class_board.stores.base import ReactiveStore
from class_board.utils.database import generate_uid


class NoticeKind(StrEnum):
    CONFIG = "config"
    AUTH = "auth"
    SUBSCRIPTION = "subscription"
    WRITE = "write"


class Notice(BaseModel):
    id: str
    kind: NoticeKind
    message: str
    dismissible: bool = True


class NoticeBoard(ReactiveStore[list[Notice]]):
    def __init__(self) -> None:
        super().__init__([])

    def post(self, kind: NoticeKind, message: str, dismissible: bool = True) -> Notice:
        notice = Notice(id=generate_uid(), kind=kind, message=message, dismissible=dismissible)
        self.set([*self.value, notice])
        return notice

    def dismiss(self, notice_id: str) -> bool:
        """Remove a dismissible notice. Returns False if it is unknown or persistent."""
        notice = next((n for n in self.value if n.id == notice_id), None)
        if notice is None or not notice.dismissible:
            return False
        self.set([n for n in self.value if n.id != notice_id])
        return True

    def of_kind(self, kind: NoticeKind) -> list[Notice]:
        return [notice for notice in self.value if notice.kind == kind]
