"""
Board identifiers and the remote collection layout.

A board is either a topic feed, the chat stream, or a pure navigation state
(login, dashboard, admin) that carries no feed. 'BOARD_COLLECTIONS' is the
single source of truth for which collection backs which board.
"""

from enum import StrEnum


class Board(StrEnum):
    LOGIN = "login"
    DASHBOARD = "dashboard"
    ADMIN = "admin"
    CHAT = "chat"
    DIARY = "diary"
    PETS = "pets"
    HOMEWORK = "homework"
    REWARDS = "rewards"
    BIRTHDAY = "birthday"


BOARD_COLLECTIONS: dict[Board, str] = {
    Board.CHAT: "messages",
    Board.DIARY: "posts_diary",
    Board.PETS: "posts_pets",
    Board.HOMEWORK: "posts_homework",
    Board.REWARDS: "posts_rewards",
    Board.BIRTHDAY: "posts_birthday",
}

CHAT_COLLECTION = BOARD_COLLECTIONS[Board.CHAT]
USERS_COLLECTION = "users"
SETTINGS_COLLECTION = "settings"
SETTINGS_DOCUMENT = "config"


def collection_for(board: Board) -> str | None:
    """Return the collection name watched for 'board', or None for navigation states."""
    return BOARD_COLLECTIONS.get(board)


class CollectionPaths:
    """
    Builds store paths for one tenant.

    Everything lives under 'artifacts/{app_id}/public/data/'. Feed collections
    are addressed by their collection name, the directory is the fixed
    'users' collection and the banner lives in the single 'settings/config'
    document.
    """

    def __init__(self, app_id: str) -> None:
        self.app_id = app_id
        self.root = f"artifacts/{app_id}/public/data"

    def collection(self, collection_name: str) -> str:
        return f"{self.root}/{collection_name}"

    def document(self, collection_name: str, doc_id: str) -> str:
        return f"{self.collection(collection_name)}/{doc_id}"

    @property
    def users(self) -> str:
        return self.collection(USERS_COLLECTION)

    @property
    def settings(self) -> str:
        return self.document(SETTINGS_COLLECTION, SETTINGS_DOCUMENT)
