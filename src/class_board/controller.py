"""
Class board controller (Facade).

'ClassBoardController' is the single entry point a UI shell talks to. It
owns one session's context and wires the session manager, the
directory/settings cache, the feed store, the notice board, the
subscription coordinator and the interaction engine together:

    start()     build the context, attach the coordinator, bootstrap sign-in
    navigate()  switch the active board (and with it the feed watch)
    login()     resolve the application identity, then open the dashboard
    logout()    clear it and return to the login screen, closing the feed watch
    close()     cancel every watch and tear the context down

UI code reads the stores ('feed', 'directory', 'notices') and calls the
'engine' for mutations.
"""

from typing import Any

from loguru import logger

from class_board.boards import Board, collection_for
from class_board.config import BoardConfig, configure_logging, load_config
from class_board.context import BoardContext
from class_board.coordinator import SubscriptionCoordinator
from class_board.data_models.user import UserProfile
from class_board.errors import ConfigError
from class_board.interactions import InteractionEngine
from class_board.session import SessionManager
from class_board.stores.directory import DirectorySettingsCache
from class_board.stores.feed import FeedStore
from class_board.stores.notices import NoticeBoard, NoticeKind

PUBLIC_BOARDS = {Board.LOGIN}


class ClassBoardController:
    def __init__(self, context: BoardContext | None = None, config: BoardConfig | None = None) -> None:
        self.config: BoardConfig | None = config or (context.config if context else None)
        self.context = context
        self.notices = NoticeBoard()
        self.directory = DirectorySettingsCache()
        self.feed = FeedStore()
        self.fatal_error: ConfigError | None = None
        self.session: SessionManager | None = None
        self.coordinator: SubscriptionCoordinator | None = None
        self.engine: InteractionEngine | None = None

    async def start(self) -> bool:
        """
        Bootstrap the session. Returns False if the configuration is unusable.

        Without an explicit context or config the configuration is read from
        the CLASS_BOARD_* environment.
        """
        try:
            if self.config is None:
                self.config = load_config()
            configure_logging(self.config.log_level)
            if self.context is None:
                self.context = BoardContext.from_config(self.config)
        except ConfigError as exc:
            logger.error(f"Configuration error: {exc}")
            self.fatal_error = exc
            self.notices.post(NoticeKind.CONFIG, str(exc), dismissible=False)
            return False
        self.session = SessionManager(self.context, self.directory, self.notices)
        self.coordinator = SubscriptionCoordinator(
            self.context, self.session, self.feed, self.directory, self.notices
        )
        self.engine = InteractionEngine(self.context, self.session, self.directory, self.notices)
        self.coordinator.start()
        await self.session.bootstrap()
        return True

    @property
    def board(self) -> Board:
        return self.coordinator.active_board if self.coordinator else Board.LOGIN

    @property
    def current_user(self) -> UserProfile | None:
        return self.session.application_identity if self.session else None

    @property
    def collection_key(self) -> str | None:
        return collection_for(self.board)

    def navigate(self, board: Board) -> bool:
        """Switch to 'board'. Feed boards need a login and the admin screen needs the admin."""
        if self.coordinator is None:
            return False
        user = self.current_user
        if board not in PUBLIC_BOARDS and user is None:
            logger.warning(f"Cannot open {board} while logged out")
            return False
        if board == Board.ADMIN and (user is None or not user.is_admin):
            logger.warning("The admin screen is reserved for the admin")
            return False
        self.coordinator.set_active_board(board)
        return True

    def login(self, username: str, password: str) -> UserProfile | None:
        if self.session is None:
            return None
        user = self.session.login(username, password)
        if user is not None:
            self.navigate(Board.DASHBOARD)
        return user

    def logout(self) -> None:
        if self.session is None:
            return
        self.session.logout()
        self.navigate(Board.LOGIN)

    def close(self) -> None:
        if self.coordinator is not None:
            self.coordinator.close()
        if self.session is not None:
            self.session.close()
        if self.context is not None:
            self.context.close()

    async def __aenter__(self) -> "ClassBoardController":
        await self.start()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        self.close()
