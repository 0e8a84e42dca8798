"""
Live synchronization core of the classroom activity board.

    from class_board import ClassBoardController, Board

    async with ClassBoardController() as board:
        await board.session.wait_ready()
        board.login("admin", "admin")
        board.navigate(Board.DIARY)
        await board.engine.create_post("Field trip tomorrow!", "diary")
"""

from class_board.boards import Board
from class_board.config import BoardConfig, configure_logging, load_config
from class_board.context import BoardContext
from class_board.controller import ClassBoardController

__all__ = [
    "Board",
    "BoardConfig",
    "BoardContext",
    "ClassBoardController",
    "configure_logging",
    "load_config",
]
