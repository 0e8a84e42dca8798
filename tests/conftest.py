from collections.abc import Callable
from typing import Any

import pytest

from class_board.adapters.in_memory import InMemoryDocumentStore, InMemoryIdentityProvider
from class_board.config import BoardConfig
from class_board.context import BoardContext
from class_board.controller import ClassBoardController

APP_ID = "test-class"
VALID_TOKEN = "good-token"


async def settle(*controllers: ClassBoardController) -> None:
    """Let every scheduled identity callback and snapshot delivery run."""
    for _ in range(3):
        for controller in controllers:
            assert controller.context is not None
            await controller.context.identity.flush()  # type: ignore[attr-defined]
            await controller.context.store.flush()  # type: ignore[attr-defined]


@pytest.fixture
def store() -> InMemoryDocumentStore:
    return InMemoryDocumentStore()


@pytest.fixture
def make_context(store: InMemoryDocumentStore) -> Callable[..., BoardContext]:
    def factory(**config: Any) -> BoardContext:
        identity = InMemoryIdentityProvider(valid_tokens=[VALID_TOKEN])
        return BoardContext(store, identity, BoardConfig(app_id=APP_ID, **config))

    return factory


@pytest.fixture
def make_controller(make_context: Callable[..., BoardContext]):
    """Build started, settled controllers that share one store, like several browser sessions."""
    controllers: list[ClassBoardController] = []

    async def factory(**config: Any) -> ClassBoardController:
        controller = ClassBoardController(make_context(**config))
        await controller.start()
        await settle(controller)
        controllers.append(controller)
        return controller

    yield factory
    for controller in controllers:
        controller.close()


async def add_student(
    controller: ClassBoardController, username: str, password: str = "secret", display_name: str | None = None
) -> str:
    """Write a directory entry straight to the store, bypassing the engine's checks."""
    assert controller.context is not None
    return await controller.context.store.create(
        controller.context.paths.users,
        {
            "username": username,
            "password": password,
            "displayName": display_name or username.title(),
            "role": "student",
            "avatarColor": "bg-green-400",
        },
    )
