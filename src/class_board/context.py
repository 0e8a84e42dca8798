"""
Explicit context holding the backend client handles.

The store and identity adapters are constructed once per session and passed
into the session manager, coordinator and interaction engine, instead of
living as process-wide globals.
"""

from typing import Any

from loguru import logger

from class_board.adapters.document_store import DocumentStore
from class_board.adapters.identity import IdentityProvider
from class_board.adapters.in_memory import InMemoryDocumentStore, InMemoryIdentityProvider
from class_board.boards import CollectionPaths
from class_board.config import BoardConfig
from class_board.errors import ConfigError


class BoardContext:
    def __init__(self, store: DocumentStore, identity: IdentityProvider, config: BoardConfig | None = None) -> None:
        self.config = config or BoardConfig()
        self.store = store
        self.identity = identity
        self.paths = CollectionPaths(self.config.app_id)
        self.closed = False

    @classmethod
    def from_config(cls, config: BoardConfig) -> "BoardContext":
        """Build the adapters for 'config.backend'. Raises 'ConfigError' for unknown backends."""
        match config.backend:
            case "memory":
                options = config.backend_config
                store = InMemoryDocumentStore(
                    resolve_server_timestamps=bool(options.get("resolve_server_timestamps", True))
                )
                identity = InMemoryIdentityProvider(valid_tokens=_as_list(options.get("valid_tokens", [])))
                logger.info(f"Store backend: in-memory (app_id={config.app_id})")
                return cls(store, identity, config)
            case _:
                raise ConfigError(f"Unsupported backend {config.backend!r}. Choose 'memory'.")

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        logger.debug("Board context closed")

    async def __aenter__(self) -> "BoardContext":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        self.close()


def _as_list(value: Any) -> list[str]:
    if not isinstance(value, list):
        raise ConfigError("backend option 'valid_tokens' must be a list of strings")
    return [str(token) for token in value]
