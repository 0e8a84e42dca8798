"""
Always-on mirrors of the user directory and the settings document.

Both are fed by the auxiliary subscriptions opened once the session becomes
ready. Login and signup consult this cache only; nothing here talks to the
store directly.
"""

from collections.abc import Sequence

from loguru import logger
from pydantic import ValidationError as PydanticValidationError

from class_board.adapters.document_store import DocumentSnapshot
from class_board.data_models.settings import Settings
from class_board.data_models.user import UserProfile
from class_board.stores.base import ReactiveStore


class DirectorySettingsCache:
    def __init__(self) -> None:
        self.users: ReactiveStore[list[UserProfile]] = ReactiveStore([])
        self.settings: ReactiveStore[Settings] = ReactiveStore(Settings())

    def apply_directory_snapshot(self, documents: Sequence[DocumentSnapshot]) -> None:
        users: list[UserProfile] = []
        for document in documents:
            if document.data is None:
                continue
            try:
                users.append(UserProfile.model_validate({**document.data, "id": document.id}))
            except PydanticValidationError as exc:
                logger.warning(f"Skipping malformed directory entry {document.id!r}: {exc.error_count()} errors")
        logger.debug(f"Directory: {len(users)} users")
        self.users.set(users)

    def apply_settings_snapshot(self, document: DocumentSnapshot) -> None:
        # An absent settings document keeps whatever banner was last seen.
        if document.data is None:
            return
        self.settings.set(Settings.model_validate(document.data))

    def find_by_credentials(self, username: str, password: str) -> UserProfile | None:
        """Exact, case-sensitive match. With colliding usernames the first cached entry wins."""
        return next(
            (user for user in self.users.value if user.username == username and user.password == password),
            None,
        )

    def username_taken(self, username: str) -> bool:
        return any(user.username == username for user in self.users.value)

    @property
    def banner_ref(self) -> str:
        return self.settings.value.banner_ref
