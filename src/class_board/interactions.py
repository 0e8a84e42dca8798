"""
Interaction engine: role-gated mutations against the remote store.

Every operation validates locally, issues a single remote write and returns.
Nothing is applied to local state: the result is observed back through the
watch of the affected collection. Remote failures are logged and posted as
notices; they are never raised to the caller and never retried.

Known properties kept on purpose:
    - Role gates (rewards posts are admin-only) are enforced here only; the
      store does not check them.
    - 'toggle_like' decides add vs remove from the locally held post, which
      may be stale. Two quick toggles can both add; the store's set-add
      absorbs the duplicate.
    - 'add_comment' appends without deduplication and synthesizes the id
      from the wall clock. Retrying after an ambiguous failure can show the
      comment twice.
    - 'create_user' checks username uniqueness against the cached directory
      only. Two sessions signing up the same username at the same time can
      both succeed.
"""

import random
from typing import Any

from loguru import logger
from pydantic import ValidationError as PydanticValidationError

from class_board.adapters.document_store import SERVER_TIMESTAMP, AddToSet, AppendToList, RemoveFromSet
from class_board.boards import USERS_COLLECTION, Board
from class_board.context import BoardContext
from class_board.data_models.comment import Comment
from class_board.data_models.post import AnyPost, PostBase, PostType, new_post
from class_board.data_models.user import AVATAR_COLORS, Role, UserProfile
from class_board.errors import ValidationError, WriteError
from class_board.session import SessionManager
from class_board.stores.directory import DirectorySettingsCache
from class_board.stores.notices import NoticeBoard, NoticeKind
from class_board.utils.time import get_current_time, get_wall_clock_millis

ADMIN_ONLY_POST_TYPES = {PostType.REWARDS}


class InteractionEngine:
    def __init__(
        self,
        context: BoardContext,
        session: SessionManager,
        directory: DirectorySettingsCache,
        notices: NoticeBoard,
    ) -> None:
        self.context = context
        self.session = session
        self.directory = directory
        self.notices = notices

    @property
    def identity(self) -> UserProfile | None:
        return self.session.application_identity

    def can_post(self, board: Board) -> bool:
        """Whether the current identity may create posts on 'board'."""
        if self.identity is None:
            return False
        try:
            post_type = PostType(board.value)
        except ValueError:
            return False
        return post_type not in ADMIN_ONLY_POST_TYPES or self.identity.is_admin

    def has_liked(self, post: PostBase) -> bool:
        return self.identity is not None and self.identity.id in post.likes

    async def create_post(self, content: str, post_type: str, image_ref: str | None = None) -> str | None:
        """
        Create a post in the collection of 'post_type' and return its id.

        Empty text without an image is a no-op. Without an application
        identity, or for a non-admin on an admin-only board, nothing is
        written and None is returned. A draft failing per-variant validation
        raises 'ValidationError'.
        """
        if not content.strip() and not image_ref:
            return None
        identity = self.identity
        if identity is None:
            logger.warning("create_post ignored: no logged-in user")
            return None
        try:
            kind = PostType(post_type)
        except ValueError as exc:
            raise ValidationError(f"Unknown post type {post_type!r}") from exc
        if kind in ADMIN_ONLY_POST_TYPES and identity.role != Role.ADMIN:
            logger.warning(f"create_post ignored: {identity.username!r} may not post to {kind}")
            return None

        try:
            post: AnyPost = new_post(
                kind,
                content=content,
                author_id=identity.id,
                author_name=identity.display_name,
                author_color=identity.avatar_color,
                image_ref=image_ref or "",
            )
            post.check_draft()
        except (PydanticValidationError, ValueError) as exc:
            raise ValidationError(f"Invalid {kind} post: {exc}") from exc

        fields = {**post.to_document(), "createdAt": SERVER_TIMESTAMP}
        try:
            post_id = await self.context.store.create(self.context.paths.collection(kind.collection), fields)
        except Exception as exc:
            self._write_failed(f"creating a {kind} post", exc)
            return None
        logger.info(f"Post {post_id} created in {kind.collection} by {identity.username!r}")
        return post_id

    async def toggle_like(self, post: PostBase, collection_key: str) -> None:
        """Add or remove the current identity's like, judged from the locally held 'post'."""
        identity = self.identity
        if identity is None:
            logger.warning("toggle_like ignored: no logged-in user")
            return
        path = self.context.paths.document(collection_key, post.id)
        if identity.id in post.likes:
            mutation: AddToSet | RemoveFromSet = RemoveFromSet(field="likes", value=identity.id)
        else:
            mutation = AddToSet(field="likes", value=identity.id)
        try:
            await self.context.store.mutate(path, [mutation])
        except Exception as exc:
            self._write_failed("toggling a like", exc)
            return
        logger.debug(f"{mutation.op} {identity.id!r} on {path}")

    async def add_comment(self, post: PostBase, collection_key: str, text: str) -> None:
        identity = self.identity
        if identity is None or not text.strip():
            return
        comment = Comment(
            id=str(get_wall_clock_millis()),
            author_name=identity.display_name,
            content=text,
            created_at=get_current_time(),
        )
        path = self.context.paths.document(collection_key, post.id)
        try:
            await self.context.store.mutate(
                path, [AppendToList(field="comments", value=comment.model_dump(mode="json", by_alias=True))]
            )
        except Exception as exc:
            self._write_failed("adding a comment", exc)
            return
        logger.debug(f"Comment {comment.id} appended to {path}")

    async def create_user(self, username: str, password: str, display_name: str) -> str | None:
        """
        Create a student directory entry and return its id.

        Raises 'ValidationError' when a field is empty or the username is
        already in the cached directory. The check does not reach the store.
        """
        if not username or not password or not display_name:
            raise ValidationError("Username, password and display name are all required")
        if self.directory.username_taken(username):
            raise ValidationError(f"Username {username!r} already exists")
        fields: dict[str, Any] = {
            "username": username,
            "password": password,
            "displayName": display_name,
            "role": Role.STUDENT.value,
            "avatarColor": random.choice(AVATAR_COLORS),
        }
        try:
            user_id = await self.context.store.create(self.context.paths.users, fields)
        except Exception as exc:
            self._write_failed(f"creating user {username!r}", exc)
            return None
        logger.info(f"User {username!r} created in {USERS_COLLECTION} ({user_id})")
        return user_id

    async def update_banner(self, ref: str) -> bool:
        """Merge the banner reference into the settings document. The value is not validated."""
        try:
            await self.context.store.upsert(self.context.paths.settings, {"bannerUrl": ref}, merge=True)
        except Exception as exc:
            self._write_failed("updating the banner", exc)
            return False
        logger.info("Banner updated")
        return True

    def _write_failed(self, action: str, exc: Exception) -> None:
        error = WriteError(f"Error {action}: {exc}")
        logger.error(str(error))
        self.notices.post(NoticeKind.WRITE, str(error))
