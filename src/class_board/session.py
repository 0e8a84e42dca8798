"""
Session manager.

Two independent identities live here:

    Transport identity: issued by the identity provider and used only for
        store access. 'bootstrap()' tries token sign-in when a token is
        configured and falls back to anonymous sign-in on any failure.
    Application identity: a directory entry or the fixed admin, resolved
        purely by matching credentials against the locally cached directory.

Readiness tracks "identity listener attached and called back once", not
"sign-in succeeded": the first identity callback flips it to True even if
every sign-in attempt failed, in which case the board stays usable but no
application identity can be backed by a transport identity. That case is
posted as a dismissible AUTH notice.

States:
    transport:   UNINITIALIZED -> AUTHENTICATING -> READY
    application: LOGGED_OUT <-> LOGGED_IN, with a transient LOGIN_ERROR
"""

import asyncio
from collections.abc import Callable
from enum import StrEnum

from loguru import logger

from class_board.adapters.identity import TransportIdentity
from class_board.context import BoardContext
from class_board.data_models.user import ADMIN_PASSWORD, ADMIN_USERNAME, UserProfile, admin_profile
from class_board.errors import AuthError
from class_board.stores.directory import DirectorySettingsCache
from class_board.stores.notices import NoticeBoard, NoticeKind

LOGIN_ERROR_MESSAGE = "Wrong username or password!"


class TransportState(StrEnum):
    UNINITIALIZED = "uninitialized"
    AUTHENTICATING = "authenticating"
    READY = "ready"


class ApplicationState(StrEnum):
    LOGGED_OUT = "logged_out"
    LOGGED_IN = "logged_in"
    LOGIN_ERROR = "login_error"


class SessionManager:
    def __init__(
        self, context: BoardContext, directory: DirectorySettingsCache, notices: NoticeBoard | None = None
    ) -> None:
        self.context = context
        self.directory = directory
        self.notices = notices if notices is not None else NoticeBoard()
        self.transport_identity: TransportIdentity | None = None
        self.application_identity: UserProfile | None = None
        self.login_error: str | None = None
        self.transport_state = TransportState.UNINITIALIZED
        self._ready = asyncio.Event()
        self._ready_callbacks: list[Callable[[], None]] = []
        self._detach_identity: Callable[[], None] | None = None

    @property
    def ready(self) -> bool:
        return self._ready.is_set()

    @property
    def application_state(self) -> ApplicationState:
        if self.application_identity is not None:
            return ApplicationState.LOGGED_IN
        if self.login_error is not None:
            return ApplicationState.LOGIN_ERROR
        return ApplicationState.LOGGED_OUT

    def on_ready(self, callback: Callable[[], None]) -> None:
        """Run 'callback' once readiness is reached, immediately if it already was."""
        if self.ready:
            callback()
        else:
            self._ready_callbacks.append(callback)

    async def wait_ready(self) -> None:
        await self._ready.wait()

    async def bootstrap(self) -> None:
        if self.transport_state != TransportState.UNINITIALIZED:
            return
        self.transport_state = TransportState.AUTHENTICATING
        self._detach_identity = self.context.identity.on_identity_change(self._identity_changed)
        token = self.context.config.auth_token
        try:
            if token:
                await self._sign_in_with_token(token)
            else:
                await self.context.identity.sign_in_anonymous()
        except AuthError as exc:
            logger.warning(f"{exc}, falling back to anonymous sign-in")
            await self._sign_in_anonymous_fallback()
        except Exception as exc:
            self._sign_in_failed(exc)

    async def _sign_in_with_token(self, token: str) -> None:
        try:
            await self.context.identity.sign_in_with_token(token)
        except Exception as exc:
            raise AuthError(f"Token sign-in failed: {exc}") from exc

    async def _sign_in_anonymous_fallback(self) -> None:
        try:
            await self.context.identity.sign_in_anonymous()
        except Exception as exc:
            self._sign_in_failed(exc)

    def _sign_in_failed(self, exc: Exception) -> None:
        logger.error(f"Anonymous sign-in failed: {exc}")
        self.notices.post(NoticeKind.AUTH, f"Could not connect to the class board: {exc}")

    def _identity_changed(self, identity: TransportIdentity | None) -> None:
        self.transport_identity = identity
        logger.info(f"Transport identity: {identity.uid if identity else None}")
        if self.ready:
            return
        self.transport_state = TransportState.READY
        self._ready.set()
        logger.info("Session ready")
        callbacks, self._ready_callbacks = self._ready_callbacks, []
        for callback in callbacks:
            callback()

    def login(self, username: str, password: str) -> UserProfile | None:
        """
        Resolve the application identity from local credentials.

        'admin'/'admin' always yields the fixed admin, bypassing the directory.
        Anything else is an exact match against the cached directory. On
        failure 'login_error' is set and any current identity is kept.
        """
        self.login_error = None
        if username == ADMIN_USERNAME and password == ADMIN_PASSWORD:
            user = admin_profile()
        else:
            user = self.directory.find_by_credentials(username, password)
        if user is None:
            self.login_error = LOGIN_ERROR_MESSAGE
            logger.info(f"Login rejected for {username!r}")
            return None
        self.application_identity = user
        logger.info(f"Logged in as {user.username!r} ({user.role})")
        return user

    def logout(self) -> None:
        """Clear the application identity. The transport identity is kept."""
        if self.application_identity is not None:
            logger.info(f"Logged out {self.application_identity.username!r}")
        self.application_identity = None
        self.login_error = None

    def close(self) -> None:
        if self._detach_identity is not None:
            self._detach_identity()
            self._detach_identity = None
        self._ready_callbacks = []
