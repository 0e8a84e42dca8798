import pytest

from class_board.adapters.document_store import DocumentSnapshot
from class_board.adapters.in_memory import InMemoryIdentityProvider
from class_board.config import BoardConfig
from class_board.context import BoardContext
from class_board.data_models.user import ADMIN_ID
from class_board.session import ApplicationState, SessionManager, TransportState
from class_board.stores.directory import DirectorySettingsCache
from class_board.stores.notices import NoticeKind

from conftest import VALID_TOKEN

DIRECTORY = [
    ("u1", "an", "pw1", "An"),
    ("u2", "binh", "pw2", "Binh"),
    ("u3", "Binh", "pw3", "Binh Upper"),
    ("u4", "admin", "not-admin", "Student named admin"),
]


def _directory() -> DirectorySettingsCache:
    cache = DirectorySettingsCache()
    cache.apply_directory_snapshot(
        [
            DocumentSnapshot(
                id=user_id,
                data={"username": u, "password": p, "displayName": n, "role": "student", "avatarColor": "c"},
            )
            for user_id, u, p, n in DIRECTORY
        ]
    )
    return cache


def _session(store, identity=None, token=None, directory=None) -> SessionManager:
    identity = identity or InMemoryIdentityProvider(valid_tokens=[VALID_TOKEN])
    context = BoardContext(store, identity, BoardConfig(app_id="t", auth_token=token))
    return SessionManager(context, directory or _directory())


async def test_anonymous_bootstrap_reaches_ready(store):
    session = _session(store)
    assert session.transport_state == TransportState.UNINITIALIZED

    await session.bootstrap()
    await session.wait_ready()
    await session.context.identity.flush()

    assert session.transport_state == TransportState.READY
    assert session.transport_identity is not None
    assert session.transport_identity.is_anonymous


async def test_token_bootstrap(store):
    session = _session(store, token=VALID_TOKEN)

    await session.bootstrap()
    await session.context.identity.flush()

    assert not session.transport_identity.is_anonymous


async def test_failed_token_falls_back_to_anonymous(store):
    session = _session(store, token="expired")

    await session.bootstrap()
    await session.context.identity.flush()

    assert session.ready
    assert session.transport_identity.is_anonymous
    assert session.notices.value == []


async def test_ready_even_when_every_sign_in_fails(store):
    session = _session(store, identity=InMemoryIdentityProvider(fail_anonymous=True), token="expired")

    await session.bootstrap()
    await session.context.identity.flush()

    assert session.ready
    assert session.transport_identity is None
    notice = session.notices.of_kind(NoticeKind.AUTH)[0]
    assert notice.dismissible


async def test_failed_anonymous_sign_in_is_reported(store):
    session = _session(store, identity=InMemoryIdentityProvider(fail_anonymous=True))

    await session.bootstrap()
    await session.context.identity.flush()

    assert session.ready
    assert len(session.notices.of_kind(NoticeKind.AUTH)) == 1


async def test_ready_callbacks_run_once(store):
    session = _session(store)
    calls = []
    session.on_ready(lambda: calls.append("early"))

    await session.bootstrap()
    await session.context.identity.flush()
    session.on_ready(lambda: calls.append("late"))

    assert calls == ["early", "late"]


@pytest.mark.parametrize("user_id, username, password, _", DIRECTORY[:3])
def test_login_with_directory_credentials(store, user_id, username, password, _):
    session = _session(store)

    user = session.login(username, password)

    assert user is not None and user.id == user_id
    assert session.application_state == ApplicationState.LOGGED_IN


def test_admin_shortcut_ignores_directory(store):
    session = _session(store)

    user = session.login("admin", "admin")

    assert user.id == ADMIN_ID
    assert user.is_admin


def test_admin_shortcut_with_empty_directory(store):
    session = _session(store, directory=DirectorySettingsCache())

    assert session.login("admin", "admin").id == ADMIN_ID


def test_login_is_case_sensitive_and_exact(store):
    session = _session(store)

    assert session.login("AN", "pw1") is None
    assert session.login("an", "PW1") is None
    assert session.login("admin", "not-admin").id == "u4"


def test_failed_login_sets_transient_error(store):
    session = _session(store)

    assert session.login("an", "wrong") is None
    assert session.application_state == ApplicationState.LOGIN_ERROR
    assert session.application_identity is None

    session.login("an", "pw1")
    assert session.login_error is None
    assert session.application_state == ApplicationState.LOGGED_IN


def test_failed_login_keeps_current_identity(store):
    session = _session(store)
    session.login("an", "pw1")

    assert session.login("an", "wrong") is None

    assert session.application_identity.id == "u1"
    assert session.login_error
    assert session.application_state == ApplicationState.LOGGED_IN


async def test_logout_keeps_transport_identity(store):
    session = _session(store)
    await session.bootstrap()
    await session.context.identity.flush()
    transport = session.transport_identity
    session.login("an", "pw1")

    session.logout()

    assert session.application_state == ApplicationState.LOGGED_OUT
    assert session.transport_identity == transport
