"""
User directory model.

Directory entries are created once at signup and never edited or deleted.
The admin is a single logical identity with the fixed sentinel id 'admin'; it
is resolved by a hardcoded credential shortcut and never stored as a
directory document.

Passwords are stored and compared in plaintext on the client. This mirrors
the client-trusted model of the board and is intentionally left as is.
"""

from enum import StrEnum

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class Role(StrEnum):
    ADMIN = "admin"
    STUDENT = "student"


ADMIN_ID = "admin"
ADMIN_USERNAME = "admin"
ADMIN_PASSWORD = "admin"
ADMIN_DISPLAY_NAME = "Teacher (Admin)"
ADMIN_AVATAR_COLOR = "bg-purple-500"

AVATAR_COLORS = ["bg-red-400", "bg-blue-400", "bg-green-400", "bg-yellow-400", "bg-pink-400", "bg-indigo-400"]


class UserProfile(BaseModel):
    """
    An application identity: either a directory entry or the fixed admin.

    'username' is unique and case-sensitive by convention only; uniqueness is
    checked against the locally cached directory, not enforced remotely.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    id: str
    username: str
    password: str = ""
    display_name: str
    role: Role = Role.STUDENT
    avatar_color: str = AVATAR_COLORS[0]

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN


def admin_profile() -> UserProfile:
    return UserProfile(
        id=ADMIN_ID,
        username=ADMIN_USERNAME,
        display_name=ADMIN_DISPLAY_NAME,
        role=Role.ADMIN,
        avatar_color=ADMIN_AVATAR_COLOR,
    )
