from class_board.data_models.comment import Comment
from class_board.data_models.post import (
    AnyPost,
    BirthdayPost,
    ChatPost,
    DiaryPost,
    HomeworkPost,
    PetPost,
    PostBase,
    PostType,
    RewardPost,
    new_post,
    parse_post,
)
from class_board.data_models.settings import Settings
from class_board.data_models.user import ADMIN_ID, AVATAR_COLORS, Role, UserProfile, admin_profile

__all__ = [
    "ADMIN_ID",
    "AVATAR_COLORS",
    "AnyPost",
    "BirthdayPost",
    "ChatPost",
    "Comment",
    "DiaryPost",
    "HomeworkPost",
    "PetPost",
    "PostBase",
    "PostType",
    "RewardPost",
    "Role",
    "Settings",
    "UserProfile",
    "admin_profile",
    "new_post",
    "parse_post",
]
