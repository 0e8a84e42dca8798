"""
Post data model.

A post is a tagged variant keyed by 'type'. All variants share the same
stored shape; they differ in which drafts they accept ('check_draft') and in
which roles may create them (enforced by 'InteractionEngine', client-side
only).

'created_at' is assigned by the store. Until the store resolves it, a
freshly created post carries 'None' (pending), which sorts as time zero.
'likes' is a set of user ids: membership matters, multiplicity does not.
'comments' is append-only.
"""

from datetime import datetime
from enum import StrEnum
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator
from pydantic.alias_generators import to_camel

from class_board.boards import BOARD_COLLECTIONS, Board
from class_board.data_models.comment import Comment


class PostType(StrEnum):
    CHAT = "chat"
    DIARY = "diary"
    PETS = "pets"
    HOMEWORK = "homework"
    REWARDS = "rewards"
    BIRTHDAY = "birthday"

    @property
    def board(self) -> Board:
        return Board(self.value)

    @property
    def collection(self) -> str:
        return BOARD_COLLECTIONS[self.board]


class PostBase(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str = ""
    content: str = ""
    author_id: str
    author_name: str
    author_color: str = ""
    created_at: datetime | None = None
    image_ref: str = Field(default="", alias="imageUrl")
    likes: set[str] = Field(default_factory=set)
    comments: list[Comment] = Field(default_factory=list)

    @field_validator("content", "image_ref", "author_color", mode="before")
    @classmethod
    def _missing_text(cls, value: Any) -> Any:
        return value or ""

    @field_validator("likes", "comments", mode="before")
    @classmethod
    def _missing_collection(cls, value: Any) -> Any:
        return value or []

    @property
    def timestamp(self) -> float:
        """Creation time in epoch seconds; a pending timestamp counts as zero."""
        return self.created_at.timestamp() if self.created_at is not None else 0.0

    @property
    def pending(self) -> bool:
        return self.created_at is None

    def check_draft(self) -> None:
        """Raise 'ValueError' if this post may not be written as a new document."""
        if not self.content.strip() and not self.image_ref:
            raise ValueError("a post needs text or an image")

    def to_document(self) -> dict[str, Any]:
        """Persisted fields, without the document id and the store-assigned creation time."""
        return self.model_dump(mode="json", by_alias=True, exclude={"id", "created_at"})


class ChatPost(PostBase):
    type: Literal["chat"] = "chat"

    def check_draft(self) -> None:
        if self.image_ref:
            raise ValueError("chat messages cannot carry an image")
        if not self.content.strip():
            raise ValueError("chat messages need text")


class DiaryPost(PostBase):
    type: Literal["diary"] = "diary"


class PetPost(PostBase):
    type: Literal["pets"] = "pets"


class HomeworkPost(PostBase):
    type: Literal["homework"] = "homework"


class RewardPost(PostBase):
    type: Literal["rewards"] = "rewards"


class BirthdayPost(PostBase):
    type: Literal["birthday"] = "birthday"


AnyPost = Annotated[
    Union[ChatPost, DiaryPost, PetPost, HomeworkPost, RewardPost, BirthdayPost],
    Field(discriminator="type"),
]

_post_adapter: TypeAdapter[AnyPost] = TypeAdapter(AnyPost)


def parse_post(doc_id: str, data: dict[str, Any]) -> AnyPost:
    """Build the post variant for a stored document. Raises pydantic's 'ValidationError'."""
    return _post_adapter.validate_python({**data, "id": doc_id})


def new_post(post_type: PostType, **fields: Any) -> AnyPost:
    """Build an unsaved post variant of 'post_type'."""
    return _post_adapter.validate_python({**fields, "type": post_type.value})
