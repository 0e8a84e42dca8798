from datetime import datetime, timezone

import pytest
from pydantic import ValidationError as PydanticValidationError

from class_board.boards import Board, CollectionPaths, collection_for
from class_board.data_models import (
    ChatPost,
    DiaryPost,
    PostType,
    RewardPost,
    Settings,
    UserProfile,
    admin_profile,
    new_post,
    parse_post,
)


def test_board_table():
    assert collection_for(Board.CHAT) == "messages"
    assert collection_for(Board.DIARY) == "posts_diary"
    assert collection_for(Board.BIRTHDAY) == "posts_birthday"
    for board in (Board.LOGIN, Board.DASHBOARD, Board.ADMIN):
        assert collection_for(board) is None


def test_collection_paths():
    paths = CollectionPaths("class-2a8")

    assert paths.collection("posts_pets") == "artifacts/class-2a8/public/data/posts_pets"
    assert paths.document("posts_pets", "p1") == "artifacts/class-2a8/public/data/posts_pets/p1"


def test_post_type_maps_to_its_collection():
    assert PostType.PETS.collection == "posts_pets"
    assert PostType.CHAT.board == Board.CHAT


def test_parse_post_picks_variant_from_type():
    created = datetime(2024, 9, 5, 7, 30, tzinfo=timezone.utc)
    post = parse_post(
        "p1",
        {
            "type": "rewards",
            "content": "Star of the week",
            "authorId": "admin",
            "authorName": "Teacher (Admin)",
            "authorColor": "bg-purple-500",
            "createdAt": created,
            "imageUrl": "",
            "likes": ["u1", "u1", "u2"],
            "comments": [{"id": "1", "authorName": "An", "content": "Yay", "createdAt": "2024-09-05T08:00:00Z"}],
        },
    )

    assert isinstance(post, RewardPost)
    assert post.id == "p1"
    assert post.likes == {"u1", "u2"}
    assert post.comments[0].author_name == "An"
    assert post.timestamp == created.timestamp()


def test_parse_post_fills_missing_optional_fields():
    post = parse_post("p2", {"type": "diary", "content": "hi", "authorId": "u1", "authorName": "An", "likes": None})

    assert isinstance(post, DiaryPost)
    assert post.likes == set()
    assert post.comments == []
    assert post.image_ref == ""
    assert post.pending
    assert post.timestamp == 0.0


def test_parse_post_rejects_unknown_type():
    with pytest.raises(PydanticValidationError):
        parse_post("p3", {"type": "gossip", "content": "x", "authorId": "u1", "authorName": "An"})


def test_to_document_uses_stored_field_names():
    post = new_post(PostType.DIARY, content="hello", author_id="u1", author_name="An", author_color="bg-red-400")

    document = post.to_document()

    assert document == {
        "type": "diary",
        "content": "hello",
        "authorId": "u1",
        "authorName": "An",
        "authorColor": "bg-red-400",
        "imageUrl": "",
        "likes": [],
        "comments": [],
    }


def test_chat_drafts_are_text_only():
    with pytest.raises(ValueError):
        ChatPost(author_id="u1", author_name="An", content="look", image_ref="data:image/png;base64,AAA").check_draft()
    with pytest.raises(ValueError):
        ChatPost(author_id="u1", author_name="An", content="   ").check_draft()
    ChatPost(author_id="u1", author_name="An", content="hello").check_draft()


def test_feed_drafts_accept_image_only():
    DiaryPost(author_id="u1", author_name="An", image_ref="data:image/png;base64,AAA").check_draft()
    with pytest.raises(ValueError):
        DiaryPost(author_id="u1", author_name="An", content=" ").check_draft()


def test_user_profile_from_directory_document():
    user = UserProfile.model_validate(
        {"id": "u1", "username": "an", "password": "pw", "displayName": "An", "role": "student", "avatarColor": "x"}
    )

    assert user.display_name == "An"
    assert not user.is_admin
    assert admin_profile().is_admin
    assert admin_profile().id == "admin"


def test_settings_tolerates_missing_banner():
    assert Settings.model_validate({"bannerUrl": None}).banner_ref == ""
    assert Settings.model_validate({"bannerUrl": "https://x/banner.png"}).banner_ref == "https://x/banner.png"
