# tests/test_posts.py
"""Tests for post authoring."""

import pytest
from sqlalchemy import func, select

from desiiseb.core.errors import NotFoundError, SourceUnavailableError, ValidationError
from desiiseb.models import Mention, Post
from desiiseb.repositories.post_repo import PostRepository
from desiiseb.schemas.post import PostCreate
from desiiseb.services.post_service import create_post, get_post


async def _post_count(session) -> int:
    return await session.scalar(select(func.count()).select_from(Post))


@pytest.mark.asyncio
async def test_content_of_280_code_points_is_accepted(db_session, alice) -> None:
    post = await create_post(db_session, author_id=alice.id, data=PostCreate(content="a" * 280))
    assert len(post.content) == 280


@pytest.mark.asyncio
async def test_bengali_content_counts_code_points(db_session, alice) -> None:
    content = "ক" * 280
    post = await create_post(db_session, author_id=alice.id, data=PostCreate(content=content))
    assert post.content == content


@pytest.mark.asyncio
async def test_content_of_281_code_points_is_rejected_before_write(db_session, alice) -> None:
    with pytest.raises(ValidationError):
        await create_post(db_session, author_id=alice.id, data=PostCreate(content="a" * 281))
    assert await _post_count(db_session) == 0


@pytest.mark.asyncio
async def test_blank_content_is_rejected(db_session, alice) -> None:
    with pytest.raises(ValidationError):
        await create_post(db_session, author_id=alice.id, data=PostCreate(content="   "))


@pytest.mark.asyncio
async def test_media_only_post_is_accepted(db_session, alice) -> None:
    post = await create_post(
        db_session,
        author_id=alice.id,
        data=PostCreate(content="", media_urls=["https://cdn.example/1.jpg"], media_type="image"),
    )
    assert post.media_urls == ["https://cdn.example/1.jpg"]
    assert post.media_type == "image"


@pytest.mark.asyncio
async def test_unknown_author_raises_not_found(db_session) -> None:
    with pytest.raises(NotFoundError):
        await create_post(db_session, author_id=999, data=PostCreate(content="hi"))


@pytest.mark.asyncio
async def test_reply_to_must_exist(db_session, alice, make_post) -> None:
    with pytest.raises(NotFoundError):
        await create_post(db_session, author_id=alice.id, data=PostCreate(content="hi", reply_to=42))

    parent = await make_post(alice, "parent")
    reply = await create_post(
        db_session, author_id=alice.id, data=PostCreate(content="reply", reply_to=parent.id)
    )
    assert reply.reply_to == parent.id


@pytest.mark.asyncio
async def test_create_post_links_hashtags_and_mentions(db_session, alice, bob) -> None:
    post = await create_post(
        db_session,
        author_id=alice.id,
        data=PostCreate(content="#hello @bob @alice @nobody #hello"),
    )

    assert await PostRepository(db_session).hashtag_names_for_post(post.id) == ["hello"]
    mentioned = await db_session.scalars(
        select(Mention.mentioned_user_id).where(Mention.post_id == post.id)
    )
    # Self mentions and unknown handles are not recorded.
    assert list(mentioned) == [bob.id]


@pytest.mark.asyncio
async def test_hashtag_failure_keeps_the_post(db_session, alice, monkeypatch) -> None:
    async def broken_upsert(self, name):
        raise SourceUnavailableError("hashtags table unavailable")

    monkeypatch.setattr(PostRepository, "upsert_hashtag", broken_upsert)

    post = await create_post(db_session, author_id=alice.id, data=PostCreate(content="#lost tag"))

    assert (await get_post(db_session, post.id)).content == "#lost tag"
    assert await PostRepository(db_session).hashtag_names_for_post(post.id) == []


@pytest.mark.asyncio
async def test_get_post_raises_for_missing_post(db_session) -> None:
    with pytest.raises(NotFoundError):
        await get_post(db_session, 12345)
