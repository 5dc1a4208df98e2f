"""
Video feed: filtering, ordering, pagination and the owner projection
"""

from datetime import datetime, timedelta, timezone
from uuid import uuid4

import pytest

VIDEOS_URL = "/api/v1/videos"

BASE_TIME = datetime(2024, 1, 1, tzinfo=timezone.utc)


def _titles(response):
    return [item["title"] for item in response.json()["data"]["items"]]


async def test_query_matches_only_published_videos(client, make_user, make_video):
    owner = await make_user()
    await make_video(owner, title="Cats", description="Funny cats")
    await make_video(owner, title="Dogs", description="Good dogs", is_published=False)

    cats = await client.get(VIDEOS_URL, params={"query": "Cats"})
    dogs = await client.get(VIDEOS_URL, params={"query": "Dogs"})

    assert cats.status_code == 200
    assert _titles(cats) == ["Cats"]
    assert _titles(dogs) == []
    assert dogs.json()["data"]["pageInfo"]["totalItems"] == 0


async def test_query_is_case_insensitive_over_title_and_description(client, make_user, make_video):
    owner = await make_user()
    await make_video(owner, title="Holiday", description="Beach and SUNSET")
    await make_video(owner, title="Sunset timelapse", description="Sky")
    await make_video(owner, title="Cooking", description="Pasta")

    response = await client.get(VIDEOS_URL, params={"query": "sunset", "sortBy": "title", "sortType": "asc"})

    assert _titles(response) == ["Holiday", "Sunset timelapse"]


async def test_query_wildcards_are_literal(client, make_user, make_video):
    owner = await make_user()
    await make_video(owner, title="100% fun", description="x")
    await make_video(owner, title="1000 fun", description="x")

    response = await client.get(VIDEOS_URL, params={"query": "100%"})

    assert _titles(response) == ["100% fun"]


async def test_default_order_is_newest_first(client, make_user, make_video):
    owner = await make_user()
    await make_video(owner, title="T1", created_at=BASE_TIME)
    await make_video(owner, title="T2", created_at=BASE_TIME + timedelta(hours=1))

    response = await client.get(VIDEOS_URL)

    assert _titles(response) == ["T2", "T1"]


async def test_sort_requires_both_field_and_direction(client, make_user, make_video):
    owner = await make_user()
    await make_video(owner, title="b", created_at=BASE_TIME)
    await make_video(owner, title="a", created_at=BASE_TIME + timedelta(hours=1))

    only_field = await client.get(VIDEOS_URL, params={"sortBy": "title"})
    ascending = await client.get(VIDEOS_URL, params={"sortBy": "title", "sortType": "asc"})
    descending = await client.get(VIDEOS_URL, params={"sortBy": "title", "sortType": "desc"})

    assert _titles(only_field) == ["a", "b"]
    assert _titles(ascending) == ["a", "b"]
    assert _titles(descending) == ["b", "a"]


async def test_unknown_sort_type_sorts_ascending(client, make_user, make_video):
    owner = await make_user()
    await make_video(owner, title="old", created_at=BASE_TIME)
    await make_video(owner, title="new", created_at=BASE_TIME + timedelta(days=1))

    response = await client.get(VIDEOS_URL, params={"sortBy": "createdAt", "sortType": "sideways"})

    assert _titles(response) == ["old", "new"]


async def test_unknown_sort_field_falls_back_to_created_at(client, make_user, make_video):
    owner = await make_user()
    await make_video(owner, title="old", created_at=BASE_TIME)
    await make_video(owner, title="new", created_at=BASE_TIME + timedelta(days=1))

    response = await client.get(VIDEOS_URL, params={"sortBy": "password", "sortType": "desc"})

    assert _titles(response) == ["new", "old"]


async def test_owner_filter(client, make_user, make_video):
    alice = await make_user("alice")
    bob = await make_user("bob")
    await make_video(alice, title="by alice")
    await make_video(bob, title="by bob")

    response = await client.get(VIDEOS_URL, params={"userId": str(alice.id)})

    assert _titles(response) == ["by alice"]


async def test_malformed_owner_filter_is_ignored(client, make_user, make_video):
    owner = await make_user()
    await make_video(owner, title="one", created_at=BASE_TIME)
    await make_video(owner, title="two", created_at=BASE_TIME + timedelta(minutes=1))

    response = await client.get(VIDEOS_URL, params={"userId": "not-an-id"})

    assert response.status_code == 200
    assert _titles(response) == ["two", "one"]


async def test_unknown_owner_returns_empty_page(client, make_user, make_video):
    owner = await make_user()
    await make_video(owner)

    response = await client.get(VIDEOS_URL, params={"userId": str(uuid4())})

    assert _titles(response) == []


async def test_owner_projection_contains_only_public_fields(client, make_user, make_video):
    owner = await make_user("carol", fullname="Carol Smith")
    await make_video(owner)

    response = await client.get(VIDEOS_URL)

    item = response.json()["data"]["items"][0]
    assert item["owner"] == {
        "username": "carol",
        "fullname": "Carol Smith",
        "avatar": "https://cdn.example.com/images/carol.png"
    }


@pytest.mark.parametrize(
    "page,limit,expected_count,has_next",
    [
        ("1", "10", 10, True),
        ("2", "10", 10, True),
        ("3", "10", 5, False),
        ("4", "10", 0, False),
        ("1", "25", 25, False),
    ]
)
async def test_page_windows(client, make_user, make_video, page, limit, expected_count, has_next):
    owner = await make_user()
    for index in range(25):
        await make_video(owner, title=f"video {index:02d}", created_at=BASE_TIME + timedelta(minutes=index))

    response = await client.get(VIDEOS_URL, params={"page": page, "limit": limit})

    data = response.json()["data"]
    assert len(data["items"]) == expected_count
    assert data["pageInfo"]["hasNextPage"] is has_next
    assert data["pageInfo"]["totalItems"] == 25
    assert data["pageInfo"]["currentPage"] == int(page)


async def test_pages_do_not_overlap_on_tied_timestamps(client, make_user, make_video):
    owner = await make_user()
    for index in range(6):
        await make_video(owner, title=f"tied {index}", created_at=BASE_TIME)

    first = await client.get(VIDEOS_URL, params={"page": 1, "limit": 3})
    second = await client.get(VIDEOS_URL, params={"page": 2, "limit": 3})

    first_ids = {item["id"] for item in first.json()["data"]["items"]}
    second_ids = {item["id"] for item in second.json()["data"]["items"]}
    assert len(first_ids | second_ids) == 6


@pytest.mark.parametrize("params", [{"page": "0"}, {"page": "abc"}, {"limit": "-1"}])
async def test_invalid_pagination_is_rejected(client, params):
    response = await client.get(VIDEOS_URL, params=params)

    assert response.status_code == 400
    assert response.json()["success"] is False


async def test_oversized_limit_is_clamped(client, make_user, make_video):
    owner = await make_user()
    await make_video(owner)

    response = await client.get(VIDEOS_URL, params={"limit": "1000"})

    assert response.status_code == 200
    assert response.json()["data"]["pageInfo"]["totalPages"] == 1


async def test_page_beyond_any_offset_is_empty(client, make_user, make_video, auth_headers):
    owner = await make_user()
    video = await make_video(owner)
    huge_page = "99999999999999999999"

    videos = await client.get(VIDEOS_URL, params={"page": huge_page})
    comments = await client.get(
        f"{VIDEOS_URL}/{video.id}/comments",
        params={"page": huge_page},
        headers=auth_headers(owner)
    )

    for response in (videos, comments):
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["items"] == []
        assert data["pageInfo"]["currentPage"] == int(huge_page)
        assert data["pageInfo"]["hasNextPage"] is False
        assert data["pageInfo"]["hasPrevPage"] is True
    assert videos.json()["data"]["pageInfo"]["totalItems"] == 1
