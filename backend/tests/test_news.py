import pytest

pytestmark = pytest.mark.asyncio


def png(name: str = "picture.png"):
    return ("images", (name, b"\x89PNG\r\n\x1a\nfake", "image/png"))


async def test_create_news_with_images(client, file_store, alice, create_news):
    news = await create_news(alice, title="Breaking: Python 4", files=[png("a.png"), png("b.png")])

    assert news["title"] == "Breaking: Python 4"
    assert news["slug"].startswith("breaking-python-4-")
    assert news["views"] == 0
    assert news["author"]["id"] == alice.id
    assert news["likes_count"] == 0
    assert len(news["images"]) == 2
    for image in news["images"]:
        assert image["url"].endswith(".png")
        assert (file_store.root / image["url"]).is_file()


async def test_same_title_gets_distinct_slugs(alice, create_news):
    first = await create_news(alice, title="Same title")
    second = await create_news(alice, title="Same title")
    assert first["slug"] != second["slug"]


async def test_create_news_requires_token(client):
    response = await client.post("/api/news/", data={"title": "t", "body": "b"})
    assert response.status_code == 401


async def test_each_read_counts_a_view(client, alice, bob, create_news):
    news = await create_news(alice)

    first = await client.get(f"/api/news/{news['slug']}", headers=bob.headers)
    second = await client.get(f"/api/news/{news['slug']}", headers=alice.headers)

    assert first.json()["views"] == 1
    assert second.json()["views"] == 2

    # Listing and searching do not count views
    listed = await client.get("/api/news/")
    assert listed.json()[0]["views"] == 2


async def test_get_missing_news(client, alice):
    response = await client.get("/api/news/nope", headers=alice.headers)
    assert response.status_code == 404
    assert response.json()["detail"] == 'News with slug "nope" was not found!'


async def test_search_defaults_to_ten_newest(client, alice, create_news):
    for i in range(12):
        await create_news(alice, title=f"News {i}")

    response = await client.get("/api/news/search")

    assert response.status_code == 200
    data = response.json()
    assert data["total_count"] == 12
    assert [item["title"] for item in data["items"]] == [f"News {i}" for i in range(11, 1, -1)]

    page = await client.get("/api/news/search", params={"take": 5, "skip": 10})
    assert [item["title"] for item in page.json()["items"]] == ["News 1", "News 0"]


async def test_search_filters_by_title_or_body(client, alice, create_news):
    await create_news(alice, title="Football final", body="Goals everywhere")
    await create_news(alice, title="Weather", body="Rain and FOOTBALL cancelled")
    await create_news(alice, title="Markets", body="Stocks up")

    response = await client.get("/api/news/search", params={"title": "football", "body": "football"})

    data = response.json()
    assert data["total_count"] == 2
    assert {item["title"] for item in data["items"]} == {"Football final", "Weather"}


async def test_search_sorted_by_views(client, alice, create_news):
    quiet = await create_news(alice, title="Quiet")
    popular = await create_news(alice, title="Popular")
    for _ in range(3):
        await client.get(f"/api/news/{popular['slug']}", headers=alice.headers)
    await client.get(f"/api/news/{quiet['slug']}", headers=alice.headers)

    desc = await client.get("/api/news/search", params={"views": "DESC"})
    asc = await client.get("/api/news/search", params={"views": "ASC"})

    assert [item["title"] for item in desc.json()["items"]] == ["Popular", "Quiet"]
    assert [item["title"] for item in asc.json()["items"]] == ["Quiet", "Popular"]


async def test_search_rejects_invalid_paging(client):
    assert (await client.get("/api/news/search", params={"take": 0})).status_code == 422
    assert (await client.get("/api/news/search", params={"views": "sideways"})).status_code == 422


async def test_update_by_author_replaces_images(client, file_store, alice, create_news):
    news = await create_news(alice, files=[png("old.png")])
    old_url = news["images"][0]["url"]

    response = await client.put(
        f"/api/news/{news['slug']}",
        data={"body": "Edited body"},
        files=[png("new.png")],
        headers=alice.headers,
    )

    assert response.status_code == 200
    data = response.json()
    assert data["body"] == "Edited body"
    assert data["title"] == news["title"]
    assert len(data["images"]) == 1
    new_url = data["images"][0]["url"]
    assert new_url != old_url
    assert (file_store.root / new_url).is_file()
    assert not (file_store.root / old_url).is_file()


async def test_update_without_images_keeps_them(client, alice, create_news):
    news = await create_news(alice, files=[png()])

    response = await client.put(f"/api/news/{news['slug']}", data={"title": "Renamed"}, headers=alice.headers)

    assert response.status_code == 200
    assert response.json()["title"] == "Renamed"
    assert response.json()["slug"] == news["slug"]
    assert response.json()["images"] == news["images"]


async def test_update_by_other_user_is_denied(client, alice, bob, create_news):
    news = await create_news(alice)

    response = await client.put(f"/api/news/{news['slug']}", data={"title": "Hijacked"}, headers=bob.headers)

    assert response.status_code == 404
    assert response.json()["detail"] == f'News with slug "{news["slug"]}" was not updated! Access denied!'
    unchanged = await client.get(f"/api/news/{news['slug']}", headers=alice.headers)
    assert unchanged.json()["title"] == news["title"]


async def test_delete_missing_news(client, alice):
    response = await client.delete("/api/news/missing-slug", headers=alice.headers)
    assert response.status_code == 404
    assert response.json()["detail"] == 'News with slug "missing-slug" was not found!'


async def test_delete_by_other_user_is_denied(client, alice, bob, create_news):
    news = await create_news(alice)

    response = await client.delete(f"/api/news/{news['slug']}", headers=bob.headers)

    assert response.status_code == 404
    assert response.json()["detail"] == f'News with slug "{news["slug"]}" was not deleted! Access denied!'
    assert (await client.get(f"/api/news/{news['slug']}", headers=alice.headers)).status_code == 200


async def test_author_deletes_news_and_its_files(client, file_store, alice, create_news):
    news = await create_news(alice, files=[png()])
    url = news["images"][0]["url"]

    response = await client.delete(f"/api/news/{news['slug']}", headers=alice.headers)

    assert response.status_code == 200
    assert response.json() == {"success": True, "message": "News has been deleted!"}
    assert not (file_store.root / url).is_file()
    assert (await client.get(f"/api/news/{news['slug']}", headers=alice.headers)).status_code == 404


async def test_admin_can_delete_any_news(client, alice, admin, create_news):
    news = await create_news(alice)

    response = await client.delete(f"/api/news/{news['slug']}", headers=admin.headers)

    assert response.status_code == 200


async def test_delete_news_removes_its_comments(client, alice, bob, create_news):
    news = await create_news(alice)
    comment = await client.post(
        "/api/comments/", json={"text": "Nice", "news_slug": news["slug"]}, headers=bob.headers
    )
    assert comment.status_code == 201

    await client.delete(f"/api/news/{news['slug']}", headers=alice.headers)

    missing = await client.get(f"/api/comments/{comment.json()['id']}", headers=bob.headers)
    assert missing.status_code == 404


async def test_like_is_counted_once_and_can_be_removed(client, alice, bob, create_news):
    news = await create_news(alice)
    url = f"/api/news/{news['slug']}/like"

    await client.post(url, headers=bob.headers)
    liked = await client.post(url, headers=bob.headers)

    assert liked.status_code == 200
    assert liked.json()["likes_count"] == 1
    assert [user["id"] for user in liked.json()["liked_by_users"]] == [bob.id]

    unliked = await client.delete(url, headers=bob.headers)
    assert unliked.json()["likes_count"] == 0


async def test_like_missing_news(client, bob):
    response = await client.post("/api/news/ghost/like", headers=bob.headers)
    assert response.status_code == 404


async def test_following_feed(client, alice, bob, make_user, create_news):
    carol = await make_user("Carol")
    await create_news(alice, title="Alice one")
    await create_news(carol, title="Carol one")
    await create_news(alice, title="Alice two")

    empty = await client.get("/api/news/following-users-news", headers=bob.headers)
    assert empty.json() == []

    await client.post(f"/api/users/{alice.id}/follow", headers=bob.headers)
    feed = await client.get("/api/news/following-users-news", headers=bob.headers)

    assert feed.status_code == 200
    assert [item["title"] for item in feed.json()] == ["Alice two", "Alice one"]


async def test_update_rejects_overlong_title(client, alice, create_news):
    news = await create_news(alice)

    response = await client.put(f"/api/news/{news['slug']}", data={"title": "x" * 300}, headers=alice.headers)

    assert response.status_code == 422
    unchanged = await client.get(f"/api/news/{news['slug']}", headers=alice.headers)
    assert unchanged.json()["title"] == news["title"]


async def test_admin_can_update_any_news(client, alice, admin, create_news):
    news = await create_news(alice)

    response = await client.put(f"/api/news/{news['slug']}", data={"title": "Moderated"}, headers=admin.headers)

    assert response.status_code == 200
    assert response.json()["title"] == "Moderated"
    assert response.json()["author_id"] == alice.id


async def test_update_missing_news(client, alice):
    response = await client.put("/api/news/missing-slug", data={"title": "New"}, headers=alice.headers)

    assert response.status_code == 404
    assert response.json()["detail"] == 'News with slug "missing-slug" was not found!'
