import pytest
from httpx import AsyncClient

pytestmark = pytest.mark.asyncio


@pytest.fixture
async def admin(create_user):
    return await create_user("root_admin", is_admin=True)


async def send(client, auth_headers, user, chat_id, content):
    response = await client.post(
        "/api/v1/messages",
        json={"chatId": chat_id, "content": content},
        headers=auth_headers(user),
    )
    assert response.status_code == 201
    return response.json()


async def test_admin_routes_require_admin(client: AsyncClient, alice, auth_headers):
    for path in ("/api/v1/admin/users", "/api/v1/admin/chats", "/api/v1/admin/stats"):
        response = await client.get(path, headers=auth_headers(alice))
        assert response.status_code == 403
        assert response.json()["detail"] == "Admin access required"


async def test_list_users_paginated(client: AsyncClient, admin, alice, bob, carol, auth_headers):
    response = await client.get(
        "/api/v1/admin/users", params={"page": 1, "limit": 3}, headers=auth_headers(admin)
    )

    assert response.status_code == 200
    body = response.json()
    assert len(body["users"]) == 3
    assert body["pagination"] == {"page": 1, "limit": 3, "total": 4, "pages": 2}


async def test_list_chats(client: AsyncClient, admin, alice, bob, carol, create_chat, auth_headers):
    await create_chat(alice, bob)
    await create_chat(alice, bob, carol)

    response = await client.get("/api/v1/admin/chats", headers=auth_headers(admin))

    assert response.status_code == 200
    assert response.json()["pagination"]["total"] == 2
    assert len(response.json()["chats"]) == 2


async def test_stats(client: AsyncClient, admin, alice, bob, carol, create_chat, auth_headers):
    chat = await create_chat(alice, bob)
    await create_chat(alice, bob, carol)
    await send(client, auth_headers, alice, chat.id, "hi")

    response = await client.get("/api/v1/admin/stats", headers=auth_headers(admin))

    assert response.json() == {
        "totalUsers": 4,
        "onlineUsers": 0,
        "totalChats": 2,
        "totalMessages": 1,
        "groupChats": 1,
        "oneOnOneChats": 1,
    }


async def test_admin_cannot_delete_self(client: AsyncClient, admin, auth_headers):
    response = await client.delete(
        f"/api/v1/admin/users/{admin.id}", headers=auth_headers(admin)
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "You cannot delete your own account"


async def test_delete_nonexistent_user(client: AsyncClient, admin, auth_headers):
    response = await client.delete("/api/v1/admin/users/99999", headers=auth_headers(admin))
    assert response.status_code == 404


async def test_delete_user_cascades(
    client: AsyncClient, admin, alice, bob, carol, create_user, create_chat, auth_headers
):
    dave = await create_user("dave")
    direct = await create_chat(alice, bob)
    small_group = await create_chat(alice, bob, carol, name="Small")
    big_group = await create_chat(alice, bob, carol, dave, name="Big")

    kept = await send(client, auth_headers, bob, big_group.id, "from bob")
    await send(client, auth_headers, alice, big_group.id, "from alice")
    await send(client, auth_headers, alice, direct.id, "direct")
    await client.put(f"/api/v1/messages/{kept['id']}/read", headers=auth_headers(alice))

    response = await client.delete(
        f"/api/v1/admin/users/{alice.id}", headers=auth_headers(admin)
    )
    assert response.status_code == 200
    assert response.json() == {"message": "User deleted successfully"}

    # chats falling below their minimum are gone
    for chat in (direct, small_group):
        missing = await client.get(f"/api/v1/chats/{chat.id}", headers=auth_headers(bob))
        assert missing.status_code == 404

    remaining = await client.get(f"/api/v1/chats/{big_group.id}", headers=auth_headers(bob))
    assert remaining.status_code == 200
    body = remaining.json()
    assert alice.id not in [p["id"] for p in body["participants"]]
    assert body["adminId"] == min(bob.id, carol.id, dave.id)
    assert body["lastMessage"]["id"] == kept["id"]

    messages = await client.get(
        f"/api/v1/messages/chat/{big_group.id}", headers=auth_headers(bob)
    )
    assert [m["content"] for m in messages.json()["messages"]] == ["from bob"]
    assert messages.json()["messages"][0]["readBy"] == [bob.id]

    user = await client.get(f"/api/v1/users/{alice.id}", headers=auth_headers(bob))
    assert user.status_code == 404


async def test_admin_delete_chat(client: AsyncClient, admin, alice, bob, create_chat, auth_headers):
    chat = await create_chat(alice, bob)
    await send(client, auth_headers, alice, chat.id, "hi")

    response = await client.delete(
        f"/api/v1/admin/chats/{chat.id}", headers=auth_headers(admin)
    )
    assert response.status_code == 200

    again = await client.delete(
        f"/api/v1/admin/chats/{chat.id}", headers=auth_headers(admin)
    )
    assert again.status_code == 404
